import logging
from functools import lru_cache
from pathlib import Path

from openai import AsyncAzureOpenAI

from voicequiz.config import settings
from voicequiz.errors import TranscriptionFatalError, TranscriptionTransientError

logger = logging.getLogger(__name__)

# --- НАСТРОЙКИ ---
AZURE_API_VERSION = "2024-08-01-preview"  # версия Azure Whisper API
DEPLOYMENT_NAME = "whisper"  # имя деплоймента в Azure
MAX_RETRIES = 3  # повторы только при ECONNRESET, всего до 4 попыток


def is_connection_reset(error: BaseException) -> bool:
    """
    SDK заворачивает сетевые ошибки в APIConnectionError -> httpx -> OSError.
    Ищем ConnectionResetError по всей цепочке __cause__/__context__.
    """
    seen = set()
    current: BaseException | None = error
    while current is not None and id(current) not in seen:
        if isinstance(current, ConnectionResetError):
            return True
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return False


def build_client() -> AsyncAzureOpenAI:
    if not settings.AZURE_OPENAI_ENDPOINT or not settings.AZURE_OPENAI_API_KEY:
        raise TranscriptionFatalError(detail="AZURE_OPENAI_ENDPOINT and AZURE_OPENAI_API_KEY must be set")
    return AsyncAzureOpenAI(
        azure_endpoint=settings.AZURE_OPENAI_ENDPOINT,
        api_key=settings.AZURE_OPENAI_API_KEY,
        api_version=AZURE_API_VERSION,
        azure_deployment=DEPLOYMENT_NAME,
        max_retries=0,  # ретраи SDK выключены, политика повторов только наша
    )


class Transcriber:
    def __init__(self, client: AsyncAzureOpenAI | None = None, retries: int = MAX_RETRIES):
        self._client = client
        self.retries = retries

    @property
    def client(self) -> AsyncAzureOpenAI:
        # Клиент создается при первом запросе, чтобы сервер стартовал и без ключей
        if self._client is None:
            self._client = build_client()
        return self._client

    async def transcribe(self, path: str | Path) -> str:
        """
        Отправляет аудиофайл в Azure Whisper и возвращает текст.
        Пустую строку возвращает как есть, решение принимает вызывающий.
        """
        client = self.client
        attempts = self.retries + 1

        for attempt in range(1, attempts + 1):
            try:
                with open(path, "rb") as audio_file:
                    result = await client.audio.transcriptions.create(
                        model=DEPLOYMENT_NAME,
                        file=audio_file,
                    )
                return result.text
            except Exception as e:
                if not is_connection_reset(e):
                    logger.error(f"Transcription failed on attempt {attempt}: {e!r}")
                    raise TranscriptionFatalError(detail=repr(e)) from e
                if attempt == attempts:
                    logger.error(f"Connection reset, retry budget exhausted after {attempt} attempts")
                    raise TranscriptionTransientError(attempts=attempt) from e
                logger.warning(f"Connection reset, retrying ({attempt}/{self.retries})...")

        # range пуст только при retries < 0
        raise TranscriptionFatalError(detail="no attempts made")


@lru_cache
def get_transcriber() -> Transcriber:
    return Transcriber()
