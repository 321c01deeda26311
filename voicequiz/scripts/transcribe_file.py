import asyncio
import logging
import sys

from voicequiz.config import settings
from voicequiz.errors import TranscriptionError
from voicequiz.services.transcription import Transcriber

logger = logging.getLogger(__name__)

async def transcribe_file(path: str | None = None, transcriber: Transcriber | None = None) -> str:
    """Распознает локальный файл. Без аргумента берет AUDIO_FILE_PATH. Файл не удаляется."""
    path = path or settings.AUDIO_FILE_PATH
    transcriber = transcriber or Transcriber()
    logger.info(f"Transcribing {path}...")
    return await transcriber.transcribe(path)

def main(argv: list[str]) -> int:
    logging.basicConfig(level=logging.INFO)
    try:
        text = asyncio.run(transcribe_file(argv[1] if len(argv) > 1 else None))
    except TranscriptionError as e:
        logger.error(f"Transcription failed: {e!r}")
        return 1
    print(text)
    return 0

if __name__ == "__main__":
    sys.exit(main(sys.argv))
