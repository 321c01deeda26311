import logging
import os
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Iterable

from fastapi import UploadFile

from voicequiz.config import settings
from voicequiz.errors import MediaError, ValidationError

logger = logging.getLogger(__name__)

URL_PREFIX = "/uploads"

ALLOWED_CONTENT_TYPES = (
    "audio/flac",
    "audio/m4a",
    "audio/mp3",
    "audio/mp4",
    "audio/mpeg",
    "audio/mpga",
    "audio/oga",
    "audio/ogg",
    "audio/wav",
    "audio/webm",
)

UNSUPPORTED_FORMAT_MESSAGE = (
    "Unsupported file format. Please upload a file in one of the following formats: "
    "flac, m4a, mp3, mp4, mpeg, mpga, oga, ogg, wav, webm."
)


@dataclass(frozen=True)
class StoredFile:
    path: Path  # путь на диске
    url: str    # относительный путь, который пишется в БД


class MediaStore:
    """
    Файловое хранилище загрузок.
    Имя файла: <unix ms>-<оригинальное имя>, каталог раздается как статика по /uploads.
    """

    def __init__(self, directory: str | Path, url_prefix: str = URL_PREFIX):
        self.directory = Path(directory)
        self.url_prefix = url_prefix.rstrip("/")
        self.directory.mkdir(parents=True, exist_ok=True)

    def validate(self, uploads: Iterable[UploadFile]) -> None:
        for upload in uploads:
            if upload.content_type not in ALLOWED_CONTENT_TYPES:
                logger.info(f"Rejected upload {upload.filename!r} ({upload.content_type})")
                raise ValidationError(UNSUPPORTED_FORMAT_MESSAGE)

    async def save(self, upload: UploadFile) -> StoredFile:
        # basename отрезает "../" из имени, которое прислал клиент
        original = os.path.basename(upload.filename or "") or "upload"
        name = f"{int(time.time() * 1000)}-{original}"
        path = self.directory / name

        content = await upload.read()
        try:
            with open(path, "wb") as f:
                f.write(content)
        except OSError as e:
            # Например, имя длиннее лимита файловой системы
            logger.error(f"Failed to store {name[:80]!r}: {e}")
            raise MediaError(detail=repr(e)) from e

        logger.info(f"Stored upload: {name}, Size: {len(content) / 1024:.2f} KB")
        return StoredFile(path=path, url=f"{self.url_prefix}/{name}")

    async def save_all(self, uploads: list[UploadFile]) -> list[StoredFile]:
        # Сначала проверяем все файлы, чтобы при отказе ничего не осталось на диске
        self.validate(uploads)
        return [await self.save(upload) for upload in uploads]

    def discard(self, stored: StoredFile) -> None:
        try:
            os.remove(stored.path)
        except OSError as e:
            logger.error(f"Failed to delete {stored.path}: {e}")

    @asynccontextmanager
    async def scratch(self, upload: UploadFile) -> AsyncIterator[StoredFile]:
        """Временный файл: удаляется на любом пути выхода из блока."""
        self.validate([upload])
        stored = await self.save(upload)
        try:
            yield stored
        finally:
            self.discard(stored)


def get_media_store() -> MediaStore:
    return MediaStore(settings.UPLOAD_DIR)
