"""Shared pytest fixtures."""

import asyncio
import io
import os
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from openai import APIConnectionError
from starlette.datastructures import Headers

# Settings читаются при импорте voicequiz, поэтому окружение задаем до него
_TMP = Path(tempfile.mkdtemp(prefix="voicequiz-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{(_TMP / 'test.sqlite').as_posix()}"
os.environ["UPLOAD_DIR"] = str(_TMP / "uploads")
os.environ.pop("AZURE_OPENAI_ENDPOINT", None)
os.environ.pop("AZURE_OPENAI_API_KEY", None)

from fastapi import UploadFile  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from voicequiz.database import Base, engine  # noqa: E402
from voicequiz.main import app  # noqa: E402
from voicequiz.services.transcription import Transcriber, get_transcriber  # noqa: E402

UPLOAD_DIR = Path(os.environ["UPLOAD_DIR"])

WAV_BYTES = b"RIFF$\x00\x00\x00WAVEfmt " + b"\x00" * 32


async def reset_db():
    from voicequiz import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


def make_upload(filename="bird.wav", content=WAV_BYTES, content_type="audio/wav") -> UploadFile:
    """Build an UploadFile like the one FastAPI hands to a handler."""
    return UploadFile(
        file=io.BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


def connection_reset_error() -> APIConnectionError:
    """APIConnectionError the way the SDK raises it after ECONNRESET."""
    error = APIConnectionError(request=httpx.Request("POST", "https://example.openai.azure.com"))
    error.__cause__ = ConnectionResetError(104, "Connection reset by peer")
    return error


def stored_files() -> list[Path]:
    return [p for p in UPLOAD_DIR.iterdir() if p.is_file()]


@pytest.fixture
def upload_dir():
    """Empty upload directory for each test."""
    UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
    for path in stored_files():
        path.unlink()
    yield UPLOAD_DIR


@pytest.fixture
def provider():
    """Mock AsyncAzureOpenAI exposing audio.transcriptions.create."""
    client = MagicMock()
    client.audio.transcriptions.create = AsyncMock(return_value=MagicMock(text="a bird is singing"))
    return client


@pytest.fixture
def client(upload_dir, provider):
    """TestClient over a fresh database with the provider mocked out."""
    asyncio.run(reset_db())
    app.dependency_overrides[get_transcriber] = lambda: Transcriber(client=provider)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
