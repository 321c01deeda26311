"""Tests for /api/transcribe."""

from unittest.mock import MagicMock, patch

import httpx
from openai import APIConnectionError

from conftest import WAV_BYTES, connection_reset_error, stored_files


def audio(name="answer.wav", content=WAV_BYTES, content_type="audio/wav"):
    return {"file": (name, content, content_type)}


def transcribe(client, files=None):
    return client.post("/api/transcribe", data={"question_id": "1"}, files=files)


def test_returns_provider_text(client, provider):
    resp = transcribe(client, audio())

    assert resp.status_code == 200
    assert resp.json() == {"text": "a bird is singing"}
    provider.audio.transcriptions.create.assert_awaited_once()


def test_no_file_is_400_and_provider_not_called(client, provider):
    resp = client.post("/api/transcribe", data={"question_id": "1"})

    assert resp.status_code == 400
    assert resp.json() == {"error": "未上传录音文件"}
    provider.audio.transcriptions.create.assert_not_called()


def test_unsupported_type_is_400_and_provider_not_called(client, provider):
    resp = transcribe(client, audio("clip.avi", b"avi", "video/x-msvideo"))

    assert resp.status_code == 400
    provider.audio.transcriptions.create.assert_not_called()
    assert stored_files() == []


def test_file_exists_during_call_and_is_removed_after(client, provider):
    seen = []

    async def create(model, file):
        seen.append(file.name)
        assert file.read() == WAV_BYTES
        return MagicMock(text="ok")

    provider.audio.transcriptions.create.side_effect = create

    resp = transcribe(client, audio())

    assert resp.status_code == 200
    assert len(seen) == 1
    assert stored_files() == []


def test_empty_transcript_is_500_and_file_removed(client, provider):
    provider.audio.transcriptions.create.return_value = MagicMock(text="")

    resp = transcribe(client, audio())

    assert resp.status_code == 500
    assert resp.json() == {"error": "语音识别失败"}
    assert stored_files() == []


def test_non_reset_error_attempted_once(client, provider):
    provider.audio.transcriptions.create.side_effect = APIConnectionError(
        request=httpx.Request("POST", "https://example.openai.azure.com")
    )

    resp = transcribe(client, audio())

    assert resp.status_code == 500
    assert resp.json() == {"error": "语音识别失败"}
    assert provider.audio.transcriptions.create.await_count == 1
    assert stored_files() == []


def test_reset_every_time_attempted_four_times(client, provider):
    provider.audio.transcriptions.create.side_effect = [connection_reset_error() for _ in range(4)]

    resp = transcribe(client, audio())

    assert resp.status_code == 500
    assert resp.json() == {"error": "语音识别失败"}
    assert provider.audio.transcriptions.create.await_count == 4
    assert stored_files() == []


def test_succeeds_on_third_attempt(client, provider):
    provider.audio.transcriptions.create.side_effect = [
        connection_reset_error(),
        connection_reset_error(),
        MagicMock(text="third time lucky"),
    ]

    resp = transcribe(client, audio())

    assert resp.status_code == 200
    assert resp.json() == {"text": "third time lucky"}
    assert provider.audio.transcriptions.create.await_count == 3
    assert stored_files() == []


def test_error_body_hides_internal_details(client, provider):
    provider.audio.transcriptions.create.side_effect = RuntimeError("secret-key-123 rejected")

    resp = transcribe(client, audio())

    assert resp.status_code == 500
    assert "secret-key-123" not in resp.text


def test_overlong_filename_returns_json_error(client, provider):
    resp = transcribe(client, audio("a" * 300 + ".wav"))

    assert resp.status_code == 500
    assert resp.json() == {"error": "保存文件失败"}
    provider.audio.transcriptions.create.assert_not_called()


def test_failed_cleanup_keeps_success_response(client, caplog):
    with patch("voicequiz.services.media.os.remove", side_effect=PermissionError("locked")):
        resp = transcribe(client, audio())

    assert resp.status_code == 200
    assert resp.json() == {"text": "a bird is singing"}
    assert "Failed to delete" in caplog.text


def test_failed_cleanup_keeps_error_response(client, provider, caplog):
    provider.audio.transcriptions.create.side_effect = ValueError("bad audio")

    with patch("voicequiz.services.media.os.remove", side_effect=PermissionError("locked")):
        resp = transcribe(client, audio())

    assert resp.status_code == 500
    assert resp.json() == {"error": "语音识别失败"}
    assert "Failed to delete" in caplog.text
