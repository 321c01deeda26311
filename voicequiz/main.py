import logging
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Depends, UploadFile, File, Form, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.ext.asyncio import AsyncSession

from voicequiz.config import settings
from voicequiz.database import get_db, init_db
from voicequiz.errors import VoiceQuizError, ValidationError, TranscriptionFatalError
from voicequiz.schemas import ErrorOut, QuestionOut, QuestionCreated, RecordingCreated, TranscriptionOut
from voicequiz.services import store
from voicequiz.services.media import MediaStore, URL_PREFIX, get_media_store
from voicequiz.services.transcription import Transcriber, get_transcriber

# Настройка логирования
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

ALLOWED_ORIGIN = "http://localhost:8081"  # единственный разрешенный фронтенд
MAX_MEDIA_FILES = 10

# --- FASTAPI LIFESPAN ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Startup: creating tables...")
    await init_db()
    logger.info(f"Server ready, uploads in {settings.UPLOAD_DIR}")
    yield
    logger.info("Shutdown")

# --- FASTAPI SETUP ---
app = FastAPI(title="VoiceQuiz API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[ALLOWED_ORIGIN],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Статика: любой файл из каталога загрузок доступен по /uploads/<name>
Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
app.mount(URL_PREFIX, StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

# --- ERROR HANDLERS ---
# Клиент всегда получает {"error": "..."}, причина остается в логах

@app.exception_handler(VoiceQuizError)
async def voicequiz_error_handler(request: Request, exc: VoiceQuizError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {type(exc).__name__}: {exc.detail or exc.message}")
    return JSONResponse(status_code=exc.status_code, content=ErrorOut(error=exc.message).model_dump())

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.info(f"Invalid request to {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content=ErrorOut(error=ValidationError.message).model_dump())

@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"{request.method} {request.url.path} crashed", exc_info=exc)
    return JSONResponse(status_code=500, content=ErrorOut(error=VoiceQuizError.message).model_dump())

def parse_int(value: str | None, field: str) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"字段 {field} 必须是整数")

# --- ENDPOINTS ---

@app.get("/health")
async def health_check():
    return {"status": "ok"}

@app.post("/api/questions", response_model=QuestionCreated)
async def create_question(
    text: str | None = Form(None),
    description: str | None = Form(None),
    order_number: str | None = Form(None),
    show_spectrum: str | None = Form(None),
    correct_answer: str | None = Form(None),
    media_files: list[UploadFile] | None = File(None),
    db: AsyncSession = Depends(get_db),
    media: MediaStore = Depends(get_media_store),
):
    """Добавляет вопрос с медиафайлами (до 10 штук)."""
    uploads = media_files or []
    order = parse_int(order_number, "order_number")
    if not text or order is None:
        raise ValidationError("缺少必填字段：text, order_number")
    if len(uploads) > MAX_MEDIA_FILES:
        raise ValidationError(f"最多上传 {MAX_MEDIA_FILES} 个媒体文件")

    stored = await media.save_all(uploads)
    question_id = await store.create_question(
        db,
        text=text,
        description=description,
        media_files=[f.url for f in stored],
        correct_answer=correct_answer,
        show_spectrum=1 if show_spectrum == "true" else 0,
        order_number=order,
    )
    return QuestionCreated(question_id=question_id)

@app.get("/api/questions", response_model=list[QuestionOut])
async def list_questions(db: AsyncSession = Depends(get_db)):
    questions = await store.list_questions(db)
    return [QuestionOut.model_validate(q) for q in questions]

@app.post("/api/recordings", response_model=RecordingCreated)
async def create_recording(
    user_id: str | None = Form(None),
    question_id: str | None = Form(None),
    recording: UploadFile | None = File(None),
    db: AsyncSession = Depends(get_db),
    media: MediaStore = Depends(get_media_store),
):
    """Сохраняет запись пользователя к вопросу. Существование вопроса не проверяется."""
    qid = parse_int(question_id, "question_id")
    if not user_id or qid is None:
        raise ValidationError("缺少必填字段：user_id, question_id")
    if recording is None:
        raise ValidationError("未上传录音文件")

    media.validate([recording])
    stored = await media.save(recording)
    recording_id = await store.create_recording(db, user_id=user_id, question_id=qid, recording_url=stored.url)
    return RecordingCreated(recording_id=recording_id)

@app.post("/api/transcribe", response_model=TranscriptionOut)
async def transcribe(
    question_id: str | None = Form(None),
    file: UploadFile | None = File(None),
    media: MediaStore = Depends(get_media_store),
    transcriber: Transcriber = Depends(get_transcriber),
):
    """
    Принимает запись и возвращает текст от Azure Whisper.
    Временный файл удаляется при любом исходе, пустой текст считается ошибкой.
    """
    if file is None:
        raise ValidationError("未上传录音文件")

    async with media.scratch(file) as stored:
        logger.info(f"Transcribing {stored.path.name} (question_id={question_id})")
        transcript = await transcriber.transcribe(stored.path)

    if not transcript:
        raise TranscriptionFatalError(detail="empty transcript")
    return TranscriptionOut(text=transcript)

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=settings.API_PORT)
