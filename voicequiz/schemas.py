from pydantic import BaseModel, ConfigDict, Field

# Вопрос в ответе GET /api/questions, media_files уже список
class QuestionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    question_id: int
    text: str
    description: str | None = None
    media_files: list[str] = Field(default_factory=list)
    correct_answer: str | None = None
    show_spectrum: int
    order_number: int

class QuestionCreated(BaseModel):
    success: bool = True
    message: str = "题目已添加"
    question_id: int

class RecordingCreated(BaseModel):
    success: bool = True
    message: str = "录音已保存"
    recording_id: int

class TranscriptionOut(BaseModel):
    text: str

# Единый формат ошибки для всех эндпоинтов
class ErrorOut(BaseModel):
    error: str
