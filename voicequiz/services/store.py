import logging
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from voicequiz.errors import StorageError, ValidationError
from voicequiz.models import Question, Recording

logger = logging.getLogger(__name__)


async def _insert(session: AsyncSession, row, failure_message: str) -> None:
    # Один INSERT + commit, без многошаговых транзакций
    session.add(row)
    try:
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.exception(f"Insert into {row.__tablename__} failed")
        raise StorageError(failure_message, detail=repr(e)) from e


async def create_question(
    session: AsyncSession,
    text: str | None,
    description: str | None,
    media_files: Sequence[str],
    correct_answer: str | None,
    show_spectrum: int,
    order_number: int | None,
) -> int:
    if not text or order_number is None:
        raise ValidationError("缺少必填字段：text, order_number")

    question = Question(
        text=text,
        description=description,
        media_files=list(media_files),
        correct_answer=correct_answer,
        show_spectrum=show_spectrum,
        order_number=order_number,
    )
    await _insert(session, question, "添加题目失败")
    return question.question_id


async def list_questions(session: AsyncSession) -> list[Question]:
    # При равном order_number порядок по question_id (порядок вставки)
    query = select(Question).order_by(Question.order_number, Question.question_id)
    try:
        result = await session.execute(query)
        return list(result.scalars().all())
    except (SQLAlchemyError, ValueError) as e:
        # ValueError: битый JSON в media_files
        logger.exception("Listing questions failed")
        raise StorageError("获取题目失败", detail=repr(e)) from e


async def create_recording(
    session: AsyncSession,
    user_id: str,
    question_id: int,
    recording_url: str | None,
) -> int:
    if not recording_url:
        raise ValidationError("未上传录音文件")

    # question_id не сверяется с таблицей questions
    recording = Recording(user_id=user_id, question_id=question_id, recording_url=recording_url)
    await _insert(session, recording, "保存录音失败")
    return recording.recording_id
