from sqlalchemy import Integer, JSON, Text
from sqlalchemy.orm import Mapped, mapped_column
from voicequiz.database import Base

class Question(Base):
    __tablename__ = "questions"

    question_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Список путей вида /uploads/<ts>-<name>, хранится как JSON-текст
    media_files: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    correct_answer: Mapped[str | None] = mapped_column(Text, nullable=True)
    show_spectrum: Mapped[int] = mapped_column(Integer, nullable=False, default=0)  # 0/1
    order_number: Mapped[int] = mapped_column(Integer, nullable=False)

    def __repr__(self):
        return f"<Question(question_id={self.question_id}, order_number={self.order_number})>"
