from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from voicequiz.database import Base

class Recording(Base):
    __tablename__ = "recordings"

    recording_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[str] = mapped_column(String, nullable=False)
    # SQLite не проверяет FK без PRAGMA foreign_keys, существование вопроса не проверяется
    question_id: Mapped[int] = mapped_column(Integer, ForeignKey("questions.question_id"), nullable=False)
    recording_url: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self):
        return f"<Recording(recording_id={self.recording_id}, user_id={self.user_id})>"
