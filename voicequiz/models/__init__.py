from voicequiz.models.question import Question
from voicequiz.models.recording import Recording

__all__ = ["Question", "Recording"]
