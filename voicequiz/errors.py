"""
Ошибки приложения. Каждая знает свой HTTP статус и текст для клиента (message).
detail пишется только в лог и наружу не уходит.
"""


class VoiceQuizError(Exception):
    status_code = 500
    message = "服务器内部错误"

    def __init__(self, message: str | None = None, detail: str = ""):
        if message is not None:
            self.message = message
        self.detail = detail
        super().__init__(self.message)


class ValidationError(VoiceQuizError):
    """Нет обязательного поля или файл не прошел проверку."""
    status_code = 400
    message = "请求参数无效"


class StorageError(VoiceQuizError):
    """Операция с базой данных упала."""
    status_code = 500
    message = "数据库操作失败"


class TranscriptionError(VoiceQuizError):
    status_code = 500
    message = "语音识别失败"


class TranscriptionTransientError(TranscriptionError):
    """Соединение сброшено (ECONNRESET). Ретраится внутри клиента."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(detail=f"connection reset on all {attempts} attempts")


class TranscriptionFatalError(TranscriptionError):
    """Любая другая ошибка провайдера, нет настроек или пустой результат."""

    def __init__(self, detail: str = ""):
        super().__init__(detail=detail)


class MediaError(VoiceQuizError):
    """Файл не удалось записать в каталог загрузок."""
    status_code = 500
    message = "保存文件失败"
