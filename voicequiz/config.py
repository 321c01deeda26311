from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    API_PORT: int = 5000

    # Встроенная SQLite база и каталог для загруженных файлов
    DATABASE_URL: str = "sqlite+aiosqlite:///./database.sqlite"
    UPLOAD_DIR: str = "uploads"

    # Azure Whisper. Без ключей сервер стартует, но /api/transcribe вернет 500
    AZURE_OPENAI_ENDPOINT: str | None = None
    AZURE_OPENAI_API_KEY: str | None = None
    AUDIO_FILE_PATH: str = "<audio file path>"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
