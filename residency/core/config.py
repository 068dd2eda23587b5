from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # In-memory SQLite keeps the whole session state in one process.
    DATABASE_URL: str = "sqlite+pysqlite:///:memory:"
    SQL_ECHO: bool = False

    LOG_LEVEL: str = "INFO"

    # Load the demo residents/teachers/subjects on startup
    SEED_DEMO_DATA: bool = False

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
