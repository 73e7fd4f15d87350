from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./swift_codes.db"
    DATABASE_ECHO: bool = False

    SWIFT_CODES_FILE_PATH: str = "data/Interns_2025_SWIFT_CODES.xlsx"

    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: List[str] = ["*"]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
