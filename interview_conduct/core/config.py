from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

from interview_conduct.utils.enums import InterviewType


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    PROJECT_NAME: str = "Interview Conduct Service"
    API_V1_PREFIX: str = "/api/v1"

    DATABASE_URL: str = "sqlite:///./interview_conduct.db"
    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: List[str] = [
        "http://localhost:4444",
        "http://127.0.0.1:4444",
    ]

    # Automatic pipeline advancement after a completed interview
    ADVANCEMENT_MIN_RATING: int = 3
    ADVANCEMENT_INTERVIEW_TYPES: List[str] = [
        InterviewType.PHONE_SCREEN.value,
        InterviewType.TECHNICAL.value,
        InterviewType.FINAL.value,
        InterviewType.PANEL.value,
    ]


settings = Settings()
