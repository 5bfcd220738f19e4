from pydantic_settings import BaseSettings
from typing import List, Optional

class Settings(BaseSettings):
    # API Settings
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Screening Insights"
    CORS_ORIGINS: List[str] = ["*"]

    # QoreAI backend Settings
    QOREAI_API_BASE_URL: str = "http://localhost:3008/api"
    QOREAI_API_TOKEN: Optional[str] = None
    REQUEST_TIMEOUT: float = 10.0

    # Logging Settings
    LOG_LEVEL: str = "INFO"

    class Config:
        case_sensitive = True
        env_file = ".env"

settings = Settings()
