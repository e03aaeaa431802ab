from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./print_erp.db"

    # JWT
    SECRET_KEY: str = "dev-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # CORS
    FRONTEND_URL: str = "http://localhost:5173"

    # Launcher: optional client dev-server started next to the API
    CLIENT_DEV_COMMAND: Optional[str] = None

    # Document numbering
    PO_PREFIX: str = "PO"
    RFQ_PREFIX: str = "RFQ"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"  # "text" or "json"
    LOG_REQUEST_ID: bool = True  # Enable request ID tracking

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
