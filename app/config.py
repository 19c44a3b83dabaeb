import os
from typing import Optional, List, Union
from pydantic_settings import BaseSettings
from pydantic import field_validator


class Settings(BaseSettings):
    """Application settings"""

    # App settings
    APP_NAME: str = "Creator Match API"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    PORT: int = 7001
    LOG_LEVEL: str = "INFO"

    # Storage settings
    DB_PATH: Optional[str] = None
    TABLE_NAME: str = "creators"
    FAVORITES_TABLE_NAME: str = "creator_favorites"
    DATASET_PATH: Optional[str] = None

    # Search settings
    DEFAULT_LANGUAGE: str = "es"
    DEFAULT_RESULT_LIMIT: int = 10000
    TAG_MATCH_ROW_CAP: int = 50000
    TAXONOMY_PATH: Optional[str] = None

    # OpenAI / conversational parser settings
    OPENAI_API_KEY: Optional[str] = None
    PARSER_MODEL: str = "gpt-5-mini"
    USE_CONVERSATIONAL_PARSER: bool = False

    # CORS settings
    ALLOWED_ORIGINS: Union[str, List[str]] = ["*"]

    @field_validator('ALLOWED_ORIGINS', mode='before')
    @classmethod
    def parse_origins(cls, v):
        """Parse ALLOWED_ORIGINS from string or list"""
        if isinstance(v, str):
            if v == "*":
                return ["*"]
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator('DEFAULT_RESULT_LIMIT')
    @classmethod
    def clamp_result_limit(cls, v):
        return max(1, min(10000, int(v)))

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()


def _default_db_path() -> str:
    """LanceDB directory under CREATOR_DATA_ROOT, or the repository data/ folder."""
    repo_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    data_root = os.getenv("CREATOR_DATA_ROOT") or os.path.join(repo_root, "data")
    return os.path.join(os.path.abspath(data_root), "lancedb")


if not settings.DB_PATH:
    settings.DB_PATH = _default_db_path()
