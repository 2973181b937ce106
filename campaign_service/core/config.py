from typing import List, Literal, Union
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "Campaign Targeting Service"
    API_V1_STR: str = "/api/v1"

    # Database
    DATABASE_URL: str = "sqlite:///./campaigns.db"

    # Redis (only used when SEQUENCE_BACKEND == "redis")
    REDIS_URL: str = "redis://localhost:6379/0"

    # Campaign identifiers
    SEQUENCE_BACKEND: Literal["database", "redis"] = "database"
    CAMPAIGN_SEQUENCE_NAME: str = "campaign_seq"
    CAMPAIGN_ID_PREFIX: str = "CAMP"
    CAMPAIGN_ID_WIDTH: int = Field(default=3, ge=1)

    # Google Sign-In, audience for ID token verification
    GOOGLE_CLIENT_ID: str = ""
    SECURITY_ENABLED: bool = Field(default=True)

    # CORS - 支持字符串或列表
    BACKEND_CORS_ORIGINS: Union[List[str], str] = ["http://localhost:3000", "http://localhost:5173"]

    # Logging
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = False
    LOG_TO_FILE: bool = True
    LOG_DIR: str = "logs"

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return str(v).upper()

    @property
    def cors_origins(self) -> List[str]:
        if isinstance(self.BACKEND_CORS_ORIGINS, str):
            return [origin.strip() for origin in self.BACKEND_CORS_ORIGINS.split(",") if origin.strip()]
        return [str(origin) for origin in self.BACKEND_CORS_ORIGINS]

    model_config = SettingsConfigDict(env_file=".env", env_ignore_empty=True, extra="ignore")


settings = Settings()
