from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    HOST: str = "0.0.0.0"
    PORT: int = 8080
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]

    # Media generation
    ELEVENLABS_API_KEY: str = ""
    ELEVENLABS_VOICE_ID: str = "21m00Tcm4TlvDq8ikWAM"
    GOOGLE_API_KEY: str = ""
    IMAGEN_MODELS: List[str] = [
        "imagen-3.0-generate-002",
        "imagen-3.0-fast-generate-001",
    ]
    MEDIA_TIMEOUT_SECONDS: Optional[float] = 120.0

    # Storage
    STORAGE_PATH: str = "./media"
    STORAGE_BASE_URL: str = "http://localhost:8080/media"

    # In-app purchases
    APPLE_SHARED_SECRET: str = ""
    GOOGLE_PACKAGE_NAME: str = "com.example.duolingocards"
    IAP_SANDBOX_MODE: bool = True
    IAP_PRODUCT_PREFIX: str = "com.example.duolingocards.deck."
    FREE_DECKS: List[str] = ["japanese-basics"]


settings = Settings()
