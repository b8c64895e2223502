import os
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


@dataclass
class Settings:
    # API settings
    api_host: str = os.getenv("API_HOST", "127.0.0.1")
    api_port: int = int(os.getenv("API_PORT", "8000"))

    # Local key-value storage
    data_file: str = os.getenv("LUMINA_DATA_FILE", "lumina_library.db")
    storage_key: str = os.getenv("LUMINA_STORAGE_KEY", "lumina_books")

    # Gemini settings
    gemini_api_key: Optional[str] = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")
    gemini_model: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
    gemini_base_url: str = os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta")
    insight_timeout: float = float(os.getenv("INSIGHT_TIMEOUT", "15"))

    # Application settings
    app_name: str = os.getenv("APP_NAME", "Lumina Library")
    app_version: str = os.getenv("APP_VERSION", "1.0.0")
    debug: bool = _env_flag("DEBUG", "False")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Feature flags
    enable_ai_features: bool = _env_flag("ENABLE_AI_FEATURES", "True")
    # Re-run enrichment for records left generating by an interrupted session
    resume_pending_enrichment: bool = _env_flag("RESUME_PENDING_ENRICHMENT", "True")


settings = Settings()
