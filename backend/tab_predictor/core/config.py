from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///./tab_predictor.db"

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 3000
    api_prefix: str = "/api"

    # CORS Configuration
    cors_origins: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Logging
    log_level: str = "INFO"

    # Application
    app_name: str = "Tab Predictor"
    app_version: str = "1.0.0"

    # Predictor Configuration
    predictor_enabled: bool = True
    min_pattern_occurrences: int = 2
    min_confidence_threshold: float = 0.3
    max_predictions_shown: int = 3
    history_lookback_days: int = 7
    history_max_visits: int = 100
    context_size: int = 3
    update_interval_ms: int = 30000

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
