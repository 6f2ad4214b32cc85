from pydantic_settings import BaseSettings
from pathlib import Path


class Settings(BaseSettings):
    ENVIRONMENT: str = "development"  # development | test | staging | production
    APP_NAME: str = "Skincare Coach"
    DATABASE_URL: str = "sqlite:///data/skincare.db"
    DATA_DIR: Path = Path("data")
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "https://localhost:3000",
    ]
    API_KEY: str = ""  # consumer-app key, sent as API_KEY_HEADER
    API_KEY_HEADER: str = "x-api-key"
    API_KEY_MIN_LENGTH: int = 24
    DEFAULT_TIMEZONE: str = "Europe/London"
    LOG_LEVEL: str = "INFO"
    SECURITY_HEADERS_ENABLED: bool = True

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def is_production_like(self) -> bool:
        return (self.ENVIRONMENT or "").strip().lower() in {"production", "prod", "staging"}

    @property
    def is_development(self) -> bool:
        return (self.ENVIRONMENT or "").strip().lower() in {"development", "dev"}

    def validate_security_configuration(self) -> None:
        if not self.is_production_like:
            return

        errors: list[str] = []
        api_key = (self.API_KEY or "").strip()
        if not api_key:
            errors.append("API_KEY must be set")
        elif len(api_key) < self.API_KEY_MIN_LENGTH:
            errors.append(f"API_KEY must be at least {self.API_KEY_MIN_LENGTH} characters")
        if not (self.API_KEY_HEADER or "").strip():
            errors.append("API_KEY_HEADER must not be empty")
        if errors:
            joined = "; ".join(errors)
            raise RuntimeError(f"Insecure production configuration: {joined}")


settings = Settings()
settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
