import os
from dotenv import load_dotenv

load_dotenv()


def _flag(value: str | None) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    HEALTHCHECK_CONFIG_PATH: str = os.getenv(
        "HEALTHCHECK_CONFIG_PATH", "healthchecks.json"
    )
    HEALTHCHECK_STRICT: bool = _flag(os.getenv("HEALTHCHECK_STRICT"))
    HEALTHCHECK_LOG_LEVEL: str = os.getenv("HEALTHCHECK_LOG_LEVEL", "WARNING").upper()
    HEALTHCHECK_SERVER_PORT: int = int(os.getenv("HEALTHCHECK_SERVER_PORT", 8080))


settings = Settings()
