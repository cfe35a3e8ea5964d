from pathlib import Path

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent.parent  # project root
ENV_PATH = BASE_DIR / ".env"

# load .env into the process environment before Settings reads it
load_dotenv(dotenv_path=ENV_PATH)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        extra="ignore",
        case_sensitive=False,
    )

    DATABASE_URL: str = "postgresql+asyncpg://localhost/cart_report"

    # fallback for carts stored without a currency
    DEFAULT_CURRENCY: str = "USD"
    FREE_LABEL: str = "Free"

    PROFILE_URL_TEMPLATE: str = "/users/{user_id}"
    CART_VIEW_URL_TEMPLATE: str = "/carts/{cart_id}"

    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]


settings = Settings()
