import sys

from pydantic_settings import BaseSettings

_ENV_FILE = None if "pytest" in sys.modules else ".env"


class Settings(BaseSettings):
    APP_NAME: str = "HRIS System"
    APP_VERSION: str = "1.0.0"
    COMPANY_NAME: str = "Your Company Name"
    DEBUG: bool = False

    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: str = ""
    SUPABASE_JWT_SECRET: str = ""
    SUPABASE_TIMEOUT_SECONDS: float = 15.0

    DEFAULT_PAGE_SIZE: int = 10
    SEARCH_DEBOUNCE_MS: int = 300
    EMPLOYEE_ID_PREFIX: str = "EMP"

    LOGIN_PAGE: str = "/index.html"
    DASHBOARD_PAGE: str = "/pages/dashboard.html"

    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://localhost:8080",
    ]

    model_config = {
        "env_file": _ENV_FILE,
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }


settings = Settings()
