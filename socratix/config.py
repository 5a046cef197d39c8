from pydantic_settings import BaseSettings
from typing import Literal, Optional


class Settings(BaseSettings):
    app_name: str = "Socratix"
    debug: bool = False

    # OpenAI settings
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    openai_temperature: float = 0.7
    openai_max_retries: int = 3

    # Supabase settings
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None

    # Backends
    storage_backend: Literal["memory", "supabase"] = "memory"
    auth_backend: Literal["static", "supabase"] = "static"
    rewards_store_path: Optional[str] = None

    # Application settings
    log_dir: str = "logs"
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
