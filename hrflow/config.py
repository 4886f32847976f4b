from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Actor stamped on history entries when a request names nobody
    current_user: str = "Current User"

    # Record identifiers
    offer_id_prefix: str = "OFF"
    onboarding_id_prefix: str = "ONB"

    # Listing
    default_page_size: int = 10
    max_page_size: int = 100

    # Async tasks
    prefill_timeout_seconds: float = 5.0

    class Config:
        env_file = ".env"
        env_prefix = "HRFLOW_"


settings = Settings()
