"""Application settings."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    host: str = "127.0.0.1"
    port: int = 8790
    debug: bool = False
    restore_provider: str = "simulated"
    poll_interval_seconds: float = 30.0
    provider_retry_attempts: int = 3
    provider_retry_base_delay: float = 0.5
    approval_commit_attempts: int = 5
    overrun_factor: float = 3.0
    finance_cost_threshold: float = 50.0
    finance_size_threshold_gib: int = 500

    model_config = {"env_prefix": "RESURRECT_"}


settings = Settings()
