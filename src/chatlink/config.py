from pydantic import Field, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "CHATLINK_", "env_file": ".env", "extra": "ignore", "frozen": True}

    # Endpoint
    endpoint_url: str = "ws://localhost:8081/chat"
    connect_timeout: float = Field(default=10.0, gt=0)

    # Liveness probe period (seconds)
    probe_interval: float = Field(default=30.0, gt=0)

    # Reconnect backoff (seconds)
    backoff_base: float = Field(default=3.0, gt=0)
    backoff_multiplier: float = Field(default=1.5, ge=1.0)
    backoff_max: float = Field(default=30.0, gt=0)

    @model_validator(mode="after")
    def _check_backoff_bounds(self) -> "Settings":
        if self.backoff_base > self.backoff_max:
            raise ValueError("backoff_base must not exceed backoff_max")
        return self


settings = Settings()
