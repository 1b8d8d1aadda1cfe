import os
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

_ENV_PATH = os.getenv("PROC_EXPORTER_ENV", ".env")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PROC_EXPORTER_",
        env_file=_ENV_PATH,
        extra="ignore",
    )

    host: str = "0.0.0.0"
    port: int = 9100
    metrics_path: str = "/metrics"

    # Update tick, staleness threshold and report tick share this value
    interval: float = Field(default=5.0, gt=0)
    cpu_sample_interval: Optional[float] = None
    abort_on_sample_error: bool = False

    report_enabled: bool = True
    internal_prefixes: list[str] = ["python_", "process_"]
    runtime_collectors: bool = True

    logs_dir: Optional[Path] = Field(default=Path("logs"))
    log_level: str = "INFO"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Source order: init args > OS env > .env
        return (
            init_settings,
            env_settings,
            dotenv_settings,
        )


settings = Settings()
