from pathlib import Path
from typing import Optional
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    APP_NAME: str = "Code Runner"
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # None = one worker per available core
    WORKERS: Optional[int] = None

    # Resolved against the directory the service is launched from
    WORKSPACE_ROOT: Path = Field(default_factory=lambda: Path.cwd() / "temp")

    # Execution limits
    EXECUTION_TIMEOUT_SECONDS: float = 30
    MAX_CODE_LENGTH: int = 5000
    MAX_INPUT_LENGTH: int = 1000
    MAX_OUTPUT_BYTES: int = 1024 * 1024

    # Admission control
    RATE_LIMIT_WINDOW_SECONDS: float = 30
    RATE_LIMIT_MAX_REQUESTS: int = 1000

    LOG_LEVEL: str = "INFO"
    ACCESS_LOG: bool = True

    # Toolchain executables
    PYTHON_COMMAND: str = "python3"
    NODE_COMMAND: str = "node"
    JAVAC_COMMAND: str = "javac"
    JAVA_COMMAND: str = "java"
    GCC_COMMAND: str = "gcc"
    GXX_COMMAND: str = "g++"
    MCS_COMMAND: str = "mcs"
    MONO_COMMAND: str = "mono"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()
