# settings.py
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Project root: .../file-versioner
ROOT_DIR = Path(__file__).resolve().parents[3]
ENV_PATH = ROOT_DIR / ".env"
load_dotenv(ENV_PATH, override=False)


class Settings(BaseSettings):
    # Paths
    versions_dir: Path = Field(default=ROOT_DIR / "backend" / "data" / "versions", alias="VERSIONS_DIR")

    # Naming
    default_separator: str = Field(default="", alias="DEFAULT_SEPARATOR")

    # What to do with names that pass the prefix/suffix filter but carry no version
    unparsed_policy: Literal["ZERO", "EXCLUDE"] = Field(default="ZERO", alias="UNPARSED_POLICY")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
