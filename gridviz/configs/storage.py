"""
Content storage configuration settings.

Directories for uploaded network models, per-name modification redraws
and ephemeral render output.

Dependencies: pydantic_settings
System role: Filesystem layout configuration
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from gridviz.configs.base import BaseSettings


class StorageSettings(BaseSettings):
    """Settings for the on-disk content store."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="STORAGE_",
        case_sensitive=False,
        extra="ignore",
    )

    ingest_dir: Path = Field(
        default=Path("./cgmes"),
        description="Directory holding uploaded models as {name}.zip and redraws under {name}/",
    )
    output_dir: Path = Field(
        default=Path("./output"),
        description="Parent directory for per-request temporary render output",
    )
    max_upload_bytes: int = Field(
        default=200 * 1024 * 1024,
        description="Maximum accepted size of an uploaded model file",
    )
