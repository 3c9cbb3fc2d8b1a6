"""
Store Configuration — location of the encrypted credential file.

Reads optional overrides from environment variables:
    PINE_STORE_DIR = <directory holding the store file>   (default ".store")
    PINE_STORE_FILE = <store file name>                   (default "store.aes")

Security Note:
    Key derivation parameters are fixed in ``crypto.py`` and are not
    configurable; changing them would make existing stores unreadable.
"""
import os
import logging
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger("pine.store")

DEFAULT_DIRECTORY = ".store"
DEFAULT_FILE_NAME = "store.aes"


class StoreConfig(BaseModel):
    """Validated store location."""

    directory: str = Field(default=DEFAULT_DIRECTORY)
    file_name: str = Field(default=DEFAULT_FILE_NAME)

    model_config = {"frozen": True}

    @field_validator("directory")
    @classmethod
    def validate_directory(cls, v: str) -> str:
        """Directory must be a non-empty path."""
        if not v.strip():
            raise ValueError("Store directory cannot be empty")
        return v

    @field_validator("file_name")
    @classmethod
    def validate_file_name(cls, v: str) -> str:
        """File name must be a bare name, not a path."""
        if not v.strip():
            raise ValueError("Store file name cannot be empty")
        if "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError(f"Store file name must not be a path: {v!r}")
        return v

    @property
    def path(self) -> Path:
        """Full path of the store file."""
        return Path(self.directory) / self.file_name

    @classmethod
    def from_env(cls) -> "StoreConfig":
        """Create StoreConfig from environment variables.

        Returns:
            Populated StoreConfig instance.
        """
        directory = os.environ.get("PINE_STORE_DIR", DEFAULT_DIRECTORY)
        file_name = os.environ.get("PINE_STORE_FILE", DEFAULT_FILE_NAME)
        logger.debug("Store location from environment: %s/%s", directory, file_name)
        return cls(directory=directory, file_name=file_name)
