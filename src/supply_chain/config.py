"""Runtime configuration loaded from the environment and an optional .env file."""

import os
from typing import (
    Mapping,
    Optional,
)

from dotenv import (
    find_dotenv,
    load_dotenv,
)
from pydantic import (
    BaseModel,
    Field,
    field_validator,
)

from .storage import MAX_RECORD_SIZE


DB_FILE_ENV = "SUPPLY_CHAIN_DB_FILE"
LOG_LEVEL_ENV = "SUPPLY_CHAIN_LOG_LEVEL"

DEFAULT_DATABASE_FILE = "supply_chain.pkl"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class SupplyChainConfig(BaseModel):
    """Service configuration."""

    database_file: Optional[str] = Field(
        default=DEFAULT_DATABASE_FILE, description="Pickle file backing the memory; None keeps it in memory"
    )
    log_level: str = Field(default="INFO", description="Log level for the supply_chain logger")
    max_record_size: int = Field(default=MAX_RECORD_SIZE, gt=0, description="Maximum serialized record size")

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level


def load_config(environ: Optional[Mapping[str, str]] = None) -> SupplyChainConfig:
    """Build the configuration from environment variables.

    A ``.env`` file found by python-dotenv is loaded first (without overriding
    variables already set). ``SUPPLY_CHAIN_DB_FILE`` set to an empty string
    selects in-memory storage.

    Args:
        environ: Mapping to read instead of ``os.environ``; skips the .env lookup

    Raises:
        pydantic.ValidationError: If a value is invalid
    """
    if environ is None:
        load_dotenv(find_dotenv(usecwd=True))
        environ = os.environ

    values = {}
    if DB_FILE_ENV in environ:
        values["database_file"] = environ[DB_FILE_ENV] or None
    if LOG_LEVEL_ENV in environ:
        values["log_level"] = environ[LOG_LEVEL_ENV]

    return SupplyChainConfig.model_validate(values)
