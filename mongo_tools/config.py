import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load environment variables
load_dotenv()

# Databases that are never listed, cloned or dropped
SYSTEM_DBS = ["admin", "local", "config"]

# Number of documents buffered before each bulk write
BATCH_SIZE = 500

# Server-internal collections (system.views, system.profile, ...) are never transferred
SYSTEM_COLLECTION_PREFIX = "system."

DEFAULT_SERVER_SELECTION_TIMEOUT_MS = 8000
DEFAULT_CONFIG_DIR = Path.home() / ".config" / "mongo-tools"
CLUSTERS_FILE_NAME = "clusters.json"

# Canonical extended JSON keeps numeric types exact (Int64 stays Int64)
DEFAULT_JSON_MODE = "canonical"


class ToolSettings(BaseModel):
    """
    Runtime configuration. Components receive the settings they need
    explicitly instead of reading environment variables themselves.
    """

    config_dir: Path = DEFAULT_CONFIG_DIR
    server_selection_timeout_ms: int = DEFAULT_SERVER_SELECTION_TIMEOUT_MS
    insert_retries: int = 0
    json_mode: Literal["canonical", "relaxed"] = DEFAULT_JSON_MODE

    @field_validator("server_selection_timeout_ms")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("server selection timeout must be positive")
        return v

    @field_validator("insert_retries")
    @classmethod
    def validate_retries(cls, v: int) -> int:
        if v < 0:
            raise ValueError("insert retries cannot be negative")
        return v

    @classmethod
    def from_env(cls) -> "ToolSettings":
        """Build settings from MONGO_TOOLS_* environment variables (and .env)"""
        return cls(
            config_dir=Path(os.getenv("MONGO_TOOLS_CONFIG_DIR", str(DEFAULT_CONFIG_DIR))).expanduser(),
            server_selection_timeout_ms=int(
                os.getenv(
                    "MONGO_TOOLS_SERVER_SELECTION_TIMEOUT_MS",
                    str(DEFAULT_SERVER_SELECTION_TIMEOUT_MS),
                )
            ),
            insert_retries=int(os.getenv("MONGO_TOOLS_INSERT_RETRIES", "0")),
            json_mode=os.getenv("MONGO_TOOLS_JSON_MODE", DEFAULT_JSON_MODE).lower(),
        )
