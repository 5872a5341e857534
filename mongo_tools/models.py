from typing import List, Optional

from pydantic import BaseModel, field_validator


# ============================================================================
# Catalog models
# ============================================================================

class DatabaseInfo(BaseModel):
    name: str
    size_on_disk: Optional[int] = None


class CollectionInfo(BaseModel):
    name: str
    count: int


class DatabaseStats(BaseModel):
    name: str
    collections: List[CollectionInfo]
    total_documents: int


# ============================================================================
# Transfer models
# ============================================================================

class TransferResult(BaseModel):
    collections: int = 0
    documents: int = 0
    # Only set by exports
    output_path: Optional[str] = None


# ============================================================================
# Cluster registry models
# ============================================================================

class Cluster(BaseModel):
    name: str
    uri: str

    @field_validator("name", "uri")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        """Reject empty or whitespace-only values"""
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v.strip()
