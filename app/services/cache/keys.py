"""Cache keys and the persisted record envelope."""

from dataclasses import dataclass
from typing import Any
from urllib.parse import quote, unquote

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class CacheKey:
    """Category tag plus identifying parts, e.g. ("mapping", "yarn", "1.20")."""

    category: str
    parts: tuple[str, ...] = ()

    @classmethod
    def of(cls, category: str, *parts: Any) -> "CacheKey":
        return cls(category, tuple(str(p) for p in parts))

    @classmethod
    def parse(cls, text: str) -> "CacheKey":
        """Inverse of str(): "mapping:yarn:1.20" -> CacheKey("mapping", ("yarn", "1.20"))."""
        category, *parts = (unquote(c) for c in text.split(":"))
        return cls(category, tuple(parts))

    def physical(self, prefix: str) -> str:
        """Storage key. Components are percent-encoded so distinct keys never collide."""
        return prefix + str(self)

    def __str__(self) -> str:
        return ":".join(quote(c, safe="") for c in (self.category, *self.parts))


class CacheRecord(BaseModel):
    """Envelope written for every cached value."""

    timestamp: float
    data: Any
    schema_version: int = Field(alias="schemaVersion")

    class Config:
        populate_by_name = True
