"""Mappings API schemas - versions, namespaces, search results."""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class VersionEntry(BaseModel):
    """Game version known to a loader or namespace."""

    version: str
    stable: bool = False
    blocks: dict[str, Any] = {}


VersionsPayload = dict[str, list[VersionEntry]]


class Namespace(BaseModel):
    """Mapping namespace (yarn, mojang, mcp, ...)."""

    id: str
    versions: list[VersionEntry] = []
    supports_at: bool = Field(alias="supportsAT", default=False)
    supports_aw: bool = Field(alias="supportsAW", default=False)
    supports_mixin: bool = Field(alias="supportsMixin", default=False)
    supports_field_description: bool = Field(alias="supportsFieldDescription", default=False)
    supports_source: bool | None = Field(alias="supportsSource", default=None)

    class Config:
        populate_by_name = True
        extra = "allow"

    def default_version(self, allow_snapshots: bool = False) -> str | None:
        """First listed version, skipping snapshots unless allowed."""
        for entry in self.versions:
            if allow_snapshots or entry.stable:
                return entry.version
        return None


class NamedEntry(BaseModel):
    """Search index entry, unique by `name` within its collection."""

    name: str
    mapped: str | None = None
    owner: str | None = None

    class Config:
        extra = "allow"


class MappingSearchIndex(BaseModel):
    """Search result; also the shape of the cached per-version index."""

    classes: list[NamedEntry] = []
    methods: list[NamedEntry] = []
    fields: list[NamedEntry] = []
    entries: list[dict[str, Any]] = []
    fuzzy: bool = False
    query: str = ""

    @classmethod
    def normalize(cls, data: Any, query: str | None) -> "MappingSearchIndex":
        """Fill missing or null fields with defaults and echo the query."""
        payload = {k: v for k, v in data.items() if v is not None} if isinstance(data, dict) else {}
        payload["query"] = query or ""
        return cls.model_validate(payload)

    @classmethod
    def empty(cls, query: str | None = "") -> "MappingSearchIndex":
        return cls(query=query or "")


class SearchParams(BaseModel):
    """Parameters of a mapping search."""

    namespace: str
    version: str
    query: str = ""
    allow_classes: bool = True
    allow_fields: bool = True
    allow_methods: bool = True
    translate_mode: str | None = None
    translate_as: str | None = None
    limit: int = 100


class MappingType(StrEnum):
    CLASS = "class"
    FIELD = "field"
    METHOD = "method"


_TYPE_CODES = {"c": MappingType.CLASS, "f": MappingType.FIELD, "m": MappingType.METHOD}

# Compact wire key -> MappingEntry field
_COMPACT_KEYS = {
    "o": "obf",
    "i": "intermediary",
    "n": "named",
    "d": "desc_obf",
    "e": "desc_intermediary",
    "f": "desc_named",
    "a": "owner_obf",
    "b": "owner_intermediary",
    "c": "owner_named",
    "g": "owner_obf_client",
    "h": "obf_client",
    "j": "desc_obf_client",
    "k": "owner_obf_server",
    "s": "obf_server",
    "m": "desc_obf_server",
    "p": "args",
    "q": "args_guessed",
    "r": "args_parchment",
}


class MappingEntry(BaseModel):
    """Decoded raw search entry."""

    type: str | None = None
    intermediary: str | None = None
    obf: str | None = None
    named: str | None = None
    desc_obf: str | None = None
    desc_intermediary: str | None = None
    desc_named: str | None = None
    owner_obf: str | None = None
    owner_intermediary: str | None = None
    owner_named: str | None = None
    owner_obf_client: str | None = None
    obf_client: str | None = None
    desc_obf_client: str | None = None
    owner_obf_server: str | None = None
    obf_server: str | None = None
    desc_obf_server: str | None = None
    args: dict[int, str] | list[str] | None = None
    args_guessed: bool | None = None
    args_parchment: bool | None = None
    translated_to: "MappingEntry | None" = None

    @classmethod
    def from_compact(cls, obj: dict[str, Any]) -> "MappingEntry":
        """Decode the single-letter wire form, following `l` for translations."""
        code = obj.get("t")
        data = {field: obj[key] for key, field in _COMPACT_KEYS.items() if key in obj}
        data["type"] = _TYPE_CODES.get(code, code)
        if obj.get("l"):
            data["translated_to"] = cls.from_compact(obj["l"])
        return cls(**data)
