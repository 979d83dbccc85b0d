"""
Mod catalog data types: deployment categories, catalog records and the
in-memory lookup table built from them.
"""

from __future__ import annotations

from collections import Counter
from enum import Enum
from typing import Iterable, Iterator, Mapping, Optional

from pydantic import BaseModel, ConfigDict, StrictStr


class ModCategory(str, Enum):
    CLIENT_ONLY = "client_only"
    SERVER_ONLY = "server_only"
    CLIENT_REQUIRED_SERVER_OPTIONAL = "client_required_server_optional"
    CLIENT_OPTIONAL_SERVER_REQUIRED = "client_optional_server_required"
    CLIENT_AND_SERVER_REQUIRED = "client_and_server_required"
    CLIENT_OPTIONAL_SERVER_OPTIONAL = "client_optional_server_optional"
    UNKNOWN = "unknown"

    @property
    def directory(self) -> str:
        return _CATEGORY_DIRECTORIES[self]

    @classmethod
    def from_wire(cls, tag: str) -> "ModCategory":
        """Map a JSON ``type`` value onto a category; anything unrecognised is UNKNOWN."""
        try:
            return cls(tag)
        except ValueError:
            return cls.UNKNOWN

    @classmethod
    def directories(cls) -> list[str]:
        return [category.directory for category in cls]


_CATEGORY_DIRECTORIES: dict[ModCategory, str] = {
    ModCategory.CLIENT_ONLY: "ClientOnly",
    ModCategory.SERVER_ONLY: "ServerOnly",
    ModCategory.CLIENT_REQUIRED_SERVER_OPTIONAL: "ClientRequiredServerOptional",
    ModCategory.CLIENT_OPTIONAL_SERVER_REQUIRED: "ClientOptionalServerRequired",
    ModCategory.CLIENT_AND_SERVER_REQUIRED: "ClientAndServerRequired",
    ModCategory.CLIENT_OPTIONAL_SERVER_OPTIONAL: "ClientOptionalServerOptional",
    ModCategory.UNKNOWN: "Unknown",
}


class CatalogEntry(BaseModel):
    """One ``{"name": ..., "type": ...}`` record of mods_data.json."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    name: StrictStr
    type: StrictStr

    @property
    def key(self) -> str:
        # Catalog names are expected to be canonical already; only case is folded.
        return self.name.lower()

    @property
    def category(self) -> ModCategory:
        return ModCategory.from_wire(self.type)


class Catalog(Mapping[str, ModCategory]):
    """Read-only lookup from canonical mod key to category."""

    def __init__(self, entries: Iterable[CatalogEntry] = ()):
        table: dict[str, ModCategory] = {}
        for entry in entries:
            # Later duplicates replace earlier ones.
            table[entry.key] = entry.category
        self._table = table

    def __getitem__(self, key: str) -> ModCategory:
        return self._table[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return f"Catalog({len(self._table)} entries)"

    def lookup(self, key: str) -> Optional[ModCategory]:
        return self._table.get(key)

    def counts(self) -> dict[ModCategory, int]:
        tally = Counter(self._table.values())
        return {category: tally.get(category, 0) for category in ModCategory}
