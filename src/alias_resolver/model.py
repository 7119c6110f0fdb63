"""Dataclass models for the alias master document and the runtime index.

Master schema (``alias_master.json``, output of :meth:`AliasMaster.to_dict`):

```
{"version": "2.1", "timestamp": "<iso8601>",
 "species": [{"speciesId": "20", "canonical": "Aalscholver", "tilename": "Aal",
              "aliases": [{"text": "aalscholver", "norm": "aalscholver",
                           "cologne": "05247", "phonemes": "...",
                           "source": "seed_canonical", "timestamp": null}]}]}
```

Index schema (cache payload, output of :meth:`AliasIndex.to_dict`):

```
{"version": "2.1", "timestamp": "<iso8601>",
 "json": [{"aliasid": "20_1", "speciesid": "20", "canonical": "Aalscholver",
           "tilename": "Aal", "alias": "aalscholver", "norm": "aalscholver",
           "cologne": "05247", "phonemes": "...", "weight": 1.0,
           "source": "seed_canonical"}]}
```

The index record list is keyed ``json`` on the wire for compatibility with
caches already present on field devices. Unknown keys are ignored on load.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

DEFAULT_VERSION = "2.1"
DEFAULT_SOURCE = "seed_canonical"


def _check_mapping(data: Any, where: str) -> None:
    if not isinstance(data, Mapping):
        raise ValueError(f"{where} must be an object, got {type(data).__name__}")


def _require(data: Mapping[str, Any], key: str, where: str) -> Any:
    if key not in data:
        raise ValueError(f"{where} missing required field: {key!r}")
    return data[key]


def _require_str(data: Mapping[str, Any], key: str, where: str) -> str:
    value = _require(data, key, where)
    if not isinstance(value, str):
        raise ValueError(f"{where} field {key!r} must be str, got {type(value).__name__}")
    return value


def _optional_str(data: Mapping[str, Any], key: str, where: str) -> Optional[str]:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"{where} field {key!r} must be str or null")
    return value


def _require_list(data: Mapping[str, Any], key: str, where: str) -> list:
    value = _require(data, key, where)
    if not isinstance(value, list):
        raise ValueError(f"{where} field {key!r} must be a list, got {type(value).__name__}")
    return value


# ---------------------------------------------------------------------------
# Master document
# ---------------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class AliasData:
    """A single alias as authored in the master document."""

    text: str
    norm: str = ""
    cologne: str = ""
    phonemes: str = ""
    source: str = DEFAULT_SOURCE
    timestamp: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "norm": self.norm,
            "cologne": self.cologne,
            "phonemes": self.phonemes,
            "source": self.source,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AliasData:
        where = "alias"
        _check_mapping(data, where)
        return cls(
            text=_require_str(data, "text", where),
            norm=_optional_str(data, "norm", where) or "",
            cologne=_optional_str(data, "cologne", where) or "",
            phonemes=_optional_str(data, "phonemes", where) or "",
            source=_optional_str(data, "source", where) or DEFAULT_SOURCE,
            timestamp=_optional_str(data, "timestamp", where),
        )


@dataclass(slots=True, frozen=True)
class EntityEntry:
    """One entity and every alias known for it."""

    entity_id: str
    canonical: str
    tilename: Optional[str]
    aliases: tuple[AliasData, ...] = field(default_factory=tuple)

    def has_alias(self, text: str) -> bool:
        """Return ``True`` if ``text`` matches an alias, ignoring case and padding."""

        needle = text.strip().lower()
        return any(a.text.strip().lower() == needle for a in self.aliases)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "speciesId": self.entity_id,
            "canonical": self.canonical,
            "tilename": self.tilename,
            "aliases": [a.to_dict() for a in self.aliases],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> EntityEntry:
        where = "species entry"
        _check_mapping(data, where)
        return cls(
            entity_id=_require_str(data, "speciesId", where),
            canonical=_require_str(data, "canonical", where),
            tilename=_optional_str(data, "tilename", where),
            aliases=tuple(AliasData.from_dict(a) for a in _require_list(data, "aliases", where)),
        )


@dataclass(slots=True, frozen=True)
class AliasMaster:
    """Authoritative alias document maintained outside this package."""

    timestamp: str
    entities: tuple[EntityEntry, ...]
    version: str = DEFAULT_VERSION

    def find_entity(self, entity_id: str) -> Optional[EntityEntry]:
        for entry in self.entities:
            if entry.entity_id == entity_id:
                return entry
        return None

    def to_alias_index(self) -> AliasIndex:
        """
        Flatten the per-entity alias lists into an :class:`AliasIndex`.

        Records keep master order; ``aliasid`` is ``<entityId>_<position>``
        with a 1-based position inside the entity.
        """
        records = [
            AliasRecord(
                aliasid=f"{entry.entity_id}_{pos}",
                speciesid=entry.entity_id,
                canonical=entry.canonical,
                tilename=entry.tilename,
                alias=alias.text,
                norm=alias.norm,
                cologne=alias.cologne,
                phonemes=alias.phonemes,
                weight=1.0,
                source=alias.source,
            )
            for entry in self.entities
            for pos, alias in enumerate(entry.aliases, start=1)
        ]
        return AliasIndex(version=self.version, timestamp=self.timestamp, records=tuple(records))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "timestamp": self.timestamp,
            "species": [e.to_dict() for e in self.entities],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AliasMaster:
        where = "alias master"
        _check_mapping(data, where)
        return cls(
            version=_optional_str(data, "version", where) or DEFAULT_VERSION,
            timestamp=_require_str(data, "timestamp", where),
            entities=tuple(EntityEntry.from_dict(e) for e in _require_list(data, "species", where)),
        )


# ---------------------------------------------------------------------------
# Runtime index
# ---------------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class AliasRecord:
    """Flat runtime record; one per (entity, alias) pair."""

    aliasid: str
    speciesid: str
    canonical: str
    tilename: Optional[str]
    alias: str
    norm: str
    cologne: Optional[str] = None
    phonemes: Optional[str] = None
    weight: float = 1.0
    source: str = DEFAULT_SOURCE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "aliasid": self.aliasid,
            "speciesid": self.speciesid,
            "canonical": self.canonical,
            "tilename": self.tilename,
            "alias": self.alias,
            "norm": self.norm,
            "cologne": self.cologne,
            "phonemes": self.phonemes,
            "weight": self.weight,
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AliasRecord:
        where = "alias record"
        _check_mapping(data, where)
        weight = data.get("weight", 1.0)
        if isinstance(weight, bool) or not isinstance(weight, (int, float)):
            raise ValueError(f"{where} field 'weight' must be a number")
        return cls(
            aliasid=_require_str(data, "aliasid", where),
            speciesid=_require_str(data, "speciesid", where),
            canonical=_require_str(data, "canonical", where),
            tilename=_optional_str(data, "tilename", where),
            alias=_require_str(data, "alias", where),
            norm=_require_str(data, "norm", where),
            cologne=_optional_str(data, "cologne", where),
            phonemes=_optional_str(data, "phonemes", where),
            weight=float(weight),
            source=_optional_str(data, "source", where) or DEFAULT_SOURCE,
        )


@dataclass(slots=True, frozen=True)
class AliasIndex:
    """Immutable lookup index produced once per load."""

    timestamp: str
    records: tuple[AliasRecord, ...]
    version: str = DEFAULT_VERSION

    def __len__(self) -> int:
        return len(self.records)

    def names_by_entity(self) -> Dict[str, frozenset[str]]:
        """Return the entity identifier -> alias name set mapping."""

        grouped: Dict[str, set[str]] = {}
        for rec in self.records:
            grouped.setdefault(rec.speciesid, set()).add(rec.alias)
        return {eid: frozenset(names) for eid, names in grouped.items()}

    def semantically_equals(self, other: AliasIndex) -> bool:
        """Compare by identifier -> name-set mapping, ignoring encoding details."""

        return self.names_by_entity() == other.names_by_entity()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "timestamp": self.timestamp,
            "json": [r.to_dict() for r in self.records],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AliasIndex:
        where = "alias index"
        _check_mapping(data, where)
        return cls(
            version=_optional_str(data, "version", where) or DEFAULT_VERSION,
            timestamp=_require_str(data, "timestamp", where),
            records=tuple(AliasRecord.from_dict(r) for r in _require_list(data, "json", where)),
        )


__all__ = [
    "AliasData",
    "AliasIndex",
    "AliasMaster",
    "AliasRecord",
    "EntityEntry",
    "DEFAULT_SOURCE",
    "DEFAULT_VERSION",
]
