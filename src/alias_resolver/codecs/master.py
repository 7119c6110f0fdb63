"""
Codec for the human-authored ``alias_master.json`` document.

The index is not decoded directly from this format; callers parse an
:class:`AliasMaster` and flatten it with :meth:`AliasMaster.to_alias_index`.
"""

from __future__ import annotations

import json

from alias_resolver.model import AliasMaster


def parse_master(data: bytes) -> AliasMaster:
    """
    Parse UTF-8 master JSON into an :class:`AliasMaster`.

    Unknown keys are ignored. Blank content, invalid JSON and missing
    required fields raise ``ValueError``.
    """
    text = data.decode("utf-8")
    if not text.strip():
        raise ValueError("Alias master document is blank")
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Alias master is not valid JSON: {exc}") from exc
    return AliasMaster.from_dict(raw)


def dump_master(master: AliasMaster) -> bytes:
    """Serialize ``master`` as pretty-printed UTF-8 JSON."""

    return json.dumps(master.to_dict(), indent=2, ensure_ascii=False).encode("utf-8")


__all__ = ["parse_master", "dump_master"]
