"""
Converters between on-disk alias formats and :class:`~alias_resolver.model.AliasIndex`.

``cbor_gz`` is the native format of the local cache (and of the remote
compressed tier, which is byte-compatible with it). ``vt5bin`` reads the
compact binary container shipped in ``serverdata``. ``master`` parses the
human-authored master document.
"""

from . import cbor_gz, master, vt5bin

__all__ = ["cbor_gz", "master", "vt5bin"]
