import os
from pathlib import Path

_DEFAULT_CACHE_DIR = Path(__file__).resolve().parent.parent.parent.parent / "data" / "cache"
_DEFAULT_ROOT_DIR = Path.home() / "Documents"


def _flag(raw: object) -> bool:
    return str(raw).lower() in ("1", "true", "yes")


class Storage:
    def __init__(self, config: dict | None = None) -> None:
        storage_cfg = (config or {}).get("alias_resolver", {}).get("storage", {})
        self.ROOT_DIR: str = str(storage_cfg.get("root_dir", os.getenv("ALIAS_ROOT_DIR", str(_DEFAULT_ROOT_DIR))))
        self.APP_DIR_NAME: str = str(storage_cfg.get("app_dir_name", os.getenv("ALIAS_APP_DIR_NAME", "VT5")))
        self.CACHE_DIR: str = str(storage_cfg.get("cache_dir", os.getenv("ALIAS_CACHE_DIR", str(_DEFAULT_CACHE_DIR))))
        # Compact-binary tier promotion; off unless explicitly enabled.
        binary_raw = storage_cfg.get("binary_write_back", os.getenv("ALIAS_BINARY_WRITE_BACK", "0"))
        self.BINARY_WRITE_BACK: bool = _flag(binary_raw)
