from .local_store import CACHE_FILENAME, FastLocalStore

__all__ = ["CACHE_FILENAME", "FastLocalStore"]
