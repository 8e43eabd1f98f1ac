from .cache_store import CacheStore
from .refresh import RefreshCoordinator
from .refresh_loop import RefreshLoop
from .service import BackgroundService

__all__ = [
    "CacheStore",
    "RefreshCoordinator",
    "RefreshLoop",
    "BackgroundService",
]
