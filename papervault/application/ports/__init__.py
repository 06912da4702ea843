from papervault.application.ports.unit_of_work import UnitOfWork
from papervault.application.ports.repositories import DownloadLedger, PaperRepository
from papervault.application.ports.storage import IObjectStorage, StorageError
from papervault.application.ports.page_cache import PageCacheStore

__all__ = [
    "UnitOfWork",
    "PaperRepository",
    "DownloadLedger",
    "IObjectStorage",
    "StorageError",
    "PageCacheStore",
]
