"""Infrastructure layer exports."""

from .dossiers import DossierRepository
from .storage import DirectoryKeyValueStore, InMemoryKeyValueStore, KeyValueStore

__all__ = [
    "DirectoryKeyValueStore",
    "DossierRepository",
    "InMemoryKeyValueStore",
    "KeyValueStore",
]
