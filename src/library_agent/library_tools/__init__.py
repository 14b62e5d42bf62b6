"""Library-facing tool implementations."""

from .backend import InMemoryLibrary, LibraryBackend, in_scope
from .handlers import LibraryTools, build_library_registry
from .models import Collection, LibraryItem, Note

__all__ = [
    "InMemoryLibrary",
    "LibraryBackend",
    "in_scope",
    "LibraryTools",
    "build_library_registry",
    "Collection",
    "LibraryItem",
    "Note",
]
