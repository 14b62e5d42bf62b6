"""The storage interface library tools operate on, and an in-memory implementation."""

import itertools
from typing import Dict, Iterable, List, Optional, Protocol, Set

from library_agent.agent_core.config import LibraryScope
from library_agent.agent_core.logger import get_logger
from .models import Collection, LibraryItem, Note

logger = get_logger(__name__)


class LibraryBackend(Protocol):
    """Operations a document library must provide to back the library tools."""

    def all_items(self) -> Iterable[LibraryItem]: ...

    def get_item(self, item_id: int) -> Optional[LibraryItem]: ...

    def notes_for(self, item_id: int) -> List[Note]: ...

    def get_collection(self, collection_id: int) -> Optional[Collection]: ...

    def all_collections(self) -> Iterable[Collection]: ...

    def collection_item_ids(self, collection_id: int, recursive: bool = False) -> Set[int]: ...

    def create_collection(
        self, name: str, parent_id: Optional[int] = None, group_id: Optional[int] = None
    ) -> Collection: ...

    def add_to_collection(self, item_id: int, collection_id: int) -> None: ...

    def remove_from_collection(self, item_id: int, collection_id: int) -> bool: ...

    def create_note(
        self,
        title: str,
        content: str,
        parent_item_id: Optional[int] = None,
        collection_id: Optional[int] = None,
        tags: Optional[List[str]] = None,
    ) -> Note: ...


def in_scope(backend: LibraryBackend, item: LibraryItem, scope: LibraryScope) -> bool:
    """Whether ``item`` is visible under the configured library scope."""
    if scope.type == "all":
        return True
    if scope.type == "user":
        return item.group_id is None
    if scope.type == "group":
        return item.group_id == scope.group_id
    return item.id in backend.collection_item_ids(scope.collection_id, recursive=True)


class InMemoryLibrary:
    """
    A dictionary-backed library used by tests and examples.

    IDs for new collections and notes continue from the highest ID already present.
    """

    def __init__(
        self,
        items: Optional[Iterable[LibraryItem]] = None,
        collections: Optional[Iterable[Collection]] = None,
        notes: Optional[Iterable[Note]] = None,
    ) -> None:
        self.items: Dict[int, LibraryItem] = {item.id: item for item in items or ()}
        self.collections: Dict[int, Collection] = {c.id: c for c in collections or ()}
        self.notes: Dict[int, Note] = {note.id: note for note in notes or ()}
        start = max(itertools.chain(self.items, self.collections, self.notes), default=0) + 1
        self._ids = itertools.count(start)

    def all_items(self) -> Iterable[LibraryItem]:
        return list(self.items.values())

    def get_item(self, item_id: int) -> Optional[LibraryItem]:
        return self.items.get(item_id)

    def notes_for(self, item_id: int) -> List[Note]:
        return [note for note in self.notes.values() if note.parent_item_id == item_id]

    def get_collection(self, collection_id: int) -> Optional[Collection]:
        return self.collections.get(collection_id)

    def all_collections(self) -> Iterable[Collection]:
        return list(self.collections.values())

    def _descendants(self, collection_id: int) -> Set[int]:
        found = {collection_id}
        frontier = [collection_id]
        while frontier:
            parent = frontier.pop()
            for collection in self.collections.values():
                if collection.parent_id == parent and collection.id not in found:
                    found.add(collection.id)
                    frontier.append(collection.id)
        return found

    def collection_item_ids(self, collection_id: int, recursive: bool = False) -> Set[int]:
        targets = self._descendants(collection_id) if recursive else {collection_id}
        return {item.id for item in self.items.values() if item.collection_ids & targets}

    def create_collection(
        self, name: str, parent_id: Optional[int] = None, group_id: Optional[int] = None
    ) -> Collection:
        collection = Collection(id=next(self._ids), name=name, parent_id=parent_id, group_id=group_id)
        self.collections[collection.id] = collection
        logger.debug(f"Created collection {collection.id} '{name}'.")
        return collection

    def add_to_collection(self, item_id: int, collection_id: int) -> None:
        self.items[item_id].collection_ids.add(collection_id)

    def remove_from_collection(self, item_id: int, collection_id: int) -> bool:
        item = self.items[item_id]
        if collection_id not in item.collection_ids:
            return False
        item.collection_ids.discard(collection_id)
        return True

    def create_note(
        self,
        title: str,
        content: str,
        parent_item_id: Optional[int] = None,
        collection_id: Optional[int] = None,
        tags: Optional[List[str]] = None,
    ) -> Note:
        note = Note(
            id=next(self._ids),
            title=title,
            content=content,
            parent_item_id=parent_item_id,
            collection_id=collection_id,
            tags=list(tags or []),
        )
        self.notes[note.id] = note
        return note
