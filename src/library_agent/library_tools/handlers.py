"""Implementations of the library-facing tools over a ``LibraryBackend``."""

import re
from typing import Any, Dict, List, Optional, Union

from library_agent.agent_core.config import AgentConfig
from library_agent.agent_core.logger import get_logger
from library_agent.agent_core.tools import ToolName, ToolRegistry, ToolResult, build_registry
from library_agent.agent_core.tools.schema.tool_args import (
    CreateCollectionArgs,
    CreateNoteArgs,
    FindCollectionArgs,
    GetItemMetadataArgs,
    ListCollectionArgs,
    MoveItemArgs,
    ReadItemContentArgs,
    RemoveItemFromCollectionArgs,
    SearchFilters,
    SearchLibraryArgs,
)
from .backend import LibraryBackend, in_scope
from .models import LibraryItem

logger = get_logger(__name__)

ABSTRACT_PREVIEW_LENGTH = 200


def _preview(text: str, length: int = ABSTRACT_PREVIEW_LENGTH) -> str:
    return text if len(text) <= length else text[:length] + "..."


def _matches_filters(item: LibraryItem, filters: Optional[SearchFilters]) -> bool:
    if filters is None:
        return True
    if filters.year_from is not None and (item.year is None or item.year < filters.year_from):
        return False
    if filters.year_to is not None and (item.year is None or item.year > filters.year_to):
        return False
    if filters.tags:
        item_tags = [tag.lower() for tag in item.tags]
        if not all(any(wanted.lower() in tag for tag in item_tags) for wanted in filters.tags):
            return False
    if filters.authors:
        item_authors = [author.lower() for author in item.authors]
        if not all(any(wanted.lower() in author for author in item_authors) for wanted in filters.authors):
            return False
    if filters.item_types and item.item_type not in filters.item_types:
        return False
    return True


def _matches_query(item: LibraryItem, query: str) -> bool:
    haystack = " ".join([item.title, " ".join(item.authors), str(item.year or ""), item.abstract]).lower()
    if query.lower() in haystack:
        return True
    words = [word for word in re.split(r"\s+", query.lower()) if len(word) > 3]
    return len(words) > 1 and all(word in item.title.lower() for word in words[:5])


class LibraryTools:
    """
    Tool handlers bound to one library backend.

    Every handler takes ``(args, config)`` and returns a ``ToolResult`` with a
    short ``summary``. Lookups that fail are reported as unsuccessful results;
    backend exceptions propagate to the agent loop, which folds them back.
    """

    def __init__(self, backend: LibraryBackend) -> None:
        self.backend = backend

    def _scoped_item(self, item_id: int, config: AgentConfig) -> Union[LibraryItem, ToolResult]:
        item = self.backend.get_item(item_id)
        if item is None:
            return ToolResult.failure(f"Item with ID {item_id} not found")
        if not in_scope(self.backend, item, config.library_scope):
            return ToolResult.failure(f"Permission Denied: Item {item_id} is outside the current restricted scope.")
        return item

    def search_library(self, args: SearchLibraryArgs, config: AgentConfig) -> ToolResult:
        limit = min(args.limit, config.max_search_results)
        logger.debug(f"search_library query='{args.query}' limit={limit}")

        matches = [
            item
            for item in self.backend.all_items()
            if in_scope(self.backend, item, config.library_scope)
            and (not args.query or _matches_query(item, args.query))
            and _matches_filters(item, args.filters)
        ]
        if args.filters and args.filters.collection:
            wanted = args.filters.collection.lower()
            ids = {c.id for c in self.backend.all_collections() if c.name.lower() == wanted}
            matches = [item for item in matches if item.collection_ids & ids]

        if args.query:
            lowered = args.query.lower()
            matches.sort(key=lambda item: lowered not in item.title.lower())

        results = [
            {
                "id": item.id,
                "title": item.title,
                "authors": item.authors,
                "year": item.year,
                "abstract_preview": _preview(item.abstract),
                "tags": item.tags,
                "item_type": item.item_type,
            }
            for item in matches[:limit]
        ]
        return ToolResult(
            success=True,
            data={"items": results, "total_found": len(matches)},
            summary=f"Found {len(matches)} items, returning {len(results)}",
        )

    def get_item_metadata(self, args: GetItemMetadataArgs, config: AgentConfig) -> ToolResult:
        item = self._scoped_item(args.item_id, config)
        if isinstance(item, ToolResult):
            return item

        collections = [self.backend.get_collection(cid) for cid in sorted(item.collection_ids)]
        data = item.model_dump(exclude={"content", "collection_ids"})
        data["collections"] = [c.name for c in collections if c is not None]
        data["notes_count"] = len(self.backend.notes_for(item.id))
        data["has_content"] = bool(item.content)
        return ToolResult(success=True, data=data, summary=f'Retrieved metadata for "{item.title}"')

    def read_item_content(self, args: ReadItemContentArgs, config: AgentConfig) -> ToolResult:
        item = self._scoped_item(args.item_id, config)
        if isinstance(item, ToolResult):
            return item

        sections: List[str] = []
        sources: List[str] = []
        if args.include_pdf and config.include_content and item.content:
            sections.append(item.content)
            sources.append("full text")
        if args.include_notes:
            notes = self.backend.notes_for(item.id)
            for note in notes:
                sections.append(f"## Note: {note.title}\n{note.content}")
            if notes:
                sources.append(f"{len(notes)} note(s)")
        if not sections and item.abstract:
            sections.append(item.abstract)
            sources.append("abstract")

        content = "\n\n".join(sections)
        limit = args.max_length if args.max_length is not None else config.max_content_length
        truncated = limit > 0 and len(content) > limit
        if truncated:
            content = content[:limit]

        data: Dict[str, Any] = {"item_id": item.id, "title": item.title, "content": content, "truncated": truncated}
        if not content and args.trigger_ocr and not config.auto_ocr:
            data["ocr_hint"] = "No text content found; enable auto OCR to extract text."
        source = ", ".join(sources) if sources else "no content"
        return ToolResult(success=True, data=data, summary=f"Read {len(content)} chars from {source}")

    def create_note(self, args: CreateNoteArgs, config: AgentConfig) -> ToolResult:
        if args.parent_item_id is not None:
            parent = self._scoped_item(args.parent_item_id, config)
            if isinstance(parent, ToolResult):
                return parent
        elif self.backend.get_collection(args.collection_id) is None:
            return ToolResult.failure(f"Collection with ID {args.collection_id} not found")

        note = self.backend.create_note(
            title=args.title,
            content=args.content,
            parent_item_id=args.parent_item_id,
            collection_id=args.collection_id if args.parent_item_id is None else None,
            tags=args.tags,
        )
        target = f"item {args.parent_item_id}" if args.parent_item_id is not None else f"collection {args.collection_id}"
        return ToolResult(
            success=True,
            data={"note_id": note.id, "title": note.title},
            summary=f'Created note "{note.title}" in {target}',
        )

    def find_collection(self, args: FindCollectionArgs, config: AgentConfig) -> ToolResult:
        wanted = args.name.lower()
        found = [
            {"id": c.id, "name": c.name, "parent_id": c.parent_id}
            for c in self.backend.all_collections()
            if wanted in c.name.lower()
            and (args.parent_collection_id is None or c.parent_id == args.parent_collection_id)
            and (args.library_id is None or c.group_id == args.library_id)
        ]
        return ToolResult(
            success=True,
            data={"collections": found},
            summary=f"Found {len(found)} collection(s) matching '{args.name}'",
        )

    def create_collection(self, args: CreateCollectionArgs, config: AgentConfig) -> ToolResult:
        if args.parent_collection_id is not None and self.backend.get_collection(args.parent_collection_id) is None:
            return ToolResult.failure(f"Parent collection with ID {args.parent_collection_id} not found")
        collection = self.backend.create_collection(args.name, args.parent_collection_id, args.library_id)
        return ToolResult(
            success=True,
            data={"collection_id": collection.id, "name": collection.name},
            summary=f'Created collection "{collection.name}" (ID: {collection.id})',
        )

    def list_collection(self, args: ListCollectionArgs, config: AgentConfig) -> ToolResult:
        collection = self.backend.get_collection(args.collection_id)
        if collection is None:
            return ToolResult.failure(f"Collection with ID {args.collection_id} not found")

        subcollections = [
            {"id": c.id, "name": c.name} for c in self.backend.all_collections() if c.parent_id == collection.id
        ]
        items = []
        for item_id in sorted(self.backend.collection_item_ids(collection.id)):
            item = self.backend.get_item(item_id)
            if item is not None:
                items.append({"id": item.id, "title": item.title, "item_type": item.item_type})
        return ToolResult(
            success=True,
            data={"collection": collection.name, "subcollections": subcollections, "items": items},
            summary=f'"{collection.name}" holds {len(items)} item(s) and {len(subcollections)} subcollection(s)',
        )

    def move_item(self, args: MoveItemArgs, config: AgentConfig) -> ToolResult:
        item = self._scoped_item(args.item_id, config)
        if isinstance(item, ToolResult):
            return item
        target = self.backend.get_collection(args.target_collection_id)
        if target is None:
            return ToolResult.failure(f"Collection with ID {args.target_collection_id} not found")

        removed = []
        if args.remove_from_others:
            for collection_id in sorted(item.collection_ids - {target.id}):
                if self.backend.remove_from_collection(item.id, collection_id):
                    removed.append(collection_id)
        self.backend.add_to_collection(item.id, target.id)
        return ToolResult(
            success=True,
            data={"item_id": item.id, "collection_id": target.id, "removed_from": removed},
            summary=f'Moved "{item.title}" to "{target.name}"',
        )

    def remove_item_from_collection(self, args: RemoveItemFromCollectionArgs, config: AgentConfig) -> ToolResult:
        item = self._scoped_item(args.item_id, config)
        if isinstance(item, ToolResult):
            return item
        if not self.backend.remove_from_collection(item.id, args.collection_id):
            return ToolResult.failure(f"Item {item.id} is not in collection {args.collection_id}")
        return ToolResult(
            success=True,
            data={"item_id": item.id, "collection_id": args.collection_id},
            summary=f'Removed "{item.title}" from collection {args.collection_id}',
        )

    def handlers(self) -> Dict[ToolName, Any]:
        return {
            ToolName.SEARCH_LIBRARY: self.search_library,
            ToolName.GET_ITEM_METADATA: self.get_item_metadata,
            ToolName.READ_ITEM_CONTENT: self.read_item_content,
            ToolName.CREATE_NOTE: self.create_note,
            ToolName.FIND_COLLECTION: self.find_collection,
            ToolName.CREATE_COLLECTION: self.create_collection,
            ToolName.LIST_COLLECTION: self.list_collection,
            ToolName.MOVE_ITEM: self.move_item,
            ToolName.REMOVE_ITEM_FROM_COLLECTION: self.remove_item_from_collection,
        }


def build_library_registry(backend: LibraryBackend, *, include_unbound: bool = False) -> ToolRegistry:
    """
    Build a registry whose library tools are bound to ``backend``.

    Args:
        backend: The library the handlers operate on.
        include_unbound: Also describe catalogue tools without an implementation; calls to
            them fold back as unavailable.
    """
    return build_registry(LibraryTools(backend).handlers(), include_unbound=include_unbound)
