"""The built-in tool catalogue: descriptions, sensitivity classes and argument models."""

from typing import Dict, Mapping, NamedTuple, Optional, Type

from pydantic import BaseModel

from .base import ToolRegistry
from ..models import Sensitivity, ToolDefinition, ToolHandler, ToolName
from ..schema import tool_args as args


class CatalogueEntry(NamedTuple):
    description: str
    sensitivity: Sensitivity
    args_model: Type[BaseModel]


READ = Sensitivity.READ
WRITE = Sensitivity.WRITE
DESTRUCTIVE = Sensitivity.DESTRUCTIVE

CATALOGUE: Dict[ToolName, CatalogueEntry] = {
    ToolName.SEARCH_LIBRARY: CatalogueEntry(
        "Search the user's library by title, author, abstract and full text. Returns matching items.",
        READ,
        args.SearchLibraryArgs,
    ),
    ToolName.GET_ITEM_METADATA: CatalogueEntry(
        "Get the full bibliographic metadata of one library item.", READ, args.GetItemMetadataArgs
    ),
    ToolName.READ_ITEM_CONTENT: CatalogueEntry(
        "Read the notes and indexed full text of one library item.", READ, args.ReadItemContentArgs
    ),
    ToolName.CREATE_NOTE: CatalogueEntry(
        "Create a note attached to an item or placed in a collection.", WRITE, args.CreateNoteArgs
    ),
    ToolName.EDIT_NOTE: CatalogueEntry(
        "Apply search/replace, insert, append, prepend or delete operations to an existing note.",
        WRITE,
        args.EditNoteArgs,
    ),
    ToolName.ADD_TO_CONTEXT: CatalogueEntry(
        "Add papers, tags, authors, collections, topics or tables to the conversation context.",
        WRITE,
        args.AddToContextArgs,
    ),
    ToolName.REMOVE_FROM_CONTEXT: CatalogueEntry(
        "Remove items from the conversation context.", DESTRUCTIVE, args.RemoveFromContextArgs
    ),
    ToolName.LIST_CONTEXT: CatalogueEntry("List the items currently in the conversation context.", READ, args.NoArgs),
    ToolName.LIST_TABLES: CatalogueEntry("List the user's analysis tables.", READ, args.NoArgs),
    ToolName.CREATE_TABLE: CatalogueEntry("Create a new analysis table.", WRITE, args.CreateTableArgs),
    ToolName.ADD_TO_TABLE: CatalogueEntry("Add papers to an analysis table.", WRITE, args.AddToTableArgs),
    ToolName.CREATE_TABLE_COLUMN: CatalogueEntry(
        "Add a column whose cells are generated from an AI prompt.", WRITE, args.CreateTableColumnArgs
    ),
    ToolName.GENERATE_TABLE_DATA: CatalogueEntry(
        "Generate cell data for a table's AI columns.", WRITE, args.GenerateTableDataArgs
    ),
    ToolName.READ_TABLE: CatalogueEntry("Read a table's columns and rows.", READ, args.ReadTableArgs),
    ToolName.SEARCH_EXTERNAL: CatalogueEntry(
        "Search an external scholarly index for papers not yet in the library.", READ, args.SearchExternalArgs
    ),
    ToolName.IMPORT_PAPER: CatalogueEntry(
        "Import a paper from the external index into the library.", WRITE, args.ImportPaperArgs
    ),
    ToolName.MOVE_ITEM: CatalogueEntry("Move an item into another collection.", WRITE, args.MoveItemArgs),
    ToolName.REMOVE_ITEM_FROM_COLLECTION: CatalogueEntry(
        "Remove an item from a collection. The item itself stays in the library.",
        DESTRUCTIVE,
        args.RemoveItemFromCollectionArgs,
    ),
    ToolName.FIND_COLLECTION: CatalogueEntry("Find collections by name.", READ, args.FindCollectionArgs),
    ToolName.CREATE_COLLECTION: CatalogueEntry(
        "Create a collection, optionally nested in a parent.", WRITE, args.CreateCollectionArgs
    ),
    ToolName.LIST_COLLECTION: CatalogueEntry(
        "List the items and sub-collections of a collection.", READ, args.ListCollectionArgs
    ),
    ToolName.SEARCH_WEB: CatalogueEntry("Search the web.", READ, args.SearchWebArgs),
    ToolName.READ_WEBPAGE: CatalogueEntry("Read a web page as markdown.", READ, args.ReadWebpageArgs),
    ToolName.GET_CITATIONS: CatalogueEntry("List papers that cite the given paper.", READ, args.CitationGraphArgs),
    ToolName.GET_REFERENCES: CatalogueEntry(
        "List papers referenced by the given paper.", READ, args.CitationGraphArgs
    ),
    ToolName.GENERATE_ITEM_TAGS: CatalogueEntry(
        "Generate and apply descriptive tags for an item.", WRITE, args.GenerateItemTagsArgs
    ),
}


def build_registry(
    handlers: Optional[Mapping[ToolName, ToolHandler]] = None,
    *,
    include_unbound: bool = False,
) -> ToolRegistry:
    """Build a registry from the catalogue.

    Args:
        handlers: Implementations keyed by tool identifier.
        include_unbound: Also describe catalogue tools that have no implementation.

    Returns:
        A fresh, independent registry.
    """
    handlers = handlers or {}
    registry = ToolRegistry()
    for name, entry in CATALOGUE.items():
        handler = handlers.get(name)
        if handler is None and not include_unbound:
            continue
        registry.register(
            ToolDefinition(
                name=name.value,
                description=entry.description,
                sensitivity=entry.sensitivity,
                args_model=entry.args_model,
            ),
            handler,
        )
    return registry
