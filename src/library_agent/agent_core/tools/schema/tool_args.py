"""Argument models for the tool catalogue.

Each model is the single source of truth for one tool: it validates what the
model sent and produces the JSON schema the model is shown.
"""

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

PositiveId = Annotated[int, Field(gt=0)]

ItemType = Literal[
    "journalArticle", "book", "bookSection", "conferencePaper", "report", "thesis", "webpage", "preprint"
]
ContextItemType = Literal["paper", "tag", "author", "collection", "topic", "table"]


class SearchFilters(BaseModel):
    year_from: Annotated[Optional[int], Field(description="Minimum publication year (inclusive)")] = None
    year_to: Annotated[Optional[int], Field(description="Maximum publication year (inclusive)")] = None
    authors: Annotated[Optional[List[str]], Field(description="Author names to filter by")] = None
    tags: Annotated[Optional[List[str]], Field(description="Tags to filter by")] = None
    collection: Annotated[Optional[str], Field(description="Collection name to filter by")] = None
    item_types: Annotated[Optional[List[ItemType]], Field(description="Item types to include")] = None


class SearchLibraryArgs(BaseModel):
    query: Annotated[str, Field(description="Search query for titles, authors, abstracts, and full text")]
    filters: Annotated[Optional[SearchFilters], Field(description="Optional filters to narrow search results")] = None
    limit: Annotated[int, Field(ge=1, le=50, description="Maximum number of results (default: 10, max: 50)")] = 10


class GetItemMetadataArgs(BaseModel):
    item_id: Annotated[PositiveId, Field(description="The library item ID")]


class ReadItemContentArgs(BaseModel):
    item_id: Annotated[PositiveId, Field(description="The library item ID to read content from")]
    include_notes: Annotated[bool, Field(description="Include attached notes in content")] = True
    include_pdf: Annotated[bool, Field(description="Include PDF text content if available")] = True
    trigger_ocr: Annotated[bool, Field(description="Trigger OCR if no text content is found")] = False
    max_length: Annotated[Optional[int], Field(ge=0, description="Maximum content length (0 for no limit)")] = None


class CreateNoteArgs(BaseModel):
    parent_item_id: Annotated[Optional[PositiveId], Field(description="Parent item ID to attach note to")] = None
    collection_id: Annotated[Optional[PositiveId], Field(description="Collection ID for orphan note")] = None
    title: Annotated[str, Field(min_length=1, description="Note title")]
    content: Annotated[str, Field(min_length=1, description="Note content in Markdown")]
    tags: Annotated[Optional[List[str]], Field(description="Tags to add to the note")] = None

    @model_validator(mode="after")
    def _require_target(self) -> "CreateNoteArgs":
        if self.parent_item_id is None and self.collection_id is None:
            raise ValueError("Either parent_item_id or collection_id must be provided")
        return self


class EditNoteOperation(BaseModel):
    type: Annotated[
        Literal["replace", "insert", "append", "prepend", "delete"], Field(description="Type of edit operation")
    ]
    search: Annotated[
        Optional[str], Field(description="Text to search for (required for 'replace' and 'delete')")
    ] = None
    content: Annotated[
        Optional[str], Field(description="New content to insert/append/prepend or replacement text")
    ] = None
    position: Annotated[Optional[str], Field(description="Position for 'insert': 'start', 'end', or CSS selector")] = (
        None
    )
    replace_all: Annotated[bool, Field(description="For 'replace': replace all occurrences")] = False

    @model_validator(mode="after")
    def _require_search(self) -> "EditNoteOperation":
        if self.type in ("replace", "delete") and not self.search:
            raise ValueError(f"'search' is required for '{self.type}' operations")
        return self


class EditNoteArgs(BaseModel):
    note_id: Annotated[PositiveId, Field(description="ID of the existing note to edit")]
    operations: Annotated[
        List[EditNoteOperation], Field(min_length=1, description="List of edit operations to apply in order")
    ]
    convert_markdown: Annotated[bool, Field(description="Convert markdown content to HTML")] = True


class ContextItem(BaseModel):
    type: Annotated[ContextItemType, Field(description="Type of context item")]
    id: Annotated[Optional[Union[int, str]], Field(description="Item ID")] = None
    name: Annotated[Optional[str], Field(description="Item name (for display)")] = None


class ContextItemRef(BaseModel):
    type: ContextItemType
    id: Optional[Union[int, str]] = None


class AddToContextArgs(BaseModel):
    items: Annotated[List[ContextItem], Field(min_length=1, description="Items to add to the conversation context")]


class RemoveFromContextArgs(BaseModel):
    items: Annotated[List[ContextItemRef], Field(min_length=1, description="Items to remove from context")]


class NoArgs(BaseModel):
    """No parameters needed."""


class CreateTableArgs(BaseModel):
    name: Annotated[str, Field(min_length=1, description="Name for the new table")]
    item_ids: Annotated[Optional[List[PositiveId]], Field(description="Initial paper IDs to add to the table")] = None


class AddToTableArgs(BaseModel):
    table_id: Annotated[str, Field(min_length=1, description="ID of the target table")]
    item_ids: Annotated[List[PositiveId], Field(min_length=1, description="Paper IDs to add to the table")]


class CreateTableColumnArgs(BaseModel):
    table_id: Annotated[str, Field(min_length=1, description="ID of the target table")]
    column_name: Annotated[str, Field(min_length=1, description="Name for the new column")]
    ai_prompt: Annotated[str, Field(min_length=1, description="AI prompt template for generating column data")]


class GenerateTableDataArgs(BaseModel):
    table_id: Annotated[str, Field(min_length=1, description="ID of the target table")]
    column_id: Annotated[Optional[str], Field(description="Specific column ID to generate (all if omitted)")] = None
    item_ids: Annotated[
        Optional[List[PositiveId]], Field(description="Specific item IDs to generate for (all if omitted)")
    ] = None


class ReadTableArgs(BaseModel):
    table_id: Annotated[Optional[str], Field(description="Table ID to read (most recent if omitted)")] = None
    include_data: Annotated[bool, Field(description="Include generated cell data")] = True


class SearchExternalArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    query: Annotated[str, Field(min_length=1, description="Search query for the scholarly index")]
    year: Annotated[Optional[str], Field(description="Year range, e.g., '2020-2024' or '2023-'")] = None
    limit: Annotated[int, Field(ge=1, le=50, description="Maximum number of results")] = 10
    open_access_pdf: Annotated[
        Optional[bool], Field(alias="openAccessPdf", description="Only return papers with open access PDFs")
    ] = None


class ImportPaperArgs(BaseModel):
    paper_id: Annotated[str, Field(min_length=1, description="Scholarly index paper ID")]
    target_collection_id: Annotated[
        Optional[PositiveId], Field(description="Collection ID to add the imported paper to")
    ] = None
    trigger_ocr: Annotated[Optional[bool], Field(description="Automatically trigger OCR after import")] = None


class MoveItemArgs(BaseModel):
    item_id: Annotated[PositiveId, Field(description="Item ID to move")]
    target_collection_id: Annotated[PositiveId, Field(description="Target collection ID")]
    remove_from_others: Annotated[bool, Field(description="Remove from other collections")] = False


class RemoveItemFromCollectionArgs(BaseModel):
    item_id: Annotated[PositiveId, Field(description="Item ID to remove")]
    collection_id: Annotated[PositiveId, Field(description="Collection ID to remove from")]


class FindCollectionArgs(BaseModel):
    name: Annotated[str, Field(min_length=1, description="Collection name to search for")]
    library_id: Annotated[Optional[int], Field(description="Library ID to search in")] = None
    parent_collection_id: Annotated[
        Optional[PositiveId], Field(description="Parent collection ID to search within")
    ] = None


class CreateCollectionArgs(BaseModel):
    name: Annotated[str, Field(min_length=1, description="Name for the new collection")]
    parent_collection_id: Annotated[
        Optional[PositiveId], Field(description="Parent collection ID (creates nested collection)")
    ] = None
    library_id: Annotated[Optional[int], Field(description="Library ID to create in")] = None


class ListCollectionArgs(BaseModel):
    collection_id: Annotated[PositiveId, Field(description="Collection ID to list contents of")]


class SearchWebArgs(BaseModel):
    query: Annotated[str, Field(min_length=1, description="Web search query")]
    limit: Annotated[int, Field(ge=1, le=20, description="Maximum number of results")] = 5


class ReadWebpageArgs(BaseModel):
    url: Annotated[str, Field(min_length=1, pattern=r"^https?://", description="Absolute http(s) URL to read")]


class CitationGraphArgs(BaseModel):
    paper_id: Annotated[str, Field(min_length=1, description="Scholarly index paper ID")]
    limit: Annotated[int, Field(ge=1, le=100, description="Maximum number of papers")] = 10


class GenerateItemTagsArgs(BaseModel):
    item_id: Annotated[PositiveId, Field(description="Library item ID to generate tags for")]
