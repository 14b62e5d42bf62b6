"""Records stored in a document library."""

from typing import List, Optional, Set

from pydantic import BaseModel, Field


class LibraryItem(BaseModel):
    """
    A bibliographic item.

    Attributes:
        id: Positive item ID.
        title: Item title.
        authors: Display names of the creators.
        year: Publication year, when known.
        abstract: Abstract text.
        tags: Free-form tags.
        item_type: Library item type, e.g. ``journalArticle``.
        group_id: Group library the item lives in; None for the personal library.
        collection_ids: Collections the item belongs to.
        content: Extracted full text (PDF or HTML snapshot).
        doi: Digital object identifier.
        url: Landing page.
    """

    id: int
    title: str = "Untitled"
    authors: List[str] = Field(default_factory=list)
    year: Optional[int] = None
    abstract: str = ""
    tags: List[str] = Field(default_factory=list)
    item_type: str = "journalArticle"
    group_id: Optional[int] = None
    collection_ids: Set[int] = Field(default_factory=set)
    content: str = ""
    doi: Optional[str] = None
    url: Optional[str] = None


class Collection(BaseModel):
    id: int
    name: str
    parent_id: Optional[int] = None
    group_id: Optional[int] = None


class Note(BaseModel):
    id: int
    title: str
    content: str
    parent_item_id: Optional[int] = None
    collection_id: Optional[int] = None
    tags: List[str] = Field(default_factory=list)
