from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Type, Union

from pydantic import BaseModel

from ...config import AgentConfig


class ToolName(str, Enum):
    """Closed set of tool identifiers the agent knows how to describe and validate."""

    SEARCH_LIBRARY = "search_library"
    GET_ITEM_METADATA = "get_item_metadata"
    READ_ITEM_CONTENT = "read_item_content"
    CREATE_NOTE = "create_note"
    EDIT_NOTE = "edit_note"
    ADD_TO_CONTEXT = "add_to_context"
    REMOVE_FROM_CONTEXT = "remove_from_context"
    LIST_CONTEXT = "list_context"
    LIST_TABLES = "list_tables"
    CREATE_TABLE = "create_table"
    ADD_TO_TABLE = "add_to_table"
    CREATE_TABLE_COLUMN = "create_table_column"
    GENERATE_TABLE_DATA = "generate_table_data"
    READ_TABLE = "read_table"
    SEARCH_EXTERNAL = "search_external"
    IMPORT_PAPER = "import_paper"
    MOVE_ITEM = "move_item"
    REMOVE_ITEM_FROM_COLLECTION = "remove_item_from_collection"
    FIND_COLLECTION = "find_collection"
    CREATE_COLLECTION = "create_collection"
    LIST_COLLECTION = "list_collection"
    SEARCH_WEB = "search_web"
    READ_WEBPAGE = "read_webpage"
    GET_CITATIONS = "get_citations"
    GET_REFERENCES = "get_references"
    GENERATE_ITEM_TAGS = "generate_item_tags"

    @classmethod
    def parse(cls, name: str) -> Optional["ToolName"]:
        """Return the matching identifier, or None for names outside the catalogue."""
        try:
            return cls(name)
        except ValueError:
            return None


class Sensitivity(str, Enum):
    """Risk classification used to gate human approval."""

    READ = "read"
    WRITE = "write"
    DESTRUCTIVE = "destructive"


class ToolResult(BaseModel):
    """
    Outcome of one tool invocation.

    Attributes:
        success: Whether the tool did what was asked.
        data: Payload returned to the model.
        error: Failure description, fed back to the model for self-correction.
        summary: Short human-readable description for transcripts and traces.
    """

    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
    summary: Optional[str] = None

    @classmethod
    def failure(cls, error: str, summary: Optional[str] = None) -> "ToolResult":
        return cls(success=False, error=error, summary=summary)


ToolHandler = Callable[[Any, AgentConfig], Union[ToolResult, Awaitable[ToolResult]]]


class ToolDefinition(BaseModel):
    """
    Represents a tool the model may call.

    Attributes:
        name: The unique name of the tool.
        description: What the tool does, as shown to the model.
        sensitivity: Risk classification, fixed when the registry is built.
        args_model: Pydantic model used to validate and coerce arguments.
        parameters: JSON schema sent to the model; derived from ``args_model`` when omitted.
    """

    name: str
    description: str
    sensitivity: Sensitivity = Sensitivity.WRITE
    args_model: Optional[Type[BaseModel]] = None
    parameters: Optional[Any] = None
