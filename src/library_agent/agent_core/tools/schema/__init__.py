"""Tool schema generation and validation."""

from .schema_validator import SchemaValidator
from . import tool_args

__all__ = ["SchemaValidator", "tool_args"]
