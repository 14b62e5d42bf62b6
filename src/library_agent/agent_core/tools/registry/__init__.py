"""Tool registry and the built-in catalogue."""

from .base import ToolRegistry, ValidatedArguments
from .catalogue import CATALOGUE, CatalogueEntry, build_registry

__all__ = ["ToolRegistry", "ValidatedArguments", "CATALOGUE", "CatalogueEntry", "build_registry"]
