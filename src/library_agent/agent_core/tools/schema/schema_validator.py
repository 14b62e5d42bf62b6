from typing import Any, Dict, List, Type

import jsonref  # type: ignore
from pydantic import BaseModel, ValidationError

from ...exceptions import FieldError, ToolValidationError
from ...logger import get_logger

logger = get_logger(__name__)


class SchemaValidator:
    """
    Helper class for building, validating and sanitizing JSON schemas for tool arguments.
    """

    @staticmethod
    def _local_refs(node: Any) -> List[str]:
        """Names of the local definitions referenced anywhere below ``node``."""
        found: List[str] = []
        stack = [node]
        while stack:
            current = stack.pop()
            if isinstance(current, dict):
                ref = current.get("$ref")
                if isinstance(ref, str) and ref.startswith("#/"):
                    found.append(ref.rsplit("/", 1)[-1])
                stack.extend(current.values())
            elif isinstance(current, list):
                stack.extend(current)
        return found

    @classmethod
    def assert_no_recursive_refs(cls, schema: Dict[str, Any]) -> None:
        """
        Reject schemas whose local definitions reference themselves, directly or through others.

        Args:
            schema: The JSON schema to check.

        Raises:
            ToolValidationError: Naming the definition cycle that was found.
        """
        defs = schema.get("$defs") or schema.get("definitions") or {}

        def visit(name: str, chain: List[str]) -> None:
            if name in chain:
                cycle = " -> ".join(chain[chain.index(name) :] + [name])
                msg = f"Recursive structure detected: {cycle}. Recursive structures are not allowed in tool inputs."
                logger.error(msg)
                raise ToolValidationError(msg)
            if name not in defs:
                return
            for child in cls._local_refs(defs[name]):
                visit(child, chain + [name])

        root = {key: value for key, value in schema.items() if key not in ("$defs", "definitions")}
        for name in cls._local_refs(root):
            visit(name, [])

    @staticmethod
    def sanitize_schema(schema: Any) -> Any:
        """
        Cleans up the schema for better compatibility with completion endpoints.
        Removes $defs, $schema, $id, title.
        Simplifies Optional fields (anyOf with null).
        Enforces additionalProperties: false for objects.

        Args:
            schema: The JSON schema to sanitize.

        Returns:
            The sanitized schema.
        """
        if not isinstance(schema, dict):
            return schema

        new_schema = schema.copy()

        for key in ["$defs", "$schema", "$id", "title", "definitions"]:
            new_schema.pop(key, None)

        if "anyOf" in new_schema:
            non_null = [x for x in new_schema["anyOf"] if x.get("type") != "null"]

            if len(non_null) == 1 and isinstance(non_null[0], dict):
                # The parent's description and default win over the branch's
                merged = non_null[0].copy()
                for key in ("description", "default"):
                    if key in new_schema:
                        merged[key] = new_schema[key]
                return SchemaValidator.sanitize_schema(merged)

        if new_schema.get("type") == "object":
            if "additionalProperties" not in new_schema:
                new_schema["additionalProperties"] = False

        for key, value in new_schema.items():
            # "properties" maps field names to schemas; a field may itself be named "title"
            if key == "properties" and isinstance(value, dict):
                new_schema[key] = {name: SchemaValidator.sanitize_schema(prop) for name, prop in value.items()}
            elif isinstance(value, dict):
                new_schema[key] = SchemaValidator.sanitize_schema(value)
            elif isinstance(value, list):
                new_schema[key] = [
                    SchemaValidator.sanitize_schema(item) if isinstance(item, dict) else item for item in value
                ]

        return new_schema

    @classmethod
    def build_parameters_schema(cls, args_model: Type[BaseModel]) -> Dict[str, Any]:
        """Derive the model-facing parameter schema from an argument model.

        Args:
            args_model: Pydantic model describing the tool arguments.

        Returns:
            A self-contained JSON schema with references inlined.
        """
        raw_schema = args_model.model_json_schema()
        cls.assert_no_recursive_refs(raw_schema)
        # proxies=False ensures we get a plain dict back, not JsonRef objects
        resolved = jsonref.replace_refs(raw_schema, proxies=False)
        schema = cls.sanitize_schema(resolved)
        schema.setdefault("type", "object")
        schema.setdefault("properties", {})
        return schema

    @staticmethod
    def field_errors(error: ValidationError) -> List[FieldError]:
        """Flatten a pydantic ``ValidationError`` into path-addressed field errors."""
        errors = []
        for issue in error.errors():
            path = ".".join(str(part) for part in issue.get("loc", ()))
            message = issue.get("msg", "invalid value")
            if message.startswith("Value error, "):
                message = message[len("Value error, ") :]
            errors.append(FieldError(path=path, message=message))
        return errors
