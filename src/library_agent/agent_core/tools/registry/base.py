"""Tool registry: argument schemas, sensitivity classes and bound implementations."""

import json
from typing import Any, Callable, Dict, List, Mapping, Optional, Type, Union

from pydantic import BaseModel, ValidationError

from ..models import Sensitivity, ToolDefinition, ToolHandler, ToolName
from ..schema import SchemaValidator
from ...config import AgentConfig
from ...exceptions import FieldError, ToolNotFoundError, ToolRegistrationError, ToolValidationError
from ...logger import get_logger

logger = get_logger(__name__)

ValidatedArguments = Union[BaseModel, Dict[str, Any]]


class ToolRegistry:
    """
    An explicitly constructed registry of the tools one agent session may use.

    Catalogue tools (members of ``ToolName``) are dispatched through a closed
    table keyed by identifier. Any other registered name is an experimental
    tool: it is still described to the model and dispatched, but its
    arguments pass through unvalidated.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self.tools: Dict[str, ToolDefinition] = {}
        self._handlers: Dict[ToolName, ToolHandler] = {}
        self._experimental_handlers: Dict[str, ToolHandler] = {}

    def register(self, tool: ToolDefinition, handler: Optional[ToolHandler] = None) -> None:
        """
        Register a tool definition, optionally binding its implementation.

        Args:
            tool: The definition to add.
            handler: Optional implementation ``(args, config) -> ToolResult``.

        Raises:
            ToolRegistrationError: If a tool with the same name is already registered.
        """
        if tool.name in self.tools:
            msg = f"Tool '{tool.name}' is already registered."
            logger.error(msg)
            raise ToolRegistrationError(msg)

        if tool.parameters is None and tool.args_model is not None:
            tool = tool.model_copy(update={"parameters": SchemaValidator.build_parameters_schema(tool.args_model)})

        self.tools[tool.name] = tool
        logger.debug(f"Registered tool '{tool.name}' ({tool.sensitivity.value}).")

        if handler is not None:
            self.bind(tool.name, handler)

    def unregister(self, tool_name: str) -> None:
        """Remove a tool and its implementation.

        Raises:
            ToolNotFoundError: If the tool does not exist in the registry.
        """
        if tool_name not in self.tools:
            raise ToolNotFoundError(f"Tool '{tool_name}' not found in the registry.")
        del self.tools[tool_name]
        identifier = ToolName.parse(tool_name)
        if identifier is not None:
            self._handlers.pop(identifier, None)
        self._experimental_handlers.pop(tool_name, None)
        logger.info(f"Unregistered tool '{tool_name}'.")

    def bind(self, tool_name: Union[str, ToolName], handler: ToolHandler) -> None:
        """Attach the implementation for an already registered tool.

        Raises:
            ToolRegistrationError: If the tool has no definition.
        """
        name = tool_name.value if isinstance(tool_name, ToolName) else tool_name
        if name not in self.tools:
            raise ToolRegistrationError(f"Cannot bind an implementation to unregistered tool '{name}'.")

        identifier = ToolName.parse(name)
        if identifier is not None:
            self._handlers[identifier] = handler
        else:
            self._experimental_handlers[name] = handler

    def implementation(self, tool_name: Union[str, ToolName]) -> Callable[[ToolHandler], ToolHandler]:
        """A decorator binding a function as the implementation of ``tool_name``."""

        def decorator(func: ToolHandler) -> ToolHandler:
            self.bind(tool_name, func)
            return func

        return decorator

    def get_handler(self, tool_name: str) -> Optional[ToolHandler]:
        identifier = ToolName.parse(tool_name)
        if identifier is not None:
            return self._handlers.get(identifier)
        return self._experimental_handlers.get(tool_name)

    def get_schema(self, tool_name: str) -> Optional[Type[BaseModel]]:
        """Return the argument model for a tool, or None when it has none."""
        tool = self.tools.get(tool_name)
        return tool.args_model if tool else None

    def get_sensitivity(self, tool_name: str) -> Sensitivity:
        """Return the tool's sensitivity; unknown tools are treated as ``write``."""
        tool = self.tools.get(tool_name)
        return tool.sensitivity if tool else Sensitivity.WRITE

    def requires_approval(self, tool_name: str, config: AgentConfig) -> bool:
        """Only destructive tools block, and only when approval gating is switched on."""
        if not config.require_approval_for_destructive:
            return False
        return self.get_sensitivity(tool_name) is Sensitivity.DESTRUCTIVE

    def validate(self, tool_name: str, arguments: Union[str, Mapping[str, Any]]) -> ValidatedArguments:
        """
        Apply the tool's argument model to the parsed arguments.

        Args:
            tool_name: Name of the requested tool.
            arguments: Raw JSON text or an already parsed mapping.

        Returns:
            The validated model instance, or the parsed mapping for tools without a schema.

        Raises:
            ToolValidationError: If the arguments violate the schema, with field-level errors.
        """
        if isinstance(arguments, str):
            try:
                parsed = json.loads(arguments) if arguments.strip() else {}
            except json.JSONDecodeError as exc:
                raise ToolValidationError(
                    f"Arguments for '{tool_name}' are not valid JSON: {exc}",
                    [FieldError(path="", message=f"invalid JSON: {exc}")],
                ) from exc
        else:
            parsed = dict(arguments)

        if not isinstance(parsed, dict):
            raise ToolValidationError(
                f"Arguments for '{tool_name}' must be a JSON object.",
                [FieldError(path="", message="arguments must be a JSON object")],
            )

        args_model = self.get_schema(tool_name)
        if args_model is None:
            logger.warning(f"No argument schema registered for tool '{tool_name}'; passing arguments through.")
            return parsed

        try:
            return args_model.model_validate(parsed)
        except ValidationError as exc:
            errors = SchemaValidator.field_errors(exc)
            msg = "; ".join(str(error) for error in errors)
            raise ToolValidationError(f"Argument validation failed: {msg}", errors) from exc

    def tool_definitions(self) -> List[Dict[str, Any]]:
        """Describe every registered tool in the OpenAI function-calling format."""
        definitions = []
        for tool in self.tools.values():
            parameters = tool.parameters or {"type": "object", "properties": {}}
            definitions.append(
                {
                    "type": "function",
                    "function": {
                        "name": tool.name,
                        "description": tool.description,
                        "parameters": parameters,
                    },
                }
            )
        return definitions

    def __contains__(self, tool_name: object) -> bool:
        return tool_name in self.tools
