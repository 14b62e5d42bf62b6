"""The agent loop: stream a turn, dispatch the requested tools, fold results back, repeat."""

from __future__ import annotations

import asyncio
import inspect
import json
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel

from .state import AgentOutcome, AgentState, AgentStatus, OutcomeStatus
from .transport import CompletionTransport
from ..config import AgentConfig, ModelConfig
from ..exceptions import (
    AgentCancelledError,
    CompletionTransportError,
    RegistryInvariantError,
    ToolValidationError,
    TransientToolError,
)
from ..logger import get_logger
from ..messages import AssistantMessage, Conversation, ToolMessage
from ..rate_limit import RateLimiter, estimate_tokens, get_rate_limiter
from ..streaming import AssembledTurn, CancelToken, StreamAssembler
from ..tools import ToolCallRequest, ToolHandler, ToolRegistry, ToolResult
from ..tracing import AgentTracer

logger = get_logger(__name__)

PermissionHandler = Callable[[str, str], Awaitable[bool]]
TransientPredicate = Callable[[BaseException], bool]

TRUNCATION_NOTICE = "[Stopped after reaching the maximum of {limit} agent iterations. The answer may be incomplete.]"
CANCELLED_LABEL = "[Request cancelled]"
FAILED_LABEL = "[Request failed: {error}]"
DENIED_ERROR = "denied by user"
CANCELLED_ERROR = "cancelled before execution"


def is_transient_error(error: BaseException) -> bool:
    """Default transience test: explicit transient errors, timeouts and connection failures."""
    return isinstance(error, (TransientToolError, TimeoutError, asyncio.TimeoutError, ConnectionError))


def serialize_tool_result(result: ToolResult) -> str:
    """Render a tool result as the content of a tool message."""
    return json.dumps(result.model_dump(exclude_none=True), default=str, ensure_ascii=False)


class AgentLoop:
    """Runs agent sessions against one completion transport and one tool registry.

    The loop is provider-agnostic: it only needs a transport that streams
    ``CompletionChunk`` objects and a registry that validates and dispatches
    tool calls. Every session owns a fresh ``AgentState``; the rate limiter
    and tracer may be shared across sessions.
    """

    def __init__(
        self,
        *,
        transport: CompletionTransport,
        registry: ToolRegistry,
        model_config: ModelConfig,
        config: Optional[AgentConfig] = None,
        rate_limiter: Optional[RateLimiter] = None,
        tracer: Optional[AgentTracer] = None,
        permission_handler: Optional[PermissionHandler] = None,
        is_transient: Optional[TransientPredicate] = None,
        on_token: Optional[Callable[[str], None]] = None,
        tool_timeout: float = 180.0,
        retry_delay: float = 0.5,
        parallel_tool_calls: bool = False,
    ) -> None:
        """Initialize the agent loop.

        Args:
            transport: Streams completions for the active model configuration.
            registry: Tool schemas, sensitivity classes and implementations.
            model_config: Endpoint configuration; its rate limit governs admission.
            config: Agent bounds and library scope shared with every tool call.
            rate_limiter: Limiter shared with other sessions. Defaults to the process-wide one.
            tracer: Tracer receiving session, iteration and span events.
            permission_handler: Async ``(tool_call_id, tool_name) -> bool`` approval hook.
            is_transient: Classifies tool exceptions as retryable.
            on_token: Receives streamed text deltas as they arrive.
            tool_timeout: Timeout in seconds for a single tool execution.
            retry_delay: Base delay before retrying a transient failure, doubled per retry.
            parallel_tool_calls: Execute the calls of one turn concurrently. Results
                are still folded back in request order.
        """
        self._transport = transport
        self._registry = registry
        self._model_config = model_config
        self._config = config or AgentConfig()
        self._rate_limiter = rate_limiter or get_rate_limiter()
        self._tracer = tracer or AgentTracer()
        self._permission_handler = permission_handler
        self._is_transient = is_transient or is_transient_error
        self._on_token = on_token
        self._tool_timeout = tool_timeout
        self._retry_delay = retry_delay
        self._parallel_tool_calls = parallel_tool_calls

    @property
    def tracer(self) -> AgentTracer:
        return self._tracer

    async def run(
        self,
        conversation: Conversation,
        *,
        cancel: Optional[CancelToken] = None,
        session_id: Optional[str] = None,
    ) -> AgentOutcome:
        """Run one agent session to completion, truncation, cancellation or failure.

        Args:
            conversation: Conversation to continue. Assistant and tool messages are appended to it.
            cancel: Optional cooperative cancellation signal.
            session_id: Identifier for tracing. Generated when omitted.

        Returns:
            The labelled outcome together with the finished trace.

        Raises:
            RegistryInvariantError: Only for registry states that cannot exist in a correct program.
        """
        session_id = session_id or uuid.uuid4().hex
        state = AgentState()
        self._tracer.start_session(session_id)
        logger.info(f"Agent session {session_id} started.")

        outcome: Optional[AgentOutcome] = None
        try:
            outcome = await self._run_session(conversation, state, session_id, cancel)
        finally:
            succeeded = outcome is not None and outcome.succeeded
            trace = self._tracer.end_session(session_id, succeeded)
        outcome.trace = trace
        return outcome

    async def _run_session(
        self,
        conversation: Conversation,
        state: AgentState,
        session_id: str,
        cancel: Optional[CancelToken],
    ) -> AgentOutcome:
        tool_definitions = self._registry.tool_definitions()
        turns = 0

        while True:
            if cancel is not None and cancel.cancelled:
                state.status = AgentStatus.CANCELLED
                return AgentOutcome(status=OutcomeStatus.CANCELLED, text=CANCELLED_LABEL, turns=turns)

            self._tracer.start_iteration(session_id, state.iteration)
            state.status = AgentStatus.STREAMING
            turns += 1

            try:
                turn = await self._stream_turn(conversation, tool_definitions, cancel)
            except AgentCancelledError as exc:
                state.status = AgentStatus.CANCELLED
                logger.info(f"Agent session {session_id} cancelled while streaming: {exc}")
                if exc.partial_text:
                    conversation.append(AssistantMessage(content=exc.partial_text))
                text = self._label(exc.partial_text, CANCELLED_LABEL)
                return AgentOutcome(status=OutcomeStatus.CANCELLED, text=text, turns=turns)
            except CompletionTransportError as exc:
                state.status = AgentStatus.FAILED
                logger.error(f"Agent session {session_id} failed: {exc}")
                return AgentOutcome(status=OutcomeStatus.FAILED, text=FAILED_LABEL.format(error=exc), turns=turns)

            if not turn.has_tool_calls:
                conversation.append(AssistantMessage(content=turn.text))
                state.status = AgentStatus.DONE
                logger.info(f"Agent session {session_id} finished after {turns} turn(s).")
                return AgentOutcome(status=OutcomeStatus.COMPLETED, text=turn.text, turns=turns)

            conversation.append(
                AssistantMessage(content=turn.text, tool_calls=[call.to_wire() for call in turn.tool_calls])
            )

            state.status = AgentStatus.DISPATCHING
            results = await self._dispatch_turn(turn.tool_calls, state, session_id, cancel)

            state.status = AgentStatus.FOLDING
            for request, result in zip(turn.tool_calls, results):
                conversation.append(
                    ToolMessage(content=serialize_tool_result(result), tool_call_id=request.id, name=request.name)
                )

            self._tracer.end_iteration(session_id)
            state.iteration += 1

            if cancel is not None and cancel.cancelled:
                state.status = AgentStatus.CANCELLED
                logger.info(f"Agent session {session_id} cancelled after turn {turns}.")
                text = self._label(turn.text, CANCELLED_LABEL)
                return AgentOutcome(status=OutcomeStatus.CANCELLED, text=text, turns=turns)

            if state.iteration >= self._config.max_agent_iterations:
                state.status = AgentStatus.DONE
                notice = TRUNCATION_NOTICE.format(limit=self._config.max_agent_iterations)
                logger.warning(
                    f"Agent session {session_id} reached max iterations ({self._config.max_agent_iterations})."
                )
                conversation.append(AssistantMessage(content=notice))
                return AgentOutcome(status=OutcomeStatus.TRUNCATED, text=self._label(turn.text, notice), turns=turns)

    @staticmethod
    def _label(text: str, label: str) -> str:
        return f"{text}\n\n{label}" if text else label

    @asynccontextmanager
    async def _admission(self, estimated_cost: float, cancel: Optional[CancelToken]) -> AsyncIterator[None]:
        """Hold a rate-limiter slot for one completion call, giving up the wait on cancellation.

        Raises:
            AgentCancelledError: If the session is cancelled before or while waiting for admission.
        """
        if cancel is None:
            async with self._rate_limiter.slot(self._model_config, estimated_cost):
                yield
            return
        if cancel.cancelled:
            raise AgentCancelledError(cancel.reason)

        admission = asyncio.ensure_future(self._rate_limiter.acquire(self._model_config, estimated_cost))
        cancelled = asyncio.ensure_future(cancel.wait())
        try:
            await asyncio.wait({admission, cancelled}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            if admission.done() and not admission.cancelled() and admission.exception() is None:
                self._release_slot()
            raise
        finally:
            cancelled.cancel()
            if not admission.done():
                admission.cancel()
                # Let the limiter hand a pending wake-up on to the next waiter.
                await asyncio.wait({admission})

        if not admission.cancelled() and admission.exception() is not None:
            raise admission.exception()
        if admission.cancelled() or cancel.cancelled:
            if not admission.cancelled():
                self._release_slot()
            logger.info(f"Admission for '{self._model_config.id}' abandoned: session cancelled.")
            raise AgentCancelledError(cancel.reason)

        try:
            yield
        finally:
            self._release_slot()

    def _release_slot(self) -> None:
        if self._model_config.rate_limit is not None:
            self._rate_limiter.release(self._model_config.id)

    async def _stream_turn(
        self,
        conversation: Conversation,
        tool_definitions: Sequence[Dict[str, Any]],
        cancel: Optional[CancelToken],
    ) -> AssembledTurn:
        """Take admission for the model configuration and stream one completion."""
        assembler = StreamAssembler(on_token=self._on_token)
        estimated_cost = estimate_tokens([message.model_dump() for message in conversation.messages])

        async with self._admission(estimated_cost, cancel):
            try:
                stream = self._transport.stream_completion(conversation, tool_definitions, self._model_config)
            except (AgentCancelledError, CompletionTransportError):
                raise
            except Exception as exc:
                raise CompletionTransportError(str(exc)) from exc
            return await assembler.consume(stream, cancel)

    async def _dispatch_turn(
        self,
        requests: Sequence[ToolCallRequest],
        state: AgentState,
        session_id: str,
        cancel: Optional[CancelToken],
    ) -> List[ToolResult]:
        """Run every call of one turn and return the results in request order."""
        if self._parallel_tool_calls:
            return list(
                await asyncio.gather(*(self._process_call(request, state, session_id, cancel) for request in requests))
            )

        return [await self._process_call(request, state, session_id, cancel) for request in requests]

    async def _process_call(
        self,
        request: ToolCallRequest,
        state: AgentState,
        session_id: str,
        cancel: Optional[CancelToken],
    ) -> ToolResult:
        """Parse, validate, gate and execute one tool call."""
        logger.debug(f"Handling tool call: {request.name} (ID: {request.id})")
        if cancel is not None and cancel.cancelled:
            return ToolResult.failure(CANCELLED_ERROR)

        try:
            parsed = request.parse_arguments()
        except ValueError as exc:
            msg = f"Failed to parse arguments for tool '{request.name}': {exc}"
            logger.warning(msg)
            return ToolResult.failure(msg)

        handler = self._resolve_handler(request.name)
        if request.name not in self._registry:
            msg = f"Tool '{request.name}' is not available"
            logger.warning(f"Model requested unknown tool '{request.name}'.")
            return ToolResult.failure(msg)

        try:
            validated = self._registry.validate(request.name, parsed)
        except ToolValidationError as exc:
            msg = f"Invalid arguments for '{request.name}': {exc.format_errors()}"
            logger.warning(msg)
            return ToolResult.failure(msg)

        if handler is None:
            msg = f"Tool '{request.name}' is not available"
            logger.warning(msg)
            return ToolResult.failure(msg)

        if self._registry.requires_approval(request.name, self._config):
            state.status = AgentStatus.APPROVING
            state.pending_approval = True
            state.pending_tool_call = request
            try:
                approved = await self._request_approval(request, cancel)
            finally:
                state.pending_approval = False
                state.pending_tool_call = None
            if not approved:
                logger.info(f"Tool call '{request.name}' ({request.id}) denied.")
                return ToolResult.failure(DENIED_ERROR, summary=f"{request.name} was not approved")

        if cancel is not None and cancel.cancelled:
            return ToolResult.failure(CANCELLED_ERROR)

        return await self._execute_with_retry(request, handler, validated, parsed, state, session_id, cancel)

    def _resolve_handler(self, tool_name: str) -> Optional[ToolHandler]:
        handler = self._registry.get_handler(tool_name)
        if handler is not None and tool_name not in self._registry:
            raise RegistryInvariantError(f"Implementation bound for '{tool_name}' without a definition.")
        return handler

    async def _request_approval(self, request: ToolCallRequest, cancel: Optional[CancelToken]) -> bool:
        """Suspend this call until the permission handler decides."""
        if self._permission_handler is None:
            allowed = self._config.approval_without_handler == "allow"
            logger.info(
                f"No permission handler configured; '{request.name}' is "
                f"{'auto-approved' if allowed else 'denied'} by policy."
            )
            return allowed

        decision = asyncio.ensure_future(self._permission_handler(request.id, request.name))
        if cancel is None:
            waiters = {decision}
        else:
            waiters = {decision, asyncio.ensure_future(cancel.wait())}

        try:
            done, _ = await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for waiter in waiters:
                if not waiter.done():
                    waiter.cancel()

        if decision not in done:
            logger.info(f"Approval for '{request.name}' abandoned: session cancelled.")
            return False

        try:
            return bool(decision.result())
        except Exception as exc:
            logger.error(f"Permission handler failed for '{request.name}': {exc}", exc_info=True)
            return False

    async def _execute_with_retry(
        self,
        request: ToolCallRequest,
        handler: ToolHandler,
        validated: Any,
        input_args: Dict[str, Any],
        state: AgentState,
        session_id: str,
        cancel: Optional[CancelToken],
    ) -> ToolResult:
        """Execute a tool, retrying transient failures up to ``max_tool_retries`` times."""
        while True:
            state.status = AgentStatus.EXECUTING
            state.total_tool_calls += 1
            self._tracer.start_tool_span(session_id, request.id, request.name, input_args)

            result, error = await self._execute_tool(request.name, handler, validated)

            self._tracer.end_tool_span(session_id, request.id, result.success, result.error, result.summary)
            if result.success:
                return result

            state.failed_tool_calls += 1
            if error is None or not self._is_transient(error):
                return result

            retries = state.retry_count.get(request.id, 0)
            if retries >= self._config.max_tool_retries:
                logger.warning(f"Tool '{request.name}' ({request.id}) failed after {retries} retries: {result.error}")
                return result
            if cancel is not None and cancel.cancelled:
                return result

            state.retry_count[request.id] = retries + 1
            delay = self._retry_delay * (2**retries)
            logger.warning(
                f"Transient failure in '{request.name}' (Retry: {retries + 1}/{self._config.max_tool_retries}): "
                f"{result.error}. Waiting {delay}s..."
            )
            if delay > 0:
                await asyncio.sleep(delay)

    async def _execute_tool(
        self, tool_name: str, handler: ToolHandler, arguments: Any
    ) -> Tuple[ToolResult, Optional[BaseException]]:
        """Invoke the implementation; failures become results, never exceptions."""
        try:
            logger.info(f"Executing tool '{tool_name}'...")
            if inspect.iscoroutinefunction(handler):
                value = await asyncio.wait_for(handler(arguments, self._config), timeout=self._tool_timeout)
            else:
                value = await asyncio.wait_for(
                    asyncio.to_thread(handler, arguments, self._config), timeout=self._tool_timeout
                )
                if inspect.isawaitable(value):
                    value = await asyncio.wait_for(value, timeout=self._tool_timeout)
        except asyncio.TimeoutError:
            msg = f"Tool execution timed out after {self._tool_timeout} seconds."
            logger.warning(f"Tool '{tool_name}': {msg}")
            return ToolResult.failure(msg), TransientToolError(msg)
        except Exception as exc:
            msg = str(exc) or type(exc).__name__
            logger.warning(f"Error in '{tool_name}': {msg} ({type(exc).__name__})")
            return ToolResult.failure(msg), exc

        if isinstance(value, ToolResult):
            result = value
        elif isinstance(value, BaseModel):
            result = ToolResult(success=True, data=value.model_dump())
        else:
            result = ToolResult(success=True, data=value)

        if result.success:
            logger.info(f"Tool '{tool_name}' executed successfully.")
        else:
            logger.info(f"Tool '{tool_name}' reported failure: {result.error}")
        return result, None


async def run_agent_turn(
    conversation: Conversation,
    config: AgentConfig,
    *,
    transport: CompletionTransport,
    registry: ToolRegistry,
    model_config: ModelConfig,
    cancel: Optional[CancelToken] = None,
    **options: Any,
) -> AgentOutcome:
    """Run a single agent session with a throwaway ``AgentLoop``.

    Extra keyword arguments are passed to ``AgentLoop``.
    """
    loop = AgentLoop(transport=transport, registry=registry, model_config=model_config, config=config, **options)
    return await loop.run(conversation, cancel=cancel)
