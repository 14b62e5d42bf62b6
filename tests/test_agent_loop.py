import asyncio
import json
from typing import Any, Dict, List
from unittest.mock import AsyncMock, MagicMock

import pytest

from library_agent.agent_core.agent import AgentLoop, OutcomeStatus, run_agent_turn
from library_agent.agent_core.config import AgentConfig, ModelConfig, RateLimitKind, RateLimitPolicy
from library_agent.agent_core.exceptions import CompletionTransportError, RegistryInvariantError, TransientToolError
from library_agent.agent_core.messages import AssistantMessage, Conversation, ToolMessage
from library_agent.agent_core.rate_limit import RateLimiter
from library_agent.agent_core.streaming import CancelToken
from library_agent.agent_core.tools import ToolName, ToolRegistry, ToolResult, build_registry
from library_agent.agent_core.tools.schema.tool_args import RemoveItemFromCollectionArgs, SearchLibraryArgs
from library_agent.agent_core.tracing import AgentTracer

from fakes import ChunkStream, ScriptedTransport, text_chunks, tool_call_chunks

SEARCH_RESULT = ToolResult(
    success=True,
    data={"items": [{"id": 1}, {"id": 2}, {"id": 3}], "total_found": 3},
    summary="Found 3 items, returning 3",
)


def _loop(
    transport: ScriptedTransport,
    registry: ToolRegistry,
    model_config: ModelConfig,
    config: AgentConfig = AgentConfig(),
    **options: Any,
) -> AgentLoop:
    options.setdefault("rate_limiter", RateLimiter())
    options.setdefault("retry_delay", 0)
    return AgentLoop(transport=transport, registry=registry, model_config=model_config, config=config, **options)


def _tool_messages(conversation: Conversation) -> List[ToolMessage]:
    return [message for message in conversation.messages if isinstance(message, ToolMessage)]


def _payload(message: ToolMessage) -> Dict[str, Any]:
    return json.loads(message.content)


@pytest.mark.asyncio
async def test_search_then_answer(conversation: Conversation, model_config: ModelConfig) -> None:
    search = AsyncMock(return_value=SEARCH_RESULT)
    registry = build_registry({ToolName.SEARCH_LIBRARY: search})
    transport = ScriptedTransport(
        [
            tool_call_chunks(0, "call_1", "search_library", '{"query": "X"}'),
            text_chunks("I found ", "3 papers about X."),
        ]
    )

    outcome = await _loop(transport, registry, model_config).run(conversation)

    assert outcome.status is OutcomeStatus.COMPLETED
    assert outcome.text == "I found 3 papers about X."
    assert outcome.turns == 2
    assert len(outcome.trace.iterations) == 2
    assert outcome.trace.final_success

    args, config = search.call_args.args
    assert args == SearchLibraryArgs(query="X")
    assert isinstance(config, AgentConfig)

    roles = [message.author for message in conversation.messages]
    assert roles == ["system", "user", "assistant", "tool", "assistant"]
    assert conversation.messages[2].tool_calls[0]["function"] == {"name": "search_library", "arguments": '{"query": "X"}'}
    folded = _tool_messages(conversation)[0]
    assert folded.tool_call_id == "call_1"
    assert folded.name == "search_library"
    assert len(_payload(folded)["data"]["items"]) == 3

    second_request = transport.requests[1]["messages"]
    assert second_request[-1]["author"] == "tool"
    assert "search_library" in transport.requests[0]["tools"]


@pytest.mark.asyncio
async def test_arguments_split_across_fragments(conversation: Conversation, model_config: ModelConfig) -> None:
    search = AsyncMock(return_value=SEARCH_RESULT)
    transport = ScriptedTransport(
        [tool_call_chunks(0, "call_1", "search_library", '{"query": "ne', 'ural networks"}'), text_chunks("Done.")]
    )

    await _loop(transport, build_registry({ToolName.SEARCH_LIBRARY: search}), model_config).run(conversation)

    assert search.call_args.args[0].query == "neural networks"
    assert conversation.messages[2].tool_calls[0]["function"]["arguments"] == '{"query": "neural networks"}'


@pytest.mark.asyncio
async def test_invalid_arguments_never_reach_the_tool(conversation: Conversation, model_config: ModelConfig) -> None:
    search = AsyncMock(return_value=SEARCH_RESULT)
    transport = ScriptedTransport(
        [tool_call_chunks(0, "call_1", "search_library", '{"limit": 0}'), text_chunks("Sorry.")]
    )

    outcome = await _loop(transport, build_registry({ToolName.SEARCH_LIBRARY: search}), model_config).run(conversation)

    search.assert_not_called()
    payload = _payload(_tool_messages(conversation)[0])
    assert payload["success"] is False
    assert "query: " in payload["error"]
    assert "limit: " in payload["error"]
    assert outcome.status is OutcomeStatus.COMPLETED


@pytest.mark.asyncio
async def test_unparseable_arguments_are_folded_back(conversation: Conversation, model_config: ModelConfig) -> None:
    search = AsyncMock(return_value=SEARCH_RESULT)
    transport = ScriptedTransport(
        [tool_call_chunks(0, "call_1", "search_library", '{"query": '), text_chunks("Retrying is up to you.")]
    )

    await _loop(transport, build_registry({ToolName.SEARCH_LIBRARY: search}), model_config).run(conversation)

    search.assert_not_called()
    payload = _payload(_tool_messages(conversation)[0])
    assert payload["success"] is False
    assert payload["error"].startswith("Failed to parse arguments for tool 'search_library'")


@pytest.mark.asyncio
async def test_denied_destructive_call_is_not_executed(conversation: Conversation, model_config: ModelConfig) -> None:
    remove = MagicMock(return_value=ToolResult(success=True))
    permission = AsyncMock(return_value=False)
    transport = ScriptedTransport(
        [
            tool_call_chunks(0, "call_9", "remove_item_from_collection", '{"item_id": 1, "collection_id": 10}'),
            text_chunks("I did not remove it."),
        ]
    )
    loop = _loop(
        transport,
        build_registry({ToolName.REMOVE_ITEM_FROM_COLLECTION: remove}),
        model_config,
        AgentConfig(require_approval_for_destructive=True),
        permission_handler=permission,
    )

    outcome = await loop.run(conversation)

    remove.assert_not_called()
    permission.assert_awaited_once_with("call_9", "remove_item_from_collection")
    assert _payload(_tool_messages(conversation)[0])["error"] == "denied by user"
    assert outcome.status is OutcomeStatus.COMPLETED


@pytest.mark.asyncio
async def test_approved_destructive_call_runs(conversation: Conversation, model_config: ModelConfig) -> None:
    remove = MagicMock(return_value=ToolResult(success=True, summary="removed"))
    transport = ScriptedTransport(
        [
            tool_call_chunks(0, "call_9", "remove_item_from_collection", '{"item_id": 1, "collection_id": 10}'),
            text_chunks("Removed."),
        ]
    )
    loop = _loop(
        transport,
        build_registry({ToolName.REMOVE_ITEM_FROM_COLLECTION: remove}),
        model_config,
        AgentConfig(require_approval_for_destructive=True),
        permission_handler=AsyncMock(return_value=True),
    )

    await loop.run(conversation)

    assert remove.call_args.args[0] == RemoveItemFromCollectionArgs(item_id=1, collection_id=10)


@pytest.mark.asyncio
async def test_failing_permission_handler_denies(conversation: Conversation, model_config: ModelConfig) -> None:
    remove = MagicMock(return_value=ToolResult(success=True))
    transport = ScriptedTransport(
        [
            tool_call_chunks(0, "call_9", "remove_item_from_collection", '{"item_id": 1, "collection_id": 10}'),
            text_chunks("Could not ask."),
        ]
    )
    loop = _loop(
        transport,
        build_registry({ToolName.REMOVE_ITEM_FROM_COLLECTION: remove}),
        model_config,
        AgentConfig(require_approval_for_destructive=True),
        permission_handler=AsyncMock(side_effect=RuntimeError("dialog closed")),
    )

    await loop.run(conversation)

    remove.assert_not_called()
    assert _payload(_tool_messages(conversation)[0])["error"] == "denied by user"


@pytest.mark.asyncio
async def test_destructive_call_without_handler_fails_open(
    conversation: Conversation, model_config: ModelConfig
) -> None:
    remove = MagicMock(return_value=ToolResult(success=True, summary="removed"))
    transport = ScriptedTransport(
        [
            tool_call_chunks(0, "call_9", "remove_item_from_collection", '{"item_id": 1, "collection_id": 10}'),
            text_chunks("Removed."),
        ]
    )
    loop = _loop(
        transport,
        build_registry({ToolName.REMOVE_ITEM_FROM_COLLECTION: remove}),
        model_config,
        AgentConfig(require_approval_for_destructive=True),
    )

    outcome = await loop.run(conversation)

    remove.assert_called_once()
    spans = outcome.trace.iterations[0].tool_spans
    assert len(spans) == 1
    assert spans[0].tool_name == "remove_item_from_collection"
    assert spans[0].result.success is True


@pytest.mark.asyncio
async def test_destructive_call_without_handler_can_be_denied_by_policy(
    conversation: Conversation, model_config: ModelConfig
) -> None:
    remove = MagicMock(return_value=ToolResult(success=True))
    transport = ScriptedTransport(
        [
            tool_call_chunks(0, "call_9", "remove_item_from_collection", '{"item_id": 1, "collection_id": 10}'),
            text_chunks("Not allowed."),
        ]
    )
    config = AgentConfig(require_approval_for_destructive=True, approval_without_handler="deny")

    await _loop(
        transport, build_registry({ToolName.REMOVE_ITEM_FROM_COLLECTION: remove}), model_config, config
    ).run(conversation)

    remove.assert_not_called()
    assert _payload(_tool_messages(conversation)[0])["error"] == "denied by user"


@pytest.mark.asyncio
async def test_transient_failures_are_retried_up_to_the_bound(
    conversation: Conversation, model_config: ModelConfig
) -> None:
    search = AsyncMock(side_effect=TransientToolError("index busy"))
    transport = ScriptedTransport(
        [tool_call_chunks(0, "call_1", "search_library", '{"query": "X"}'), text_chunks("The index is busy.")]
    )

    outcome = await _loop(
        transport, build_registry({ToolName.SEARCH_LIBRARY: search}), model_config, AgentConfig(max_tool_retries=2)
    ).run(conversation)

    assert search.await_count == 3
    spans = outcome.trace.iterations[0].tool_spans
    assert [span.tool_call_id for span in spans] == ["call_1"] * 3
    assert outcome.trace.total_tool_calls == 3
    assert outcome.trace.failed_tool_calls == 3
    payload = _payload(_tool_messages(conversation)[0])
    assert payload == {"success": False, "error": "index busy"}


@pytest.mark.asyncio
async def test_permanent_failures_are_not_retried(conversation: Conversation, model_config: ModelConfig) -> None:
    search = AsyncMock(side_effect=LookupError("Item with ID 5 not found"))
    transport = ScriptedTransport(
        [tool_call_chunks(0, "call_1", "search_library", '{"query": "X"}'), text_chunks("Nothing found.")]
    )

    await _loop(transport, build_registry({ToolName.SEARCH_LIBRARY: search}), model_config).run(conversation)

    assert search.await_count == 1
    assert _payload(_tool_messages(conversation)[0])["error"] == "Item with ID 5 not found"


@pytest.mark.asyncio
async def test_transient_failure_then_success(conversation: Conversation, model_config: ModelConfig) -> None:
    search = AsyncMock(side_effect=[ConnectionError("reset"), SEARCH_RESULT])
    transport = ScriptedTransport(
        [tool_call_chunks(0, "call_1", "search_library", '{"query": "X"}'), text_chunks("Found them.")]
    )

    outcome = await _loop(transport, build_registry({ToolName.SEARCH_LIBRARY: search}), model_config).run(conversation)

    assert search.await_count == 2
    assert _payload(_tool_messages(conversation)[0])["success"] is True
    assert [span.result.success for span in outcome.trace.iterations[0].tool_spans] == [False, True]


@pytest.mark.asyncio
async def test_custom_transience_predicate(conversation: Conversation, model_config: ModelConfig) -> None:
    search = AsyncMock(side_effect=LookupError("flaky"))
    transport = ScriptedTransport(
        [tool_call_chunks(0, "call_1", "search_library", '{"query": "X"}'), text_chunks("Gave up.")]
    )
    loop = _loop(
        transport,
        build_registry({ToolName.SEARCH_LIBRARY: search}),
        model_config,
        AgentConfig(max_tool_retries=1),
        is_transient=lambda error: isinstance(error, LookupError),
    )

    await loop.run(conversation)

    assert search.await_count == 2


@pytest.mark.asyncio
async def test_tool_timeout_is_a_transient_failure(conversation: Conversation, model_config: ModelConfig) -> None:
    async def slow_search(args: SearchLibraryArgs, config: AgentConfig) -> ToolResult:
        await asyncio.sleep(1)
        return SEARCH_RESULT

    transport = ScriptedTransport(
        [tool_call_chunks(0, "call_1", "search_library", '{"query": "X"}'), text_chunks("Too slow.")]
    )
    loop = _loop(
        transport,
        build_registry({ToolName.SEARCH_LIBRARY: slow_search}),
        model_config,
        AgentConfig(max_tool_retries=1),
        tool_timeout=0.01,
    )

    outcome = await loop.run(conversation)

    assert "timed out" in _payload(_tool_messages(conversation)[0])["error"]
    assert len(outcome.trace.iterations[0].tool_spans) == 2


@pytest.mark.asyncio
async def test_iteration_bound_truncates(conversation: Conversation, model_config: ModelConfig) -> None:
    search = AsyncMock(return_value=SEARCH_RESULT)
    transport = ScriptedTransport(
        [tool_call_chunks(0, f"call_{n}", "search_library", '{"query": "more"}') for n in range(10)]
    )

    outcome = await _loop(
        transport, build_registry({ToolName.SEARCH_LIBRARY: search}), model_config, AgentConfig(max_agent_iterations=3)
    ).run(conversation)

    assert outcome.status is OutcomeStatus.TRUNCATED
    assert outcome.turns == 3
    assert len(transport.requests) == 3
    assert "maximum of 3 agent iterations" in outcome.text
    last = conversation.last
    assert isinstance(last, AssistantMessage)
    assert "maximum of 3 agent iterations" in last.content
    assert not outcome.trace.final_success


@pytest.mark.asyncio
async def test_unbound_and_unknown_tools_are_unavailable(
    conversation: Conversation, model_config: ModelConfig
) -> None:
    transport = ScriptedTransport(
        [
            tool_call_chunks(0, "call_1", "search_web", '{"query": "news"}')
            + tool_call_chunks(1, "call_2", "format_disk", "{}"),
            text_chunks("I cannot do that."),
        ]
    )

    outcome = await _loop(transport, build_registry(include_unbound=True), model_config).run(conversation)

    first, second = (_payload(message) for message in _tool_messages(conversation))
    assert first == {"success": False, "error": "Tool 'search_web' is not available"}
    assert second == {"success": False, "error": "Tool 'format_disk' is not available"}
    assert outcome.status is OutcomeStatus.COMPLETED


@pytest.mark.asyncio
@pytest.mark.parametrize("parallel", [False, True])
async def test_results_fold_back_in_request_order(
    conversation: Conversation, model_config: ModelConfig, parallel: bool
) -> None:
    async def search(args: SearchLibraryArgs, config: AgentConfig) -> ToolResult:
        await asyncio.sleep(0.05)
        return ToolResult(success=True, data=args.query)

    def list_tables(args: Any, config: AgentConfig) -> ToolResult:
        return ToolResult(success=True, data=[])

    registry = build_registry({ToolName.SEARCH_LIBRARY: search, ToolName.LIST_TABLES: list_tables})
    transport = ScriptedTransport(
        [
            tool_call_chunks(1, "call_b", "list_tables")
            + tool_call_chunks(0, "call_a", "search_library", '{"query": "slow"}'),
            text_chunks("Both done."),
        ]
    )

    await _loop(transport, registry, model_config, parallel_tool_calls=parallel).run(conversation)

    folded = _tool_messages(conversation)
    assert [message.tool_call_id for message in folded] == ["call_a", "call_b"]
    assert _payload(folded[0])["data"] == "slow"


@pytest.mark.asyncio
async def test_plain_return_values_are_wrapped(conversation: Conversation, model_config: ModelConfig) -> None:
    registry = build_registry({ToolName.LIST_CONTEXT: lambda args, config: {"items": []}})
    transport = ScriptedTransport([tool_call_chunks(0, "call_1", "list_context"), text_chunks("Empty.")])

    await _loop(transport, registry, model_config).run(conversation)

    assert _payload(_tool_messages(conversation)[0]) == {"success": True, "data": {"items": []}}


@pytest.mark.asyncio
async def test_cancel_while_streaming_keeps_partial_text(
    conversation: Conversation, model_config: ModelConfig
) -> None:
    cancel = CancelToken()
    tokens: List[str] = []

    def on_token(token: str) -> None:
        tokens.append(token)
        if len(tokens) == 2:
            cancel.cancel()

    transport = ScriptedTransport([text_chunks("Transformers ", "are ", "great.")])

    outcome = await _loop(transport, build_registry(), model_config, on_token=on_token).run(conversation, cancel=cancel)

    assert outcome.status is OutcomeStatus.CANCELLED
    assert outcome.text.startswith("Transformers are")
    assert "[Request cancelled]" in outcome.text
    assert conversation.last.content == "Transformers are "
    assert transport.streams[0].closed


@pytest.mark.asyncio
async def test_cancel_during_tool_execution_stops_further_turns(
    conversation: Conversation, model_config: ModelConfig
) -> None:
    cancel = CancelToken()

    async def search(args: SearchLibraryArgs, config: AgentConfig) -> ToolResult:
        cancel.cancel()
        return SEARCH_RESULT

    transport = ScriptedTransport(
        [
            tool_call_chunks(0, "call_1", "search_library", '{"query": "X"}')
            + tool_call_chunks(1, "call_2", "search_library", '{"query": "Y"}'),
            text_chunks("never streamed"),
        ]
    )

    outcome = await _loop(transport, build_registry({ToolName.SEARCH_LIBRARY: search}), model_config).run(
        conversation, cancel=cancel
    )

    assert outcome.status is OutcomeStatus.CANCELLED
    assert len(transport.requests) == 1
    first, second = (_payload(message) for message in _tool_messages(conversation))
    assert first["success"] is True
    assert second == {"success": False, "error": "cancelled before execution"}


@pytest.mark.asyncio
async def test_cancel_releases_pending_approval(conversation: Conversation, model_config: ModelConfig) -> None:
    cancel = CancelToken()
    remove = MagicMock(return_value=ToolResult(success=True))

    async def never_answers(tool_call_id: str, tool_name: str) -> bool:
        cancel.cancel()
        await asyncio.sleep(10)
        return True

    transport = ScriptedTransport(
        [tool_call_chunks(0, "call_9", "remove_item_from_collection", '{"item_id": 1, "collection_id": 10}')]
    )
    loop = _loop(
        transport,
        build_registry({ToolName.REMOVE_ITEM_FROM_COLLECTION: remove}),
        model_config,
        AgentConfig(require_approval_for_destructive=True),
        permission_handler=never_answers,
    )

    outcome = await asyncio.wait_for(loop.run(conversation, cancel=cancel), timeout=2)

    remove.assert_not_called()
    assert outcome.status is OutcomeStatus.CANCELLED


@pytest.mark.asyncio
async def test_transport_failure_becomes_a_labelled_outcome(
    conversation: Conversation, model_config: ModelConfig
) -> None:
    transport = ScriptedTransport([ChunkStream(text_chunks("Half"), error=CompletionTransportError("HTTP 502"))])

    outcome = await _loop(transport, build_registry(), model_config).run(conversation)

    assert outcome.status is OutcomeStatus.FAILED
    assert outcome.text == "[Request failed: HTTP 502]"
    assert not outcome.trace.final_success


@pytest.mark.asyncio
async def test_transport_timeout_is_treated_as_cancellation(
    conversation: Conversation, model_config: ModelConfig
) -> None:
    transport = ScriptedTransport([ChunkStream(text_chunks("Partial answer"), error=asyncio.TimeoutError())])

    outcome = await _loop(transport, build_registry(), model_config).run(conversation)

    assert outcome.status is OutcomeStatus.CANCELLED
    assert outcome.text.startswith("Partial answer")
    assert conversation.last.content == "Partial answer"


@pytest.mark.asyncio
async def test_rate_limit_slot_is_released_after_each_turn(conversation: Conversation) -> None:
    limiter = RateLimiter()
    config = ModelConfig(id="limited", rate_limit=RateLimitPolicy(kind=RateLimitKind.CONCURRENCY, limit=1))
    transport = ScriptedTransport(
        [tool_call_chunks(0, "call_1", "list_tables"), ChunkStream([], error=CompletionTransportError("boom"))]
    )
    registry = build_registry({ToolName.LIST_TABLES: lambda args, cfg: ToolResult(success=True)})

    outcome = await _loop(transport, registry, config, rate_limiter=limiter).run(conversation)

    assert outcome.status is OutcomeStatus.FAILED
    assert limiter.in_flight("limited") == 0


@pytest.mark.asyncio
async def test_cancel_while_waiting_for_admission(conversation: Conversation) -> None:
    limiter = RateLimiter()
    config = ModelConfig(id="limited", rate_limit=RateLimitPolicy(kind=RateLimitKind.CONCURRENCY, limit=1))
    await limiter.acquire(config)
    cancel = CancelToken()
    transport = ScriptedTransport([text_chunks("never streamed")])

    session = asyncio.ensure_future(
        _loop(transport, build_registry(), config, rate_limiter=limiter).run(conversation, cancel=cancel)
    )
    await asyncio.sleep(0.05)
    assert not session.done()

    cancel.cancel()
    outcome = await asyncio.wait_for(session, timeout=1)

    assert outcome.status is OutcomeStatus.CANCELLED
    assert outcome.text == "[Request cancelled]"
    assert transport.requests == []
    assert limiter.in_flight("limited") == 1

    limiter.release("limited")
    await asyncio.wait_for(limiter.acquire(config), timeout=1)
    assert limiter.in_flight("limited") == 1


class _CancelAtEnd(ChunkStream):
    """Sets the cancel token once the last fragment has been read."""

    def __init__(self, chunks: List[Any], cancel: CancelToken) -> None:
        super().__init__(chunks)
        self._cancel = cancel

    async def __anext__(self) -> Any:
        try:
            return await super().__anext__()
        except StopAsyncIteration:
            self._cancel.cancel()
            raise


@pytest.mark.asyncio
@pytest.mark.parametrize("parallel", [False, True])
async def test_calls_are_not_started_after_cancel(
    conversation: Conversation, model_config: ModelConfig, parallel: bool
) -> None:
    cancel = CancelToken()
    search = AsyncMock(return_value=SEARCH_RESULT)
    transport = ScriptedTransport(
        [
            _CancelAtEnd(
                tool_call_chunks(0, "call_1", "search_library", '{"query": "X"}')
                + tool_call_chunks(1, "call_2", "search_library", '{"query": "Y"}'),
                cancel,
            )
        ]
    )
    loop = _loop(
        transport, build_registry({ToolName.SEARCH_LIBRARY: search}), model_config, parallel_tool_calls=parallel
    )

    outcome = await loop.run(conversation, cancel=cancel)

    assert outcome.status is OutcomeStatus.CANCELLED
    search.assert_not_called()
    assert [_payload(message) for message in _tool_messages(conversation)] == [
        {"success": False, "error": "cancelled before execution"},
        {"success": False, "error": "cancelled before execution"},
    ]


@pytest.mark.asyncio
async def test_tracer_is_shared_and_sessions_are_closed(
    conversation: Conversation, model_config: ModelConfig
) -> None:
    tracer = AgentTracer()
    transport = ScriptedTransport([text_chunks("Hello.")])

    outcome = await _loop(transport, build_registry(), model_config, tracer=tracer).run(
        conversation, session_id="session-1"
    )

    assert outcome.trace.session_id == "session-1"
    assert tracer.active_sessions == 0


@pytest.mark.asyncio
async def test_registry_invariant_violation_propagates(
    conversation: Conversation, model_config: ModelConfig
) -> None:
    registry = build_registry({ToolName.SEARCH_LIBRARY: AsyncMock(return_value=SEARCH_RESULT)})
    del registry.tools["search_library"]
    transport = ScriptedTransport([tool_call_chunks(0, "call_1", "search_library", '{"query": "X"}')])

    with pytest.raises(RegistryInvariantError):
        await _loop(transport, registry, model_config).run(conversation)


@pytest.mark.asyncio
async def test_run_agent_turn(conversation: Conversation, model_config: ModelConfig) -> None:
    transport = ScriptedTransport([text_chunks("Short answer.")])

    outcome = await run_agent_turn(
        conversation,
        AgentConfig(),
        transport=transport,
        registry=build_registry(),
        model_config=model_config,
        rate_limiter=RateLimiter(),
    )

    assert outcome.succeeded
    assert outcome.text == "Short answer."
