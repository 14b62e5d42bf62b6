import asyncio
import logging

from dotenv import load_dotenv

from library_agent.agent_core import AgentLoop, Conversation, SystemMessage, UserMessage, setup_logging
from library_agent.agent_core.config import get_settings
from library_agent.agent_impl.openai_api import OpenAICompletionTransport
from library_agent.library_tools import Collection, InMemoryLibrary, LibraryItem, build_library_registry

load_dotenv()


def demo_library() -> InMemoryLibrary:
    return InMemoryLibrary(
        items=[
            LibraryItem(
                id=1,
                title="Attention Is All You Need",
                authors=["Ashish Vaswani"],
                year=2017,
                tags=["transformers"],
                collection_ids={10},
            ),
            LibraryItem(id=2, title="Deep Residual Learning for Image Recognition", authors=["Kaiming He"], year=2016),
        ],
        collections=[Collection(id=10, name="Reading List")],
    )


async def ask_permission(tool_call_id: str, tool_name: str) -> bool:
    answer = await asyncio.to_thread(input, f"\nAllow '{tool_name}' ({tool_call_id})? [y/N] ")
    return answer.strip().lower() in ("y", "yes")


async def main() -> None:
    """
    Chat with the research agent over a small in-memory library.
    """
    setup_logging(logging.WARNING)
    settings = get_settings()
    if not settings.api_key:
        print("Error: OPENAI_API_KEY not found in environment variables.")
        return

    loop = AgentLoop(
        transport=OpenAICompletionTransport(),
        registry=build_library_registry(demo_library()),
        model_config=settings.build_model_config(),
        config=settings.build_agent_config(),
        permission_handler=ask_permission,
        on_token=lambda token: print(token, end="", flush=True),
    )
    conversation = Conversation(messages=[SystemMessage(content="You are a research assistant for a paper library.")])

    print("Start chatting! Type 'exit' or 'quit' to stop.")
    while True:
        user_input = input("\nYou: ").strip()
        if user_input.lower() in ["exit", "quit"]:
            print("Goodbye!")
            break
        if not user_input:
            continue

        conversation.append(UserMessage(content=user_input))
        print("Assistant: ", end="")
        outcome = await loop.run(conversation)
        if outcome.status.value != "completed":
            print(f"\n{outcome.text}")
        print(f"\n({outcome.turns} turn(s), {outcome.trace.total_tool_calls} tool call(s))")


if __name__ == "__main__":
    asyncio.run(main())
