import pytest

from library_agent.agent_core.config import AgentConfig, ModelConfig
from library_agent.agent_core.messages import Conversation, SystemMessage, UserMessage
from library_agent.agent_core.rate_limit import RateLimiter
from library_agent.library_tools import Collection, InMemoryLibrary, LibraryItem, Note


@pytest.fixture
def model_config() -> ModelConfig:
    return ModelConfig(id="test-model", name="test", api_key="dummy_key")


@pytest.fixture
def agent_config() -> AgentConfig:
    return AgentConfig()


@pytest.fixture
def rate_limiter() -> RateLimiter:
    return RateLimiter()


@pytest.fixture
def conversation() -> Conversation:
    return Conversation(
        messages=[
            SystemMessage(content="You are a research assistant for a document library."),
            UserMessage(content="What do I have on transformers?"),
        ]
    )


@pytest.fixture
def library() -> InMemoryLibrary:
    return InMemoryLibrary(
        items=[
            LibraryItem(
                id=1,
                title="Attention Is All You Need",
                authors=["Ashish Vaswani", "Noam Shazeer"],
                year=2017,
                abstract="The dominant sequence transduction models are based on recurrent networks.",
                tags=["transformers", "nlp"],
                collection_ids={10},
                content="We propose a new simple network architecture, the Transformer.",
            ),
            LibraryItem(
                id=2,
                title="Deep Residual Learning for Image Recognition",
                authors=["Kaiming He"],
                year=2016,
                abstract="Deeper neural networks are more difficult to train.",
                tags=["vision"],
                collection_ids={11},
            ),
            LibraryItem(
                id=3,
                title="BERT: Pre-training of Deep Bidirectional Transformers",
                authors=["Jacob Devlin"],
                year=2019,
                tags=["transformers", "nlp"],
                group_id=7,
            ),
        ],
        collections=[
            Collection(id=10, name="Reading List"),
            Collection(id=11, name="Vision", parent_id=10),
            Collection(id=12, name="Archive"),
        ],
        notes=[Note(id=20, title="Summary", content="Self-attention replaces recurrence.", parent_item_id=1)],
    )
