"""Content pipeline

ContentOrchestrator runs one keyword through research, synthesis,
drafting, judging, the critique/revision loop and finalization.
ContentRunner feeds it from a keyword queue and hands finished articles
to the publisher and record store.
"""

from .orchestrator import AgentSuite, ContentOrchestrator, PhaseFailure
from .runner import ContentRunner
from .stores import (
    ContentPublisher,
    ContentStore,
    InMemoryContentStore,
    InMemoryKeywordQueue,
    InMemoryPublisher,
    KeywordSource,
)

__all__ = [
    "AgentSuite",
    "ContentOrchestrator",
    "PhaseFailure",
    "ContentRunner",
    "KeywordSource",
    "ContentStore",
    "ContentPublisher",
    "InMemoryKeywordQueue",
    "InMemoryContentStore",
    "InMemoryPublisher",
]
