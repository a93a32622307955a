"""ProTools ER1 course assistant: knowledge-base chatbot with a remote LLM fallback."""

from .chat_log import ChatLogger, JsonFileStore, LogEntry, MemoryStore
from .config import ChatContext, Settings, build_context
from .dispatcher import Reply, ResponseDispatcher
from .knowledge import KnowledgeBase, KnowledgeEntry, default_knowledge_base, load_knowledge_base
from .matcher import Matcher, MatchResult
from .presence import PresenceAnimator
from .widget import ChatView, ChatWidget

__all__ = [
    "ChatContext",
    "ChatLogger",
    "ChatView",
    "ChatWidget",
    "JsonFileStore",
    "KnowledgeBase",
    "KnowledgeEntry",
    "LogEntry",
    "MatchResult",
    "Matcher",
    "MemoryStore",
    "PresenceAnimator",
    "Reply",
    "ResponseDispatcher",
    "Settings",
    "build_context",
    "default_knowledge_base",
    "load_knowledge_base",
]
