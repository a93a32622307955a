import os
import random
from dataclasses import dataclass, field
from typing import Optional, Tuple

from dotenv import load_dotenv

load_dotenv()

# =========================
# Bot identity & links
# =========================
BOT_NAME = "ER1 Assistant"
COURSE_NAME = "ProTools ER1"

# =========================
# Storage keys
# =========================
LOG_STORAGE_KEY = "protools_er1_chat_logs"
SESSION_ID_KEY = "protools_er1_session_id"

# =========================
# Limits
# =========================
MAX_LOG_ENTRIES = 1000
DAILY_LIMIT = 99000  # stop before the 100k free tier
MATCH_THRESHOLD = 2


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    try:
        return float(value) if value else default
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    try:
        return int(value) if value else default
    except ValueError:
        return default


@dataclass
class Settings:
    fallback_url: str = "http://127.0.0.1:5000/chat"
    fallback_enabled: bool = True
    fallback_timeout: float = 8.0
    reply_delay: float = 0.5

    log_path: Optional[str] = None
    max_log_entries: int = MAX_LOG_ENTRIES
    knowledge_path: Optional[str] = None

    # presence loop, seconds
    animation_window: Tuple[float, float] = (8.0, 20.0)
    bubble_window: Tuple[float, float] = (25.0, 60.0)
    effect_duration: float = 1.2
    bubble_duration: float = 5.0

    # proxy side
    daily_limit: int = DAILY_LIMIT
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-1.5-flash-latest"
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            fallback_url=os.getenv("PROTOOLS_FALLBACK_URL", cls.fallback_url),
            fallback_enabled=_env_bool("PROTOOLS_FALLBACK_ENABLED", True),
            fallback_timeout=_env_float("PROTOOLS_FALLBACK_TIMEOUT", cls.fallback_timeout),
            reply_delay=_env_float("PROTOOLS_REPLY_DELAY", cls.reply_delay),
            log_path=os.getenv("PROTOOLS_LOG_PATH"),
            max_log_entries=_env_int("PROTOOLS_MAX_LOG_ENTRIES", MAX_LOG_ENTRIES),
            knowledge_path=os.getenv("PROTOOLS_KNOWLEDGE_PATH"),
            daily_limit=_env_int("PROTOOLS_DAILY_LIMIT", DAILY_LIMIT),
            gemini_api_key=os.getenv("GEMINI_API_KEY"),
            gemini_model=os.getenv("GEMINI_MODEL", cls.gemini_model),
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            openai_model=os.getenv("OPENAI_MODEL", cls.openai_model),
            log_level=os.getenv("PROTOOLS_LOG_LEVEL", "INFO"),
        )


@dataclass
class ChatContext:
    """Everything the chat widget needs, built once at startup."""

    settings: Settings
    knowledge_base: "KnowledgeBase"
    matcher: "Matcher"
    chat_log: "ChatLogger"
    rng: random.Random = field(default_factory=random.Random)


def build_context(settings: Optional[Settings] = None, rng: Optional[random.Random] = None) -> ChatContext:
    from .chat_log import ChatLogger, JsonFileStore, MemoryStore
    from .knowledge import default_knowledge_base, load_knowledge_base
    from .matcher import Matcher

    settings = settings or Settings.from_env()

    kb = None
    if settings.knowledge_path:
        kb = load_knowledge_base(settings.knowledge_path)
    if kb is None:
        kb = default_knowledge_base()

    store = JsonFileStore(settings.log_path) if settings.log_path else MemoryStore()
    chat_log = ChatLogger(store, capacity=settings.max_log_entries)

    return ChatContext(
        settings=settings,
        knowledge_base=kb,
        matcher=Matcher(kb),
        chat_log=chat_log,
        rng=rng or random.Random(),
    )
