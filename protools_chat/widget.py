from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Callable, Dict, List, Optional

from .chat_log import LogEntry
from .config import BOT_NAME, ChatContext
from .dispatcher import Reply, ResponseDispatcher
from .logging import get_logger
from .presence import PresenceAnimator

logger = get_logger(__name__)

REQUIRED_ELEMENTS = (
    "chatbot-messages",
    "chatbot-input",
    "chatbot-send",
    "chatbot-toggle",
    "chatbot-panel",
)

EVENTS = ("open", "close", "send", "reply")


class ChatView(ABC):
    """Rendering surface the widget drives (a page, a terminal, a test double)."""

    @abstractmethod
    def has_element(self, element_id: str) -> bool: ...

    @abstractmethod
    def read_input(self) -> str: ...

    @abstractmethod
    def clear_input(self) -> None: ...

    def focus_input(self) -> None:
        pass

    @abstractmethod
    def add_message(self, text: str, role: str) -> None: ...

    def show_status(self, text: str) -> None:
        pass

    def clear_status(self) -> None:
        pass

    @abstractmethod
    def set_panel_open(self, is_open: bool) -> None: ...

    def confirm(self, prompt: str) -> bool:
        return False

    # presence hooks
    def apply_effect(self, effect: str) -> None:
        pass

    def clear_effect(self, effect: str) -> None:
        pass

    def show_bubble(self, text: str) -> None:
        pass

    def hide_bubble(self) -> None:
        pass


class ChatWidget:
    def __init__(
        self,
        context: ChatContext,
        view: ChatView,
        dispatcher: Optional[ResponseDispatcher] = None,
        animator: Optional[PresenceAnimator] = None,
    ):
        self.context = context
        self.view = view
        self.dispatcher = dispatcher or ResponseDispatcher(context)
        self.animator = animator or PresenceAnimator.from_settings(view, context.settings, rng=context.rng)
        self.mounted = False
        self.is_open = False
        self._handlers: Dict[str, List[Callable]] = defaultdict(list)

    # =========================
    # Events
    # =========================
    def on(self, event: str, handler: Callable) -> None:
        if event not in EVENTS:
            raise ValueError(f"unknown widget event: {event!r}")
        self._handlers[event].append(handler)

    def _emit(self, event: str, *args) -> None:
        for handler in list(self._handlers[event]):
            handler(*args)

    # =========================
    # Lifecycle
    # =========================
    def mount(self) -> bool:
        missing = [e for e in REQUIRED_ELEMENTS if not self.view.has_element(e)]
        if missing:
            logger.debug("chat_widget_skipped", missing=missing)
            return False
        self.mounted = True
        self.animator.start()
        return True

    def unmount(self) -> None:
        if self.mounted:
            self.animator.stop()
            self.mounted = False

    def open(self) -> None:
        if not self.mounted or self.is_open:
            return
        self.is_open = True
        self.animator.open()
        self.view.set_panel_open(True)
        self.view.focus_input()
        self._emit("open")

    def close(self) -> None:
        if not self.mounted or not self.is_open:
            return
        self.is_open = False
        self.view.set_panel_open(False)
        self.animator.close()
        self._emit("close")

    def toggle(self) -> None:
        if self.is_open:
            self.close()
        else:
            self.open()

    # =========================
    # Messages
    # =========================
    async def send(self) -> Optional[Reply]:
        if not self.mounted:
            return None

        message = (self.view.read_input() or "").strip()
        if not message:
            return None

        self.view.clear_input()
        self.view.add_message(message, "user")
        self.context.chat_log.log(LogEntry(type="user", message=message))
        self._emit("send", message)

        self.view.show_status(f"{BOT_NAME} is typing…")
        try:
            reply = await self.dispatcher.respond(message)
        finally:
            self.view.clear_status()

        self.view.add_message(reply.text, "assistant")
        self.context.chat_log.log(
            LogEntry(type="assistant", message=reply.text, user_query=message, source=reply.source)
        )
        self._emit("reply", reply)
        return reply

    def clear_logs(self) -> bool:
        return self.context.chat_log.clear(
            lambda: self.view.confirm("Are you sure you want to clear all chat logs?")
        )
