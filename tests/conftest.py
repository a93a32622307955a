"""Shared fixtures: settings without delays, a manual clock scheduler and a recording view."""

import random

import pytest

from protools_chat.chat_log import ChatLogger, MemoryStore
from protools_chat.config import ChatContext, Settings
from protools_chat.knowledge import default_knowledge_base
from protools_chat.matcher import Matcher
from protools_chat.widget import REQUIRED_ELEMENTS, ChatView

FALLBACK_URL = "http://proxy.test/chat"


class FakeTimer:
    def __init__(self, when, callback):
        self.when = when
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Timers that only fire when the test advances the clock."""

    def __init__(self):
        self.now = 0.0
        self.timers = []

    def call_later(self, delay, callback):
        timer = FakeTimer(self.now + delay, callback)
        self.timers.append(timer)
        return timer

    def pending(self):
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def advance(self, seconds):
        target = self.now + seconds
        while True:
            due = [t for t in self.pending() if t.when <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.when)
            self.now = timer.when
            timer.fired = True
            timer.callback()
        self.now = target


class RecordingView(ChatView):
    def __init__(self, elements=REQUIRED_ELEMENTS, confirm_answer=True):
        self.elements = set(elements)
        self.input = ""
        self.messages = []
        self.statuses = []
        self.panel_open = False
        self.focused = False
        self.confirm_answer = confirm_answer
        self.events = []
        self.active_effect = None
        self.bubble = None

    def has_element(self, element_id):
        return element_id in self.elements

    def read_input(self):
        return self.input

    def clear_input(self):
        self.input = ""

    def focus_input(self):
        self.focused = True

    def add_message(self, text, role):
        self.messages.append((text, role))

    def show_status(self, text):
        self.statuses.append(text)

    def set_panel_open(self, is_open):
        self.panel_open = is_open

    def confirm(self, prompt):
        return self.confirm_answer

    def apply_effect(self, effect):
        self.events.append(("effect", effect))
        self.active_effect = effect

    def clear_effect(self, effect):
        self.events.append(("clear_effect", effect))
        self.active_effect = None

    def show_bubble(self, text):
        self.events.append(("bubble", text))
        self.bubble = text

    def hide_bubble(self):
        self.events.append(("hide_bubble", None))
        self.bubble = None


@pytest.fixture
def settings():
    return Settings(fallback_url=FALLBACK_URL, reply_delay=0.0, fallback_timeout=2.0)


@pytest.fixture
def context(settings):
    kb = default_knowledge_base()
    return ChatContext(
        settings=settings,
        knowledge_base=kb,
        matcher=Matcher(kb),
        chat_log=ChatLogger(MemoryStore(), capacity=50),
        rng=random.Random(7),
    )


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def view():
    return RecordingView()
