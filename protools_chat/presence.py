"""
Idle-time animation and speech-bubble loop for the closed chat toggle.

While the panel is closed two independent self-rescheduling timers run: one
plays a short visual effect, the other shows a speech bubble. Opening the
panel cancels every pending timer and removes whatever is on screen, so
nothing fires or stays visible while the panel is open.
"""

import asyncio
import random
from typing import Callable, Optional, Sequence, Tuple

from .logging import get_logger

logger = get_logger(__name__)

EFFECTS: Tuple[str, ...] = ("bounce", "wiggle", "pulse", "shake", "glow")

BUBBLE_MESSAGES: Tuple[str, ...] = (
    "Stuck on a merge? Ask me! 🔗",
    "Need help with DiD or IV?",
    "Questions about Git? I can help.",
    "Python, Stata or R? Ask away!",
    "Clustered standard errors confusing you?",
    "Hi! I'm here if you need me 👋",
)


class AsyncioScheduler:
    """Timer source backed by the running asyncio loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]):
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


class PresenceAnimator:
    def __init__(
        self,
        view,
        scheduler=None,
        rng: Optional[random.Random] = None,
        animation_window: Tuple[float, float] = (8.0, 20.0),
        bubble_window: Tuple[float, float] = (25.0, 60.0),
        effect_duration: float = 1.2,
        bubble_duration: float = 5.0,
        effects: Sequence[str] = EFFECTS,
        messages: Sequence[str] = BUBBLE_MESSAGES,
    ):
        self.view = view
        self.scheduler = scheduler or AsyncioScheduler()
        self.rng = rng or random.Random()
        self.animation_window = animation_window
        self.bubble_window = bubble_window
        self.effect_duration = effect_duration
        self.bubble_duration = bubble_duration
        self.effects = tuple(effects)
        self.messages = tuple(messages)

        self.is_panel_open = False
        self.running = False
        self.pending_animation_timer = None
        self.pending_bubble_timer = None
        self._effect_revert_timer = None
        self._bubble_hide_timer = None
        self._active_effect: Optional[str] = None
        self._bubble_visible = False

    @classmethod
    def from_settings(cls, view, settings, scheduler=None, rng=None) -> "PresenceAnimator":
        return cls(
            view,
            scheduler=scheduler,
            rng=rng,
            animation_window=settings.animation_window,
            bubble_window=settings.bubble_window,
            effect_duration=settings.effect_duration,
            bubble_duration=settings.bubble_duration,
        )

    # =========================
    # State transitions
    # =========================
    def start(self) -> None:
        self.running = True
        if not self.is_panel_open:
            self._schedule_animation()
            self._schedule_bubble()

    def stop(self) -> None:
        self.running = False
        self._cancel_all()

    def open(self) -> None:
        self.is_panel_open = True
        self._cancel_all()

    def close(self) -> None:
        if not self.is_panel_open:
            return
        self.is_panel_open = False
        if self.running:
            self._schedule_animation()
            self._schedule_bubble()

    # =========================
    # Scheduling
    # =========================
    def _active(self) -> bool:
        return self.running and not self.is_panel_open

    def _schedule_animation(self) -> None:
        if self.pending_animation_timer is not None:
            self.pending_animation_timer.cancel()
        delay = self.rng.uniform(*self.animation_window)
        self.pending_animation_timer = self.scheduler.call_later(delay, self._fire_animation)

    def _schedule_bubble(self) -> None:
        if self.pending_bubble_timer is not None:
            self.pending_bubble_timer.cancel()
        delay = self.rng.uniform(*self.bubble_window)
        self.pending_bubble_timer = self.scheduler.call_later(delay, self._fire_bubble)

    def _fire_animation(self) -> None:
        self.pending_animation_timer = None
        if not self._active():
            return
        self._revert_effect()
        effect = self.rng.choice(self.effects)
        self._active_effect = effect
        self.view.apply_effect(effect)
        self._effect_revert_timer = self.scheduler.call_later(self.effect_duration, self._revert_effect)
        self._schedule_animation()

    def _fire_bubble(self) -> None:
        self.pending_bubble_timer = None
        if not self._active():
            return
        self._hide_bubble()
        message = self.rng.choice(self.messages)
        self._bubble_visible = True
        self.view.show_bubble(message)
        self._bubble_hide_timer = self.scheduler.call_later(self.bubble_duration, self._hide_bubble)
        self._schedule_bubble()

    def _revert_effect(self) -> None:
        if self._effect_revert_timer is not None:
            self._effect_revert_timer.cancel()
            self._effect_revert_timer = None
        if self._active_effect is not None:
            self.view.clear_effect(self._active_effect)
            self._active_effect = None

    def _hide_bubble(self) -> None:
        if self._bubble_hide_timer is not None:
            self._bubble_hide_timer.cancel()
            self._bubble_hide_timer = None
        if self._bubble_visible:
            self.view.hide_bubble()
            self._bubble_visible = False

    def _cancel_all(self) -> None:
        for name in ("pending_animation_timer", "pending_bubble_timer"):
            timer = getattr(self, name)
            if timer is not None:
                timer.cancel()
                setattr(self, name, None)
        self._revert_effect()
        self._hide_bubble()
        logger.debug("presence_suspended")
