"""Foreground/visibility state machine for the single surface.

Foreground holds only while playback is active. A paused Show is presented
and then immediately withdrawn from foreground, Hide withdraws without
removing the surface, and teardown removes it unconditionally. There are no
timers; every transition is request-driven.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Literal, Protocol

if TYPE_CHECKING:
    from tz_nowplaying.services.renderer import SurfacePayload

logger = logging.getLogger(__name__)

VisibilityState = Literal["hidden", "foreground", "background"]


class SurfacePresenter(Protocol):
    def present(self, payload: SurfacePayload, *, hold_foreground: bool) -> None: ...

    def withdraw(self, *, remove: bool) -> None: ...

    def release(self) -> None: ...


class VisibilityStateMachine:
    """Sole writer of the process-wide `VisibilityState`."""

    def __init__(
        self,
        presenter: SurfacePresenter,
        *,
        on_change: Callable[[VisibilityState, VisibilityState], None] | None = None,
    ) -> None:
        self._presenter = presenter
        self._on_change = on_change
        self._state: VisibilityState = "hidden"
        self._payload: SurfacePayload | None = None

    @property
    def state(self) -> VisibilityState:
        return self._state

    @property
    def payload(self) -> SurfacePayload | None:
        """Last payload handed to the platform, kept across Hide."""
        return self._payload

    def show(self, payload: SurfacePayload, *, is_playing: bool) -> VisibilityState:
        self._presenter.present(payload, hold_foreground=True)
        self._payload = payload
        self._transition("foreground")
        if not is_playing:
            self._presenter.withdraw(remove=False)
            self._transition("background")
        return self._state

    def hide(self) -> VisibilityState:
        self._presenter.withdraw(remove=False)
        self._transition("hidden")
        return self._state

    def teardown(self) -> VisibilityState:
        self._presenter.withdraw(remove=True)
        self._presenter.release()
        self._payload = None
        self._transition("hidden")
        return self._state

    def _transition(self, target: VisibilityState) -> None:
        previous = self._state
        if previous == target:
            return
        self._state = target
        logger.debug("Surface visibility %s -> %s", previous, target)
        if self._on_change is not None:
            self._on_change(previous, target)
