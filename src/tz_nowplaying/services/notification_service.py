"""Render pipeline orchestration between inbound actions and the platform.

`NotificationService` is the surface authority. All of its state lives on the
event loop that owns it: artwork resolution is the only await point, and the
continuation resumes on the loop before anything touches the platform. Other
threads hand actions in through `submit_threadsafe`.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from contextlib import suppress
from typing import Callable

from tz_nowplaying.events import (
    Hide,
    NotificationAction,
    Show,
    SurfacePresented,
    VisibilityChanged,
)
from tz_nowplaying.models import ImageData
from tz_nowplaying.services.actions import build_actions
from tz_nowplaying.services.artwork import ArtworkResolver
from tz_nowplaying.services.renderer import SurfacePayload, SurfaceRenderer
from tz_nowplaying.services.visibility import VisibilityState, VisibilityStateMachine

logger = logging.getLogger(__name__)


class NotificationService:
    """Owns the surface lifecycle and emits events to subscribers."""

    def __init__(
        self,
        *,
        renderer: SurfaceRenderer,
        resolver: ArtworkResolver,
        emit_event: Callable[[object], Awaitable[None]] | None = None,
        supersede_stale_renders: bool = True,
    ) -> None:
        self._renderer = renderer
        self._resolver = resolver
        self._emit_event = emit_event
        self._supersede = supersede_stale_renders
        self._visibility = VisibilityStateMachine(
            renderer, on_change=self._on_visibility_change
        )
        self._inflight: dict[str, asyncio.Task[SurfacePayload]] = {}
        self._pending_events: set[asyncio.Task[None]] = set()
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def visibility(self) -> VisibilityState:
        return self._visibility.state

    @property
    def payload(self) -> SurfacePayload | None:
        return self._visibility.payload

    async def handle(self, action: NotificationAction) -> None:
        """Process one action to completion, propagating platform failures."""
        self._bind_loop()
        if isinstance(action, Show):
            await self._render(action)
        elif isinstance(action, Hide):
            self._hide()
        else:
            raise TypeError(f"unsupported notification action: {action!r}")

    def submit(
        self, action: NotificationAction
    ) -> asyncio.Task[SurfacePayload] | None:
        """Schedule an action from the loop thread.

        Show starts a supervised render task (returned); Hide applies at once.
        """
        self._bind_loop()
        if isinstance(action, Hide):
            self._hide()
            return None
        if not isinstance(action, Show):
            raise TypeError(f"unsupported notification action: {action!r}")
        player_id = action.request.player_id
        if self._supersede:
            stale = self._inflight.get(player_id)
            if stale is not None and not stale.done():
                logger.debug("Superseding in-flight render for player %s", player_id)
                stale.cancel()
        task = asyncio.create_task(self._render(action))
        self._inflight[player_id] = task
        task.add_done_callback(lambda done: self._on_render_done(player_id, done))
        return task

    def submit_threadsafe(self, action: NotificationAction) -> None:
        """Mailbox entry point for callers outside the loop thread."""
        if self._loop is None:
            raise RuntimeError("NotificationService has not been bound to a loop")
        self._loop.call_soon_threadsafe(self.submit, action)

    def teardown(self) -> None:
        """Force the surface away regardless of state (host task removed)."""
        self._cancel_inflight()
        self._visibility.teardown()

    async def shutdown(self) -> None:
        """Cancel renders, tear the surface down and release network resources."""
        tasks = self._cancel_inflight()
        for task in tasks:
            with suppress(asyncio.CancelledError, Exception):
                await task
        self._visibility.teardown()
        for pending in list(self._pending_events):
            with suppress(Exception):
                await pending
        await self._resolver.close()

    async def wait_idle(self) -> None:
        """Await all in-flight renders; failures are already logged."""
        while True:
            pending = [task for task in self._inflight.values() if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def _render(self, action: Show) -> SurfacePayload:
        request = action.request
        resolved = await self._resolver.resolve(request.audio_metas.image)
        art = resolved if isinstance(resolved, ImageData) else None
        actions = build_actions(request)
        payload = self._renderer.render(request, art, actions)
        self._visibility.show(payload, is_playing=request.is_playing)
        logger.info(
            "Presented surface for player %s (playing=%s, artwork=%s)",
            request.player_id,
            request.is_playing,
            art is not None,
            extra={"player_id": request.player_id, "actions": len(actions)},
        )
        await self._emit(SurfacePresented(payload))
        return payload

    def _hide(self) -> None:
        if self._supersede:
            self._cancel_inflight()
        self._visibility.hide()

    def _cancel_inflight(self) -> list[asyncio.Task[SurfacePayload]]:
        tasks = [task for task in self._inflight.values() if not task.done()]
        for task in tasks:
            task.cancel()
        return tasks

    def _on_render_done(
        self, player_id: str, task: asyncio.Task[SurfacePayload]
    ) -> None:
        if self._inflight.get(player_id) is task:
            del self._inflight[player_id]
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Surface render failed for player %s",
                player_id,
                exc_info=(type(exc), exc, exc.__traceback__),
            )

    def _on_visibility_change(
        self, previous: VisibilityState, current: VisibilityState
    ) -> None:
        if self._emit_event is None:
            return
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return
        event_task = asyncio.ensure_future(
            self._emit(VisibilityChanged(previous, current))
        )
        self._pending_events.add(event_task)
        event_task.add_done_callback(self._pending_events.discard)

    async def _emit(self, event: object) -> None:
        if self._emit_event is None:
            return
        await self._emit_event(event)

    def _bind_loop(self) -> None:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
