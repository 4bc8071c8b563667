"""
Map state store.

Single source of truth for markers, the pending camera target and the
auto-frame suppression flag. The store is constructed explicitly and passed to
the tool dispatcher and the map state binding; there is no module-level
instance.

Mutations are plain attribute swaps on an immutable ``MapState`` snapshot,
followed by a synchronous notification of every subscriber. Multi-field
updates go through ``apply()`` so subscribers observe them as one change.
A write made by a listener while subscribers are being notified is queued
and committed once the current round finishes, so every subscriber sees the
changes in the order they were made.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Iterable, Optional

from map_orchestrator.models.map_models import CameraTarget, MapMarker, MapState

logger = logging.getLogger(__name__)

StateListener = Callable[[MapState, MapState], None]

_UNSET = object()


class MapStateStore:
    """Observable holder of the current ``MapState``."""

    def __init__(self, initial: Optional[MapState] = None):
        self._state = initial or MapState()
        self._listeners: list[StateListener] = []
        self._notifying = False
        self._pending: list[Callable[[MapState], Optional[MapState]]] = []

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def get_state(self) -> MapState:
        return self._state

    @property
    def generation(self) -> int:
        return self._state.generation

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Register a listener called with ``(state, previous)`` after each change.

        Returns:
            A callable that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def set_markers(self, markers: Iterable[MapMarker]) -> None:
        self.apply(markers=markers)

    def clear_markers(self) -> None:
        self.apply(markers=())

    def set_camera_target(self, target: Optional[CameraTarget]) -> None:
        self.apply(camera_target=target)

    def set_prevent_auto_frame(self, prevent: bool) -> None:
        self.apply(prevent_auto_frame=prevent)

    def apply(
        self,
        markers=_UNSET,
        camera_target=_UNSET,
        prevent_auto_frame=_UNSET,
    ) -> MapState:
        """
        Apply several field updates as a single change.

        A marker write always replaces the whole set and advances the
        generation, even when the new list equals the old one.
        """
        if markers is not _UNSET:
            markers = tuple(markers)

        def build(current: MapState) -> Optional[MapState]:
            changes = {}
            if markers is not _UNSET:
                changes["markers"] = markers
                changes["generation"] = current.generation + 1
            if camera_target is not _UNSET:
                changes["camera_target"] = camera_target
            if prevent_auto_frame is not _UNSET:
                changes["prevent_auto_frame"] = bool(prevent_auto_frame)
            return replace(current, **changes) if changes else None

        return self._commit(build)

    def begin_marker_write(self) -> int:
        """Take a token for a marker write that will complete later."""
        return self._state.generation

    def is_current(self, token: int) -> bool:
        return token == self._state.generation

    def commit_if_current(self, token: int, **changes) -> bool:
        """
        Apply ``changes`` only if no marker write happened since ``token``.

        Returns:
            True when the changes were applied.
        """
        if not self.is_current(token):
            logger.info(
                "Discarding stale marker update",
                extra={"generation": self._state.generation},
            )
            return False
        self.apply(**changes)
        return True

    def reset(self) -> None:
        """Return to the initial state between sessions."""
        # The generation keeps counting so that resolutions started in the
        # previous session are recognised as stale.
        self._commit(lambda current: MapState(generation=current.generation + 1))

    def _commit(self, build: Callable[[MapState], Optional[MapState]]) -> MapState:
        if self._notifying:
            self._pending.append(build)
            return self._state

        state = build(self._state)
        if state is None:
            return self._state

        previous = self._state
        self._state = state
        self._notifying = True
        try:
            self._notify(previous)
        finally:
            self._notifying = False

        while self._pending:
            self._commit(self._pending.pop(0))
        return self._state

    def _notify(self, previous: MapState) -> None:
        state = self._state
        for listener in list(self._listeners):
            try:
                listener(state, previous)
            except Exception as e:
                logger.error(f"Map state listener failed: {e}", exc_info=True)
