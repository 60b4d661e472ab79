"""Pause/resume/cancel coordination shared by every worker of a run."""

from __future__ import annotations

import logging
import threading

from wordscrub.models import RunControlState

logger = logging.getLogger(__name__)


class Gate:
    """A single tri-state value guarded by one condition variable.

    Cancelled is terminal: once set, pause() and resume() do nothing and
    every checkpoint() returns CANCELLED without blocking.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._state = RunControlState.RUNNING

    @property
    def state(self) -> RunControlState:
        with self._cond:
            return self._state

    def is_cancelled(self) -> bool:
        return self.state is RunControlState.CANCELLED

    def pause(self) -> None:
        with self._cond:
            if self._state is RunControlState.RUNNING:
                self._state = RunControlState.PAUSED
                logger.info("Run paused")

    def resume(self) -> None:
        with self._cond:
            if self._state is RunControlState.PAUSED:
                self._state = RunControlState.RUNNING
                self._cond.notify_all()
                logger.info("Run resumed")

    def cancel(self) -> None:
        with self._cond:
            if self._state is RunControlState.CANCELLED:
                return
            self._state = RunControlState.CANCELLED
            self._cond.notify_all()
            logger.info("Run cancelled")

    def checkpoint(self) -> RunControlState:
        """Block while paused. Return RUNNING to proceed or CANCELLED to stop."""
        with self._cond:
            while self._state is RunControlState.PAUSED:
                self._cond.wait()
            return self._state
