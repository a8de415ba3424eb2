"""Two-step delete confirmation: ``idle`` or ``armed(row_id)``.

The first activation on a row arms it; a second activation on the same row
fires and returns to idle. Activating another row moves the armed state there.
An optional timeout makes a stale arm count as idle.
"""
import time
from typing import Callable, Optional


class DeleteConfirmation:
    def __init__(
        self,
        armed_id: Optional[int] = None,
        armed_at: Optional[float] = None,
        timeout: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._armed_id = armed_id
        self._armed_at = armed_at
        self.timeout = timeout
        self._clock = clock

    @property
    def armed_id(self) -> Optional[int]:
        if self._armed_id is None:
            return None
        if self.timeout is not None and self._armed_at is not None:
            if self._clock() - self._armed_at > self.timeout:
                return None
        return self._armed_id

    @property
    def is_idle(self) -> bool:
        return self.armed_id is None

    def activate(self, row_id: int) -> bool:
        """Return True when this activation should perform the delete."""
        if self.armed_id == row_id:
            self.reset()
            return True
        self._armed_id = row_id
        self._armed_at = self._clock()
        return False

    def reset(self):
        self._armed_id = None
        self._armed_at = None

    def to_state(self) -> Optional[dict]:
        if self.armed_id is None:
            return None
        return {"row": self._armed_id, "at": self._armed_at}

    @classmethod
    def from_state(cls, state: Optional[dict], timeout: Optional[float] = None, clock: Callable[[], float] = time.time) -> "DeleteConfirmation":
        if not state:
            return cls(timeout=timeout, clock=clock)
        return cls(armed_id=state.get("row"), armed_at=state.get("at"), timeout=timeout, clock=clock)
