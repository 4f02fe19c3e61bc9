"""
One-shot completion latch, one per configuration document.
"""
from threading import Condition
from typing import Optional


class LoadGate:
    """
    Single-set latch backed by a condition variable.

    Starts unset, is set exactly once, and never resets.  Waiters on any
    thread are released when it is set.
    """

    def __init__(self, name: str):
        self.name = name
        self._cond = Condition()
        self._set = False

    def set(self) -> bool:
        """Open the gate.  Returns False if it was already open."""
        with self._cond:
            if self._set:
                return False
            self._set = True
            self._cond.notify_all()
            return True

    def is_set(self) -> bool:
        with self._cond:
            return self._set

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the gate is set or ``timeout`` seconds elapse.

        Returns:
            True if the gate is set
        """
        with self._cond:
            return self._cond.wait_for(lambda: self._set, timeout)

    def __repr__(self):
        return f"LoadGate({self.name!r}, set={self.is_set()})"
