"""
Selected-device state shared by the executor and the device registry.
"""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Optional


class SelectionState:
    """
    Handle for "the device commands target".

    The registry is the only writer. Everything else reads the current serial
    or takes the per-device lock through ``exclusive()``.
    """

    def __init__(self, serial: Optional[str] = None):
        self._lock = threading.RLock()
        self._serial = serial
        self._device_locks: Dict[str, threading.Lock] = {}

    def get(self) -> Optional[str]:
        """Return the selected serial, or None."""
        with self._lock:
            return self._serial

    def set(self, serial: Optional[str]) -> None:
        with self._lock:
            self._serial = serial

    def clear_if(self, serial: str) -> bool:
        """Clear the selection only if it still points at ``serial``."""
        with self._lock:
            if self._serial == serial:
                self._serial = None
                return True
            return False

    def device_lock(self, serial: str) -> threading.Lock:
        with self._lock:
            lock = self._device_locks.get(serial)
            if lock is None:
                lock = threading.Lock()
                self._device_locks[serial] = lock
            return lock

    @contextmanager
    def exclusive(self, serial: Optional[str] = None) -> Iterator[Optional[str]]:
        """
        Serialize state-mutating operations against one device.

        Args:
            serial: Device to lock; defaults to the current selection

        Yields:
            The serial that was locked (None when nothing is selected, in
            which case no lock is held)
        """
        target = serial if serial is not None else self.get()
        if target is None:
            yield None
            return
        with self.device_lock(target):
            yield target
