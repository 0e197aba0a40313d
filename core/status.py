"""
core/status.py -- Process-wide system status flag.

The status string is shared by every request handler, so reads and writes go
through SystemStatus rather than a module-level variable. Last writer wins.
"""

from threading import Lock


class SystemStatus:
    """Owner of the human-readable system status ("Online", "Maintenance", ...).

    Usage:
        status = SystemStatus("Online")
        status.set("Maintenance")   # -> "Maintenance"
        status.set("")              # empty value keeps the current status
        status.get()                # -> "Maintenance"
    """

    def __init__(self, initial: str = "Online") -> None:
        self._lock = Lock()
        self._value = initial

    def get(self) -> str:
        with self._lock:
            return self._value

    def set(self, value: str | None) -> str:
        """Replace the status when value is a non-empty string; return the resulting status."""
        with self._lock:
            if value:
                self._value = value
            return self._value
