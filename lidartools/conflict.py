"""Detecting devices that answer with different broadcast codes on one IP."""

from __future__ import annotations

from typing import Optional


class IpConflictDetector:
    """Remembers the first broadcast code seen at each IP address."""

    def __init__(self) -> None:
        self.codes: dict[str, str] = {}

    def observe(self, ip: str, broadcast_code: str) -> Optional[str]:
        """Record a broadcast from ``ip``.

        Returns the code first seen at that address when it differs from
        ``broadcast_code`` (an address conflict), otherwise None.
        """
        known = self.codes.setdefault(ip, broadcast_code)
        if known == broadcast_code:
            return None
        return known