"""Broadcast-code whitelists that decide which devices get connected."""

from __future__ import annotations

from typing import Iterable, Iterator, Optional

BROADCAST_CODE_SIZE = 16
MAX_LIDAR_COUNT = 32
CODE_SEPARATOR = "&"
INVALID_CODE_MARKER = "000000000"

# Codes compiled into the program. The shipped entry is a placeholder
# and is rejected by is_valid_local_code.
LOCAL_BROADCAST_CODES: tuple[str, ...] = ("000000000000001",)


class WhitelistError(ValueError):
    """A broadcast code could not be added to a whitelist."""


class DuplicateCodeError(WhitelistError):
    """The broadcast code is already in the whitelist."""


class WhitelistFullError(WhitelistError):
    """The whitelist already holds as many codes as it may."""


def split_broadcast_codes(text: str) -> list[str]:
    """Split a command-line list of codes joined by ``&``."""
    return text.split(CODE_SEPARATOR)


def is_valid_local_code(code: str) -> bool:
    """Whether a compiled-in code has the right length and is not a placeholder."""
    return (
        len(code) + 1 == BROADCAST_CODE_SIZE
        and INVALID_CODE_MARKER not in code
    )


def _key(code: str) -> str:
    return code[:BROADCAST_CODE_SIZE]


class BroadcastWhitelist:
    """An ordered set of broadcast codes, compared on their first 16 characters."""

    def __init__(self, capacity: int = MAX_LIDAR_COUNT) -> None:
        self.capacity = capacity
        self._codes: list[str] = []

    def add(self, code: str) -> None:
        """Add a code.

        Raises WhitelistError if the code is too long, WhitelistFullError if
        the list is full and DuplicateCodeError if the code is already present.
        """
        if len(code) > BROADCAST_CODE_SIZE:
            raise WhitelistError(
                f"broadcast code {code!r} is longer than {BROADCAST_CODE_SIZE}"
            )
        if len(self._codes) >= self.capacity:
            raise WhitelistFullError(
                f"whitelist already holds {self.capacity} codes"
            )
        if code in self:
            raise DuplicateCodeError(f"{code} is already in the whitelist")
        self._codes.append(code)

    def add_local_codes(
        self, codes: Iterable[str] = LOCAL_BROADCAST_CODES
    ) -> list[str]:
        """Add every valid code that fits; return the codes actually added."""
        added = []
        for code in codes:
            if not is_valid_local_code(code):
                continue
            try:
                self.add(code)
            except WhitelistError:
                continue
            added.append(code)
        return added

    def __contains__(self, code: Optional[str]) -> bool:
        if not isinstance(code, str):
            return False
        wanted = _key(code)
        return any(_key(known) == wanted for known in self._codes)

    def __len__(self) -> int:
        return len(self._codes)

    def __iter__(self) -> Iterator[str]:
        return iter(self._codes)

    def auto_connect(self) -> bool:
        """True when the list is empty and every device should be connected."""
        return not self._codes