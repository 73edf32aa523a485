"""User-Agent pool abstraction."""

from __future__ import annotations

import random
from typing import Iterable, List


class UserAgentPool:
    """Pick a browser identification header for each request.

    Falls back to ``default`` while the pool is empty, so callers always get
    a desktop-browser string.
    """

    def __init__(
        self,
        default: str,
        user_agents: Iterable[str] | None = None,
    ) -> None:
        self.default = default
        self._uas: List[str] = []
        if user_agents:
            self._uas.extend(ua.strip() for ua in user_agents if ua.strip())

    def get(self) -> str:
        if not self._uas:
            return self.default
        return random.choice(self._uas)


__all__ = ["UserAgentPool"]
