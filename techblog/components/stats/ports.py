"""
Stats component port definitions.
"""

from __future__ import annotations

from typing import Protocol


class CountablePort(Protocol):
    def count(self) -> int:
        ...
