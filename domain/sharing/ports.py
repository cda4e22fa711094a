"""Domain Port(s) for the page location holding the share parameter."""

from __future__ import annotations

from typing import Protocol


class ShareLocation(Protocol):
    """Port for reading and rewriting the current URL without navigating."""

    def current_url(self) -> str:
        ...

    def replace_url(self, url: str) -> None:
        ...
