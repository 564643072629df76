"""A location block: a URI prefix mapped to a filesystem root."""

from __future__ import annotations

from dataclasses import dataclass

from .utils import CYAN, GREEN, PURPLE, RESET


@dataclass
class Location:
    """A URI prefix served from a root directory."""

    path: str = ""
    root: str = ""

    def describe(self) -> str:
        """Return a coloured, indented two-line description."""
        return (
            f"\t{PURPLE}Location{RESET}: {CYAN}{self.path}\n"
            f"\t\t{CYAN}Root{RESET}: {GREEN}{self.root}\n\n"
        )