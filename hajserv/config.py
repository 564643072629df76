"""Configuration file parsing: global directives and server blocks."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

from .location import Location
from .utils import CYAN, GREEN, PURPLE, RESET, YELLOW, trim

_WORDS = re.compile(r"[^ \t\n\v\f\r]+")
_LEADING_INT = re.compile(r"[ \t\n\v\f\r]*([+-]?[0-9]+)")

_Lines = Iterator[tuple[int, str]]


class ConfigError(Exception):
    """Raised when a configuration file cannot be read or parsed."""


@dataclass
class ServerBlock:
    """The directives, locations and error pages of one ``server { }`` block."""

    data: dict[str, str] = field(default_factory=dict)
    locations: list[Location] = field(default_factory=list)
    errors: dict[int, str] = field(default_factory=dict)
    root_error: str = ""


def _atoi(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def _directive_lines(text: str) -> _Lines:
    """Yield numbered, trimmed lines, skipping blank lines and comments."""
    for number, raw in enumerate(text.split("\n"), start=1):
        line = trim(raw)
        if line and not line.startswith("#"):
            yield number, line


def _key_value(line: str, error: str) -> tuple[str, str]:
    words = _WORDS.findall(line)
    if len(words) != 2:
        raise ConfigError(error)
    key, value = words
    return key, value.removesuffix(";")


def _block_path(line: str, number: int) -> str:
    words = _WORDS.findall(line)
    if len(words) < 2:
        raise ConfigError(
            f"Syntax error: invalid location line at {number}: '{line}'"
        )
    return words[1].removesuffix("{")


def _parse_location(lines: _Lines, location: Location) -> None:
    for number, line in lines:
        if line == "}":
            return
        key, value = _key_value(
            line, f"Syntax error in location block at line {number}: '{line}'"
        )
        if key == "root":
            location.root = value
    raise ConfigError("location block not closed properly before EOF")


def _parse_errors(lines: _Lines, block: ServerBlock) -> None:
    for number, line in lines:
        if line == "}":
            return
        key, value = _key_value(
            line, f"Syntax error in location block at line {number}: '{line}'"
        )
        block.errors[_atoi(key)] = value
    raise ConfigError("location block not closed properly before EOF")


def _parse_server(lines: _Lines) -> ServerBlock:
    block = ServerBlock()
    for number, line in lines:
        if line == "}":
            return block
        if line.startswith("location"):
            location = Location(path=_block_path(line, number))
            _parse_location(lines, location)
            block.locations.append(location)
        elif line.startswith("error_pages"):
            block.root_error = _block_path(line, number)
            _parse_errors(lines, block)
        elif line == "server {":
            raise ConfigError(f"Nested server block at line {number}: '{line}'")
        else:
            key, value = _key_value(
                line, f"Syntax error in server block at line {number}: '{line}'"
            )
            block.data[key] = value
    raise ConfigError("server block not closed properly before EOF")


class Config:
    """Global directives and server blocks read from a configuration file."""

    def __init__(self) -> None:
        self.loaded = False
        self.globals: dict[str, str] = {}
        self.servers: list[ServerBlock] = []

    def load(self, path: str | Path) -> None:
        """Read and parse the file at ``path``; raise ConfigError on failure."""
        try:
            text = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigError(f"Could not open config file: {path}") from exc
        self.parse(text)

    def parse(self, text: str) -> None:
        """Parse configuration text; raise ConfigError on a syntax error."""
        lines = _directive_lines(text)
        for number, line in lines:
            if line == "server {":
                self.servers.append(_parse_server(lines))
            else:
                key, value = _key_value(
                    line, f"Syntax error at line {number}: '{line}'"
                )
                self.globals[key] = value
        self.loaded = True

    def get_global(self, key: str) -> str:
        """Return a global directive's value, or an empty string."""
        return self.globals.get(key, "")

    def server_block(self, index: int) -> ServerBlock:
        """Return the server block at ``index``, or an empty one if out of range."""
        if 0 <= index < len(self.servers):
            return self.servers[index]
        return ServerBlock()

    def server_count(self) -> int:
        """Return the number of server blocks."""
        return len(self.servers)

    def describe(self) -> str:
        """Return a coloured summary of the whole configuration."""
        parts = [f"{GREEN}[ Global Config ]{RESET}\n"]
        parts.extend(
            f"{PURPLE}{key}{RESET}: {GREEN}{self.globals[key]}{RESET}\n"
            for key in sorted(self.globals)
        )
        parts.append(f"{GREEN}\n[ Server Blocks ]{RESET}\n")
        for index, block in enumerate(self.servers):
            parts.append(f"{YELLOW}Server {index}{RESET}\n")
            parts.extend(
                f"\t{CYAN}{key}{RESET}: {GREEN}{block.data[key]}{RESET}\n"
                for key in sorted(block.data)
            )
            parts.extend(location.describe() for location in block.locations)
        return "".join(parts)