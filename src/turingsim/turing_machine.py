import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import IntEnum
from itertools import chain, groupby
from pathlib import Path
from types import MappingProxyType
from typing import Self, TypeAlias

from rich.markup import escape

logger = logging.getLogger(__name__)

BLANK = "B"
INPUT_ALPHABET = frozenset("01")
START_STATE = "0"
ACCEPT_STATE = "f"
COMMENT = "//"


def highlight_blanks(cells: str) -> str:
    parts = []
    for blank, run in groupby(cells, BLANK.__eq__):
        text = "".join(run)
        parts.append(f"[grey58]{text}[/]" if blank else escape(text))
    return "".join(parts)


class Direction(IntEnum):
    L = -1
    R = 1

    @classmethod
    def parse(cls, val: str) -> Self:
        match val:
            case "L" | "R":
                return getattr(cls, val)
            case _:
                raise ValueError(f"Unknown direction '{val}'")


Action: TypeAlias = tuple[str, str, Direction]


@dataclass
class Configuration:
    state: str
    left: str
    right: str

    def __str__(self) -> str:
        return f"{self.left} [ q{self.state} ] {self.right}"

    def __format__(self, format: str) -> str:
        if not format:
            return str(self)
        elif format == ">":
            return self.pretty()
        else:
            raise ValueError

    def pretty(self) -> str:
        state = f"[cyan]\\[ q{escape(self.state)} ][/]"
        return f"{highlight_blanks(self.left)} {state} {highlight_blanks(self.right)}"


class Tape:
    """Two-way infinite tape addressed by physical buffer indices.

    Cells left of the original first cell live in `_left` nearest-first, so
    growing the tape at either end only ever appends to a list. Index `0`
    always refers to the leftmost cell currently allocated.
    """

    _left: list[str]
    _right: list[str]
    head: int

    def __init__(self, input: str = "") -> None:
        self.initialize(input)

    def initialize(self, input: str) -> None:
        self._left = []
        self._right = [BLANK, *input, BLANK]
        self.head = 0

    def __len__(self) -> int:
        return len(self._left) + len(self._right)

    def __iter__(self) -> Iterator[str]:
        return chain(reversed(self._left), self._right)

    def __str__(self) -> str:
        return "".join(self)

    def _locate(self, index: int) -> tuple[list[str], int]:
        if not 0 <= index < len(self):
            raise IndexError(f"Tape index {index} out of range for tape of length {len(self)}")
        offset = index - len(self._left)
        if offset < 0:
            return self._left, -offset - 1
        else:
            return self._right, offset

    def read(self, index: int) -> str:
        cells, i = self._locate(index)
        return cells[i]

    def write(self, index: int, symbol: str) -> None:
        cells, i = self._locate(index)
        cells[i] = symbol

    def extend_to(self, index: int) -> None:
        if index == len(self):
            self._right.append(BLANK)

    def move_head(self, direction: Direction, index: int) -> int:
        match direction:
            case Direction.R:
                if index >= len(self) - 1:
                    self._right.append(BLANK)
                return index + 1
            case Direction.L:
                if index <= 0:
                    self._left.append(BLANK)
                    return 0
                return index - 1

    def configuration(self, state: str) -> Configuration:
        cells = str(self)
        scanned = self.head + 1
        first = len(cells) - len(cells.lstrip(BLANK))
        last = len(cells.rstrip(BLANK))
        return Configuration(state=state, left=cells[first:scanned], right=cells[scanned:last])


class MalformedTransitionError(ValueError):
    def __init__(self, line_number: int, line: str, reason: str) -> None:
        super().__init__(f"Line {line_number}: {reason}: '{line}'")
        self.line_number = line_number
        self.line = line
        self.reason = reason


def parse_rule(line: str) -> tuple[tuple[str, str], Action]:
    tokens = line.split()
    if len(tokens) < 5:
        raise ValueError(f"expected 5 fields, found {len(tokens)}")
    state, symbol, out_state, out_symbol, dir, *_ = tokens
    if any(len(token) != 1 for token in (state, symbol, out_state, out_symbol, dir)):
        raise ValueError("fields must be single characters")
    return (state, symbol), (out_state, out_symbol, Direction.parse(dir))


class TransitionTable(Mapping[tuple[str, str], Action]):
    """Read-only transition function of a deterministic machine.

    Descriptions hold one rule per line, `state symbol new_state new_symbol L|R`.
    Everything after `//` is a comment. In the default lenient mode malformed
    lines are dropped and a repeated key replaces the earlier rule; strict mode
    raises `MalformedTransitionError` for either instead.
    """

    def __init__(self, rules: Mapping[tuple[str, str], Action] | None = None) -> None:
        self._rules = MappingProxyType(dict(rules or {}))

    def __getitem__(self, key: tuple[str, str]) -> Action:
        return self._rules[key]

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({dict(self._rules)!r})"

    def lookup(self, state: str, symbol: str) -> Action | None:
        return self._rules.get((state, symbol))

    @classmethod
    def parse(cls, lines: Iterable[str], *, strict: bool = False) -> Self:
        rules: dict[tuple[str, str], Action] = {}
        for line_number, raw in enumerate(lines, 1):
            if raw.startswith(COMMENT):
                continue
            line = raw.split(COMMENT, 1)[0].strip()
            if not line:
                continue
            try:
                key, action = parse_rule(line)
            except ValueError as e:
                if strict:
                    raise MalformedTransitionError(line_number, line, str(e)) from e
                logger.debug("Skipping line %d (%s): '%s'", line_number, e, line)
                continue
            if key in rules:
                if strict:
                    raise MalformedTransitionError(line_number, line, f"duplicate transition for {key}")
                logger.debug("Line %d replaces the transition for %s", line_number, key)
            rules[key] = action
        return cls(rules)

    @classmethod
    def from_spec(cls, spec: str, *, strict: bool = False) -> Self:
        return cls.parse(spec.splitlines(), strict=strict)

    @classmethod
    def from_file(cls, path: Path, *, strict: bool = False) -> Self:
        table = cls.from_spec(path.read_text(), strict=strict)
        logger.debug("Loaded %d transitions from %s", len(table), path)
        return table
