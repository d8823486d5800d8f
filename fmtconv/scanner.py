"""
scanner.py

Responsibility: Read typed values from a line-oriented text source.

- `read_token`: next run of non-whitespace characters
- `read_line`: rest of the current line (terminator stripped)
- `read_formatted`: input matching a small format mini-language

Reads never raise for bad input. They return a `ScanResult` whose `error` is a
`ParseError` (input has the wrong shape or does not convert to the target kind)
or an `EndOfInputError` (input ended first). Reads block on the source until a
line is available.
"""

from __future__ import annotations

import logging
import re
import sys
from dataclasses import dataclass
from typing import Any, TextIO

from fmtconv.converter import text_to_value
from fmtconv.kinds import Kind

logger = logging.getLogger(__name__)

_SPACE_RE = re.compile(r"\s*")
_BLANKS_RE = re.compile(r"[^\S\n]*")
_TOKEN_RE = re.compile(r"\S+")
_VERB_PATTERNS: dict[str, re.Pattern[str]] = {
    "d": re.compile(r"[+-]?[0-9]+"),
    "f": re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|[+-]?(?i:infinity|inf)|(?i:nan)"),
    "s": _TOKEN_RE,
    "v": _TOKEN_RE,
}
_VERB_PATTERNS["g"] = _VERB_PATTERNS["f"]
_VERB_DESCRIPTIONS = {"d": "integer", "f": "float", "g": "float", "s": "token", "v": "token"}


class ParseError(ValueError):
    pass


class EndOfInputError(EOFError):
    pass


@dataclass(frozen=True)
class ScanResult:
    """
    Outcome of a read. `value` is a single value for token/line reads and a
    tuple (one entry per target) for formatted reads. `count` is the number of
    targets that were filled before any error.
    """

    value: Any
    error: ParseError | EndOfInputError | None = None
    count: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        if self.error is not None:
            raise self.error
        return self.value


def _parse_format(fmt: str) -> list[tuple[str, str]]:
    """Split a scan format into ("verb", v), ("space", ""), ("newline", ""), ("literal", c) items."""
    items: list[tuple[str, str]] = []
    i = 0
    while i < len(fmt):
        c = fmt[i]
        if c == "%":
            if i + 1 >= len(fmt):
                raise ValueError("Scan format ends with a lone '%'")
            verb = fmt[i + 1]
            if verb == "%":
                items.append(("literal", "%"))
            elif verb in _VERB_PATTERNS:
                items.append(("verb", verb))
            else:
                raise ValueError(f"Unsupported scan verb: %{verb}")
            i += 2
            continue
        if c.isspace():
            if c == "\n":
                items.append(("newline", ""))
            elif not items or items[-1][0] != "space":
                items.append(("space", ""))
        else:
            items.append(("literal", c))
        i += 1
    return items


class Scanner:
    """
    Input side of the console, reading from an injected text source.

    The scanner buffers at most one line. When no source is given, `sys.stdin`
    is looked up on every refill.
    """

    def __init__(self, source: TextIO | None = None) -> None:
        self._source = source
        self._line = ""
        self._eof = False

    @property
    def source(self) -> TextIO:
        return self._source if self._source is not None else sys.stdin

    def _fill(self) -> bool:
        """Ensure the line buffer holds input; False at end of input."""
        if self._line:
            return True
        if self._eof:
            return False
        line = self.source.readline()
        if line == "":
            self._eof = True
            return False
        self._line = line
        return True

    def _skip_whitespace(self) -> bool:
        """Skip whitespace across lines; False at end of input."""
        while self._fill():
            self._line = self._line[_SPACE_RE.match(self._line).end() :]
            if self._line:
                return True
        return False

    def _skip_blanks(self) -> None:
        """Skip whitespace up to (not including) the line terminator, never refilling."""
        self._line = self._line[_BLANKS_RE.match(self._line).end() :]

    def _convert(self, text: str, kind: Kind) -> tuple[Any, ParseError | None]:
        result = text_to_value(text, kind)
        if result.ok:
            return result.value, None
        error = ParseError(f"expected {kind.value}: {result.error}")
        logger.debug("scan conversion failed: %s", error)
        return kind.zero, error

    def read_token(self, kind: Kind = Kind.STRING) -> ScanResult:
        """
        Skip whitespace, then read up to the next whitespace and convert the
        token to `kind`. A token that ends its line also consumes the line
        terminator.
        """
        if not self._skip_whitespace():
            return ScanResult(kind.zero, EndOfInputError("end of input before a token"))

        match = _TOKEN_RE.match(self._line)
        if match is None:
            return ScanResult(kind.zero, ParseError(f"expected a token, got {self._line[:1]!r}"))
        token = match.group()
        self._line = self._line[match.end() :]
        if _SPACE_RE.fullmatch(self._line):
            self._line = ""

        value, error = self._convert(token, kind)
        return ScanResult(value, error, count=0 if error else 1)

    def read_line(self, kind: Kind = Kind.STRING) -> ScanResult:
        """Read through the next line terminator and convert the line content to `kind`."""
        if not self._fill():
            return ScanResult(kind.zero, EndOfInputError("end of input before a line"))

        line, self._line = self._line, ""
        if line.endswith("\n"):
            line = line[:-1]
            if line.endswith("\r"):
                line = line[:-1]

        value, error = self._convert(line, kind)
        return ScanResult(value, error, count=0 if error else 1)

    def read_formatted(self, fmt: str, *kinds: Kind) -> ScanResult:
        """
        Read input matching `fmt`, converting each verb's match into the
        corresponding entry of `kinds`.

        Verbs: %d integer, %f/%g float, %s/%v token, %% literal percent.
        Verbs skip leading whitespace (line terminators included). Other
        whitespace in the format matches blanks on the current line, possibly
        none; a newline in the format matches the line terminator. Neither
        reads another line. Any other character must match the input exactly.
        """
        items = _parse_format(fmt)
        verbs = [v for t, v in items if t == "verb"]
        if len(verbs) != len(kinds):
            raise ValueError(f"Scan format has {len(verbs)} verb(s) but {len(kinds)} target(s) were given")

        values: list[Any] = [k.zero for k in kinds]
        filled = 0

        def result(error: ParseError | EndOfInputError | None) -> ScanResult:
            if error is not None:
                logger.debug("formatted scan stopped after %d target(s): %s", filled, error)
            return ScanResult(tuple(values), error, count=filled)

        for item_type, item in items:
            if item_type == "space":
                self._skip_blanks()
                continue

            if item_type == "newline":
                self._skip_blanks()
                if self._line.startswith("\n"):
                    self._line = self._line[1:]
                elif self._line:
                    return result(ParseError(f"input does not match format: expected newline, got {self._line[0]!r}"))
                # An empty buffer means the terminator was already consumed.
                continue

            if item_type == "literal":
                if not self._fill():
                    return result(EndOfInputError(f"end of input before {item!r}"))
                if self._line[0] != item:
                    return result(ParseError(f"input does not match format: expected {item!r}, got {self._line[0]!r}"))
                self._line = self._line[1:]
                continue

            kind = kinds[filled]
            if not self._skip_whitespace():
                return result(EndOfInputError(f"end of input before %{item}"))
            match = _VERB_PATTERNS[item].match(self._line)
            if match is None:
                got = _TOKEN_RE.match(self._line)
                shown = got.group() if got else self._line[:1]
                return result(ParseError(f"expected {_VERB_DESCRIPTIONS[item]} for %{item}, got {shown!r}"))
            self._line = self._line[match.end() :]

            value, error = self._convert(match.group(), kind)
            if error is not None:
                return result(error)
            values[filled] = value
            filled += 1

        return result(None)
