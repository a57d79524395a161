"""
Marker Scanner - Splits one template line into literal and marker spans.

Marker grammar:

    &KEYWORD|param1|param2|...|

- KEYWORD is a run of letters, digits and underscores, or one of the
  conditional keywords `<` and `!`. Matching is case-insensitive.
- Every run of non-blank, non-`&` characters directly after a `|` is a
  parameter and must be closed by `|`. Inside a parameter `\\|` is a
  literal pipe and `\\\\` a literal backslash.
- The marker ends after a `|` followed by a blank, `&` or end of line.

`&` followed by a blank, another `&` or text without a `|` is ordinary
text, so `a && b` passes through untouched. A `|` reached after an
illegal keyword, as in `&WS-VARS|x|`, is a ParseError.
"""

from dataclasses import dataclass
from typing import Iterator

from genowa.errors import ParseError
from genowa.vocabulary.keywords import (
    CONDITIONAL_KEYWORDS,
    DELIMITER,
    ESCAPE,
    MARKER_START,
    is_keyword_char,
)


@dataclass(frozen=True)
class LiteralSpan:
    """Text copied to the output unchanged."""
    text: str
    start: int
    end: int


@dataclass(frozen=True)
class MarkerSpan:
    """
    A parsed `&KEYWORD|...|` occurrence.

    `keyword` is uppercased; `raw` is the marker text as written;
    start/end are offsets into the source line (end exclusive).
    """
    keyword: str
    params: tuple[str, ...]
    start: int
    end: int
    raw: str

    @property
    def column(self) -> int:
        """1-based column of the opening `&`."""
        return self.start + 1


Span = LiteralSpan | MarkerSpan


class LineScan:
    """
    Lazy, restartable span sequence for one line.

    Each iteration scans the line again from the start. Parse errors
    surface when iteration reaches the malformed marker.
    """

    def __init__(self, line: str, template_name: str | None = None, line_number: int | None = None):
        self.line = line
        self.template_name = template_name
        self.line_number = line_number

    def __iter__(self) -> Iterator[Span]:
        return _scan(self.line, self.template_name, self.line_number)

    def has_markers(self) -> bool:
        return any(isinstance(span, MarkerSpan) for span in self)

    def __repr__(self) -> str:
        return f"<LineScan {self.template_name}:{self.line_number} {self.line!r}>"


def scan_line(line: str, template_name: str | None = None, line_number: int | None = None) -> LineScan:
    """Scan one line of template text (without its terminator)."""
    return LineScan(line, template_name, line_number)


def _scan(line: str, template_name: str | None, line_number: int | None) -> Iterator[Span]:
    length = len(line)
    literal_start = 0
    pos = line.find(MARKER_START)

    while pos != -1:
        keyword_end = _keyword_end(line, pos + 1)
        if keyword_end < length and line[keyword_end] == DELIMITER:
            if keyword_end == pos + 1:
                raise ParseError(
                    "Empty marker keyword",
                    template_name=template_name,
                    line_number=line_number,
                    column=pos + 1,
                )
            params, end = _read_params(line, pos, keyword_end + 1, template_name, line_number)
            if pos > literal_start:
                yield LiteralSpan(line[literal_start:pos], literal_start, pos)
            yield MarkerSpan(
                keyword=line[pos + 1:keyword_end].upper(),
                params=params,
                start=pos,
                end=end,
                raw=line[pos:end],
            )
            literal_start = end
            pos = line.find(MARKER_START, end)
        else:
            word = line[pos + 1:_word_end(line, pos + 1)]
            if DELIMITER in word:
                raise ParseError(
                    f"Invalid marker keyword '{word.split(DELIMITER, 1)[0]}'",
                    template_name=template_name,
                    line_number=line_number,
                    column=pos + 1,
                )
            # Not a marker, the `&` stays literal.
            pos = line.find(MARKER_START, pos + 1)

    if literal_start < length:
        yield LiteralSpan(line[literal_start:], literal_start, length)


def _keyword_end(line: str, start: int) -> int:
    """Index just past the keyword beginning at `start`."""
    if start < len(line) and line[start] in CONDITIONAL_KEYWORDS:
        return start + 1
    end = start
    while end < len(line) and is_keyword_char(line[end]):
        end += 1
    return end


def _word_end(line: str, start: int) -> int:
    """Index of the first blank or `&` at or after `start`."""
    end = start
    while end < len(line) and not line[end].isspace() and line[end] != MARKER_START:
        end += 1
    return end


def _read_params(
    line: str,
    marker_start: int,
    pos: int,
    template_name: str | None,
    line_number: int | None,
) -> tuple[tuple[str, ...], int]:
    """Read `param|param|...` from `pos`; return params and the marker end."""
    params: list[str] = []
    length = len(line)

    while pos < length and not line[pos].isspace() and line[pos] != MARKER_START:
        chars: list[str] = []
        while True:
            if pos >= length or line[pos].isspace() or line[pos] == MARKER_START:
                raise ParseError(
                    f"Unterminated marker '{line[marker_start:pos]}'",
                    template_name=template_name,
                    line_number=line_number,
                    column=marker_start + 1,
                )
            ch = line[pos]
            if ch == ESCAPE and pos + 1 < length and line[pos + 1] in (DELIMITER, ESCAPE):
                chars.append(line[pos + 1])
                pos += 2
                continue
            if ch == DELIMITER:
                pos += 1
                break
            chars.append(ch)
            pos += 1
        params.append("".join(chars))

    return tuple(params), pos
