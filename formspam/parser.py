"""Form Fuzzing Language (FFL) parser.

One field per line::

    static("key","value")
    email("mail",["gmail.com","yahoo.com"])
    choose_n(2,[("a","1"),("b","2"),("c","3")])
    cellphone("phone")
    choose_any([("color","red"),("color","blue")])
    date("dob",1950,2005)
    string("comment",40)
    name("fullname",12)

String literals understand the escapes ``\\(``, ``\\)``, ``\\n``, ``\\"`` and
``\\\\``. Whitespace is only allowed around a field, never inside it.
"""

from pathlib import Path
from typing import Callable, List, Optional, Tuple, TypeVar

from .config import (
    CellPhone,
    ChooseAny,
    ChooseN,
    Date,
    Email,
    FieldSpec,
    Name,
    Pair,
    Static,
    StringField,
)
from .errors import ConfigError


T = TypeVar('T')

ESCAPES = {
    '(': '(',
    ')': ')',
    'n': '\n',
    '"': '"',
    '\\': '\\',
}
DIGITS = '0123456789'
MAX_DIGITS = 18
MAX_LEN = 10000


class _NoMatch(Exception):
    """Internal: an alternative did not match at ``pos``."""

    def __init__(self, pos: int, expected: str):
        super().__init__(expected)
        self.pos = pos
        self.expected = expected


class _Cursor:
    """Position over a single line of FFL text."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def expect(self, literal: str) -> None:
        if not self.text.startswith(literal, self.pos):
            raise _NoMatch(self.pos, f"expected {literal!r}")
        self.pos += len(literal)

    def string(self) -> str:
        self.expect('"')
        chars = []
        while True:
            if self.at_end():
                raise _NoMatch(self.pos, "unterminated string literal")
            ch = self.text[self.pos]
            if ch == '"':
                self.pos += 1
                return ''.join(chars)
            if ch == '\\':
                escape = self.text[self.pos + 1:self.pos + 2]
                if escape not in ESCAPES:
                    raise _NoMatch(self.pos, f"invalid escape sequence '\\{escape}'")
                chars.append(ESCAPES[escape])
                self.pos += 2
                continue
            chars.append(ch)
            self.pos += 1

    def uint(self) -> int:
        start = self.pos
        while not self.at_end() and self.text[self.pos] in DIGITS:
            self.pos += 1
        if start == self.pos:
            raise _NoMatch(start, "expected digits")
        if self.pos - start > MAX_DIGITS:
            raise _NoMatch(start, f"number longer than {MAX_DIGITS} digits")
        return int(self.text[start:self.pos])

    def pair(self) -> Pair:
        self.expect('(')
        key = self.string()
        self.expect(',')
        value = self.string()
        self.expect(')')
        return key, value

    def array(self, item: Callable[[], T]) -> Tuple[T, ...]:
        self.expect('[')
        items = [item()]
        while self.text.startswith(',', self.pos):
            self.pos += 1
            items.append(item())
        self.expect(']')
        return tuple(items)


def _static(c: _Cursor) -> FieldSpec:
    c.expect('static(')
    name = c.string()
    c.expect(',')
    value = c.string()
    c.expect(')')
    return Static(name=name, value=value)


def _email(c: _Cursor) -> FieldSpec:
    c.expect('email(')
    name = c.string()
    c.expect(',')
    domains = c.array(c.string)
    c.expect(')')
    return Email(name=name, domains=domains)


def _choose_n(c: _Cursor) -> FieldSpec:
    c.expect('choose_n(')
    n = c.uint()
    c.expect(',')
    pairs = c.array(c.pair)
    c.expect(')')
    return ChooseN(n=n, pairs=pairs)


def _cellphone(c: _Cursor) -> FieldSpec:
    c.expect('cellphone(')
    name = c.string()
    c.expect(')')
    return CellPhone(name=name)


def _choose_any(c: _Cursor) -> FieldSpec:
    c.expect('choose_any(')
    options = c.array(c.pair)
    c.expect(')')
    return ChooseAny(options=options)


def _date(c: _Cursor) -> FieldSpec:
    c.expect('date(')
    name = c.string()
    c.expect(',')
    min_year = c.uint()
    c.expect(',')
    max_year = c.uint()
    c.expect(')')
    return Date(name=name, min_year=min_year, max_year=max_year)


def _string(c: _Cursor) -> FieldSpec:
    c.expect('string(')
    name = c.string()
    c.expect(',')
    max_len = c.uint()
    c.expect(')')
    return StringField(name=name, max_len=max_len)


def _name(c: _Cursor) -> FieldSpec:
    c.expect('name(')
    name = c.string()
    c.expect(',')
    max_len = c.uint()
    c.expect(')')
    return Name(name=name, max_len=max_len)


# Tried in order, first match wins
ALTERNATIVES: Tuple[Callable[[_Cursor], FieldSpec], ...] = (
    _static,
    _email,
    _choose_n,
    _cellphone,
    _choose_any,
    _date,
    _string,
    _name,
)


def check_field(field: FieldSpec) -> Optional[str]:
    """Return why ``field`` can never be generated, or None if it is fine."""
    if isinstance(field, ChooseN) and field.n > len(field.pairs):
        return f"choose_n asks for {field.n} of {len(field.pairs)} pairs"
    if isinstance(field, Date) and field.min_year > field.max_year:
        return f"date range {field.min_year}..{field.max_year} is empty"
    if isinstance(field, (StringField, Name)) and field.max_len < 1:
        return "max length must be at least 1"
    if isinstance(field, (StringField, Name)) and field.max_len > MAX_LEN:
        return f"max length {field.max_len} exceeds {MAX_LEN}"
    if isinstance(field, Email) and not field.domains:
        return "email needs at least one domain"
    return None


def parse_field(line: str) -> FieldSpec:
    """Parse one line of FFL text.

    Raises:
        ConfigError: the line is malformed or describes an impossible field.
            ``line_no`` is left unset.
    """
    text = line.strip()
    furthest: Optional[_NoMatch] = None

    for alternative in ALTERNATIVES:
        cursor = _Cursor(text)
        try:
            field = alternative(cursor)
        except _NoMatch as e:
            if furthest is None or e.pos > furthest.pos:
                furthest = e
            continue

        if not cursor.at_end():
            raise ConfigError(
                f"malformed field (unexpected input at column {cursor.pos + 1})", line=text)
        problem = check_field(field)
        if problem:
            raise ConfigError(problem, line=text)
        return field

    detail = ""
    if furthest is not None and furthest.pos > 0:
        detail = f" ({furthest.expected} at column {furthest.pos + 1})"
    raise ConfigError(f"malformed field{detail}", line=text)


def parse_config(text: str) -> List[FieldSpec]:
    """Parse every non-blank line of ``text``, stopping at the first bad one."""
    fields = []
    for line_no, raw in enumerate(text.split('\n'), start=1):
        line = raw.strip()
        if not line:
            continue
        try:
            fields.append(parse_field(line))
        except ConfigError as e:
            raise ConfigError(e.reason, line=line, line_no=line_no) from None
    return fields


def load_fields(path: Path) -> List[FieldSpec]:
    """Read and parse a field file."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read field file {path}: {e}") from e
    return parse_config(text)
