"""
csvtext — streaming CSV text parser with strict/permissive quoting and typed rows.

Contract (v0):
- Input is an in-memory (or fully buffered) str; file-like objects are read once.
- Separators (delimiter, quote, record break) are configured by one frozen Dialect.
  Each may be a single character or a substring.
- Record breaks: the configured record_break plus LF, CRLF and CR are always
  recognised. CRLF counts as one break. Breaks inside quoted fields are data.
- Quoting: a field is quoted only when it starts with the quote token. Inside a
  quoted field a doubled quote is one literal quote.
- Modes:
    strict     -> UnexpectedQuote, DataAfterClosingQuote, UnterminatedQuote
    permissive -> never raises for malformed quoting:
                  stray quotes in unquoted fields are literal,
                  data after a closing quote continues the field unquoted
                  (the closing quote is dropped: "ab"cd -> abcd),
                  an unterminated quoted field returns its partial text.
- Conversion failures (ConversionError) surface in both modes.
- Header: optional first record. Name lookup is last-occurrence-wins.
  Plain rows must request names in input order (strict); permissive reorders
  and drops unknown names. Typed rows may always reorder.
- A failing Dataset.__next__ rewinds to the start of the record, so retrying
  raises the same error again.

API:
- parse(source, field_type=str, *, header=None, ...) -> Dataset
- next_token(cursor, dialect) -> str                 (one field, low level)
- RecordCursor(cursor, dialect, selection=None)     (one record, field by field)
- RowBinder(row_type).bind(raw_fields)              (typed rows)
- quote_field(text, dialect), format_record(fields, dialect)

Python: 3.10+
"""

from __future__ import annotations

import logging
import math
import re
import types
from dataclasses import MISSING, dataclass, field, fields as dataclass_fields, is_dataclass, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from itertools import permutations
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Optional,
    Sequence,
    Tuple,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

__version__ = "0.1.0"

logger = logging.getLogger(__name__)


# ----------------------------
# Exceptions
# ----------------------------

class CSVError(ValueError):
    """Base error. Carries the physical location where the problem was found."""

    def __init__(self, reason: str, *, line: int = 0, column: int = 0, position: int = -1) -> None:
        if line:
            msg = f"{type(self).__name__}(line={line}, column={column}): {reason}"
        else:
            msg = f"{type(self).__name__}: {reason}"
        super().__init__(msg)
        self.reason = reason
        self.line = line            # 1-based physical line, 0 when not tied to input
        self.column = column        # 1-based character column on that line
        self.position = position    # 0-based offset into the input


class DialectError(CSVError):
    """Invalid separator configuration."""


class IncompleteFieldError(CSVError):
    """A field could not be completed. `partial` holds the text read so far."""

    def __init__(self, reason: str, *, partial: str, **location: int) -> None:
        super().__init__(reason, **location)
        self.partial = partial


class UnexpectedQuote(IncompleteFieldError):
    pass


class DataAfterClosingQuote(IncompleteFieldError):
    pass


class UnterminatedQuote(IncompleteFieldError):
    pass


class HeaderMismatch(CSVError):
    def __init__(
        self,
        reason: str,
        *,
        requested: Sequence[str] = (),
        missing: Sequence[str] = (),
        **location: int,
    ) -> None:
        super().__init__(reason, **location)
        self.requested = list(requested)
        self.missing = list(missing)


class ConversionError(CSVError):
    def __init__(
        self,
        *,
        field_name: str,
        raw_text: str,
        type_name: str,
        record: int = 0,
        reason: str = "",
        **location: int,
    ) -> None:
        detail = f"cannot convert {raw_text!r} to {type_name} for field {field_name!r}"
        if record:
            detail += f" in record {record}"
        if reason:
            detail += f": {reason}"
        super().__init__(detail, **location)
        self.field_name = field_name
        self.raw_text = raw_text
        self.type_name = type_name
        self.record = record


class UnsortedSelection(CSVError):
    def __init__(self, reason: str, *, selection: Sequence[int]) -> None:
        super().__init__(reason)
        self.selection = list(selection)


# ----------------------------
# Dialect
# ----------------------------

class Mode(str, Enum):
    STRICT = "strict"
    PERMISSIVE = "permissive"


_STANDARD_BREAKS: Tuple[str, ...] = ("\r\n", "\r", "\n")


@dataclass(frozen=True)
class Dialect:
    delimiter: str = ","
    quote: str = '"'
    record_break: str = "\n"
    mode: Mode = Mode.STRICT
    # recognised breaks, longest first so CRLF wins over CR
    breaks: Tuple[str, ...] = field(init=False, repr=False, compare=False, default=())

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "mode", Mode(self.mode))
        except ValueError:
            raise DialectError(f"Unknown mode: {self.mode!r}") from None

        separators = {
            "delimiter": self.delimiter,
            "quote": self.quote,
            "record_break": self.record_break,
        }
        for name, value in separators.items():
            if not isinstance(value, str) or not value:
                raise DialectError(f"{name} must be a non-empty string, got {value!r}")

        for (a, va), (b, vb) in permutations(separators.items(), 2):
            if vb.startswith(va):
                raise DialectError(f"{a} {va!r} collides with {b} {vb!r}")

        for name in ("delimiter", "quote"):
            value = separators[name]
            if "\r" in value or "\n" in value:
                raise DialectError(f"{name} must not contain a line break, got {value!r}")

        candidates = (self.record_break,) + _STANDARD_BREAKS
        unique = tuple(dict.fromkeys(candidates))
        object.__setattr__(self, "breaks", tuple(sorted(unique, key=len, reverse=True)))

    @property
    def strict(self) -> bool:
        return self.mode is Mode.STRICT

    def replace(self, **changes: Any) -> "Dialect":
        return replace(self, **changes)


DEFAULT = Dialect()
DEFAULT_DIALECT = DEFAULT
TSV = Dialect(delimiter="\t")


# ----------------------------
# Cursor + token scanner
# ----------------------------

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


class Cursor:
    """Read position over a buffered text. Owned by exactly one reader chain."""

    __slots__ = ("text", "pos")

    def __init__(self, text: str, pos: int = 0) -> None:
        self.text = text
        self.pos = pos

    def __repr__(self) -> str:
        return f"Cursor(pos={self.pos}, remaining={self.remaining()[:20]!r})"

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def remaining(self) -> str:
        return self.text[self.pos:]

    def startswith(self, token: str) -> bool:
        return self.text.startswith(token, self.pos)

    def match_break(self, dialect: Dialect) -> int:
        """Length of the record break at the current position, 0 if none."""
        for brk in dialect.breaks:
            if self.text.startswith(brk, self.pos):
                return len(brk)
        return 0

    def consume_break(self, dialect: Dialect) -> bool:
        n = self.match_break(dialect)
        self.pos += n
        return n > 0

    def location(self, pos: Optional[int] = None) -> Dict[str, int]:
        """Physical (line, column, position) of `pos`, as error keyword arguments."""
        if pos is None:
            pos = self.pos
        line, line_start = 1, 0
        for m in _LINE_BREAK_RE.finditer(self.text, 0, pos):
            line += 1
            line_start = m.end()
        return {"line": line, "column": pos - line_start + 1, "position": pos}


def _at_separator(text: str, pos: int, dialect: Dialect) -> bool:
    if text.startswith(dialect.delimiter, pos):
        return True
    for brk in dialect.breaks:
        if text.startswith(brk, pos):
            return True
    return False


def _log_recovery(what: str, text: str, pos: int) -> None:
    if logger.isEnabledFor(logging.DEBUG):
        loc = Cursor(text, pos).location()
        logger.debug("%s at line %d, column %d", what, loc["line"], loc["column"])


def next_token(cursor: Cursor, dialect: Dialect = DEFAULT) -> str:
    """
    Scan one field from the cursor and return its decoded text.

    The delimiter or record break that ends the field is left unconsumed.
    An empty string is a present-but-empty field; deciding whether a field
    exists at all is up to the caller (see RecordCursor).

    In strict mode the cursor is left where the problem was detected:
    at the stray quote, at the first character after a closing quote, or at
    end of input for an unterminated quoted field.
    """
    text = cursor.text
    n = len(text)
    quote = dialect.quote
    qlen = len(quote)
    pos = cursor.pos
    buf: List[str] = []

    if text.startswith(quote, pos):
        pos += qlen
        while True:
            if pos >= n:
                cursor.pos = pos
                partial = "".join(buf)
                if dialect.strict:
                    raise UnterminatedQuote(
                        "Input ended inside a quoted field",
                        partial=partial,
                        **cursor.location(),
                    )
                _log_recovery("Unterminated quoted field kept as data", text, pos)
                return partial

            if text.startswith(quote, pos):
                pos += qlen
                if text.startswith(quote, pos):
                    buf.append(quote)
                    pos += qlen
                    continue
                if pos >= n or _at_separator(text, pos, dialect):
                    cursor.pos = pos
                    return "".join(buf)
                if dialect.strict:
                    cursor.pos = pos
                    raise DataAfterClosingQuote(
                        "Content continues after closing quote",
                        partial="".join(buf),
                        **cursor.location(),
                    )
                _log_recovery("Data after closing quote absorbed into field", text, pos)
                break

            buf.append(text[pos])
            pos += 1

    while pos < n and not _at_separator(text, pos, dialect):
        if text.startswith(quote, pos):
            if dialect.strict:
                cursor.pos = pos
                raise UnexpectedQuote(
                    "Quote located in unquoted field",
                    partial="".join(buf),
                    **cursor.location(),
                )
            _log_recovery("Stray quote kept as data", text, pos)
            buf.append(quote)
            pos += qlen
            continue
        buf.append(text[pos])
        pos += 1

    cursor.pos = pos
    return "".join(buf)


# ----------------------------
# Record cursor
# ----------------------------

class RecordCursor:
    """
    Fields of one record, read lazily from a shared Cursor.

    With a selection, only fields at those physical column indices are
    returned (in ascending order); the others are still scanned so the cursor
    stays positioned. The record break is not consumed.
    """

    def __init__(
        self,
        cursor: Cursor,
        dialect: Dialect = DEFAULT,
        selection: Optional[Iterable[int]] = None,
    ) -> None:
        self._cursor = cursor
        self._dialect = dialect
        self._started = False
        self._index = -1
        self.column = -1  # physical index of the last returned field

        self._selection: Optional[List[int]] = None
        if selection is not None:
            sel = list(selection)
            if any(i < 0 for i in sel):
                raise UnsortedSelection("Selection indices must be non-negative", selection=sel)
            if any(b <= a for a, b in zip(sel, sel[1:])):
                if dialect.strict:
                    raise UnsortedSelection(
                        f"Selection must be strictly ascending, got {sel!r}", selection=sel
                    )
                sel = sorted(set(sel))
            self._selection = sel
        self._next_selected = 0

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        token = self.advance()
        if token is None:
            raise StopIteration
        return token

    def is_record_complete(self) -> bool:
        c = self._cursor
        if c.at_end() or c.match_break(self._dialect):
            return True
        # after a field the cursor sits on a delimiter or a break
        return self._started and not c.startswith(self._dialect.delimiter)

    def advance(self) -> Optional[str]:
        """Next (selected) field of the record, or None once the record is done."""
        sel = self._selection
        while not self.is_record_complete():
            if self._started:
                self._cursor.pos += len(self._dialect.delimiter)
            self._started = True
            self._index += 1
            token = next_token(self._cursor, self._dialect)
            if sel is None:
                self.column = self._index
                return token
            if self._next_selected < len(sel) and sel[self._next_selected] == self._index:
                self._next_selected += 1
                self.column = self._index
                return token
        return None

    def skip_rest(self) -> None:
        while self.advance() is not None:
            pass


# ----------------------------
# Type conversion
# ----------------------------

_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE,
)

BOOL_TRUE: Tuple[str, ...] = ("true", "t", "yes", "y", "1")
BOOL_FALSE: Tuple[str, ...] = ("false", "f", "no", "n", "0")


def _parse_int(raw: str) -> int:
    if _INT_RE.fullmatch(raw) is None:
        raise ValueError(f"Invalid integer literal: {raw!r}")
    return int(raw)


def _parse_float(raw: str) -> float:
    if _FLOAT_RE.fullmatch(raw) is None:
        raise ValueError(f"Invalid float literal: {raw!r}")
    value = float(raw)
    if math.isinf(value) and "inf" not in raw.lower():
        raise OverflowError(f"{raw!r} is out of range for float")
    return value


def _parse_decimal(raw: str) -> Decimal:
    if _FLOAT_RE.fullmatch(raw) is None:
        raise ValueError(f"Invalid decimal literal: {raw!r}")
    return Decimal(raw)


def _parse_bool(raw: str) -> bool:
    s = raw.lower()
    if s in BOOL_TRUE:
        return True
    if s in BOOL_FALSE:
        return False
    raise ValueError(f"Invalid bool literal: {raw!r}")


_CONVERTERS: Dict[type, Callable[[str], Any]] = {
    str: lambda s: s,
    int: _parse_int,
    float: _parse_float,
    bool: _parse_bool,
    datetime: datetime.fromisoformat,
    Decimal: _parse_decimal,
}


def converter_for(type_: Any) -> Callable[[str], Any]:
    try:
        return _CONVERTERS[type_]
    except (KeyError, TypeError):
        raise TypeError(f"Unsupported field type: {type_!r}") from None


def convert(raw: str, type_: Any, *, field_name: str = "", record: int = 0) -> Any:
    """Convert one field's text to `type_`, raising ConversionError on failure."""
    parser = converter_for(type_)
    try:
        return parser(raw)
    except (ValueError, ArithmeticError) as e:
        raise ConversionError(
            field_name=field_name,
            raw_text=raw,
            type_name=getattr(type_, "__name__", str(type_)),
            record=record,
            reason=str(e),
        ) from e


# ----------------------------
# Typed row binding
# ----------------------------

_NO_DEFAULT = object()


@dataclass(frozen=True)
class FieldDescriptor:
    name: str
    type: Any                  # target type, Optional[...] unwrapped
    position: int              # declared position in the row type
    optional: bool = False     # "" -> None
    default: Any = _NO_DEFAULT # value (or zero-arg factory) for unresolved columns
    default_is_factory: bool = False

    def default_value(self) -> Any:
        if self.default is _NO_DEFAULT:
            return None
        return self.default() if self.default_is_factory else self.default


def _unwrap_optional(tp: Any) -> Tuple[Any, bool]:
    if get_origin(tp) in (Union, types.UnionType):
        args = [a for a in get_args(tp) if a is not type(None)]
        if len(args) == 1 and len(args) != len(get_args(tp)):
            return args[0], True
    return tp, False


def _is_namedtuple(tp: Any) -> bool:
    return isinstance(tp, type) and issubclass(tp, tuple) and hasattr(tp, "_fields")


def is_row_type(tp: Any) -> bool:
    """True for dataclasses, NamedTuple classes and sequences of (name, type) pairs."""
    if isinstance(tp, type):
        return is_dataclass(tp) or _is_namedtuple(tp)
    if isinstance(tp, (list, tuple)):
        return bool(tp) and all(isinstance(p, (list, tuple)) and len(p) == 2 and isinstance(p[0], str) for p in tp)
    return False


def describe_fields(row_type: Any) -> List[FieldDescriptor]:
    """Build the field descriptor list for a row type (once per shape)."""
    raw: List[Tuple[str, Any, Any, bool]] = []
    if isinstance(row_type, type) and is_dataclass(row_type):
        hints = get_type_hints(row_type)
        for f in dataclass_fields(row_type):
            if not f.init:
                continue
            if f.default is not MISSING:
                raw.append((f.name, hints[f.name], f.default, False))
            elif f.default_factory is not MISSING:
                raw.append((f.name, hints[f.name], f.default_factory, True))
            else:
                raw.append((f.name, hints[f.name], _NO_DEFAULT, False))
    elif _is_namedtuple(row_type):
        hints = get_type_hints(row_type)
        defaults = getattr(row_type, "_field_defaults", {})
        for name in row_type._fields:
            raw.append((name, hints.get(name, str), defaults.get(name, _NO_DEFAULT), False))
    elif is_row_type(row_type):
        raw = [(name, tp, _NO_DEFAULT, False) for name, tp in row_type]
    else:
        raise TypeError(f"Not a row type: {row_type!r}")

    out: List[FieldDescriptor] = []
    for position, (name, hint, default, is_factory) in enumerate(raw):
        tp, optional = _unwrap_optional(hint)
        converter_for(tp)
        out.append(FieldDescriptor(
            name=name,
            type=tp,
            position=position,
            optional=optional,
            default=default,
            default_is_factory=is_factory,
        ))
    return out


class RowBinder:
    """Converts raw field strings into one typed row, in declared field order."""

    def __init__(self, row_type: Any) -> None:
        self.row_type = row_type
        self.fields = describe_fields(row_type)

    @property
    def names(self) -> List[str]:
        return [f.name for f in self.fields]

    def bind(self, raw: Sequence[Optional[str]], *, record: int = 0) -> Any:
        """
        `raw[i]` feeds declared field i. Missing trailing entries read as "".
        A None entry marks an unresolved column: the field default (or None) is used.
        """
        values: List[Any] = []
        for spec in self.fields:
            text = raw[spec.position] if spec.position < len(raw) else ""
            if text is None:
                values.append(spec.default_value())
            elif text == "" and spec.optional:
                values.append(None)
            else:
                values.append(convert(text, spec.type, field_name=spec.name, record=record))

        if isinstance(self.row_type, type) and is_dataclass(self.row_type):
            return self.row_type(**{f.name: v for f, v in zip(self.fields, values)})
        if _is_namedtuple(self.row_type):
            return self.row_type(*values)
        return tuple(values)


# ----------------------------
# Dataset
# ----------------------------

HeaderSpec = Union[bool, Sequence[Optional[str]], None]


class Dataset:
    """
    Iterator over the records of one input.

    Yields lists of fields (converted to `field_type` when it is a scalar type)
    or typed rows when `field_type` is a row type. With `header`, the first
    record is read at construction as the header row.
    """

    def __init__(
        self,
        source: Any,
        dialect: Dialect = DEFAULT,
        *,
        header: HeaderSpec = None,
        field_type: Any = str,
    ) -> None:
        text = source.read() if hasattr(source, "read") else source
        if not isinstance(text, str):
            raise TypeError(f"Expected str input, got {type(text).__name__}")

        self.dialect = dialect
        self._cursor = Cursor(text)
        self._binder: Optional[RowBinder] = None
        self._cell_type: Any = str
        if is_row_type(field_type):
            self._binder = RowBinder(field_type)
        else:
            converter_for(field_type)
            self._cell_type = field_type

        self.raw_header: Optional[List[str]] = None
        self.header: Optional[List[str]] = None
        self.records_read = 0
        self._record_number = 0
        # physical columns to scan (ascending) and the output order over them
        self._selection: Optional[List[int]] = None
        self._order: Optional[List[Optional[int]]] = None

        if header is not None and header is not False:
            self._read_header(header)
        elif self._binder is not None:
            self._order = list(range(len(self._binder.fields)))
            self._selection = list(self._order)

    def __iter__(self) -> "Dataset":
        return self

    def __next__(self) -> Any:
        if not self.has_next():
            raise StopIteration
        start = self._cursor.pos
        try:
            pairs = self._read_record()
            row = self._build(pairs)
        except CSVError:
            self._cursor.pos = start
            self._record_number -= 1
            raise
        self.records_read += 1
        return row

    def has_next(self) -> bool:
        return not self._cursor.at_end()

    def _read_record(self) -> List[Tuple[int, str]]:
        self._record_number += 1
        rc = RecordCursor(self._cursor, self.dialect, self._selection)
        pairs = [(rc.column, token) for token in rc]
        self._cursor.consume_break(self.dialect)
        return pairs

    def _read_header(self, requested: HeaderSpec) -> None:
        # row types map names to fields by position, so placeholders stay in place
        positional: List[Optional[str]] = [] if requested is True else list(requested)  # type: ignore[arg-type]
        if self.has_next():
            self.raw_header = [token for _, token in self._read_record()]
        else:
            self.raw_header = []

        index: Dict[str, int] = {}
        for i, name in enumerate(self.raw_header):
            index[name] = i  # last occurrence wins

        if self._binder is not None:
            self._resolve_row_header(positional, index)
        else:
            self._resolve_plain_header([n for n in positional if n], index)

        if self._order is not None:
            self._selection = sorted({i for i in self._order if i is not None})
        logger.debug(
            "Header %r resolved to %r (columns %r)", self.raw_header, self.header, self._order
        )

    def _resolve_plain_header(self, names: List[str], index: Dict[str, int]) -> None:
        if not names:
            self.header = list(self.raw_header or [])
            return

        missing = [n for n in names if n not in index]
        if self.dialect.strict:
            if missing:
                raise HeaderMismatch(
                    f"Requested header names not found: {missing!r}",
                    requested=names, missing=missing, line=1, column=1, position=0,
                )
            order = [index[n] for n in names]
            if any(b <= a for a, b in zip(order, order[1:])):
                raise HeaderMismatch(
                    f"Requested header {names!r} is not in input order {self.raw_header!r}",
                    requested=names, line=1, column=1, position=0,
                )
        elif missing:
            logger.warning("Dropping header names not found in input: %r", missing)

        kept = [n for n in names if n in index]
        self.header = kept
        self._order = [index[n] for n in kept]

    def _resolve_row_header(self, names: List[Optional[str]], index: Dict[str, int]) -> None:
        binder = self._binder
        assert binder is not None
        fields = binder.fields
        if len(names) > len(fields) and self.dialect.strict:
            raise HeaderMismatch(
                f"{len(names)} header names requested for {len(fields)} fields",
                requested=names, line=1, column=1, position=0,
            )
        wanted = [(names[i] if i < len(names) else None) or f.name for i, f in enumerate(fields)]

        missing = [n for n in wanted if n not in index]
        if missing:
            if self.dialect.strict:
                raise HeaderMismatch(
                    f"Row fields not found in header: {missing!r}",
                    requested=wanted, missing=missing, line=1, column=1, position=0,
                )
            logger.warning("Row fields not found in header, using defaults: %r", missing)

        self.header = wanted
        self._order = [index.get(n) for n in wanted]

    def _build(self, pairs: List[Tuple[int, str]]) -> Any:
        if self._binder is not None:
            by_column = dict(pairs)
            raw = [None if i is None else by_column.get(i, "") for i in self._order or []]
            return self._binder.bind(raw, record=self._record_number)

        if self._order is None:
            columns = [col for col, _ in pairs]
            cells = [token for _, token in pairs]
        else:
            by_column = dict(pairs)
            columns = list(self._order)  # type: ignore[arg-type]
            cells = [by_column.get(i, "") for i in self._order]  # type: ignore[arg-type]

        if self._cell_type is str:
            return cells
        return [
            convert(cell, self._cell_type, field_name=self._column_name(j, col), record=self._record_number)
            for j, (col, cell) in enumerate(zip(columns, cells))
        ]

    def _column_name(self, output_index: int, column: int) -> str:
        if self.header is not None and output_index < len(self.header):
            return self.header[output_index]
        return str(column)


def parse(
    source: Any,
    field_type: Any = str,
    *,
    header: HeaderSpec = None,
    mode: Union[Mode, str, None] = None,
    delimiter: Optional[str] = None,
    quote: Optional[str] = None,
    record_break: Optional[str] = None,
    dialect: Optional[Dialect] = None,
) -> Dataset:
    """
    Build a Dataset over `source`.

    Keyword separators and `mode` override the matching fields of `dialect`
    (DEFAULT when omitted). `header=True` or a list of names reads the first
    record as the header; None/"" entries in the list are placeholders.
    """
    d = dialect or DEFAULT
    changes = {
        k: v
        for k, v in (
            ("mode", mode),
            ("delimiter", delimiter),
            ("quote", quote),
            ("record_break", record_break),
        )
        if v is not None
    }
    if changes:
        d = d.replace(**changes)
    return Dataset(source, d, header=header, field_type=field_type)


# ----------------------------
# Writing
# ----------------------------

def _format_value(v: Any) -> str:
    if v is None:
        return ""
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, datetime):
        return v.isoformat()
    if isinstance(v, float):
        return repr(v)
    return str(v)


def _ends_with_partial(text: str, token: str) -> bool:
    return any(text.endswith(token[:k]) for k in range(1, len(token)))


def quote_field(text: str, dialect: Dialect = DEFAULT) -> str:
    """
    Quote `text` when it holds a separator, doubling embedded quotes.

    With multi-character separators, text ending in the start of the
    delimiter or a record break is quoted too, since it would otherwise
    run into the separator that follows it.
    """
    specials = (dialect.delimiter, dialect.quote) + dialect.breaks
    needs_quotes = any(s in text for s in specials) or any(
        _ends_with_partial(text, s) for s in (dialect.delimiter,) + dialect.breaks
    )
    if not needs_quotes:
        return text
    q = dialect.quote
    return q + text.replace(q, q + q) + q


def format_record(values: Sequence[Any], dialect: Dialect = DEFAULT) -> str:
    cells = [quote_field(_format_value(v), dialect) for v in values]
    if cells == [""]:
        # a lone empty field would otherwise read back as an empty record
        return dialect.quote * 2
    return dialect.delimiter.join(cells)


__all__ = [
    "CSVError",
    "DialectError",
    "IncompleteFieldError",
    "UnexpectedQuote",
    "DataAfterClosingQuote",
    "UnterminatedQuote",
    "HeaderMismatch",
    "ConversionError",
    "UnsortedSelection",
    "Mode",
    "Dialect",
    "DEFAULT",
    "DEFAULT_DIALECT",
    "TSV",
    "Cursor",
    "next_token",
    "RecordCursor",
    "FieldDescriptor",
    "RowBinder",
    "describe_fields",
    "is_row_type",
    "converter_for",
    "convert",
    "Dataset",
    "parse",
    "quote_field",
    "format_record",
    "__version__",
]
