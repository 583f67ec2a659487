"""
Value literal encoding.

Turns a `ValueExpression` into inline SQL text or a bind registration. This
is the only place user-supplied values become SQL text, so every string
goes through `quote_string()` regardless of how deeply it is nested.
"""
import datetime
import decimal
import logging
from typing import TYPE_CHECKING

from sqlgen.bind import BindParameterManager
from sqlgen.exceptions import DescriptorError, TypeConversionError
from sqlgen.sql import quote_string
from sqlgen.types import ArrayOf, Binary, Bool, ColumnRef, FunctionCall, Null
from sqlgen.types import Number, Raw, Str, Timestamp, ValueExpression

if TYPE_CHECKING:
    from sqlgen.strategy.base import DialectStrategy

logger = logging.getLogger(__name__)


def format_offset(offset: datetime.timedelta) -> str:
    """Render a UTC offset as `+HH:MM`."""
    total = int(offset.total_seconds())
    sign = '+' if total >= 0 else '-'
    hours, remainder = divmod(abs(total), 3600)
    return f'{sign}{hours:02d}:{remainder // 60:02d}'


def format_timestamp(value: datetime.datetime, zone: datetime.tzinfo) -> str:
    """Format as `YYYY-MM-DD HH:MM:SS.mmm +HH:MM` in the given zone.

    Naive datetimes are read as UTC. Sub-millisecond precision is truncated.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=datetime.timezone.utc)
    value = value.astimezone(zone)
    return (f'{value.year:04d}-{value.month:02d}-{value.day:02d} '
            f'{value.hour:02d}:{value.minute:02d}:{value.second:02d}.'
            f'{value.microsecond // 1000:03d} {format_offset(value.utcoffset())}')


class ValueEncoder:
    """Inline and bound rendering of value expressions for one dialect.
    """

    def __init__(self, strategy: 'DialectStrategy'):
        self.strategy = strategy
        self.zone = strategy.options.tzinfo

    def inline(self, expr: ValueExpression, cast: bool = False) -> str:
        """Render a value directly as escaped SQL text.

        `cast` requests an explicit element-type suffix on arrays.
        """
        match expr:
            case Null():
                return 'NULL'
            case Bool(value):
                return self.strategy.bool_literal(value)
            case Number(value):
                return str(value)
            case Str(value):
                return quote_string(value)
            case Binary(value):
                return self.strategy.binary_literal(value)
            case Timestamp(value):
                return quote_string(format_timestamp(value, self.zone))
            case ArrayOf():
                return self.array(expr, cast)
            case ColumnRef() | FunctionCall() | Raw():
                return self.verbatim(expr)
        raise TypeConversionError(f'Not a value expression: {expr!r}')

    def bound(self, expr: ValueExpression, bind: BindParameterManager) -> str:
        """Register a value with the manager and return its placeholder.

        Arrays are always inlined; raw expressions are never bound.
        """
        match expr:
            case Null():
                return bind.register(None)
            case Bool(value) | Number(value) | Str(value) | Binary(value):
                return bind.register(value)
            case Timestamp(value):
                return bind.register(format_timestamp(value, self.zone))
            case ArrayOf():
                return self.array(expr)
            case ColumnRef() | FunctionCall() | Raw():
                return self.verbatim(expr)
        raise TypeConversionError(f'Not a value expression: {expr!r}')

    def verbatim(self, expr: ValueExpression) -> str:
        """Render a column reference, function call or raw fragment.

        Function arguments are inline-encoded, never bound.
        """
        match expr:
            case ColumnRef(name):
                return self.strategy.quote_column(name)
            case FunctionCall(name, args):
                return f"{name}({', '.join(self.inline(arg) for arg in args)})"
            case Raw(text):
                return text
        raise TypeConversionError(f'Not a raw expression: {expr!r}')

    def array(self, expr: ArrayOf, cast: bool = False) -> str:
        """Render `ARRAY[a,b]`, with `::TYPE[]` when a cast is required.

        An empty uncast array has no element type to carry, so it renders as
        the untyped literal `'{}'`.
        """
        body = ','.join(self.inline(item) for item in expr.items)
        if not (cast or expr.element_type):
            return f'ARRAY[{body}]' if expr.items else "'{}'"
        element_type = expr.element_type or self.infer_element_type(expr)
        return f'ARRAY[{body}]::{element_type}[]'

    def infer_element_type(self, expr: ArrayOf) -> str:
        """Pick the cast type from the element variants, ignoring NULLs."""
        kinds = {type(item) for item in expr.items if not isinstance(item, Null)}
        if Number in kinds and len(kinds) == 1:
            values = [item.value for item in expr.items if isinstance(item, Number)]
            if any(isinstance(v, decimal.Decimal) for v in values):
                return self.strategy.ARRAY_ELEMENT_TYPES['decimal']
            if any(isinstance(v, float) for v in values):
                return self.strategy.ARRAY_ELEMENT_TYPES['float']
            return self.strategy.ARRAY_ELEMENT_TYPES['integer']
        if len(kinds) == 1:
            kind = kinds.pop()
            element_type = self.strategy.ARRAY_ELEMENT_TYPES.get(kind.__name__.lower())
            if element_type:
                return element_type
        raise DescriptorError(
            f'Cannot infer array element type from {sorted(k.__name__ for k in kinds) or "empty array"}; '
            'pass ArrayOf(..., element_type=...)')
