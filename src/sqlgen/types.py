"""
Consolidated type handling for statement generation.

This module provides:
- ValueExpression: the closed set of value variants the encoder understands
- TypeConverter: Convert Python, NumPy and pandas values to value expressions
- TableReference: Table name with optional schema
- Predicate nodes (Comparison, And, Or) and the Op operator enum
- Trigger and column-change definition records
- BoundQuery: SQL text paired with its bind mapping
"""
import datetime
import decimal
import json
import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import dateutil.parser
import numpy as np
import pandas as pd
from sqlgen.exceptions import DescriptorError, TypeConversionError
from sqlgen.exceptions import UnknownOperatorError

logger = logging.getLogger(__name__)


class _Unset:
    """Marker for a field that is present in a record but carries no value."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'UNSET'

    def __bool__(self) -> bool:
        return False


UNSET = _Unset()


# Value expressions


class ValueExpression:
    """Base class of the closed value variant.

    Only `Str`, `Binary`, `Timestamp` and array elements are ever escaped.
    `ColumnRef`, `FunctionCall` and `Raw` are emitted verbatim and are never
    bound.
    """

    __slots__ = ()

    @property
    def is_raw(self) -> bool:
        return isinstance(self, ColumnRef | FunctionCall | Raw)


@dataclass(frozen=True, slots=True)
class Null(ValueExpression):
    """SQL NULL."""


NULL = Null()


@dataclass(frozen=True, slots=True)
class Bool(ValueExpression):
    value: bool


@dataclass(frozen=True, slots=True)
class Number(ValueExpression):
    value: int | float | decimal.Decimal


@dataclass(frozen=True, slots=True)
class Str(ValueExpression):
    value: str


@dataclass(frozen=True, slots=True)
class Binary(ValueExpression):
    value: bytes


@dataclass(frozen=True, slots=True)
class Timestamp(ValueExpression):
    """Point in time; strings are parsed with dateutil.

    Naive datetimes are read as UTC when formatted.
    """
    value: datetime.datetime

    def __post_init__(self):
        value = self.value
        if isinstance(value, str):
            try:
                value = dateutil.parser.parse(value)
            except (ValueError, OverflowError) as exc:
                raise TypeConversionError(f'Cannot parse timestamp {self.value!r}') from exc
        elif isinstance(value, datetime.date) and not isinstance(value, datetime.datetime):
            value = datetime.datetime.combine(value, datetime.time())
        if not isinstance(value, datetime.datetime):
            raise TypeConversionError(f'Timestamp requires a datetime, got {type(value).__name__}')
        object.__setattr__(self, 'value', value)


@dataclass(frozen=True, slots=True)
class ArrayOf(ValueExpression):
    """Array literal; items are converted with `TypeConverter`.

    `element_type` overrides the inferred cast type (e.g. `VARCHAR(255)`).
    """
    items: tuple
    element_type: str | None = None

    def __post_init__(self):
        items = tuple(TypeConverter.to_expression(item) for item in self.items)
        object.__setattr__(self, 'items', items)


@dataclass(frozen=True, slots=True)
class ColumnRef(ValueExpression):
    """Reference to a column; `table.column` is qualified per segment."""
    name: str


@dataclass(frozen=True, slots=True)
class FunctionCall(ValueExpression):
    name: str
    args: tuple = ()

    def __post_init__(self):
        args = tuple(TypeConverter.to_expression(arg) for arg in self.args)
        object.__setattr__(self, 'args', args)


@dataclass(frozen=True, slots=True)
class Raw(ValueExpression):
    """SQL fragment emitted exactly as given."""
    text: str


def fn(name: str, *args: Any) -> FunctionCall:
    """Build a function call expression: `fn('YEAR', col('createdAt'))`."""
    return FunctionCall(name, args)


def col(name: str) -> ColumnRef:
    """Build a column reference expression."""
    return ColumnRef(name)


def literal(text: str) -> Raw:
    """Build a raw SQL fragment."""
    return Raw(text)


# Type Converter - Python -> value expression


class TypeConverter:
    """Map plain Python, NumPy and pandas values onto value expressions.
    """

    @staticmethod
    def is_null(value: Any) -> bool:
        """Check whether a value renders as SQL NULL."""
        if value is None or value is UNSET or isinstance(value, Null):
            return True
        if value is pd.NA or value is pd.NaT:
            return True
        if isinstance(value, float | np.floating):
            return math.isnan(value) or math.isinf(value)
        if isinstance(value, np.datetime64):
            return bool(np.isnat(value))
        if isinstance(value, decimal.Decimal):
            return value.is_nan()
        return False

    @staticmethod
    def to_expression(value: Any) -> ValueExpression:
        """Convert a single value to a value expression."""
        if isinstance(value, ValueExpression):
            return value

        if TypeConverter.is_null(value):
            return NULL

        if isinstance(value, bool | np.bool_):
            return Bool(bool(value))

        if isinstance(value, np.integer | np.floating):
            return Number(value.item())

        if isinstance(value, int | float | decimal.Decimal):
            return Number(value)

        if isinstance(value, str):
            return Str(value)

        if isinstance(value, bytes | bytearray | memoryview):
            return Binary(bytes(value))

        if isinstance(value, pd.Timestamp):
            return Timestamp(value.to_pydatetime())

        if isinstance(value, np.datetime64):
            return Timestamp(pd.Timestamp(value).to_pydatetime())

        if isinstance(value, datetime.datetime):
            return Timestamp(value)

        if isinstance(value, datetime.date):
            return Str(value.isoformat())

        if isinstance(value, dict):
            return Str(json.dumps(value))

        if isinstance(value, np.ndarray):
            return ArrayOf(tuple(value.tolist()))

        if isinstance(value, list | tuple):
            return ArrayOf(tuple(value))

        raise TypeConversionError(f'Cannot convert {type(value).__name__} to a SQL value')

    @staticmethod
    def convert_record(record: Mapping[str, Any]) -> dict[str, ValueExpression]:
        """Convert every value of a field record, preserving key order."""
        if not isinstance(record, Mapping):
            raise DescriptorError(f'Field record must be a mapping, got {type(record).__name__}')
        return {key: TypeConverter.to_expression(value) for key, value in record.items()}


# Tables


@dataclass(frozen=True, slots=True)
class TableReference:
    """Table name with optional schema."""
    name: str
    schema: str | None = None

    @classmethod
    def of(cls, table: Any) -> 'TableReference':
        """Coerce a string, `(schema, name)` pair or mapping to a reference."""
        if isinstance(table, TableReference):
            return table
        if isinstance(table, str):
            return cls(table)
        if isinstance(table, tuple) and len(table) == 2:
            schema, name = table
            return cls(name, schema)
        if isinstance(table, Mapping):
            name = table.get('tableName') or table.get('table_name') or table.get('name')
            if not name:
                raise DescriptorError(f'Table mapping has no name: {table!r}')
            return cls(name, table.get('schema'))
        raise DescriptorError(f'Invalid table reference: {table!r}')


# Predicates


class Op(str, Enum):
    """Comparison operators understood by the WHERE builder."""
    EQ = 'eq'
    NE = 'ne'
    GT = 'gt'
    GTE = 'gte'
    LT = 'lt'
    LTE = 'lte'
    IS = 'is'
    NOT = 'not'
    IN = 'in'
    NOT_IN = 'notIn'
    LIKE = 'like'
    NOT_LIKE = 'notLike'
    ILIKE = 'iLike'
    NOT_ILIKE = 'notILike'
    BETWEEN = 'between'
    NOT_BETWEEN = 'notBetween'
    CONTAINS = 'contains'
    CONTAINED = 'contained'
    OVERLAP = 'overlap'

    @classmethod
    def parse(cls, token: Any) -> 'Op':
        """Resolve an `Op`, its name or a SQL symbol such as `@>`."""
        if isinstance(token, Op):
            return token
        if isinstance(token, str):
            if token in _OP_SYMBOLS:
                return _OP_SYMBOLS[token]
            for op in cls:
                if token == op.value or token.lower() == op.value.lower():
                    return op
        raise UnknownOperatorError(token, [op.value for op in cls])


_OP_SYMBOLS = {
    '=': Op.EQ,
    '!=': Op.NE,
    '<>': Op.NE,
    '>': Op.GT,
    '>=': Op.GTE,
    '<': Op.LT,
    '<=': Op.LTE,
    '@>': Op.CONTAINS,
    '<@': Op.CONTAINED,
    '&&': Op.OVERLAP,
}


@dataclass(frozen=True, slots=True)
class Comparison:
    """Leaf predicate: `<column> <operator> <value>`."""
    column: str | ValueExpression
    operator: Op | str = Op.EQ
    value: Any = None


class _Group:
    __slots__ = ('conditions',)
    joiner = ''

    def __init__(self, *conditions: Any):
        self.conditions = conditions

    def __repr__(self) -> str:
        return f'{type(self).__name__}{self.conditions!r}'

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.conditions == other.conditions

    __hash__ = None


class And(_Group):
    """Conditions joined with AND."""
    joiner = ' AND '


class Or(_Group):
    """Conditions joined with OR."""
    joiner = ' OR '


# Results and DDL records


@dataclass(slots=True)
class BoundQuery:
    """Statement text with its placeholder -> value mapping."""
    query: str
    bind: dict[str, Any] = field(default_factory=dict)


class TriggerTiming(str, Enum):
    BEFORE = 'before'
    AFTER = 'after'
    INSTEAD_OF = 'instead_of'
    AFTER_CONSTRAINT = 'after_constraint'


class TriggerEvent(str, Enum):
    INSERT = 'insert'
    UPDATE = 'update'
    DELETE = 'delete'


@dataclass(frozen=True, slots=True)
class TriggerArgument:
    name: str
    type: str


@dataclass(frozen=True, slots=True)
class TriggerDefinition:
    """Everything needed to render CREATE TRIGGER.

    `options` are raw clauses (e.g. `FOR EACH ROW`) placed before EXECUTE.
    """
    table: Any
    name: str
    timing: TriggerTiming | str
    events: tuple
    function: str
    function_args: tuple = ()
    options: tuple = ()


@dataclass(frozen=True, slots=True)
class ColumnTypeChange:
    """Move a column onto a (possibly new) enum type with these labels."""
    column: str
    values: tuple

    def __post_init__(self):
        if isinstance(self.values, str):
            raise DescriptorError(f'Enum values for {self.column!r} must be a sequence, not a string')
        object.__setattr__(self, 'values', tuple(self.values))
