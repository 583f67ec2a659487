"""
PostgreSQL SQL text generation from structured descriptors.

All statements can be generated either as:
- Module functions: sqlgen.select_query('myTable', where={'id': 2})
- QueryGenerator methods: QueryGenerator(quote_identifiers=False).select_query(...)

The module functions use a generator with the default options.
"""
__version__ = '0.1.0'

from functools import lru_cache
from typing import Any

from sqlgen.exceptions import ArrayParseError, DescriptorError, GenerationError
from sqlgen.exceptions import OptionConflictError, TriggerDefinitionError
from sqlgen.exceptions import TypeConversionError, UnknownOperatorError
from sqlgen.generator import QueryGenerator
from sqlgen.options import GeneratorOptions, QueryOptions
from sqlgen.types import NULL, UNSET, And, ArrayOf, BoundQuery, Comparison
from sqlgen.types import ColumnTypeChange, Op, Or, TableReference
from sqlgen.types import TriggerArgument, TriggerDefinition, TriggerEvent
from sqlgen.types import TriggerTiming, col, fn, literal


@lru_cache(maxsize=1)
def default_generator() -> QueryGenerator:
    """Return the shared generator with default options."""
    return QueryGenerator()


def select_query(table: Any, options: Any = None, **kw: Any) -> str:
    """Generate a SELECT statement.
    """
    return default_generator().select_query(table, options, **kw)


def insert_query(table: Any, values: Any, options: Any = None, **kw: Any) -> BoundQuery:
    """Generate a single-row INSERT with bound values.
    """
    return default_generator().insert_query(table, values, options, **kw)


def bulk_insert_query(table: Any, rows: Any, options: Any = None, **kw: Any) -> str:
    """Generate a multi-row INSERT with inline values.
    """
    return default_generator().bulk_insert_query(table, rows, options, **kw)


def update_query(table: Any, values: Any, where: Any, options: Any = None,
                 **kw: Any) -> BoundQuery:
    """Generate an UPDATE with bound values.
    """
    return default_generator().update_query(table, values, where, options, **kw)


def create_trigger(table: Any, *args: Any, **kw: Any) -> str:
    return default_generator().create_trigger(table, *args, **kw)


def drop_trigger(table: Any, name: str) -> str:
    return default_generator().drop_trigger(table, name)


def rename_trigger(table: Any, old_name: str, new_name: str) -> str:
    return default_generator().rename_trigger(table, old_name, new_name)


def change_column_query(table: Any, changes: Any) -> str:
    return default_generator().change_column_query(table, changes)


def from_array(text: str) -> list[str]:
    """Parse a PostgreSQL array literal such as `{a,"b c"}`.
    """
    return default_generator().from_array(text)


def to_array(items: Any) -> str:
    return default_generator().to_array(items)


__all__ = [
    'QueryGenerator',
    'GeneratorOptions',
    'QueryOptions',
    'default_generator',
    'select_query',
    'insert_query',
    'bulk_insert_query',
    'update_query',
    'create_trigger',
    'drop_trigger',
    'rename_trigger',
    'change_column_query',
    'from_array',
    'to_array',
    'fn',
    'col',
    'literal',
    'NULL',
    'UNSET',
    'And',
    'Or',
    'Comparison',
    'Op',
    'ArrayOf',
    'BoundQuery',
    'TableReference',
    'TriggerDefinition',
    'TriggerArgument',
    'TriggerTiming',
    'TriggerEvent',
    'ColumnTypeChange',
    'GenerationError',
    'DescriptorError',
    'UnknownOperatorError',
    'OptionConflictError',
    'TriggerDefinitionError',
    'TypeConversionError',
    'ArrayParseError',
]
