"""
Base strategy interface for statement generation.

Defines the abstract base class that all dialect-specific strategy
implementations inherit from. SELECT, INSERT, bulk INSERT and UPDATE are
assembled here from the clause builders; each concrete strategy supplies
the dialect-specific literals, operators, conflict handling and DDL.

A strategy holds only the read-only `GeneratorOptions` it was built with,
so a single instance is safely shared by concurrent calls. Every call gets
its own `BindParameterManager`.
"""
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from itertools import chain
from typing import TYPE_CHECKING, Any

from more_itertools import unique_everseen
from sqlgen.bind import BindParameterManager
from sqlgen.clauses import build_attributes, build_group, build_order
from sqlgen.clauses import build_returning, build_where
from sqlgen.encoder import ValueEncoder
from sqlgen.exceptions import DescriptorError, OptionConflictError
from sqlgen.exceptions import UnknownOperatorError
from sqlgen.sql import qualify, quote_identifier as sql_quote_identifier
from sqlgen.sql import split_qualified
from sqlgen.types import NULL, BoundQuery, Null, Op, TableReference
from sqlgen.types import TriggerDefinition, TypeConverter

if TYPE_CHECKING:
    from sqlgen.options import GeneratorOptions, QueryOptions

logger = logging.getLogger(__name__)

# Registry of dialect name -> strategy class
# Defined here to avoid circular imports (concrete strategies import from base)
_STRATEGY_REGISTRY: dict[str, type['DialectStrategy']] = {}


def register_strategy(dialect: str):
    """Decorator to register a strategy class for a dialect.

    Usage:
        @register_strategy('postgresql')
        class PostgresStrategy(DialectStrategy):
            ...
    """
    def decorator(cls: type['DialectStrategy']) -> type['DialectStrategy']:
        _STRATEGY_REGISTRY[dialect] = cls
        return cls
    return decorator


def _column_list(value: Any, option: str) -> list[str]:
    """Accept a single column name or a sequence of names."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    columns = list(value)
    if not all(isinstance(c, str) for c in columns):
        raise DescriptorError(f'{option} must contain column names, got {columns!r}')
    return columns


class DialectStrategy(ABC):
    """Base class for dialect-specific statement generation.
    """

    # Cast types for array literals, keyed by value variant
    ARRAY_ELEMENT_TYPES: dict[str, str] = {}

    OPERATORS: dict[Op, str] = {
        Op.EQ: '=',
        Op.NE: '!=',
        Op.GT: '>',
        Op.GTE: '>=',
        Op.LT: '<',
        Op.LTE: '<=',
        Op.IS: 'IS',
        Op.NOT: 'IS NOT',
        Op.IN: 'IN',
        Op.NOT_IN: 'NOT IN',
        Op.LIKE: 'LIKE',
        Op.NOT_LIKE: 'NOT LIKE',
        Op.BETWEEN: 'BETWEEN',
        Op.NOT_BETWEEN: 'NOT BETWEEN',
    }

    def __init__(self, options: 'GeneratorOptions'):
        self.options = options
        self.encoder = ValueEncoder(self)

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """Return the dialect identifier (e.g., 'postgresql')."""

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return option field names that must be non-empty for this dialect.
        """
        return ['bind_prefix', 'timezone']

    @classmethod
    def validate_options(cls, options: 'GeneratorOptions') -> None:
        """Validate options for this dialect.

        Raises
            ValueError: If any required field is None or empty
        """
        for field in cls.get_required_options():
            if not getattr(options, field):
                raise ValueError(f'field {field} cannot be None or empty')

    # Quoting

    def quote_identifier(self, identifier: str) -> str:
        """Quote a database identifier.

        Default implementation uses standard SQL double-quote escaping and
        honours `quote_identifiers`. Override in subclasses if the database
        requires different quoting.
        """
        return sql_quote_identifier(identifier, self.options.quote_identifiers)

    def quote_table(self, table: Any) -> str:
        """Render `schema.name` or `name` with each segment quoted."""
        ref = TableReference.of(table)
        return qualify(ref.name, ref.schema, self.options.quote_identifiers)

    def quote_column(self, reference: str) -> str:
        """Quote a possibly dotted column reference; `*` stays bare."""
        return '.'.join(segment if segment == '*' else self.quote_identifier(segment)
                        for segment in split_qualified(reference))

    # Dialect hooks

    def get_placeholder_style(self) -> str:
        """Return the marker that precedes bind parameter names."""
        return '$'

    def new_bind(self) -> BindParameterManager:
        """Create the bind parameter manager for one statement call."""
        return BindParameterManager(self.options.bind_prefix, self.get_placeholder_style())

    def operator_sql(self, op: Op) -> str:
        """Return the SQL text for an operator.

        Raises
            UnknownOperatorError: If the dialect cannot render the operator
        """
        try:
            return self.OPERATORS[op]
        except KeyError:
            raise UnknownOperatorError(op.value, [o.value for o in self.OPERATORS]) from None

    @abstractmethod
    def bool_literal(self, value: bool) -> str:
        """Render a boolean literal."""

    @abstractmethod
    def binary_literal(self, value: bytes) -> str:
        """Render an escaped byte string literal."""

    @abstractmethod
    def build_conflict_clause(self, options: 'QueryOptions') -> str:
        """Return the ` ON CONFLICT ...` suffix for an insert, or ''.
        """

    def _build_update_exprs(self, columns: list[str]) -> list[str]:
        """Build SET expressions for upsert operations.

        Returns
            List of SET expressions like '"col"=EXCLUDED."col"'
        """
        update_exprs = []
        for column in columns:
            qc = self.quote_identifier(column)
            update_exprs.append(f'{qc}=EXCLUDED.{qc}')
        return update_exprs

    def _check_conflict_options(self, options: 'QueryOptions') -> None:
        """Reject option combinations no single statement can express."""
        update_columns = _column_list(options.update_on_duplicate, 'update_on_duplicate')
        upsert_keys = _column_list(options.upsert_keys, 'upsert_keys')
        if options.ignore_duplicates and update_columns:
            raise OptionConflictError('ignore_duplicates cannot be combined with update_on_duplicate')
        if update_columns and not upsert_keys:
            raise OptionConflictError('update_on_duplicate requires upsert_keys')

    def _prepare_record(self, values: Mapping[str, Any], options: 'QueryOptions') -> dict:
        record = TypeConverter.convert_record(values)
        if options.resolve_omit_null(self.options):
            record = {key: value for key, value in record.items() if not isinstance(value, Null)}
        return record

    # Statements

    def select_query(self, table: Any, options: 'QueryOptions') -> str:
        """Generate a SELECT statement.

        Where values are inlined and columns qualified by the alias, or by
        the table when no alias is given.
        """
        quoted_table = self.quote_table(table)
        sql = f'SELECT {build_attributes(self, options.attributes)} FROM {quoted_table}'

        qualifier = quoted_table
        if options.alias:
            qualifier = self.quote_identifier(options.alias)
            sql += f' AS {qualifier}'

        where = build_where(self, options.where, qualifier=qualifier)
        if where:
            sql += f' WHERE {where}'

        group = build_group(self, options.group)
        if group:
            sql += f' GROUP BY {group}'

        order = build_order(self, options.order, options.alias)
        if order:
            sql += f' ORDER BY {order}'

        sql += self.build_limit_clause(options.limit, options.offset)

        logger.debug(f'Generated select for {quoted_table=}')
        return sql + ';'

    def build_limit_clause(self, limit: int | None, offset: int | None) -> str:
        """Return ` LIMIT n OFFSET m` for the supplied parts."""
        clause = ''
        for keyword, value in (('LIMIT', limit), ('OFFSET', offset)):
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise DescriptorError(f'{keyword} must be a non-negative integer, got {value!r}')
            clause += f' {keyword} {value}'
        return clause

    def insert_query(self, table: Any, values: Mapping[str, Any],
                     options: 'QueryOptions') -> BoundQuery:
        """Generate a single-row INSERT with bound values.

        Raw values are inlined but keep their column position. An empty
        record produces `DEFAULT VALUES`.
        """
        self._check_conflict_options(options)
        quoted_table = self.quote_table(table)
        record = self._prepare_record(values, options)
        bind = self.new_bind()

        if record:
            columns = ','.join(self.quote_identifier(column) for column in record)
            placeholders = ','.join(self.encoder.bound(value, bind) for value in record.values())
            sql = f'INSERT INTO {quoted_table} ({columns}) VALUES ({placeholders})'
        else:
            sql = f'INSERT INTO {quoted_table} DEFAULT VALUES'

        sql += self.build_conflict_clause(options)
        sql += build_returning(self, options.returning)

        logger.debug(f'Generated insert for {quoted_table=} with {len(bind)} bind parameters')
        return BoundQuery(sql + ';', bind.finalize())

    def bulk_insert_query(self, table: Any, rows: Any, options: 'QueryOptions') -> str:
        """Generate a multi-row INSERT with inline literals.

        Columns are the union of row keys in first-appearance order and
        missing keys render NULL. `omit_null` is never honoured here: a
        column present in some rows cannot be dropped for others.
        """
        self._check_conflict_options(options)
        if isinstance(rows, Mapping) or not rows:
            raise DescriptorError('bulk_insert_query requires a non-empty sequence of rows')

        quoted_table = self.quote_table(table)
        records = [TypeConverter.convert_record(row) for row in rows]
        columns = list(unique_everseen(chain.from_iterable(records)))
        if not columns:
            raise DescriptorError('bulk_insert_query requires at least one column')

        tuples = ','.join(
            '(' + ','.join(self.encoder.inline(record.get(column, NULL)) for column in columns) + ')'
            for record in records)
        quoted_columns = ','.join(self.quote_identifier(column) for column in columns)

        sql = f'INSERT INTO {quoted_table} ({quoted_columns}) VALUES {tuples}'
        sql += self.build_conflict_clause(options)
        sql += build_returning(self, options.returning)

        logger.debug(f'Generated bulk insert for {quoted_table=} with {len(records)} rows')
        return sql + ';'

    def update_query(self, table: Any, values: Mapping[str, Any], where: Any,
                     options: 'QueryOptions') -> BoundQuery:
        """Generate an UPDATE whose SET and WHERE share one placeholder sequence.
        """
        quoted_table = self.quote_table(table)
        record = self._prepare_record(values, options)
        if not record:
            raise DescriptorError(f'No values to update for {quoted_table}')

        bind = self.new_bind()
        assignments = ','.join(f'{self.quote_identifier(column)}={self.encoder.bound(value, bind)}'
                               for column, value in record.items())
        sql = f'UPDATE {quoted_table} SET {assignments}'

        predicate = build_where(self, where, bind=bind)
        if predicate:
            sql += f' WHERE {predicate}'

        sql += build_returning(self, options.returning)

        logger.debug(f'Generated update for {quoted_table=} with {len(bind)} bind parameters')
        return BoundQuery(sql, bind.finalize())

    # DDL

    @abstractmethod
    def create_trigger(self, definition: TriggerDefinition) -> str:
        """Generate CREATE TRIGGER for a definition record.
        """

    @abstractmethod
    def drop_trigger(self, table: Any, name: str) -> str:
        """Generate DROP TRIGGER.
        """

    @abstractmethod
    def rename_trigger(self, table: Any, old_name: str, new_name: str) -> str:
        """Generate the trigger rename statement.
        """

    @abstractmethod
    def change_column_query(self, table: Any, changes: Any) -> str:
        """Generate the statement batch moving columns onto enum types.
        """

    @abstractmethod
    def from_array(self, text: str) -> list[str]:
        """Decode the dialect's array wire format.
        """

    @abstractmethod
    def to_array(self, items: Any) -> str:
        """Encode strings in the dialect's array wire format.
        """
