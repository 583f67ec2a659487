"""
PostgreSQL-specific strategy implementation.

This module implements the DialectStrategy interface for PostgreSQL.
It handles PostgreSQL's unique features such as:
- Array operators (`@>`, `<@`, `&&`) and case-insensitive ILIKE
- INSERT ... ON CONFLICT for ignore-duplicates and upserts
- Trigger DDL, including constraint triggers
- Enum column changes through an idempotent anonymous DO block
- The curly-brace array wire format
"""
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from sqlgen import array
from sqlgen.exceptions import DescriptorError, TriggerDefinitionError
from sqlgen.sql import qualify, quote_string
from sqlgen.strategy.base import DialectStrategy, _column_list
from sqlgen.strategy.base import register_strategy
from sqlgen.types import ColumnTypeChange, Op, TableReference
from sqlgen.types import TriggerArgument, TriggerDefinition, TriggerEvent
from sqlgen.types import TriggerTiming

if TYPE_CHECKING:
    from sqlgen.options import QueryOptions

logger = logging.getLogger(__name__)

_TRIGGER_TIMINGS = {
    TriggerTiming.BEFORE: 'BEFORE',
    TriggerTiming.AFTER: 'AFTER',
    TriggerTiming.INSTEAD_OF: 'INSTEAD OF',
    TriggerTiming.AFTER_CONSTRAINT: 'AFTER',
}

_TRIGGER_EVENTS = {
    TriggerEvent.INSERT: 'INSERT',
    TriggerEvent.UPDATE: 'UPDATE',
    TriggerEvent.DELETE: 'DELETE',
}


def _parse_enum(enum: type, value: Any, kind: str):
    """Resolve an enum member from itself, its value or its SQL spelling."""
    if isinstance(value, enum):
        return value
    if isinstance(value, str):
        token = value.strip().lower().replace(' ', '_')
        for member in enum:
            if token == member.value:
                return member
    raise TriggerDefinitionError(f'Unknown trigger {kind}: {value!r}. '
                                 f'Supported: {[m.value for m in enum]}')


@register_strategy('postgresql')
class PostgresStrategy(DialectStrategy):
    """PostgreSQL-specific statement generation.
    """

    ARRAY_ELEMENT_TYPES = {
        'str': 'VARCHAR(255)',
        'integer': 'INTEGER',
        'float': 'DOUBLE PRECISION',
        'decimal': 'DECIMAL',
        'bool': 'BOOLEAN',
        'timestamp': 'TIMESTAMP WITH TIME ZONE',
        'binary': 'BYTEA',
    }

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Enum type DDL needs a schema to fall back on."""
        return ['bind_prefix', 'timezone', 'default_schema']

    OPERATORS = {
        **DialectStrategy.OPERATORS,
        Op.ILIKE: 'ILIKE',
        Op.NOT_ILIKE: 'NOT ILIKE',
        Op.CONTAINS: '@>',
        Op.CONTAINED: '<@',
        Op.OVERLAP: '&&',
    }

    @property
    def dialect_name(self) -> str:
        """Return the dialect identifier for PostgreSQL."""
        return 'postgresql'

    def bool_literal(self, value: bool) -> str:
        return 'true' if value else 'false'

    def binary_literal(self, value: bytes) -> str:
        """Render bytes as an escape-string hex literal: `E'\\\\x0a0b'`."""
        return f"E'\\\\x{value.hex()}'"

    def build_conflict_clause(self, options: 'QueryOptions') -> str:
        """Generate the ON CONFLICT suffix.

        `update_on_duplicate` yields `DO UPDATE SET "c"=EXCLUDED."c"` against
        the `upsert_keys` target; `ignore_duplicates` yields `DO NOTHING`,
        targeted when keys are given.
        """
        update_columns = _column_list(options.update_on_duplicate, 'update_on_duplicate')
        quoted_keys = ','.join(self.quote_identifier(k)
                               for k in _column_list(options.upsert_keys, 'upsert_keys'))

        if update_columns:
            update_exprs = self._build_update_exprs(update_columns)
            return f" ON CONFLICT ({quoted_keys}) DO UPDATE SET {','.join(update_exprs)}"

        if options.ignore_duplicates:
            target = f' ({quoted_keys})' if quoted_keys else ''
            return f' ON CONFLICT{target} DO NOTHING'

        return ''

    # Triggers

    def _trigger_argument(self, argument: Any) -> str:
        if isinstance(argument, Mapping):
            argument = TriggerArgument(argument.get('name'), argument.get('type'))
        elif isinstance(argument, tuple) and len(argument) == 2:
            argument = TriggerArgument(*argument)
        if not isinstance(argument, TriggerArgument) or not argument.name or not argument.type:
            raise TriggerDefinitionError(f'Trigger function argument needs a name and type: {argument!r}')
        return f'{argument.name} {argument.type}'

    def create_trigger(self, definition: TriggerDefinition) -> str:
        """Generate CREATE [CONSTRAINT] TRIGGER.

        Trigger name and table are quoted; the function name and its argument
        declarations are emitted as given.

        Raises
            TriggerDefinitionError: On a missing name or function, an unknown
                timing or event, or an empty or repeated event list
        """
        if not definition.name:
            raise TriggerDefinitionError('Trigger name is required')
        if not definition.function:
            raise TriggerDefinitionError(f'Trigger {definition.name!r} has no function')

        timing = _parse_enum(TriggerTiming, definition.timing, 'timing')
        raw_events = [definition.events] if isinstance(definition.events, str) else list(definition.events)
        events = [_parse_enum(TriggerEvent, event, 'event') for event in raw_events]
        if not events:
            raise TriggerDefinitionError(f'Trigger {definition.name!r} needs at least one event')
        if len(set(events)) != len(events):
            raise TriggerDefinitionError(f'Trigger {definition.name!r} lists an event more than once')

        trigger_options = definition.options
        if isinstance(trigger_options, str):
            trigger_options = (trigger_options,)

        arguments = ', '.join(self._trigger_argument(a) for a in definition.function_args)
        verb = 'CREATE CONSTRAINT TRIGGER' if timing is TriggerTiming.AFTER_CONSTRAINT else 'CREATE TRIGGER'

        parts = [
            verb,
            self.quote_identifier(definition.name),
            _TRIGGER_TIMINGS[timing],
            ' OR '.join(_TRIGGER_EVENTS[event] for event in events),
            'ON',
            self.quote_table(definition.table),
            *trigger_options,
            f'EXECUTE PROCEDURE {definition.function}({arguments})',
        ]
        logger.debug(f'Generated trigger {definition.name=} on {definition.table=}')
        return ' '.join(parts) + ';'

    def drop_trigger(self, table: Any, name: str) -> str:
        if not name:
            raise TriggerDefinitionError('Trigger name is required')
        return f'DROP TRIGGER {self.quote_identifier(name)} ON {self.quote_table(table)} RESTRICT;'

    def rename_trigger(self, table: Any, old_name: str, new_name: str) -> str:
        if not old_name or not new_name:
            raise TriggerDefinitionError('Both the current and the new trigger name are required')
        return (f'ALTER TRIGGER {self.quote_identifier(old_name)} ON {self.quote_table(table)} '
                f'RENAME TO {self.quote_identifier(new_name)};')

    # Enum columns

    def enum_type_name(self, table: TableReference, column: str) -> str:
        """Return the qualified `enum_<table>_<column>` type name."""
        schema = table.schema or self.options.default_schema
        return qualify(f'enum_{table.name}_{column}', schema, self.options.quote_identifiers)

    def change_column_query(self, table: Any, changes: Any) -> str:
        """Generate the statements moving each column onto its enum type.

        Per column: set NOT NULL, drop the default, create the enum type
        unless it already exists, then retype the column with a USING cast.
        Statements are concatenated without separators beyond their `;`.

        Parameters
            table: Table reference
            changes: Mapping of column -> labels, or ColumnTypeChange records
        """
        ref = TableReference.of(table)
        if isinstance(changes, Mapping):
            changes = [ColumnTypeChange(column, values) for column, values in changes.items()]
        elif isinstance(changes, ColumnTypeChange):
            changes = [changes]

        changes = list(changes or ())
        if not changes:
            raise DescriptorError(f'No column changes for {ref.name!r}')

        quoted_table = self.quote_table(ref)
        statements = []
        for change in changes:
            if not isinstance(change, ColumnTypeChange):
                raise DescriptorError(f'Expected ColumnTypeChange, got {change!r}')
            if not change.values:
                raise DescriptorError(f'Enum for column {change.column!r} needs at least one value')

            column = self.quote_identifier(change.column)
            enum_type = self.enum_type_name(ref, change.column)
            alter = f'ALTER TABLE {quoted_table} ALTER COLUMN {column}'
            labels = ', '.join(quote_string(str(value)) for value in change.values)
            body = (f'BEGIN CREATE TYPE {enum_type} AS ENUM({labels}); '
                    'EXCEPTION WHEN duplicate_object THEN null; END')

            statements.append(f'{alter} SET NOT NULL;')
            statements.append(f'{alter} DROP DEFAULT;')
            statements.append(f'DO {quote_string(body)};')
            statements.append(f'{alter} TYPE {enum_type} USING ({column}::{enum_type});')

        logger.debug(f'Generated {len(changes)} enum column changes for {quoted_table=}')
        return ''.join(statements)

    # Arrays

    def from_array(self, text: str) -> list[str]:
        return array.from_array(text)

    def to_array(self, items: Any) -> str:
        return array.to_array(items)
