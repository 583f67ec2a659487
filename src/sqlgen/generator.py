"""
Query generator bound to one set of generator options.

    >>> gen = QueryGenerator()
    >>> gen.select_query('myTable', where={'id': 2})
    'SELECT * FROM "myTable" WHERE "myTable"."id" = 2;'
"""
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from sqlgen.options import GeneratorOptions, QueryOptions, coerce_query_options
from sqlgen.strategy import DialectStrategy, get_strategy
from sqlgen.types import BoundQuery, TriggerDefinition

logger = logging.getLogger(__name__)


class QueryGenerator:
    """Statement generation entry point.

    Parameters
        options: GeneratorOptions instance or mapping of option values
        **kw: Individual option overrides (`quote_identifiers=False`, ...)
    """

    def __init__(self, options: GeneratorOptions | Mapping[str, Any] | None = None, **kw: Any):
        self.options = GeneratorOptions.load(options, **kw)
        self.strategy: DialectStrategy = get_strategy(self.options)

    def __repr__(self) -> str:
        return f'QueryGenerator({self.options!r})'

    def select_query(self, table: Any, options: QueryOptions | Mapping | None = None,
                     **kw: Any) -> str:
        """Generate a SELECT statement with inline where values."""
        return self.strategy.select_query(table, coerce_query_options(options, **kw))

    def insert_query(self, table: Any, values: Mapping[str, Any],
                     options: QueryOptions | Mapping | None = None, **kw: Any) -> BoundQuery:
        """Generate a single-row INSERT with bound values."""
        return self.strategy.insert_query(table, values, coerce_query_options(options, **kw))

    def bulk_insert_query(self, table: Any, rows: Iterable[Mapping[str, Any]],
                          options: QueryOptions | Mapping | None = None, **kw: Any) -> str:
        """Generate a multi-row INSERT with inline values."""
        rows = rows if isinstance(rows, Mapping) else list(rows)
        return self.strategy.bulk_insert_query(table, rows, coerce_query_options(options, **kw))

    def update_query(self, table: Any, values: Mapping[str, Any], where: Any,
                     options: QueryOptions | Mapping | None = None, **kw: Any) -> BoundQuery:
        """Generate an UPDATE with bound SET and WHERE values."""
        return self.strategy.update_query(table, values, where, coerce_query_options(options, **kw))

    def create_trigger(self, table: Any, name: str | None = None, timing: Any = None,
                       events: Iterable[Any] = (), function: str | None = None,
                       function_args: Iterable[Any] = (), options: Iterable[str] = ()) -> str:
        """Generate CREATE TRIGGER from a TriggerDefinition or its fields.
        """
        if isinstance(table, TriggerDefinition):
            definition = table
        else:
            if isinstance(events, str):
                events = (events,)
            if isinstance(options, str):
                options = (options,)
            definition = TriggerDefinition(table, name, timing, tuple(events), function,
                                           tuple(function_args), tuple(options))
        return self.strategy.create_trigger(definition)

    def drop_trigger(self, table: Any, name: str) -> str:
        return self.strategy.drop_trigger(table, name)

    def rename_trigger(self, table: Any, old_name: str, new_name: str) -> str:
        return self.strategy.rename_trigger(table, old_name, new_name)

    def change_column_query(self, table: Any, changes: Any) -> str:
        """Generate the enum column change batch for a table."""
        return self.strategy.change_column_query(table, changes)

    def from_array(self, text: str) -> list[str]:
        return self.strategy.from_array(text)

    def to_array(self, items: Iterable[Any]) -> str:
        return self.strategy.to_array(items)
