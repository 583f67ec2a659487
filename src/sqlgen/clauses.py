"""
Clause builders: WHERE, ORDER BY, GROUP BY, RETURNING and select lists.

Each builder returns the clause body without its keyword. Values always go
through the strategy's `ValueEncoder`, inline when no bind manager is given
and bound otherwise.
"""
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from sqlgen.bind import BindParameterManager
from sqlgen.exceptions import DescriptorError
from sqlgen.sql import is_preformed
from sqlgen.types import And, ArrayOf, Bool, Comparison, FunctionCall
from sqlgen.types import Null, Op, Raw, TypeConverter, ValueExpression
from sqlgen.types import _Group

if TYPE_CHECKING:
    from sqlgen.strategy.base import DialectStrategy

logger = logging.getLogger(__name__)

SORT_DIRECTIONS = frozenset({
    'ASC',
    'DESC',
    'ASC NULLS FIRST',
    'ASC NULLS LAST',
    'DESC NULLS FIRST',
    'DESC NULLS LAST',
    'NULLS FIRST',
    'NULLS LAST',
})

_ARRAY_OPERATORS = {Op.CONTAINS, Op.CONTAINED, Op.OVERLAP}
_LIST_OPERATORS = {Op.IN, Op.NOT_IN}
_RANGE_OPERATORS = {Op.BETWEEN, Op.NOT_BETWEEN}


def column_reference(strategy: 'DialectStrategy', column: str | ValueExpression,
                     qualifier: str | None = None) -> str:
    """Render a column for use inside a clause.

    Dotted names are quoted per segment and never re-qualified; bare names
    are prefixed with `qualifier` (an already quoted table or alias).
    """
    if isinstance(column, ValueExpression):
        return strategy.encoder.verbatim(column)
    if '.' in column:
        return strategy.quote_column(column)
    quoted = strategy.quote_column(column)
    if qualifier:
        return f'{qualifier}.{quoted}'
    return quoted


# WHERE


def build_where(strategy: 'DialectStrategy', where: Any,
                bind: BindParameterManager | None = None,
                qualifier: str | None = None) -> str:
    """Render a flat mapping or predicate tree.

    Top-level entries are AND-combined; nested groups with a different
    joiner are parenthesised.
    """
    if where is None:
        return ''
    return _render_condition(strategy, where, bind, qualifier, None)


def _render_condition(strategy, node, bind, qualifier, outer_joiner) -> str:
    if isinstance(node, Comparison):
        return _render_comparison(strategy, node.column, node.operator, node.value, bind, qualifier)
    if isinstance(node, Raw | FunctionCall):
        return strategy.encoder.verbatim(node)

    if isinstance(node, Mapping):
        parts = [_render_entry(strategy, column, value, bind, qualifier)
                 for column, value in node.items()]
        joiner = And.joiner
    elif isinstance(node, _Group):
        joiner = node.joiner
        parts = [_render_condition(strategy, child, bind, qualifier, joiner)
                 for child in node.conditions]
    elif isinstance(node, list | tuple):
        joiner = And.joiner
        parts = [_render_condition(strategy, child, bind, qualifier, joiner)
                 for child in node]
    else:
        raise DescriptorError(f'Invalid where condition: {node!r}')

    parts = [part for part in parts if part]
    text = joiner.join(parts)
    if len(parts) > 1 and outer_joiner and joiner != outer_joiner:
        return f'({text})'
    return text


def _render_entry(strategy, column, value, bind, qualifier) -> str:
    """Render one `column: value` or `column: {operator: value}` entry."""
    if isinstance(value, Mapping):
        parts = [_render_comparison(strategy, column, operator, operand, bind, qualifier)
                 for operator, operand in value.items()]
        if not parts:
            raise DescriptorError(f'Empty operator mapping for column {column!r}')
        return And.joiner.join(parts)
    return _render_comparison(strategy, column, Op.EQ, value, bind, qualifier)


def _render_comparison(strategy, column, operator, value, bind, qualifier) -> str:
    op = Op.parse(operator)
    left = column_reference(strategy, column, qualifier)

    if isinstance(value, list | tuple):
        if op == Op.EQ:
            op = Op.IN
        elif op == Op.NE:
            op = Op.NOT_IN

    if op in _LIST_OPERATORS:
        return f'{left} {strategy.operator_sql(op)} {_render_list(strategy, value, bind)}'

    if op in _RANGE_OPERATORS:
        if not isinstance(value, list | tuple) or len(value) != 2:
            raise DescriptorError(f'{op.value} requires exactly two values for {column!r}')
        low, high = (_encode(strategy, TypeConverter.to_expression(v), bind) for v in value)
        return f'{left} {strategy.operator_sql(op)} {low} AND {high}'

    expr = TypeConverter.to_expression(value)

    if op in _ARRAY_OPERATORS:
        if not isinstance(expr, ArrayOf | Raw | FunctionCall):
            expr = ArrayOf((value,))
        right = strategy.encoder.inline(expr, cast=True)
        return f'{left} {strategy.operator_sql(op)} {right}'

    if isinstance(expr, Null):
        if op in {Op.EQ, Op.IS}:
            return f'{left} IS NULL'
        if op in {Op.NE, Op.NOT}:
            return f'{left} IS NOT NULL'

    if op in {Op.IS, Op.NOT}:
        if not isinstance(expr, Bool):
            raise DescriptorError(f'{op.value} accepts only NULL, true or false, got {value!r}')
        return f'{left} {strategy.operator_sql(op)} {strategy.encoder.inline(expr)}'

    return f'{left} {strategy.operator_sql(op)} {_encode(strategy, expr, bind)}'


def _render_list(strategy, value, bind) -> str:
    expr = value if isinstance(value, ValueExpression) else None
    if isinstance(expr, Raw | FunctionCall):
        return f'({strategy.encoder.verbatim(expr)})'
    if isinstance(expr, ArrayOf):
        items = expr.items
    elif isinstance(value, list | tuple):
        items = [TypeConverter.to_expression(v) for v in value]
    else:
        items = [TypeConverter.to_expression(value)]
    if not items:
        return '(NULL)'
    return '(' + ', '.join(_encode(strategy, item, bind) for item in items) + ')'


def _encode(strategy, expr: ValueExpression, bind: BindParameterManager | None) -> str:
    if bind is None:
        return strategy.encoder.inline(expr)
    return strategy.encoder.bound(expr, bind)


# ORDER BY / GROUP BY


def _as_list(entries: Any) -> list:
    if entries is None:
        return []
    if isinstance(entries, str | ValueExpression):
        return [entries]
    return list(entries)


def _sort_key(strategy, key, qualifier) -> str:
    if isinstance(key, str) and is_preformed(key):
        return key
    return column_reference(strategy, key, qualifier)


def build_order(strategy: 'DialectStrategy', order: Any, alias: str | None = None) -> str:
    """Render ORDER BY entries, comma-joined in input order.

    Directions are emitted exactly as given after validation.
    """
    qualifier = strategy.quote_identifier(alias) if alias else None
    entries = []
    for entry in _as_list(order):
        if isinstance(entry, list | tuple):
            if not entry or len(entry) > 2:
                raise DescriptorError(f'Order entry must be [column] or [column, direction]: {entry!r}')
            key = _sort_key(strategy, entry[0], qualifier)
            if len(entry) == 2:
                direction = entry[1]
                if not isinstance(direction, str) or direction.upper() not in SORT_DIRECTIONS:
                    raise DescriptorError(f'Invalid sort direction: {direction!r}')
                key = f'{key} {direction}'
            entries.append(key)
        elif isinstance(entry, str | ValueExpression):
            entries.append(_sort_key(strategy, entry, qualifier))
        else:
            raise DescriptorError(f'Invalid order entry: {entry!r}')
    return ', '.join(entries)


def build_group(strategy: 'DialectStrategy', group: Any) -> str:
    """Render GROUP BY keys; a single string is one key."""
    keys = []
    for key in _as_list(group):
        if not isinstance(key, str | ValueExpression):
            raise DescriptorError(f'Invalid group entry: {key!r}')
        keys.append(_sort_key(strategy, key, None))
    return ', '.join(keys)


# Select list / RETURNING


def build_attributes(strategy: 'DialectStrategy', attributes: Any) -> str:
    """Render the select list; `[expr, alias]` pairs become `expr AS "alias"`."""
    if not attributes:
        return '*'
    rendered = []
    for attribute in _as_list(attributes):
        if isinstance(attribute, list | tuple):
            if len(attribute) != 2:
                raise DescriptorError(f'Attribute pair must be [expression, alias]: {attribute!r}')
            expr, alias = attribute
            rendered.append(f'{_select_item(strategy, expr)} AS {strategy.quote_identifier(alias)}')
        else:
            rendered.append(_select_item(strategy, attribute))
    return ', '.join(rendered)


def _select_item(strategy, item) -> str:
    if item == '*':
        return '*'
    if isinstance(item, str) and is_preformed(item):
        return item
    if isinstance(item, str | ValueExpression):
        return column_reference(strategy, item)
    raise DescriptorError(f'Invalid attribute: {item!r}')


def build_returning(strategy: 'DialectStrategy', returning: Any) -> str:
    """Return ` RETURNING ...` or an empty string."""
    if not returning:
        return ''
    if returning is True:
        return ' RETURNING *'
    return f' RETURNING {build_attributes(strategy, returning)}'


__all__ = [
    'SORT_DIRECTIONS',
    'build_attributes',
    'build_group',
    'build_order',
    'build_returning',
    'build_where',
    'column_reference',
]
