import datetime
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any

from dateutil import tz
from sqlgen.exceptions import DescriptorError

__all__ = [
    'GeneratorOptions',
    'QueryOptions',
    'resolve_timezone',
    'coerce_query_options',
]

logger = logging.getLogger(__name__)

_OFFSET = re.compile(r'^(?P<sign>[+-])(?P<hours>\d{2}):?(?P<minutes>\d{2})$')


def resolve_timezone(name: str) -> datetime.tzinfo:
    """Resolve `+05:30`, `-0800`, `UTC` or an IANA name to a tzinfo.
    """
    match = _OFFSET.match(name)
    if match:
        seconds = int(match['hours']) * 3600 + int(match['minutes']) * 60
        if match['sign'] == '-':
            seconds = -seconds
        return tz.tzoffset(None, seconds)
    zone = tz.gettz(name)
    if zone is None:
        raise ValueError(f'Unknown timezone: {name}')
    return zone


@dataclass(frozen=True)
class GeneratorOptions:
    """Options

    Read-only dialect configuration shared by every generation call.

    - dialect: Registered strategy name (default: `postgresql`)
    - quote_identifiers: Wrap identifiers in double quotes (default: True)
    - bind_prefix: Placeholder name prefix, `$p1` -> `p1` (default: `p`)
    - timezone: Offset or IANA zone timestamps are rendered in (default: `+00:00`)
    - omit_null: Default for dropping null fields from insert/update (default: False)
    - default_schema: Schema for generated enum types (default: `public`)
    """
    dialect: str = 'postgresql'
    quote_identifiers: bool = True
    bind_prefix: str = 'p'
    timezone: str = '+00:00'
    omit_null: bool = False
    default_schema: str = 'public'

    def __post_init__(self):
        from sqlgen.strategy import get_available_dialects, get_strategy_class
        from sqlgen.strategy import is_supported_dialect

        if not is_supported_dialect(self.dialect):
            available = get_available_dialects()
            raise ValueError(f'dialect must be one of: {available}')
        strategy_cls = get_strategy_class(self.dialect)
        strategy_cls.validate_options(self)
        if not re.fullmatch(r'[A-Za-z_][A-Za-z0-9_]*', self.bind_prefix or ''):
            raise ValueError(f'bind_prefix must be an identifier, got {self.bind_prefix!r}')
        resolve_timezone(self.timezone)

    @property
    def tzinfo(self) -> datetime.tzinfo:
        return resolve_timezone(self.timezone)

    @classmethod
    def load(cls, options: 'GeneratorOptions | Mapping[str, Any] | None' = None,
             **kw: Any) -> 'GeneratorOptions':
        """Build options from an instance, a mapping and/or keyword overrides.
        """
        if isinstance(options, GeneratorOptions):
            if not kw:
                return options
            base = {f.name: getattr(options, f.name) for f in fields(options)}
        else:
            base = dict(options or {})
        base.update(kw)
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(base) - known)
        if unknown:
            raise ValueError(f'Unknown generator options: {unknown}')
        return cls(**base)


@dataclass
class QueryOptions:
    """Per-call options for statement assembly.

    - attributes: Columns/expressions to select (default: `*`)
    - where: Flat mapping or predicate tree
    - order: ORDER BY entries
    - group: GROUP BY key or list of keys
    - limit / offset: Row window for SELECT
    - returning: True for `RETURNING *` or a list of columns
    - ignore_duplicates: Append `ON CONFLICT DO NOTHING`
    - update_on_duplicate / upsert_keys: Upsert columns and conflict target
    - omit_null: Drop null fields from insert/update (None inherits generator default)
    - alias: Alias for the table in SELECT; bare columns are qualified by it
    """
    attributes: list | None = None
    where: Any = None
    order: Any = None
    group: Any = None
    limit: int | None = None
    offset: int | None = None
    returning: bool | list | tuple = False
    ignore_duplicates: bool = False
    update_on_duplicate: list | tuple | None = None
    upsert_keys: list | tuple | None = None
    omit_null: bool | None = None
    alias: str | None = None

    def resolve_omit_null(self, options: GeneratorOptions) -> bool:
        return options.omit_null if self.omit_null is None else self.omit_null


_QUERY_OPTION_ALIASES = {
    'ignoreDuplicates': 'ignore_duplicates',
    'updateOnDuplicate': 'update_on_duplicate',
    'upsertKeys': 'upsert_keys',
    'omitNull': 'omit_null',
}


def coerce_query_options(options: QueryOptions | Mapping[str, Any] | None = None,
                         **kw: Any) -> QueryOptions:
    """Merge a QueryOptions instance or mapping with keyword overrides.

    Accepts the camelCase spellings used by model layers
    (`ignoreDuplicates`, `upsertKeys`, ...).
    """
    if isinstance(options, QueryOptions) and not kw:
        return options
    if isinstance(options, QueryOptions):
        merged = {f.name: getattr(options, f.name) for f in fields(options)}
    elif options is None:
        merged = {}
    elif isinstance(options, Mapping):
        merged = dict(options)
    else:
        raise DescriptorError(f'Query options must be a mapping, got {type(options).__name__}')
    merged.update(kw)
    merged = {_QUERY_OPTION_ALIASES.get(k, k): v for k, v in merged.items()}
    known = {f.name for f in fields(QueryOptions)}
    unknown = sorted(set(merged) - known)
    if unknown:
        raise DescriptorError(f'Unknown query options: {unknown}')
    return QueryOptions(**merged)
