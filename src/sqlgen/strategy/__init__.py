"""
Dialect strategy factory for statement generation.
"""
from functools import lru_cache
from typing import TYPE_CHECKING

from sqlgen.strategy.base import _STRATEGY_REGISTRY
from sqlgen.strategy.base import DialectStrategy as DialectStrategy
from sqlgen.strategy.base import register_strategy as register_strategy
from sqlgen.strategy.postgres import PostgresStrategy as PostgresStrategy

if TYPE_CHECKING:
    from sqlgen.options import GeneratorOptions


def _validate_dialect(dialect: str) -> None:
    """Raise ValueError if dialect is not registered."""
    if dialect not in _STRATEGY_REGISTRY:
        available = list(_STRATEGY_REGISTRY.keys())
        raise ValueError(f'Unsupported dialect: {dialect}. Available: {available}')


@lru_cache(maxsize=8)
def _get_strategy(options: 'GeneratorOptions') -> DialectStrategy:
    """Get cached strategy instance for a set of options."""
    _validate_dialect(options.dialect)
    return _STRATEGY_REGISTRY[options.dialect](options)


def get_strategy(options: 'GeneratorOptions') -> DialectStrategy:
    """Get the strategy instance for generator options.

    Options are frozen, so equal options share one strategy instance.
    """
    return _get_strategy(options)


def get_available_dialects() -> list[str]:
    """Return list of registered dialect names."""
    return list(_STRATEGY_REGISTRY.keys())


def is_supported_dialect(dialect: str) -> bool:
    """Check if a dialect is supported."""
    return dialect in _STRATEGY_REGISTRY


def get_strategy_class(dialect: str) -> type['DialectStrategy']:
    """Get the strategy class for a dialect without instantiating."""
    _validate_dialect(dialect)
    return _STRATEGY_REGISTRY[dialect]
