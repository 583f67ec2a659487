"""
Unit tests for per-call bind parameter allocation.
"""
from sqlgen.bind import BindParameterManager
from sqlgen.types import UNSET


def test_sequential_tokens():
    bind = BindParameterManager()
    assert bind.register('foo') == '$p1'
    assert bind.register(None) == '$p2'
    assert bind.finalize() == {'p1': 'foo', 'p2': None}
    assert len(bind) == 2


def test_values_are_not_deduplicated():
    bind = BindParameterManager()
    bind.register('foo')
    bind.register('foo')
    assert bind.finalize() == {'p1': 'foo', 'p2': 'foo'}


def test_custom_prefix_and_marker():
    bind = BindParameterManager(prefix='sequelize_', marker=':')
    assert bind.register(1) == ':sequelize_1'
    assert bind.finalize() == {'sequelize_1': 1}


def test_next_reserves_unset_slot():
    bind = BindParameterManager()
    assert bind.next() == '$p1'
    assert bind.register('x') == '$p2'
    assert bind.finalize() == {'p1': UNSET, 'p2': 'x'}
    assert len(bind) == 2


def test_finalize_returns_copy():
    bind = BindParameterManager()
    bind.register(1)
    values = bind.finalize()
    values['p9'] = 9
    assert bind.finalize() == {'p1': 1}


def test_managers_are_independent():
    first, second = BindParameterManager(), BindParameterManager()
    first.register('a')
    assert second.register('b') == '$p1'
