import datetime
import pathlib
import site

import pytest
from sqlgen import QueryGenerator
from sqlgen.strategy import _get_strategy

HERE = pathlib.Path(pathlib.Path(__file__).resolve()).parent
site.addsitedir(HERE)


@pytest.fixture(autouse=True)
def clear_strategy_cache():
    """Clear cached strategies before and after each test to ensure test isolation."""
    _get_strategy.cache_clear()
    yield
    _get_strategy.cache_clear()


@pytest.fixture
def generator():
    """Generator with default options (quoted identifiers, `$p1` binds)"""
    return QueryGenerator()


@pytest.fixture
def unquoted_generator():
    """Generator with identifier quoting disabled"""
    return QueryGenerator(quote_identifiers=False)


@pytest.fixture
def strategy(generator):
    return generator.strategy


@pytest.fixture(scope='module')
def value_dict():
    """Return a dictionary of test values for the major value variants"""
    return {
        'int_value': 42,
        'bool_true': True,
        'bool_false': False,
        'float_value': 1.5,
        'text_value': 'Lorem ipsum',
        'quoted_text': "Queen's",
        'datetime_value': datetime.datetime(2011, 3, 27, 10, 1, 55),
        'binary_value': b'\x01\x02\x03',
        'null_value': None,
        'json_value': '{"info":"Look ma a \\" quote"}',
    }
