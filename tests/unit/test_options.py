import datetime

import pytest
from sqlgen.exceptions import DescriptorError
from sqlgen.options import GeneratorOptions, QueryOptions, coerce_query_options
from sqlgen.options import resolve_timezone


def test_init_defaults():
    """Test default initialization"""
    options = GeneratorOptions()

    assert options.dialect == 'postgresql'
    assert options.quote_identifiers is True
    assert options.bind_prefix == 'p'
    assert options.timezone == '+00:00'
    assert options.omit_null is False
    assert options.default_schema == 'public'
    assert options.tzinfo.utcoffset(None) == datetime.timedelta(0)


def test_validation():
    """Test validation rules"""
    with pytest.raises(ValueError, match='dialect must be one of'):
        GeneratorOptions(dialect='invalid')

    with pytest.raises(ValueError, match='bind_prefix'):
        GeneratorOptions(bind_prefix='1p')

    with pytest.raises(ValueError, match='bind_prefix'):
        GeneratorOptions(bind_prefix='')

    with pytest.raises(ValueError, match='Unknown timezone'):
        GeneratorOptions(timezone='Mars/Olympus')


@pytest.mark.parametrize('field', ['bind_prefix', 'timezone', 'default_schema'])
def test_dialect_required_options(field):
    """The dialect strategy rejects empty required options"""
    with pytest.raises(ValueError, match=f'field {field} cannot be None or empty'):
        GeneratorOptions(**{field: ''})


def test_options_are_frozen():
    options = GeneratorOptions()
    with pytest.raises(AttributeError):
        options.bind_prefix = 'x'


def test_options_are_hashable():
    assert hash(GeneratorOptions()) == hash(GeneratorOptions())


class TestLoad:

    def test_instance_without_overrides_is_returned(self):
        options = GeneratorOptions(bind_prefix='q')
        assert GeneratorOptions.load(options) is options

    def test_instance_with_overrides(self):
        options = GeneratorOptions.load(GeneratorOptions(bind_prefix='q'), quote_identifiers=False)
        assert options.bind_prefix == 'q'
        assert options.quote_identifiers is False

    def test_mapping_and_kwargs(self):
        options = GeneratorOptions.load({'timezone': '+05:30'}, omit_null=True)
        assert options.timezone == '+05:30'
        assert options.omit_null is True

    def test_unknown_option(self):
        with pytest.raises(ValueError, match='Unknown generator options'):
            GeneratorOptions.load(hostname='localhost')


@pytest.mark.parametrize(('name', 'offset'), [
    ('+00:00', datetime.timedelta(0)),
    ('+05:30', datetime.timedelta(hours=5, minutes=30)),
    ('-0800', datetime.timedelta(hours=-8)),
    ('UTC', datetime.timedelta(0)),
])
def test_resolve_timezone(name, offset):
    assert resolve_timezone(name).utcoffset(datetime.datetime(2020, 1, 1)) == offset


def test_resolve_iana_timezone():
    zone = resolve_timezone('America/New_York')
    assert zone.utcoffset(datetime.datetime(2020, 1, 1)) == datetime.timedelta(hours=-5)


class TestQueryOptions:

    def test_defaults(self):
        options = coerce_query_options()
        assert options == QueryOptions()
        assert options.returning is False

    def test_instance_passthrough(self):
        options = QueryOptions(returning=True)
        assert coerce_query_options(options) is options

    def test_instance_with_overrides(self):
        options = coerce_query_options(QueryOptions(returning=True), omit_null=True)
        assert options.returning is True
        assert options.omit_null is True

    def test_camel_case_aliases(self):
        options = coerce_query_options({'ignoreDuplicates': True, 'upsertKeys': ['id']},
                                       updateOnDuplicate=['name'], omitNull=True)
        assert options.ignore_duplicates is True
        assert options.upsert_keys == ['id']
        assert options.update_on_duplicate == ['name']
        assert options.omit_null is True

    def test_unknown_key(self):
        with pytest.raises(DescriptorError, match='Unknown query options'):
            coerce_query_options(orderBy='id')

    def test_invalid_options_type(self):
        with pytest.raises(DescriptorError):
            coerce_query_options(['returning'])

    @pytest.mark.parametrize(('query_value', 'generator_value', 'expected'), [
        (None, False, False),
        (None, True, True),
        (False, True, False),
        (True, False, True),
    ])
    def test_resolve_omit_null(self, query_value, generator_value, expected):
        options = QueryOptions(omit_null=query_value)
        assert options.resolve_omit_null(GeneratorOptions(omit_null=generator_value)) is expected
