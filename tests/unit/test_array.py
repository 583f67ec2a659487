"""
Unit tests for the PostgreSQL array literal parser and encoder.
"""
import pytest
from sqlgen.array import from_array, to_array
from sqlgen.exceptions import ArrayParseError


@pytest.mark.parametrize(('text', 'expected'), [
    ('{foo,bar,foobar}', ['foo', 'bar', 'foobar']),
    ('{"foo bar",foo,bar}', ['foo bar', 'foo', 'bar']),
    ('{foo,bar,"foo bar"}', ['foo', 'bar', 'foo bar']),
    ('{foo,"foo bar",bar}', ['foo', 'foo bar', 'bar']),
    ('{"foo bar","foo bar","foo bar"}', ['foo bar', 'foo bar', 'foo bar']),
], ids=['bare', 'quoted_first', 'quoted_last', 'quoted_middle', 'all_quoted'])
def test_from_array(text, expected):
    assert from_array(text) == expected


@pytest.mark.parametrize(('text', 'expected'), [
    ('{}', []),
    ('{ }', []),
    ('{ foo , bar }', ['foo', 'bar']),
    ('{"a,b","c}d"}', ['a,b', 'c}d']),
    (r'{"say \"hi\"","back\\slash"}', ['say "hi"', 'back\\slash']),
    ('{""}', ['']),
    ('{NULL}', ['NULL']),
    ('  {x}  ', ['x']),
], ids=['empty', 'blank', 'whitespace', 'delimiters', 'escapes', 'empty_string',
        'null_word', 'outer_whitespace'])
def test_from_array_edge_cases(text, expected):
    assert from_array(text) == expected


@pytest.mark.parametrize('text', [
    'foo,bar',
    '{foo,bar',
    'foo}',
    '{"foo}',
    '{"foo"bar}',
    '{foo,,bar}',
    '{foo,}',
    '{fo"o}',
    '{',
], ids=['no_braces', 'no_close', 'no_open', 'unterminated', 'after_quote',
        'empty_middle', 'trailing_comma', 'stray_quote', 'single_brace'])
def test_from_array_malformed(text):
    with pytest.raises(ArrayParseError):
        from_array(text)


def test_from_array_requires_string():
    with pytest.raises(ArrayParseError):
        from_array(['foo'])


def test_error_reports_position():
    with pytest.raises(ArrayParseError, match='at position'):
        from_array('{"foo"bar}')


@pytest.mark.parametrize(('items', 'expected'), [
    (['foo', 'bar', 'foobar'], '{foo,bar,foobar}'),
    (['foo bar', 'foo'], '{"foo bar",foo}'),
    (['', 'NULL', 'null'], '{"","NULL","null"}'),
    (['a"b', 'c\\d'], '{"a\\"b","c\\\\d"}'),
    ([], '{}'),
])
def test_to_array(items, expected):
    assert to_array(items) == expected


@pytest.mark.parametrize('items', [
    ['foo', 'foo bar', ''],
    ['a,b', '{c}', 'say "hi"', 'back\\slash', 'NULL'],
    [' padded '],
])
def test_to_array_reads_back(items):
    assert from_array(to_array(items)) == items
