"""Unit tests for identifier quoting and string literal escaping.

Tests the public API:
- quote_identifier(name, enabled) - Quote table/column names
- qualify(name, schema, enabled) - Join quoted segments
- split_qualified(reference) - Split dotted references
- is_preformed(fragment) - Detect `id DESC` style fragments
- escape_string(text) / quote_string(text) - String literals
"""
import pytest
from sqlgen.sql import escape_string, is_preformed, qualify, quote_identifier
from sqlgen.sql import quote_string, split_qualified


class TestQuoteIdentifier:
    """Test identifier quoting."""

    @pytest.mark.parametrize(('identifier', 'expected'), [
        ('myTable', '"myTable"'),
        ('my table', '"my table"'),
        ('my"table', '"my""table"'),
        ('', '""'),
    ], ids=['simple', 'space', 'embedded_quote', 'empty'])
    def test_quoted(self, identifier, expected):
        assert quote_identifier(identifier) == expected

    def test_disabled_returns_unchanged(self):
        assert quote_identifier('myTable', enabled=False) == 'myTable'

    def test_same_input_same_output(self):
        assert quote_identifier('a"b') == quote_identifier('a"b')


class TestQualify:
    """Test schema-qualified names."""

    @pytest.mark.parametrize(('name', 'schema', 'enabled', 'expected'), [
        ('myTable', None, True, '"myTable"'),
        ('myTable', 'mySchema', True, '"mySchema"."myTable"'),
        ('myTable', 'mySchema', False, 'mySchema.myTable'),
        ('myTable', '', True, '"myTable"'),
    ])
    def test_qualify(self, name, schema, enabled, expected):
        assert qualify(name, schema, enabled) == expected


def test_split_qualified():
    assert split_qualified('myTable.id') == ['myTable', 'id']
    assert split_qualified('id') == ['id']


@pytest.mark.parametrize(('fragment', 'expected'), [
    ('id', False),
    ('myTable.id', False),
    ('id DESC', True),
    ('count(*)', True),
])
def test_is_preformed(fragment, expected):
    assert is_preformed(fragment) is expected


class TestStringLiterals:
    """Test single-quoted string literals."""

    def test_escape_doubles_single_quotes(self):
        assert escape_string("Queen's") == "Queen''s"

    def test_backslash_is_not_escaped(self):
        assert quote_string('a\\b') == "'a\\b'"

    def test_injection_attempt_stays_inside_literal(self):
        literal = quote_string("'; DROP TABLE users; --")
        assert literal == "'''; DROP TABLE users; --'"
        assert literal.startswith("'") and literal.endswith("'")

    @pytest.mark.parametrize('text', [
        "''",
        "a'b'c",
        "'; DROP TABLE users; --",
        "it's Queen's '' day",
        "'''",
        "x' OR '1'='1",
    ], ids=['only_quotes', 'interleaved', 'drop_table', 'mixed', 'odd_run', 'tautology'])
    def test_literal_decodes_to_original(self, text):
        """The literal body holds only doubled quotes and reads back as the input."""
        literal = quote_string(text)
        assert literal.startswith("'") and literal.endswith("'")
        body = literal[1:-1]
        assert "'" not in body.replace("''", '')
        assert body.replace("''", "'") == text
