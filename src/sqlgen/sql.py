"""
Identifier quoting and string literal escaping.

Everything that ends up between double quotes (identifiers) or single
quotes (string literals) in generated SQL passes through this module:

- `quote_identifier()` - Quote a single table/column/schema name
- `qualify()` - Join independently quoted segments with `.`
- `split_qualified()` - Split a dotted `table.column` reference
- `escape_string()` / `quote_string()` - Single-quoted string literals
"""
import re

# A pre-formed SQL fragment such as `id DESC` or `count(*)`, as opposed to a
# bare or dot-qualified name.
_PREFORMED = re.compile(r'[\s()*]')


def quote_identifier(identifier: str, enabled: bool = True) -> str:
    """Safely quote a database identifier.

    Parameters
        identifier: Table, schema or column name
        enabled: When False the identifier is returned unchanged

    Returns
        Quoted identifier
    """
    if not enabled:
        return identifier
    return '"' + identifier.replace('"', '""') + '"'


def qualify(name: str, schema: str | None = None, enabled: bool = True) -> str:
    """Quote each present segment independently and join with an unquoted dot.
    """
    if schema:
        return f'{quote_identifier(schema, enabled)}.{quote_identifier(name, enabled)}'
    return quote_identifier(name, enabled)


def split_qualified(reference: str) -> list[str]:
    """Split `schema.table.column` into its segments."""
    return reference.split('.')


def is_preformed(fragment: str) -> bool:
    """Check if a string is an already-formed SQL fragment (`id DESC`)."""
    return bool(_PREFORMED.search(fragment))


def escape_string(text: str) -> str:
    """Escape a string for use as a PostgreSQL string literal."""
    return text.replace("'", "''")


def quote_string(text: str) -> str:
    """Wrap a string in single quotes, doubling embedded quotes."""
    return f"'{escape_string(text)}'"
