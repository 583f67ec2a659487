"""
PostgreSQL array literal wire format.

- `from_array('{a,"b c",d}')` -> `['a', 'b c', 'd']`
- `to_array(['a', 'b c', 'd'])` -> `'{a,"b c",d}'`

Elements containing a delimiter, brace, quote, backslash or whitespace, the
empty string and the word NULL are double-quoted; inside quotes `\\"` and
`\\\\` decode to `"` and `\\`. Multi-dimensional arrays are not supported.
"""
import logging
import re

from sqlgen.exceptions import ArrayParseError

logger = logging.getLogger(__name__)

_QUOTED = re.compile(r'"((?:[^"\\]|\\.)*)"', re.DOTALL)
_BARE = re.compile(r'[^,{}"]*')
_ESCAPE = re.compile(r'\\(.)', re.DOTALL)
_NEEDS_QUOTES = re.compile(r'[,{}"\\\s]')
_WHITESPACE = re.compile(r'\s*')


def from_array(text: str) -> list[str]:
    """Parse a curly-brace array literal into an ordered list of strings.

    Raises
        ArrayParseError: On missing or unbalanced braces, an unterminated
            quoted element, text after a closing quote or an empty element
    """
    if not isinstance(text, str):
        raise ArrayParseError(f'Array literal must be a string, got {type(text).__name__}')

    literal = text.strip()
    if len(literal) < 2 or literal[0] != '{' or literal[-1] != '}':
        raise ArrayParseError('Array literal must be enclosed in braces', text)

    body = literal[1:-1]
    if not body.strip():
        return []

    items = []
    pos = 0
    end = len(body)
    while True:
        pos = _WHITESPACE.match(body, pos).end()

        if pos < end and body[pos] == '"':
            match = _QUOTED.match(body, pos)
            if match is None:
                raise ArrayParseError('Unterminated quoted element', text, pos + 1)
            items.append(_ESCAPE.sub(r'\1', match.group(1)))
            pos = _WHITESPACE.match(body, match.end()).end()
        else:
            match = _BARE.match(body, pos)
            element = match.group(0).strip()
            pos = match.end()
            if pos < end and body[pos] != ',':
                raise ArrayParseError(f'Unexpected {body[pos]!r} in element', text, pos + 1)
            if not element:
                raise ArrayParseError('Empty array element', text, pos + 1)
            items.append(element)

        if pos >= end:
            break
        if body[pos] != ',':
            raise ArrayParseError(f'Expected "," but found {body[pos]!r}', text, pos + 1)
        pos += 1

    logger.debug(f'Parsed array literal with {len(items)} elements')
    return items


def _quote_element(item: str) -> str:
    if item and item.upper() != 'NULL' and not _NEEDS_QUOTES.search(item):
        return item
    escaped = item.replace('\\', '\\\\').replace('"', '\\"')
    return f'"{escaped}"'


def to_array(items) -> str:
    """Encode strings as an array literal that `from_array` reads back unchanged.
    """
    return '{' + ','.join(_quote_element(str(item)) for item in items) + '}'
