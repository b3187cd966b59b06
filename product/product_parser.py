import re
from functools import lru_cache
from typing import List, Optional

from lark import Lark
from lark.exceptions import UnexpectedInput

from product.product_errors import ParseError
from product.product_transformer import RowTransformer

# Separator between the columns of an input row
FIELD_SEPARATOR = ","
# Separator between the items of a list-valued column
LIST_SEPARATOR = "|"

# A field is a run of anything but the separator, where a backslash directly
# in front of a separator keeps that separator inside the field.
ROW_GRAMMAR_TEMPLATE = r"""
row: field (_SEP field)*
field: FIELD?

_SEP: "{literal}"
FIELD: /(?:\\{escaped}|[^{escaped}])+/
"""

_row_transformer = RowTransformer()


@lru_cache(maxsize=8)
def row_parser(separator: str) -> Lark:
    """Build (once per separator) the LALR parser that splits rows on ``separator``."""
    if len(separator) != 1 or separator in ('\\', '"', "\n", "\r"):
        raise ValueError(f"Unsupported field separator: {separator!r}")
    grammar = ROW_GRAMMAR_TEMPLATE.format(
        literal=separator,
        escaped=re.escape(separator).replace("/", "\\/"),
    )
    return Lark(grammar, start="row", parser="lalr")


def split_fields(
    line: str, separator: str = FIELD_SEPARATOR, expected: Optional[int] = None
) -> List[str]:
    """
    Split a delimited line into its fields.

    A separator preceded by a backslash does not end a field. Afterwards every
    backslash-comma run inside a field is turned back into a single comma.
    Consecutive separators give empty fields.

    Args:
        line: The raw line, without its line terminator
        separator: Single character separating the fields
        expected: If given, the exact number of fields the line must have

    Returns:
        The fields of the line, in order

    Raises:
        ParseError: If the line cannot be split or has the wrong field count
    """
    try:
        tree = row_parser(separator).parse(line)
    except UnexpectedInput as e:
        raise ParseError(
            "Unable to split line into fields", line=line, cause=e
        ) from e
    fields = _row_transformer.transform(tree)

    if expected is not None and len(fields) != expected:
        raise ParseError(
            f"Expected {expected} fields separated by [{separator}] but found {len(fields)}",
            line=line,
        )
    return fields


def split_list(value: str) -> List[str]:
    """
    Split a pipe-delimited list column into its items.

    Items are stripped and empty items dropped, so an empty column gives an
    empty list.
    """
    if not value or not value.strip():
        return []
    items = (item.strip() for item in split_fields(value, LIST_SEPARATOR))
    return [item for item in items if item]
