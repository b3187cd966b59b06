"""
Row Transformer: Lark tree transformer for delimited catalog lines.

Converts the parse tree of one delimited line into the list of its field
strings, undoing the comma escaping used by the catalog input files.
"""

import re
from typing import List

from lark import Transformer, v_args

# A backslash followed by one or more commas collapses to a single comma
RE_ESCAPED_COMMAS = re.compile(r"\\,+")


def unescape_commas(value: str) -> str:
    """Replace every backslash-comma run in ``value`` with a single comma."""
    return RE_ESCAPED_COMMAS.sub(",", value)


class RowTransformer(Transformer):
    """
    Transformer that converts a row parse tree into a list of field strings.

    The comma unescaping is applied to every field whatever separator the row
    was split on, so lists split on ``|`` get literal commas restored too.
    """

    def row(self, fields: List[str]) -> List[str]:
        """Transform the row node into its ordered fields."""
        return list(fields)

    @v_args(inline=True)
    def field(self, token=None) -> str:
        """Transform a field node; an empty field has no token."""
        if token is None:
            return ""
        return unescape_commas(str(token))
