"""
Content search queries against the product catalog.

Query files hold one search per line, as eight comma-separated columns:

1. categories (``|``-separated)
2. text to look for in name, description or author
3. minimum rating (0 to 5)
4. maximum price
5. language codes (``|``-separated)
6. country codes (``|``-separated)
7. device ids (``|``-separated)
8. content types (``|``-separated; any of application, ringtone, wallpaper)

Every column may be left empty. For example::

    # category_list, text_search, minimum_rating, max_price, language_list, country_code, device_id, content_type_list
     , Ferrari, , , , , ,
     , , 4, 0, , , ,
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from .catalog import ImportOptions, ProductCatalog
from .product_errors import ParseError
from .product_importer import iter_records, read_input_file
from .product_model import Content, ContentSearch, ContentType
from .product_parser import split_fields, split_list

logger = logging.getLogger(__name__)

QUERY_COLUMNS = 8


@dataclass
class QueryResult:
    """A parsed search together with the content it found."""

    criteria: ContentSearch
    matches: List[Content]

    def to_dict(self):
        return {
            "query": self.criteria.raw_query,
            "criteria": self.criteria.to_dict(),
            "match_count": len(self.matches),
            "matches": [item.to_dict() for item in self.matches],
        }


def _parse_query_number(line: str, value: str, convert, what: str):
    try:
        return convert(value)
    except ValueError as e:
        raise ParseError(
            f"Query line contains invalid data for the {what} [{value}]",
            line=line,
            cause=e,
        ) from e


def parse_query_line(line: str, catalog: ProductCatalog) -> ContentSearch:
    """
    Turn one query line into a ``ContentSearch``.

    Country codes and device ids are resolved through ``catalog``; unknown ones
    are dropped, but a non-empty column still counts as supplied. An empty
    content-type column means every content type.

    Raises:
        ParseError: If the line is blank, does not have eight columns, or holds
            a bad number or an unknown content type
    """
    if not line or not line.strip():
        raise ParseError("Search query line is empty", line=line)

    columns = [
        column.strip() for column in split_fields(line, expected=QUERY_COLUMNS)
    ]
    (
        categories,
        text,
        minimum_rating,
        maximum_price,
        languages,
        country_codes,
        device_ids,
        content_types,
    ) = columns

    criteria = {}
    if categories:
        criteria["categories"] = frozenset(split_list(categories))
    if text:
        criteria["text"] = text
    if minimum_rating:
        criteria["minimum_rating"] = _parse_query_number(
            line, minimum_rating, int, "minimum content rating"
        )
    if maximum_price:
        criteria["maximum_price"] = _parse_query_number(
            line, maximum_price, float, "maximum content price"
        )
    if languages:
        criteria["languages"] = frozenset(split_list(languages))
    if country_codes:
        found = (catalog.get_country_by_code(code) for code in split_list(country_codes))
        criteria["countries"] = frozenset(c for c in found if c is not None)
    if device_ids:
        found = (catalog.get_device_by_id(d) for d in split_list(device_ids))
        criteria["devices"] = frozenset(d for d in found if d is not None)

    types = set()
    for tag in split_list(content_types):
        try:
            types.add(ContentType.parse(tag))
        except ValueError as e:
            raise ParseError(
                f"Query line contains an unknown content type [{tag}]",
                line=line,
                cause=e,
            ) from e
    criteria["content_types"] = frozenset(types) or ContentType.all_types()

    return ContentSearch(raw_query=line, **criteria)


def execute_query(catalog: ProductCatalog, line: str) -> QueryResult:
    """Parse ``line`` and search ``catalog`` with it."""
    criteria = parse_query_line(line, catalog)
    return QueryResult(criteria=criteria, matches=catalog.search_content(criteria))


def execute_query_lines(
    catalog: ProductCatalog,
    lines: Iterable[str],
    filename: str = "<string>",
    options: Optional[ImportOptions] = None,
) -> List[QueryResult]:
    """
    Run every query in ``lines``, skipping blank and comment lines.

    Raises:
        ParseError: For the first malformed query, with its line number and file name
    """
    results = []
    for line_number, line in iter_records(lines, options):
        try:
            result = execute_query(catalog, line)
        except ParseError as e:
            e.line = line
            e.with_location(line_number, filename)
            raise
        logger.info(
            "Query at %s:%s matched %s items", filename, line_number, len(result.matches)
        )
        results.append(result)
    return results


def execute_query_file(
    catalog: ProductCatalog, filename: str, options: Optional[ImportOptions] = None
) -> List[QueryResult]:
    """Run every query in ``filename``; see ``execute_query_lines``."""
    return read_input_file(
        filename, lambda lines: execute_query_lines(catalog, lines, filename, options)
    )
