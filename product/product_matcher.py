"""
Content matching for catalog searches.

``matches`` decides whether one content item satisfies one ``ContentSearch``.
The clauses are tried in a fixed order and combined with OR: the first clause
that applies and holds makes the item match, a clause that applies but fails
just hands over to the next one.

Clause order:
1. Category overlap (applies when categories were given)
2. Device overlap (applies when devices were given)
3. Country overlap (applies when countries were given)
4. Language overlap (applies when languages were given)
5. Content-type membership (applies when the item has a content type)
6. Text containment in name, description or author (applies when text is non-empty)
7. Minimum rating (always applies; a rating of 0 never satisfies it)
8. Maximum price (always applies)

Since the content types default to every type, clause 5 holds for nearly every
item that reaches it, and clause 8 holds for everything under the default
maximum price.
"""

from typing import AbstractSet, Callable, List, Optional, Tuple

from .product_model import Content, ContentSearch


def _overlaps(item_values: AbstractSet, wanted: Optional[AbstractSet]) -> Optional[bool]:
    if wanted is None:
        return None
    return not item_values.isdisjoint(wanted)


def category_clause(item: Content, criteria: ContentSearch) -> Optional[bool]:
    return _overlaps(item.categories, criteria.categories)


def device_clause(item: Content, criteria: ContentSearch) -> Optional[bool]:
    return _overlaps(item.devices, criteria.devices)


def country_clause(item: Content, criteria: ContentSearch) -> Optional[bool]:
    return _overlaps(item.countries, criteria.countries)


def language_clause(item: Content, criteria: ContentSearch) -> Optional[bool]:
    return _overlaps(item.languages, criteria.languages)


def content_type_clause(item: Content, criteria: ContentSearch) -> Optional[bool]:
    if item.content_type is None:
        return None
    return item.content_type in criteria.content_types


def text_clause(item: Content, criteria: ContentSearch) -> Optional[bool]:
    if not criteria.text:
        return None
    needle = criteria.text.lower()
    return any(
        needle in (value or "").lower()
        for value in (item.name, item.description, item.author)
    )


def rating_clause(item: Content, criteria: ContentSearch) -> Optional[bool]:
    return item.rating >= criteria.minimum_rating and item.rating >= 1


def price_clause(item: Content, criteria: ContentSearch) -> Optional[bool]:
    return criteria.maximum_price >= item.price


# Each clause returns None when it does not apply to the search
Clause = Callable[[Content, ContentSearch], Optional[bool]]

CLAUSES: Tuple[Tuple[str, Clause], ...] = (
    ("category", category_clause),
    ("device", device_clause),
    ("country", country_clause),
    ("language", language_clause),
    ("content_type", content_type_clause),
    ("text", text_clause),
    ("rating", rating_clause),
    ("price", price_clause),
)


def matching_clause(item: Content, criteria: ContentSearch) -> Optional[str]:
    """
    Name of the first clause that makes ``item`` match ``criteria``.

    Returns:
        The clause name, or None if the item does not match
    """
    for name, clause in CLAUSES:
        if clause(item, criteria):
            return name
    return None


def matches(item: Content, criteria: ContentSearch) -> bool:
    """True if any applicable clause, tried in order, holds for ``item``."""
    return matching_clause(item, criteria) is not None


def filter_matches(items, criteria: ContentSearch) -> List[Content]:
    return [item for item in items if matches(item, criteria)]
