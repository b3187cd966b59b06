"""
Structural validation of catalog entities.

A validator answers whether an entity may enter the catalog. Failing
validation is not an error: the catalog just leaves the entity out.
"""

import logging
import math
from numbers import Real

from ..product_model import DETAILS_BY_TYPE, Content, ContentType, Country, Device, ExportStatus

logger = logging.getLogger(__name__)

MIN_RATING = 0
MAX_RATING = 5


def _is_blank(value) -> bool:
    return not isinstance(value, str) or not value.strip()


def validate_country(country: Country) -> bool:
    """A country needs a two-character code, a name and a known export status."""
    if _is_blank(country.code) or len(country.code.strip()) != 2:
        logger.debug("Invalid country code: %r", country.code)
        return False
    if _is_blank(country.name):
        logger.debug("Country %s has no name", country.code)
        return False
    if not isinstance(country.export_status, ExportStatus):
        logger.debug(
            "Country %s has invalid export status: %r", country.code, country.export_status
        )
        return False
    return True


def validate_device(device: Device) -> bool:
    """A device needs an id, a name and a manufacturer."""
    for attr in ("device_id", "name", "manufacturer"):
        if _is_blank(getattr(device, attr)):
            logger.debug("Device %r is missing its %s", device.device_id, attr)
            return False
    return True


def validate_content(item: Content) -> bool:
    """
    A content item needs a known type with the matching payload, a name,
    a rating from 0 to 5 and a non-negative price.
    """
    if not isinstance(item.content_type, ContentType):
        logger.debug("Content %r has no content type", item.name)
        return False
    if _is_blank(item.name):
        logger.debug("Content of type %s has no name", item.content_type.value)
        return False

    rating = item.rating
    if isinstance(rating, bool) or not isinstance(rating, int):
        logger.debug("Content %r has non-integer rating %r", item.name, rating)
        return False
    if not MIN_RATING <= rating <= MAX_RATING:
        logger.debug("Content %r has out-of-range rating %s", item.name, rating)
        return False

    price = item.price
    if not isinstance(price, Real) or not math.isfinite(price) or price < 0:
        logger.debug("Content %r has invalid price %r", item.name, price)
        return False

    if not isinstance(item.details, DETAILS_BY_TYPE[item.content_type]):
        logger.debug(
            "Content %r of type %s carries %s",
            item.name,
            item.content_type.value,
            type(item.details).__name__,
        )
        return False
    return _validate_details(item)


def _validate_details(item: Content) -> bool:
    # payload numbers are sizes and durations
    for name, value in vars(item.details).items():
        if not isinstance(value, Real) or value < 0:
            logger.debug("Content %r has invalid %s: %r", item.name, name, value)
            return False
    return True
