"""
Product catalog for the Mobile Application Store.

The catalog owns every country, device and content item that has been
imported, keeping exactly one instance per natural key, and answers content
searches. It is created explicitly and passed to whoever needs it.

Adding entities is a restricted operation: the caller has to present an
access token. Until an authentication service exists any non-empty token is
accepted.
"""

import logging
from typing import Iterable, List, Optional

from ..product_errors import AccessDeniedError
from ..product_matcher import filter_matches
from ..product_model import Content, ContentSearch, ContentType, Country, Device
from .core import validate_access_token
from .entity_store import EntityStore
from .validation import validate_content, validate_country, validate_device

logger = logging.getLogger(__name__)


class ProductCatalog:
    """
    Deduplicated in-memory catalog of countries, devices and content.

    Imports are best-effort: entities that fail validation, or whose natural
    key is already present, are skipped without raising.
    """

    def __init__(self):
        self.countries: EntityStore[Country] = EntityStore(
            "country", key=lambda c: c.key, validator=validate_country
        )
        self.devices: EntityStore[Device] = EntityStore(
            "device", key=lambda d: d.key, validator=validate_device
        )
        self.content: EntityStore[Content] = EntityStore(
            "content", key=lambda item: item, validator=validate_content
        )

    @staticmethod
    def validate_access_token(token: str) -> bool:
        return validate_access_token(token)

    def _check_access(self, token: str, operation: str):
        if not validate_access_token(token):
            raise AccessDeniedError(f"Access token rejected for {operation}")

    # === Restricted interface ===

    def import_countries(self, token: str, countries: Iterable[Country]) -> int:
        """
        Add countries to the catalog.

        Args:
            token: Access token of the caller
            countries: Countries to add; invalid and duplicate ones are skipped

        Returns:
            Number of countries actually added

        Raises:
            AccessDeniedError: If the token is not accepted
        """
        self._check_access(token, "importing countries")
        added = self.countries.add_all(countries)
        logger.info("Imported %s countries (%s total)", added, len(self.countries))
        return added

    def import_devices(self, token: str, devices: Iterable[Device]) -> int:
        """Add devices to the catalog; same rules as ``import_countries``."""
        self._check_access(token, "importing devices")
        added = self.devices.add_all(devices)
        logger.info("Imported %s devices (%s total)", added, len(self.devices))
        return added

    def import_content(self, token: str, items: Iterable[Content]) -> int:
        """Add content items to the catalog; same rules as ``import_countries``."""
        self._check_access(token, "importing content")
        added = self.content.add_all(items)
        logger.info("Imported %s content items (%s total)", added, len(self.content))
        return added

    # === Lookups ===

    def get_country_by_code(self, code: str) -> Optional[Country]:
        """Find a country by code, ignoring case; None if there is none."""
        if not code:
            return None
        return self.countries.get(code.strip().lower())

    def get_device_by_id(self, device_id: str) -> Optional[Device]:
        """Find a device by id, ignoring case; None if there is none."""
        if not device_id:
            return None
        return self.devices.get(device_id.strip().lower())

    # === Search ===

    def search_content(self, criteria: ContentSearch) -> List[Content]:
        """
        Find every content item that satisfies ``criteria``.

        An item is returned when any one of the search clauses matches it; see
        ``product_matcher.matches`` for the clause order. The order of the
        result is the catalog's iteration order and carries no meaning.
        """
        found = filter_matches(self.content, criteria)
        logger.debug("Search %r matched %s items", criteria.raw_query, len(found))
        return found

    # === Read-only projections ===

    def get_all_content(self) -> List[Content]:
        return self.content.values()

    def get_content_by_type(self, content_type: ContentType) -> List[Content]:
        return [item for item in self.content if item.content_type is content_type]

    def get_all_applications(self) -> List[Content]:
        return self.get_content_by_type(ContentType.APPLICATION)

    def get_all_ringtones(self) -> List[Content]:
        return self.get_content_by_type(ContentType.RINGTONE)

    def get_all_wallpapers(self) -> List[Content]:
        return self.get_content_by_type(ContentType.WALLPAPER)

    def get_countries(self) -> List[Country]:
        return self.countries.values()

    def get_devices(self) -> List[Device]:
        return self.devices.values()

    def get_number_content_items(self) -> int:
        return len(self.content)

    def __len__(self) -> int:
        return len(self.content)
