import sys
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, Optional, Union

# === Enumerations ===


class ExportStatus(str, Enum):
    """Whether content may be exported to a country."""

    OPEN = "open"
    CLOSED = "closed"

    @classmethod
    def parse(cls, text: str) -> Optional["ExportStatus"]:
        """Case-insensitive lookup; unknown text gives None."""
        try:
            return cls(text.strip().lower())
        except ValueError:
            return None


class ContentType(str, Enum):
    """The kinds of content sold in the store."""

    APPLICATION = "application"
    RINGTONE = "ringtone"
    WALLPAPER = "wallpaper"

    @classmethod
    def parse(cls, text: str) -> "ContentType":
        """Case-insensitive lookup; raises ValueError for an unknown tag."""
        return cls(text.strip().lower())

    @classmethod
    def all_types(cls) -> FrozenSet["ContentType"]:
        return frozenset(cls)


# === Reference Entities ===


@dataclass(frozen=True, eq=False)
class Country:
    """A country content may be exported to. Identity is the code, ignoring case."""

    code: str
    name: str
    export_status: Optional[ExportStatus]

    @property
    def key(self) -> str:
        return self.code.strip().lower()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Country):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(("country", self.key))


@dataclass(frozen=True, eq=False)
class Device:
    """A device content may run on. Identity is the device id, ignoring case."""

    device_id: str
    name: str
    manufacturer: str

    @property
    def key(self) -> str:
        return self.device_id.strip().lower()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Device):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(("device", self.key))


# === Content Variant Payloads ===


@dataclass(frozen=True)
class ApplicationDetails:
    """Attributes only applications have."""

    filesize_bytes: int = 0


@dataclass(frozen=True)
class RingtoneDetails:
    """Attributes only ringtones have."""

    duration_seconds: float = 0.0


@dataclass(frozen=True)
class WallpaperDetails:
    """Attributes only wallpapers have."""

    pixel_width: int = 0
    pixel_height: int = 0


ContentDetails = Union[ApplicationDetails, RingtoneDetails, WallpaperDetails]

# Payload type expected for each content type
DETAILS_BY_TYPE = {
    ContentType.APPLICATION: ApplicationDetails,
    ContentType.RINGTONE: RingtoneDetails,
    ContentType.WALLPAPER: WallpaperDetails,
}


# === Content ===


@dataclass(frozen=True)
class Content:
    """
    A content item for sale.

    The shared attributes live on the item itself; the variant-specific ones
    live in ``details``, whose type follows ``content_type``. Two items are
    the same catalog entry only when every field is equal.
    """

    content_type: ContentType
    name: str
    description: str
    author: str
    rating: int
    price: float
    categories: FrozenSet[str] = frozenset()
    languages: FrozenSet[str] = frozenset()
    devices: FrozenSet[Device] = frozenset()
    countries: FrozenSet[Country] = frozenset()
    image_url: str = ""
    details: Optional[ContentDetails] = None

    @classmethod
    def application(cls, *, filesize_bytes: int = 0, **attrs: Any) -> "Content":
        return cls._build(ContentType.APPLICATION, ApplicationDetails(filesize_bytes), attrs)

    @classmethod
    def ringtone(cls, *, duration_seconds: float = 0.0, **attrs: Any) -> "Content":
        return cls._build(ContentType.RINGTONE, RingtoneDetails(duration_seconds), attrs)

    @classmethod
    def wallpaper(
        cls, *, pixel_width: int = 0, pixel_height: int = 0, **attrs: Any
    ) -> "Content":
        return cls._build(
            ContentType.WALLPAPER, WallpaperDetails(pixel_width, pixel_height), attrs
        )

    @classmethod
    def _build(cls, content_type: ContentType, details, attrs: Dict[str, Any]):
        for name in ("categories", "languages", "devices", "countries"):
            if name in attrs:
                attrs[name] = _frozen(attrs[name])
        attrs.setdefault("description", "")
        attrs.setdefault("author", "")
        attrs.setdefault("rating", 0)
        attrs.setdefault("price", 0.0)
        return cls(content_type=content_type, details=details, **attrs)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly projection of the item."""
        result: Dict[str, Any] = {
            "content_type": self.content_type.value,
            "name": self.name,
            "description": self.description,
            "author": self.author,
            "rating": self.rating,
            "price": self.price,
            "categories": sorted(self.categories),
            "languages": sorted(self.languages),
            "devices": sorted(d.device_id for d in self.devices),
            "countries": sorted(c.code for c in self.countries),
            "image_url": self.image_url,
        }
        if self.details is not None:
            result.update(asdict(self.details))
        return result


def _frozen(values: Optional[Iterable]) -> frozenset:
    return frozenset(values) if values is not None else frozenset()


# === Search Criteria ===


@dataclass(frozen=True)
class ContentSearch:
    """
    Criteria for one content search.

    ``None`` for a set-valued criterion means the query did not supply it. An
    empty set means it was supplied but nothing in it could be used (for
    example, country codes the catalog does not know).
    """

    categories: Optional[FrozenSet[str]] = None
    text: str = ""
    minimum_rating: int = 0
    maximum_price: float = sys.float_info.max
    languages: Optional[FrozenSet[str]] = None
    countries: Optional[FrozenSet[Country]] = None
    devices: Optional[FrozenSet[Device]] = None
    content_types: FrozenSet[ContentType] = field(
        default_factory=lambda: ContentType.all_types()
    )
    raw_query: Optional[str] = field(default=None, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        def _sorted(values):
            return sorted(values) if values is not None else None

        return {
            "categories": _sorted(self.categories),
            "text": self.text,
            "minimum_rating": self.minimum_rating,
            "maximum_price": self.maximum_price,
            "languages": _sorted(self.languages),
            "countries": (
                sorted(c.code for c in self.countries)
                if self.countries is not None
                else None
            ),
            "devices": (
                sorted(d.device_id for d in self.devices)
                if self.devices is not None
                else None
            ),
            "content_types": sorted(t.value for t in self.content_types),
        }
