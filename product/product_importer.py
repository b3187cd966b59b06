"""
Record importers for the product catalog.

Reads delimited country, device and content records and loads them into a
``ProductCatalog``. Every input follows the same conventions: one record per
line, columns separated by commas, commas inside a column escaped as ``\\,``,
blank lines skipped, and lines starting with ``#`` treated as comments or
column headers.

Country rows: ``code,name,export_status``::

    # country_id, country_name, country_export_status
    AF,AFGHANISTAN,open
    BO,BOLIVIA\\, PLURINATIONAL STATE OF,open

Device rows: ``id,name,manufacturer``::

    # device_id, device_name, manufacturer
    iphone5, IPhone 5, Apple

Content rows: ``type,id,name,description,author,rating,categories,countries,
devices,price,languages,image_url[,filesize][,duration][,width,height]``,
where categories, countries, devices and languages are ``|``-separated lists.

A malformed row raises ``ParseError`` and nothing from that input reaches the
catalog. Rows that parse but describe an invalid entity are left out by the
catalog without raising.
"""

import logging
from typing import Callable, Iterable, Iterator, List, Optional, Tuple, TypeVar

from .catalog import ImportOptions, ProductCatalog
from .product_errors import CatalogImportError, ParseError
from .product_model import Content, ContentType, Country, Device, ExportStatus
from .product_parser import split_fields, split_list

logger = logging.getLogger(__name__)

T = TypeVar("T")

COUNTRY_COLUMNS = 3
DEVICE_COLUMNS = 3
CONTENT_MIN_COLUMNS = 12
CONTENT_MAX_COLUMNS = 16

# Content row column positions
COL_TYPE = 0
COL_NAME = 2
COL_DESCRIPTION = 3
COL_AUTHOR = 4
COL_RATING = 5
COL_CATEGORIES = 6
COL_COUNTRIES = 7
COL_DEVICES = 8
COL_PRICE = 9
COL_LANGUAGES = 10
COL_IMAGE_URL = 11
COL_FILESIZE = 12
COL_DURATION = 13
COL_PIXEL_WIDTH = 14
COL_PIXEL_HEIGHT = 15


def iter_records(
    lines: Iterable[str], options: Optional[ImportOptions] = None
) -> Iterator[Tuple[int, str]]:
    """
    Yield ``(line_number, line)`` for every line that holds a record.

    Line terminators are removed; blank lines and lines whose first character
    is the comment marker are skipped. Line numbers count every physical line,
    starting at 1.
    """
    options = options or ImportOptions()
    for line_number, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")
        if not line.strip():
            continue
        if line.startswith(options.comment_marker):
            continue
        yield line_number, line


def _parse_number(line: str, value: str, convert: Callable, what: str, default):
    value = value.strip()
    if not value:
        return default
    try:
        return convert(value)
    except ValueError as e:
        raise ParseError(
            f"Line contains invalid data for the {what} [{value}]", line=line, cause=e
        ) from e


# === Row parsers ===


def parse_country_row(line: str) -> Country:
    """Build a Country from one country row."""
    code, name, status = (
        column.strip() for column in split_fields(line, expected=COUNTRY_COLUMNS)
    )
    return Country(code=code, name=name, export_status=ExportStatus.parse(status))


def parse_device_row(line: str) -> Device:
    """Build a Device from one device row."""
    device_id, name, manufacturer = (
        column.strip() for column in split_fields(line, expected=DEVICE_COLUMNS)
    )
    return Device(device_id=device_id, name=name, manufacturer=manufacturer)


def parse_content_row(
    line: str, catalog: ProductCatalog, options: Optional[ImportOptions] = None
) -> Content:
    """
    Build a Content item from one content row.

    Country codes and device ids are looked up in ``catalog``; the ones it
    does not know are dropped.

    Args:
        line: The content row
        catalog: Catalog used to resolve country codes and device ids
        options: Import options (wallpaper dimension policy)

    Returns:
        The content item, of the variant named in the first column

    Raises:
        ParseError: On a wrong column count, a bad number or an unknown content type
    """
    options = options or ImportOptions()
    columns = split_fields(line)
    if not CONTENT_MIN_COLUMNS <= len(columns) <= CONTENT_MAX_COLUMNS:
        raise ParseError(
            f"Content line has {len(columns)} columns; expected "
            f"{CONTENT_MIN_COLUMNS} to {CONTENT_MAX_COLUMNS}",
            line=line,
        )

    def column(index: int) -> str:
        return columns[index] if index < len(columns) else ""

    try:
        content_type = ContentType.parse(columns[COL_TYPE])
    except ValueError as e:
        raise ParseError(
            f"Line contains invalid data for the content type [{columns[COL_TYPE]}]",
            line=line,
            cause=e,
        ) from e

    rating = _parse_number(line, column(COL_RATING), int, "content rating", 0)
    price = _parse_number(line, column(COL_PRICE), float, "content price", 0.0)
    filesize = _parse_number(
        line, column(COL_FILESIZE), int, "application filesize", 0
    )
    duration = _parse_number(
        line, column(COL_DURATION), float, "ringtone duration in seconds", 0.0
    )
    parsed_size = None
    if column(COL_PIXEL_WIDTH).strip() and column(COL_PIXEL_HEIGHT).strip():
        parsed_size = (
            _parse_number(line, column(COL_PIXEL_WIDTH), int, "wallpaper pixel width", 0),
            _parse_number(line, column(COL_PIXEL_HEIGHT), int, "wallpaper pixel height", 0),
        )

    countries = []
    for code in split_list(column(COL_COUNTRIES)):
        country = catalog.get_country_by_code(code)
        if country is None:
            logger.debug("Dropping unknown country code %r", code)
            continue
        countries.append(country)

    devices = []
    for device_id in split_list(column(COL_DEVICES)):
        device = catalog.get_device_by_id(device_id)
        if device is None:
            logger.debug("Dropping unknown device id %r", device_id)
            continue
        devices.append(device)

    attrs = dict(
        name=column(COL_NAME).strip(),
        description=column(COL_DESCRIPTION).strip(),
        author=column(COL_AUTHOR).strip(),
        rating=rating,
        price=price,
        categories=split_list(column(COL_CATEGORIES)),
        languages=split_list(column(COL_LANGUAGES)),
        countries=countries,
        devices=devices,
        image_url=column(COL_IMAGE_URL).strip(),
    )

    if content_type is ContentType.APPLICATION:
        return Content.application(filesize_bytes=filesize, **attrs)
    if content_type is ContentType.RINGTONE:
        return Content.ringtone(duration_seconds=duration, **attrs)

    width, height = options.wallpaper_size(parsed_size)
    if parsed_size and parsed_size != (width, height):
        logger.warning(
            "Wallpaper %r: using %sx%s instead of the %sx%s given in the row",
            attrs["name"],
            width,
            height,
            parsed_size[0],
            parsed_size[1],
        )
    return Content.wallpaper(pixel_width=width, pixel_height=height, **attrs)


# === Line importers ===


def _parse_lines(
    lines: Iterable[str],
    filename: str,
    options: ImportOptions,
    parse_row: Callable[[str], T],
) -> List[T]:
    entities = []
    for line_number, line in iter_records(lines, options):
        try:
            entities.append(parse_row(line))
        except ParseError as e:
            e.line = line
            e.with_location(line_number, filename)
            raise
    return entities


def import_country_lines(
    catalog: ProductCatalog,
    token: str,
    lines: Iterable[str],
    filename: str = "<string>",
    options: Optional[ImportOptions] = None,
) -> int:
    """
    Parse country rows and add the countries to ``catalog``.

    Returns:
        Number of countries added to the catalog
    """
    options = options or ImportOptions()
    countries = _parse_lines(lines, filename, options, parse_country_row)
    logger.info("Parsed %s country rows from %s", len(countries), filename)
    return catalog.import_countries(token, countries)


def import_device_lines(
    catalog: ProductCatalog,
    token: str,
    lines: Iterable[str],
    filename: str = "<string>",
    options: Optional[ImportOptions] = None,
) -> int:
    """Parse device rows and add the devices to ``catalog``."""
    options = options or ImportOptions()
    devices = _parse_lines(lines, filename, options, parse_device_row)
    logger.info("Parsed %s device rows from %s", len(devices), filename)
    return catalog.import_devices(token, devices)


def import_content_lines(
    catalog: ProductCatalog,
    token: str,
    lines: Iterable[str],
    filename: str = "<string>",
    options: Optional[ImportOptions] = None,
) -> int:
    """
    Parse content rows and add the items to ``catalog``.

    Countries and devices must already be in the catalog for content to refer
    to them.
    """
    options = options or ImportOptions()
    items = _parse_lines(
        lines, filename, options, lambda line: parse_content_row(line, catalog, options)
    )
    logger.info("Parsed %s content rows from %s", len(items), filename)
    return catalog.import_content(token, items)


# === File importers ===


def read_input_file(filename: str, handler: Callable[[Iterable[str]], T]) -> T:
    """
    Open ``filename`` as UTF-8 text and pass its lines to ``handler``.

    Raises:
        CatalogImportError: If the file cannot be opened, read or decoded
    """
    try:
        with open(filename, "r", encoding="utf-8") as f:
            return handler(f)
    except FileNotFoundError as e:
        raise CatalogImportError(
            f"Could not find file [{filename}] to open for reading",
            filename=filename,
            cause=e,
        ) from e
    except (OSError, UnicodeDecodeError) as e:
        raise CatalogImportError(
            f"Unable to read file [{filename}]", filename=filename, cause=e
        ) from e


def import_country_file(
    catalog: ProductCatalog,
    token: str,
    filename: str,
    options: Optional[ImportOptions] = None,
) -> int:
    """Import every country in ``filename``; see ``import_country_lines``."""
    return read_input_file(
        filename,
        lambda lines: import_country_lines(catalog, token, lines, filename, options),
    )


def import_device_file(
    catalog: ProductCatalog,
    token: str,
    filename: str,
    options: Optional[ImportOptions] = None,
) -> int:
    """Import every device in ``filename``; see ``import_device_lines``."""
    return read_input_file(
        filename,
        lambda lines: import_device_lines(catalog, token, lines, filename, options),
    )


def import_content_file(
    catalog: ProductCatalog,
    token: str,
    filename: str,
    options: Optional[ImportOptions] = None,
) -> int:
    """Import every content item in ``filename``; see ``import_content_lines``."""
    return read_input_file(
        filename,
        lambda lines: import_content_lines(catalog, token, lines, filename, options),
    )
