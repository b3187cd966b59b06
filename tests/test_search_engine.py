import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest

from product.catalog import ProductCatalog
from product.product_errors import CatalogImportError, ParseError
from product.product_matcher import CLAUSES, matches, matching_clause
from product.product_model import (
    Content,
    ContentSearch,
    ContentType,
    Country,
    Device,
    ExportStatus,
)
from product.product_search import (
    execute_query,
    execute_query_file,
    execute_query_lines,
    parse_query_line,
)

TOKEN = "test-token"

US = Country("US", "UNITED STATES", ExportStatus.OPEN)
CA = Country("CA", "CANADA", ExportStatus.OPEN)
IPHONE = Device("iphone5", "IPhone 5", "Apple")
LUMINA = Device("lumina800", "Lumina 800", "Nokia")

ONLY_RINGTONES = frozenset({ContentType.RINGTONE})


def paid_app(**attrs):
    """An application that fails the rating and the zero-price clauses."""
    attrs.setdefault("name", "Racer")
    attrs.setdefault("description", "Drive fast")
    attrs.setdefault("author", "Speedy Inc")
    attrs.setdefault("rating", 0)
    attrs.setdefault("price", 5.0)
    return Content.application(**attrs)


def strict(**criteria):
    """Criteria under which ``paid_app()`` matches no clause on its own."""
    criteria.setdefault("maximum_price", 0.0)
    criteria.setdefault("content_types", ONLY_RINGTONES)
    return ContentSearch(**criteria)


@pytest.fixture
def catalog():
    catalog = ProductCatalog()
    catalog.import_countries(TOKEN, [US, CA])
    catalog.import_devices(TOKEN, [IPHONE, LUMINA])
    catalog.import_content(
        TOKEN,
        [
            Content.application(
                name="Ferrari Racing",
                description="Race a Ferrari",
                author="Maranello Games",
                rating=5,
                price=2.99,
                categories={"games"},
                countries={US},
                devices={IPHONE},
                languages={"en"},
            ),
            Content.ringtone(
                name="Engine Roar",
                description="V12 sound",
                author="Sound Lab",
                rating=4,
                price=0.0,
                categories={"sounds"},
                countries={CA},
                devices={LUMINA},
                languages={"fr"},
            ),
            Content.wallpaper(
                name="Sunset",
                description="Beach",
                author="Jane",
                rating=0,
                price=1.0,
                pixel_width=1920,
                pixel_height=1080,
            ),
        ],
    )
    return catalog


class TestMatchingEngine:
    def test_strict_baseline_does_not_match(self):
        assert not matches(paid_app(), strict())
        assert matching_clause(paid_app(), strict()) is None

    def test_default_criteria_match_everything(self):
        items = [
            paid_app(),
            paid_app(rating=0, price=0.0),
            Content.ringtone(name="Ring", rating=0),
            Content.wallpaper(name="Wall", rating=5, price=100.0),
        ]
        criteria = ContentSearch()
        assert all(matches(item, criteria) for item in items)

    def test_default_criteria_values(self):
        criteria = ContentSearch()
        assert criteria.categories is None
        assert criteria.text == ""
        assert criteria.minimum_rating == 0
        assert criteria.maximum_price == sys.float_info.max
        assert criteria.languages is None
        assert criteria.countries is None
        assert criteria.devices is None
        assert criteria.content_types == {
            ContentType.APPLICATION,
            ContentType.RINGTONE,
            ContentType.WALLPAPER,
        }

    def test_zero_rating_never_satisfies_rating_clause(self):
        item = paid_app(rating=0)
        assert not matches(item, strict(minimum_rating=0))
        assert matching_clause(paid_app(rating=1), strict(minimum_rating=0)) == "rating"

    def test_rating_below_minimum(self):
        assert not matches(paid_app(rating=3), strict(minimum_rating=4))
        assert matches(paid_app(rating=4), strict(minimum_rating=4))

    def test_price_ceiling(self):
        assert matching_clause(paid_app(price=0.0), strict()) == "price"
        assert not matches(paid_app(price=5.0), strict())
        assert matches(paid_app(price=5.0), strict(maximum_price=5.0))

    def test_category_overlap_beats_price_ceiling(self):
        item = paid_app(price=5.0, categories={"games", "racing"})
        criteria = strict(categories=frozenset({"racing"}))
        assert matches(item, criteria)
        assert matching_clause(item, criteria) == "category"

    def test_category_mismatch_falls_through(self):
        item = paid_app(categories={"games"})
        assert not matches(item, strict(categories=frozenset({"music"})))
        # A failing clause does not veto later ones
        assert matching_clause(item, strict(categories=frozenset({"music"}), maximum_price=10.0)) == "price"

    def test_device_overlap(self):
        item = paid_app(devices={IPHONE})
        assert matching_clause(item, strict(devices=frozenset({IPHONE, LUMINA}))) == "device"
        assert not matches(item, strict(devices=frozenset({LUMINA})))

    def test_country_overlap(self):
        item = paid_app(countries={US})
        assert matching_clause(item, strict(countries=frozenset({US}))) == "country"
        assert not matches(item, strict(countries=frozenset({CA})))

    def test_country_overlap_uses_code_identity(self):
        item = paid_app(countries={Country("us", "America", ExportStatus.OPEN)})
        assert matches(item, strict(countries=frozenset({US})))

    def test_supplied_but_empty_set_never_overlaps(self):
        item = paid_app(countries={US}, devices={IPHONE})
        assert not matches(item, strict(countries=frozenset(), devices=frozenset()))

    def test_language_overlap(self):
        item = paid_app(languages={"en", "fr"})
        assert matching_clause(item, strict(languages=frozenset({"fr"}))) == "language"
        assert not matches(item, strict(languages=frozenset({"de"})))

    def test_content_type_membership(self):
        item = paid_app()
        criteria = strict(content_types=frozenset({ContentType.APPLICATION}))
        assert matching_clause(item, criteria) == "content_type"

    @pytest.mark.parametrize("text", ["racer", "RACER", "drive", "speedy", "y in"])
    def test_text_containment(self, text):
        assert matching_clause(paid_app(), strict(text=text)) == "text"

    def test_text_not_found(self):
        assert not matches(paid_app(), strict(text="Ferrari"))

    def test_clause_order(self):
        assert [name for name, _ in CLAUSES] == [
            "category",
            "device",
            "country",
            "language",
            "content_type",
            "text",
            "rating",
            "price",
        ]

    def test_first_true_clause_wins(self):
        item = paid_app(
            categories={"games"}, devices={IPHONE}, rating=5, price=0.0, languages={"en"}
        )
        criteria = ContentSearch(
            categories=frozenset({"games"}),
            devices=frozenset({IPHONE}),
            languages=frozenset({"en"}),
            text="racer",
        )
        assert matching_clause(item, criteria) == "category"
        criteria = ContentSearch(devices=frozenset({IPHONE}), languages=frozenset({"en"}))
        assert matching_clause(item, criteria) == "device"


class TestParseQueryLine:
    def test_all_columns_empty(self, catalog):
        criteria = parse_query_line(",,,,,,,", catalog)
        assert criteria == ContentSearch()
        assert criteria.raw_query == ",,,,,,,"

    def test_whitespace_columns_are_unset(self, catalog):
        assert parse_query_line(" , , , , , , , ", catalog) == ContentSearch()

    def test_full_query(self, catalog):
        criteria = parse_query_line(
            "games|sounds, Ferrari ,3,1.5,en|fr,us|ZZ,IPHONE5|nokia1,Application|ringtone",
            catalog,
        )
        assert criteria.categories == {"games", "sounds"}
        assert criteria.text == "Ferrari"
        assert criteria.minimum_rating == 3
        assert criteria.maximum_price == 1.5
        assert criteria.languages == {"en", "fr"}
        assert criteria.countries == {US}
        assert criteria.devices == {IPHONE}
        assert criteria.content_types == {ContentType.APPLICATION, ContentType.RINGTONE}

    def test_unresolved_codes_still_activate_clause(self, catalog):
        criteria = parse_query_line(",,,,,ZZ,nokia1,", catalog)
        assert criteria.countries == frozenset()
        assert criteria.devices == frozenset()

    def test_blank_content_types_default_to_all(self, catalog):
        criteria = parse_query_line("games,,,,,,,", catalog)
        assert criteria.content_types == ContentType.all_types()

    def test_escaped_comma_in_text(self, catalog):
        criteria = parse_query_line(",Race\\, Ferrari,,,,,,", catalog)
        assert criteria.text == "Race, Ferrari"

    @pytest.mark.parametrize(
        "line",
        [
            "",
            "   ",
            ",,,,,,",
            ",,,,,,,,",
            ",,four,,,,,",
            ",,,free,,,,",
            ",,,,,,,screensaver",
            ",,,,,,,application|gadget",
        ],
    )
    def test_malformed_queries(self, catalog, line):
        with pytest.raises(ParseError):
            parse_query_line(line, catalog)


class TestExecuteQueries:
    def test_text_search(self, catalog):
        result = execute_query(catalog, " , Ferrari, , , , , ,")
        assert {item.name for item in result.matches} == {
            "Ferrari Racing",
            "Engine Roar",
            "Sunset",
        }

    def test_text_search_limited_by_content_type(self, catalog):
        # content types are reached before the text clause, so a type filter
        # alone matches every item of that type
        result = execute_query(catalog, ",Ferrari,,0,,,,ringtone")
        assert {item.name for item in result.matches} == {"Ferrari Racing", "Engine Roar"}

    def test_free_and_highly_rated(self, catalog):
        result = execute_query(catalog, ",,4,0,,,,wallpaper")
        names = {item.name for item in result.matches}
        # Engine Roar: free and rated 4; Ferrari Racing: rated 5; Sunset: wallpaper
        assert names == {"Ferrari Racing", "Engine Roar", "Sunset"}

    def test_excluding_query(self, catalog):
        result = execute_query(catalog, "music,,5,0.5,de,,,wallpaper")
        names = {item.name for item in result.matches}
        # Ferrari Racing has rating 5; Engine Roar is free; Sunset is a wallpaper
        assert names == {"Ferrari Racing", "Engine Roar", "Sunset"}
        result = execute_query(catalog, "music,,5,0,de,,,ringtone")
        assert {item.name for item in result.matches} == {"Ferrari Racing", "Engine Roar"}

    def test_country_query(self, catalog):
        result = execute_query(catalog, ",,5,0,,CA,,wallpaper")
        assert {item.name for item in result.matches} == {"Engine Roar", "Sunset", "Ferrari Racing"}

    def test_result_to_dict(self, catalog):
        result = execute_query(catalog, ",,,,,,,ringtone")
        data = result.to_dict()
        assert data["query"] == ",,,,,,,ringtone"
        assert data["criteria"]["content_types"] == ["ringtone"]
        assert data["match_count"] == len(result.matches)
        ringtone = next(m for m in data["matches"] if m["content_type"] == "ringtone")
        assert ringtone["countries"] == ["CA"]
        assert ringtone["duration_seconds"] == 0.0

    def test_execute_query_lines(self, catalog):
        lines = [
            "# category_list, text_search, minimum_rating, max_price, ...\n",
            "\n",
            " , Ferrari, , , , , ,\n",
            "games,,,,,,,\n",
        ]
        results = execute_query_lines(catalog, lines)
        assert len(results) == 2
        assert results[0].criteria.text == "Ferrari"
        assert results[1].criteria.categories == {"games"}

    def test_malformed_query_reports_location(self, catalog):
        lines = ["# header\n", ",,,,,,,\n", "too,few\n"]
        with pytest.raises(ParseError) as exc_info:
            execute_query_lines(catalog, lines, filename="queries.csv")
        error = exc_info.value
        assert error.line_number == 3
        assert error.filename == "queries.csv"
        assert error.line == "too,few"

    def test_execute_query_file(self, catalog, tmp_path):
        query_file = tmp_path / "queries.csv"
        query_file.write_text("# queries\n,,,,,,,application\n", encoding="utf-8")
        (result,) = execute_query_file(catalog, str(query_file))
        assert len(result.matches) == 3

    def test_missing_query_file(self, catalog, tmp_path):
        with pytest.raises(CatalogImportError):
            execute_query_file(catalog, str(tmp_path / "missing.csv"))
