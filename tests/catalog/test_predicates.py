"""Tests for product predicates and sort policy."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.dialects import postgresql, sqlite

from finessee.catalog.models import Product
from finessee.catalog.predicates import (
    Facet,
    FacetFilter,
    SearchQuery,
    SortKey,
    escape_like,
    normalize_facet_value,
)


def _product(**fields) -> Product:
    defaults = {
        "id": 1,
        "name": "Brass Bowl",
        "code": "VF-BB-002",
        "category": "Home Decor",
        "finish": "Polished Brass",
        "material": "Pure Brass",
        "length": 1,
        "breadth": 1,
        "height": 1,
    }
    defaults.update(fields)
    return Product(**defaults)


class TestNormalizeFacetValue:
    """Tests for wire value normalisation."""

    @pytest.mark.parametrize("value", [None, "", "all"])
    def test_unconstrained_values(self, value):
        """Test "all", empty and missing mean no constraint."""
        assert normalize_facet_value(value) is None

    def test_all_sentinel_is_exact(self):
        """Test only the exact lowercase sentinel is special."""
        assert normalize_facet_value("All") == "All"
        assert normalize_facet_value("Tables") == "Tables"


class TestFacetFilter:
    """Tests for FacetFilter."""

    def test_from_wire_drops_sentinels(self):
        """Test from_wire keeps only real selections."""
        f = FacetFilter.from_wire(category="all", finish="", material="Pure Brass")
        assert f.constraints() == {Facet.MATERIAL: "Pure Brass"}

    def test_empty_filter_matches_everything(self):
        """Test a filter without constraints matches any product."""
        assert FacetFilter().is_empty
        assert FacetFilter().matches(_product())

    def test_conjunction(self):
        """Test every constraint must hold."""
        product = _product()
        assert FacetFilter(category="Home Decor", finish="Polished Brass").matches(product)
        assert not FacetFilter(category="Home Decor", finish="Antique Brass").matches(product)

    def test_exact_match_is_case_sensitive(self):
        """Test facet values compare exactly."""
        assert not FacetFilter(category="home decor").matches(_product())

    def test_without_clears_one_facet(self):
        """Test without() drops only the given facet."""
        f = FacetFilter(category="Tables", finish="Oak")
        assert f.without(Facet.CATEGORY) == FacetFilter(finish="Oak")

    def test_empty_material_is_not_a_value(self):
        """Test a product without material only matches unconstrained material."""
        product = _product(material="")
        assert FacetFilter().matches(product)
        assert not FacetFilter(material="Pure Brass").matches(product)


class TestSearchQuery:
    """Tests for SearchQuery."""

    @pytest.mark.parametrize("text", ["brass", "BRASS", "vf-bb", "home", "polished"])
    def test_matches_searched_fields(self, text):
        """Test search covers name, code, category and finish, case-insensitively."""
        assert SearchQuery(text).matches(_product())

    def test_material_and_description_are_not_searched(self):
        """Test fields outside the searched set do not match."""
        product = _product(material="Teak", description="Hand polished teak")
        assert not SearchQuery("teak").matches(product)

    def test_no_match(self):
        """Test unrelated text does not match."""
        assert not SearchQuery("chair").matches(_product())


class TestEscapeLike:
    """Tests for LIKE escaping."""

    def test_wildcards_are_escaped(self):
        """Test % and _ become literal."""
        assert escape_like("50%_off") == "50\\%\\_off"

    def test_escape_character_is_doubled(self):
        """Test the escape character itself is escaped first."""
        assert escape_like("a\\b") == "a\\\\b"


class TestSortKey:
    """Tests for SortKey."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("code", SortKey.CODE),
            ("category", SortKey.CATEGORY),
            ("newest", SortKey.NEWEST),
            ("name", SortKey.NAME),
            (None, SortKey.NAME),
            ("", SortKey.NAME),
            ("price", SortKey.NAME),
        ],
    )
    def test_parse(self, value, expected):
        """Test unknown values fall back to name."""
        assert SortKey.parse(value) == expected

    def test_code_order(self):
        """Test sorting by code ascending."""
        products = [
            _product(id=1, code="VF-BG-001"),
            _product(id=2, code="VF-BB-002"),
            _product(id=3, code="VF-DL-003"),
        ]
        ordered = SortKey.CODE.sort(products)
        assert [p.code for p in ordered] == ["VF-BB-002", "VF-BG-001", "VF-DL-003"]

    def test_ties_break_by_id(self):
        """Test equal sort values keep ascending id."""
        products = [
            _product(id=3, name="Same"),
            _product(id=1, name="Same"),
            _product(id=2, name="Same"),
        ]
        assert [p.id for p in SortKey.NAME.sort(products)] == [1, 2, 3]

    def test_newest_first_with_id_tiebreak(self):
        """Test newest sorts by creation time descending, then id ascending."""
        now = datetime.now(timezone.utc)
        products = [
            _product(id=1, created_at=now - timedelta(days=1)),
            _product(id=2, created_at=now),
            _product(id=3, created_at=now),
        ]
        assert [p.id for p in SortKey.NEWEST.sort(products)] == [2, 3, 1]

    def test_name_order_is_code_point(self):
        """Test uppercase names sort before lowercase ones."""
        products = [
            _product(id=1, name="brass bowl"),
            _product(id=2, name="Wall Shelf"),
            _product(id=3, name="Armchair"),
        ]
        ordered = SortKey.NAME.sort(products)
        assert [p.name for p in ordered] == ["Armchair", "Wall Shelf", "brass bowl"]

    @pytest.mark.parametrize("key", [SortKey.NAME, SortKey.CODE, SortKey.CATEGORY])
    def test_postgresql_text_order_uses_c_collation(self, key):
        """Test text keys ignore the PostgreSQL database locale."""
        primary = key.order_by("postgresql")[0]
        sql = str(primary.compile(dialect=postgresql.dialect()))
        assert 'COLLATE "C"' in sql

    def test_sqlite_text_order_uses_default_collation(self):
        """Test SQLite keeps its BINARY default."""
        primary = SortKey.NAME.order_by("sqlite")[0]
        assert "COLLATE" not in str(primary.compile(dialect=sqlite.dialect()))

    def test_newest_order_is_not_collated(self):
        """Test the timestamp key never gets a collation."""
        primary = SortKey.NEWEST.order_by("postgresql")[0]
        assert "COLLATE" not in str(primary.compile(dialect=postgresql.dialect()))
