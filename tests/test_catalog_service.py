import io
import json
from decimal import Decimal

import pytest

from pricer.engine import Catalog, MultiplierType, Product, ProductSortCriteria
from pricer.errors import NotFoundError, QuoteValidationError
from pricer.services.catalog_service import (
    CatalogStore, import_products, products_from_csv, search_products, sort_products,
)


@pytest.fixture
def store(settings):
    return CatalogStore(settings.catalogs_dir)


def test_save_and_load_catalog(store, catalog):
    path = store.save_catalog(catalog)
    assert path.exists()

    loaded = store.load_catalog("cat-1")
    assert loaded == catalog
    assert loaded.multiplier("haul").is_discountable is False
    assert loaded.multiplier("stain").type == MultiplierType.FIXED_PER_UNIT
    assert loaded.product("rail").base_price == Decimal("25.50")


def test_saved_file_uses_camel_case_keys(store, catalog):
    path = store.save_catalog(catalog)
    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    assert data["companyName"] == "Acme Decks"
    assert data["products"][0]["basePrice"] == "100"
    assert "isDiscountable" in data["multipliers"][0]


def test_list_catalogs_sorted_by_name(store, catalog):
    assert store.list_catalogs() == []
    store.save_catalog(catalog)
    store.save_catalog(Catalog(id="cat-2", name="Bathrooms"))

    assert store.list_catalogs() == [
        {"id": "cat-2", "name": "Bathrooms"},
        {"id": "cat-1", "name": "Decks"},
    ]


def test_unreadable_files_are_skipped(store, catalog):
    store.save_catalog(catalog)
    (store.catalogs_dir / "broken.json").write_text("{not json", encoding="utf-8")
    assert [c["id"] for c in store.list_catalogs()] == ["cat-1"]


def test_delete_catalog(store, catalog):
    store.save_catalog(catalog)
    assert store.delete_catalog("cat-1")
    with pytest.raises(NotFoundError):
        store.load_catalog("cat-1")
    with pytest.raises(NotFoundError):
        store.delete_catalog("cat-1")


def test_products_from_csv():
    source = io.StringIO(
        "name,description,unit_type,base_price,category,is_discountable\n"
        "Joist Hanger,Galvanized,each,2.49,Hardware,true\n"
        ",No name,each,1.00,Hardware,true\n"
        "Permit,City permit,,75,Fees,false\n"
        "Screws,Box of 100,box,cheap,Hardware,\n"
        "Post Cap,,,12,,\n"
    )
    report = products_from_csv(source)

    assert [p.name for p in report.products] == ["Joist Hanger", "Permit", "Post Cap"]
    hanger, permit, cap = report.products
    assert hanger.base_price == Decimal("2.49")
    assert hanger.unit_type == "each"
    assert permit.is_discountable is False
    assert permit.unit_type == "unit"
    assert cap.category == "Default"
    assert cap.is_discountable is True

    assert len(report.warnings) == 2
    assert report.warnings[0].startswith("Row 3:")
    assert report.warnings[1].startswith("Row 5:")


def test_csv_without_required_columns_is_rejected():
    with pytest.raises(QuoteValidationError):
        products_from_csv(io.StringIO("title,price\nDeck,10\n"))


def test_import_products_adds_to_catalog(catalog):
    extra = [Product(id="cap", name="Post Cap", base_price=Decimal("12"))]
    updated = import_products(catalog, extra)
    assert updated.product("cap") is not None
    assert len(updated.products) == len(catalog.products) + 1
    assert catalog.product("cap") is None


def test_sort_products(catalog):
    products = catalog.products
    assert [p.id for p in sort_products(products, ProductSortCriteria.NAME_ASC)] == ["deck", "permit", "rail"]
    assert [p.id for p in sort_products(products, ProductSortCriteria.PRICE_DESC)] == ["deck", "permit", "rail"]
    assert [p.id for p in sort_products(products, ProductSortCriteria.PRICE_ASC)] == ["rail", "permit", "deck"]
    assert [p.id for p in sort_products(products, "CATEGORY_ASC")][0] == "permit"


def test_search_products(catalog):
    assert [p.id for p in search_products(catalog.products, "RAIL")] == ["rail"]
    assert [p.id for p in search_products(catalog.products, "lumber")] == ["deck", "rail"]
    assert len(search_products(catalog.products, "  ")) == 3
    assert search_products(catalog.products, "concrete") == []


@pytest.mark.parametrize("content", [
    "{not json",
    '{"id": "cat-9", "products": [{"name": "Deck", "basePrice": "cheap"}]}',
    '{"id": "cat-9", "multipliers": [{"name": "Rush", "type": "SOMETIMES"}]}',
    '{"id": "cat-9", "products": ["Deck"]}',
])
def test_unreadable_catalog_is_a_validation_error(store, content):
    store.catalogs_dir.mkdir(parents=True, exist_ok=True)
    (store.catalogs_dir / "cat-9.json").write_text(content, encoding="utf-8")

    with pytest.raises(QuoteValidationError):
        store.load_catalog("cat-9")


@pytest.mark.parametrize("data", [b"", b"name,base_price\n\xff\xfe,1\n"])
def test_unreadable_csv_is_a_validation_error(data):
    with pytest.raises(QuoteValidationError):
        products_from_csv(io.BytesIO(data))
