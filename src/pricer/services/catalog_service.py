"""
Catalog Service - save/load catalogs and bulk-import products.

Catalogs are stored as one JSON file per catalog. The engine never touches
these files; callers load a Catalog here and hand it to the quote session.
"""
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

import pandas as pd

from ..engine.models import Catalog, Product, ProductSortCriteria
from ..engine.parsing import parse_decimal
from ..errors import NotFoundError, QuoteValidationError


@dataclass
class ImportReport:
    """Result of a CSV product import."""
    products: list[Product] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class CatalogStore:
    """Reads and writes catalogs under a directory."""

    def __init__(self, catalogs_dir: Path):
        self.catalogs_dir = Path(catalogs_dir)

    def _path(self, catalog_id: str) -> Path:
        return self.catalogs_dir / f"{catalog_id}.json"

    def list_catalogs(self) -> list[dict]:
        """List {id, name} of every stored catalog, sorted by name."""
        catalogs = []
        if not self.catalogs_dir.exists():
            return catalogs

        for path in sorted(self.catalogs_dir.glob('*.json')):
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError):
                continue
            catalogs.append({'id': data.get('id', path.stem), 'name': data.get('name', path.stem)})

        catalogs.sort(key=lambda c: c['name'].lower())
        return catalogs

    def load_catalog(self, catalog_id: str) -> Catalog:
        path = self._path(catalog_id)
        if not path.exists():
            raise NotFoundError(f"Catalog '{catalog_id}' not found")
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return Catalog.from_dict(json.load(f))
        except (ArithmeticError, AttributeError, TypeError, ValueError) as e:
            # ValueError covers bad JSON, bad UTF-8 and unknown multiplier types
            raise QuoteValidationError(f"Catalog '{catalog_id}' is unreadable: {e}") from e

    def save_catalog(self, catalog: Catalog) -> Path:
        self.catalogs_dir.mkdir(parents=True, exist_ok=True)
        path = self._path(catalog.id)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(catalog.to_dict(), f, indent=2, ensure_ascii=False)
        return path

    def delete_catalog(self, catalog_id: str) -> bool:
        path = self._path(catalog_id)
        if not path.exists():
            raise NotFoundError(f"Catalog '{catalog_id}' not found")
        path.unlink()
        return True


def products_from_csv(source) -> ImportReport:
    """
    Read products from a CSV file or buffer.

    Required columns: name, base_price. Optional: description, unit_type,
    category, is_discountable. Rows without a name or with an unreadable
    price are skipped and reported.
    """
    try:
        df = pd.read_csv(source, dtype=str, encoding='utf-8').fillna('')
    except (UnicodeDecodeError, pd.errors.EmptyDataError, pd.errors.ParserError) as e:
        raise QuoteValidationError(f"Product CSV could not be read: {e}") from e
    df.columns = [c.strip().lower() for c in df.columns]

    missing = [c for c in ('name', 'base_price') if c not in df.columns]
    if missing:
        raise QuoteValidationError(f"Product CSV is missing columns: {', '.join(missing)}")

    report = ImportReport()
    for row_num, row in enumerate(df.to_dict(orient='records'), start=2):
        name = row['name'].strip()
        if not name:
            report.warnings.append(f"Row {row_num}: missing name, skipped")
            continue

        price = parse_decimal(row['base_price'])
        if price is None:
            report.warnings.append(f"Row {row_num}: invalid base_price '{row['base_price']}', skipped")
            continue

        discountable = row.get('is_discountable', '').strip().lower()
        report.products.append(Product(
            name=name,
            description=row.get('description', '').strip(),
            unit_type=row.get('unit_type', '').strip() or 'unit',
            base_price=price,
            category=row.get('category', '').strip() or 'Default',
            is_discountable=discountable not in ('false', '0', 'no', 'off'),
        ))

    return report


def import_products(catalog: Catalog, products: Iterable[Product]) -> Catalog:
    for product in products:
        catalog = catalog.with_product(product)
    return catalog


def sort_products(products: Iterable[Product], criteria: ProductSortCriteria) -> list[Product]:
    """Sort products for the catalog view."""
    criteria = ProductSortCriteria(criteria)
    if criteria in (ProductSortCriteria.NAME_ASC, ProductSortCriteria.NAME_DESC):
        key = lambda p: p.name.lower()
    elif criteria in (ProductSortCriteria.PRICE_ASC, ProductSortCriteria.PRICE_DESC):
        key = lambda p: p.base_price
    else:
        key = lambda p: p.category.lower()

    descending = criteria.value.endswith('_DESC')
    return sorted(products, key=key, reverse=descending)


def search_products(products: Iterable[Product], query: Optional[str]) -> list[Product]:
    """Case-insensitive match on name, description or category."""
    products = list(products)
    term = (query or '').strip().lower()
    if not term:
        return products
    return [
        p for p in products
        if term in p.name.lower() or term in p.description.lower() or term in p.category.lower()
    ]
