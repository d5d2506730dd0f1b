"""Process-wide API state: one quote session and the catalog store."""
from ..config.settings import get_settings
from ..services.catalog_service import CatalogStore
from ..services.quote_session import QuoteSession

settings = get_settings()
store = CatalogStore(settings.catalogs_dir)
session = QuoteSession(settings=settings)


def get_session() -> QuoteSession:
    return session


def get_store() -> CatalogStore:
    return store
