"""
Centralized settings and path configuration for the pricer.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    # Walk up from this file to find the project root
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 4 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path

    # Catalog JSON files, one per catalog
    catalogs_dir: Path

    # CSV / Excel quote exports
    exports_dir: Path

    # Defaults for a fresh workspace
    default_catalog_name: str = "Default Catalog"
    default_company_name: str = ""

    # Presentation only; the engine never rounds
    currency_symbol: str = "$"
    money_places: int = 2

    log_level: str = "INFO"

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> 'Settings':
        """
        Load settings from the project structure.

        Any field can be overridden with a PRICER_* environment variable,
        e.g. PRICER_CATALOGS_DIR or PRICER_COMPANY_NAME.
        """
        root = project_root or Path(os.environ.get('PRICER_PROJECT_ROOT', '') or get_project_root())
        data_dir = root / 'data'

        return cls(
            project_root=root,
            catalogs_dir=Path(os.environ.get('PRICER_CATALOGS_DIR', data_dir / 'catalogs')),
            exports_dir=Path(os.environ.get('PRICER_EXPORTS_DIR', data_dir / 'exports')),
            default_catalog_name=os.environ.get('PRICER_CATALOG_NAME', "Default Catalog"),
            default_company_name=os.environ.get('PRICER_COMPANY_NAME', ""),
            currency_symbol=os.environ.get('PRICER_CURRENCY_SYMBOL', "$"),
            money_places=int(os.environ.get('PRICER_MONEY_PLACES', 2)),
            log_level=os.environ.get('PRICER_LOG_LEVEL', "INFO").upper(),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reset_settings():
    """Drop the cached settings so the next get_settings() reloads them."""
    global _settings
    _settings = None
