"""
Centralized settings for the pricelist resolver.

Values come from the environment; a .env file at the project root is loaded
first when present. Variables already set in the environment win.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 3 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


def _load_dotenv(project_root: Path):
    root_env = project_root / '.env'
    if root_env.exists():
        load_dotenv(root_env)


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    project_root: Path

    # Which backend serves lookups: "odoo" or "snapshot"
    backend: str = 'odoo'

    # Odoo JSON-RPC endpoint and credentials
    odoo_url: Optional[str] = None
    odoo_db: Optional[str] = None
    odoo_user: Optional[str] = None
    odoo_password: Optional[str] = None
    odoo_timeout: float = 30.0

    # Boolean field on product.pricelist that marks a list as eligible
    pricelist_active_field: str = 'x_studio_disponible'

    # JSON export used by the snapshot backend
    snapshot_path: Optional[Path] = None

    port: int = 3001
    log_level: str = 'INFO'

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> 'Settings':
        """Load settings from .env and the process environment."""
        root = project_root or get_project_root()
        _load_dotenv(root)

        snapshot = os.getenv('SNAPSHOT_PATH')
        snapshot_path = None
        if snapshot:
            snapshot_path = Path(snapshot)
            if not snapshot_path.is_absolute():
                snapshot_path = root / snapshot_path

        return cls(
            project_root=root,
            backend=os.getenv('PRICELIST_BACKEND', 'odoo').strip().lower(),
            odoo_url=os.getenv('ODOO_URL') or None,
            odoo_db=os.getenv('ODOO_DB') or None,
            odoo_user=os.getenv('ODOO_USER') or None,
            odoo_password=os.getenv('ODOO_PASSWORD') or None,
            odoo_timeout=float(os.getenv('ODOO_TIMEOUT', '30')),
            pricelist_active_field=os.getenv('ODOO_PRICELIST_ACTIVE_FIELD', 'x_studio_disponible'),
            snapshot_path=snapshot_path,
            port=int(os.getenv('PORT', '3001')),
            log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
        )

    def missing_odoo_settings(self) -> list[str]:
        """Names of the Odoo variables that are not set."""
        required = {
            'ODOO_URL': self.odoo_url,
            'ODOO_DB': self.odoo_db,
            'ODOO_USER': self.odoo_user,
            'ODOO_PASSWORD': self.odoo_password,
        }
        return [name for name, value in required.items() if not value]


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
