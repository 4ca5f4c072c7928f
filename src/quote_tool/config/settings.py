"""
Centralized settings and path configuration for the quote tool.

Values come from the environment (optionally a .env file in the project
root) with sensible defaults for local development.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from ..engine.pricing import PricingPolicy


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 4 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except ValueError:
        return default


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path
    catalog_dir: Path
    catalog_workbook: Optional[Path] = None

    # Pricing rules
    rounding: str = 'half_up'
    modifier_mode: str = 'multiplicative'
    min_details_for_contract_step: int = 0

    # Mail relay
    smtp_host: str = 'smtp.gmail.com'
    smtp_port: int = 587
    smtp_username: Optional[str] = None
    smtp_password: Optional[str] = None
    mail_from: str = 'anfragen@localhost'
    mail_to: str = 'anfragen@localhost'

    # API
    cors_origins: tuple = ('*',)
    log_level: str = 'INFO'

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> 'Settings':
        """Load settings from the environment and the project structure."""
        root = project_root or get_project_root()
        load_dotenv(root / '.env')

        catalog_dir = os.getenv('QUOTE_CATALOG_DIR')
        workbook = os.getenv('QUOTE_CATALOG_WORKBOOK')
        smtp_username = os.getenv('SMTP_USERNAME') or None
        origins = os.getenv('CORS_ORIGINS', '*')

        return cls(
            project_root=root,
            catalog_dir=Path(catalog_dir) if catalog_dir else Path(__file__).resolve().parent.parent / 'data' / 'files',
            catalog_workbook=Path(workbook) if workbook else None,
            rounding=os.getenv('QUOTE_ROUNDING', 'half_up'),
            modifier_mode=os.getenv('QUOTE_MODIFIER_MODE', 'multiplicative'),
            min_details_for_contract_step=_env_int('QUOTE_MIN_DETAILS_STEP3', 0),
            smtp_host=os.getenv('SMTP_HOST', 'smtp.gmail.com'),
            smtp_port=_env_int('SMTP_PORT', 587),
            smtp_username=smtp_username,
            smtp_password=os.getenv('SMTP_PASSWORD') or None,
            mail_from=os.getenv('MAIL_FROM', smtp_username or 'anfragen@localhost'),
            mail_to=os.getenv('MAIL_TO', smtp_username or 'anfragen@localhost'),
            cors_origins=tuple(o.strip() for o in origins.split(',') if o.strip()),
            log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
        )

    def pricing_policy(self) -> PricingPolicy:
        """Pricing policy for new engines."""
        return PricingPolicy(rounding=self.rounding, modifier_mode=self.modifier_mode)

    def engine_options(self) -> dict:
        """Keyword arguments for QuoteEngine."""
        return {
            'policy': self.pricing_policy(),
            'min_details_for_contract_step': self.min_details_for_contract_step,
        }


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
