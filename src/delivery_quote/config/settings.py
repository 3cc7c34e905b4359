"""
Centralized settings and path configuration for the delivery quote engine.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional


FULFILLMENT_MODES = ('drone', 'robot')
MULTISTOP_PRICING_MODES = ('selector', 'per_stop')
SUBMISSION_PRICE_SOURCES = ('breakdown', 'legacy')


def get_package_root() -> Path:
    """Get the delivery_quote package directory."""
    return Path(__file__).resolve().parent.parent


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 3 levels up from this file
    return current.parent.parent.parent.parent


def _choice(value: str, allowed: tuple, name: str) -> str:
    value = value.strip().lower()
    if value not in allowed:
        raise ValueError(f"{name} must be one of {', '.join(allowed)}; got '{value}'")
    return value


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path

    # Directory holding the rate table CSV files
    rates_dir: Path

    # Pricing policy
    fulfillment_mode: str = 'drone'
    multistop_package_pricing: str = 'selector'  # "selector" or "per_stop"
    submission_price_source: str = 'breakdown'  # "breakdown" or "legacy"

    # Shown on the created order until dispatch supplies a real estimate
    default_eta: str = '15 min'

    def __post_init__(self):
        self.fulfillment_mode = _choice(
            self.fulfillment_mode, FULFILLMENT_MODES, 'fulfillment_mode'
        )
        self.multistop_package_pricing = _choice(
            self.multistop_package_pricing, MULTISTOP_PRICING_MODES, 'multistop_package_pricing'
        )
        self.submission_price_source = _choice(
            self.submission_price_source, SUBMISSION_PRICE_SOURCES, 'submission_price_source'
        )

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> 'Settings':
        """Load settings from the project structure and environment overrides."""
        root = project_root or get_project_root()

        rates_dir = os.environ.get('DELIVERY_QUOTE_RATES_DIR')

        return cls(
            project_root=root,
            rates_dir=Path(rates_dir) if rates_dir else get_package_root() / 'data',
            fulfillment_mode=os.environ.get('DELIVERY_QUOTE_FULFILLMENT_MODE', 'drone'),
            multistop_package_pricing=os.environ.get('DELIVERY_QUOTE_MULTISTOP_PRICING', 'selector'),
            submission_price_source=os.environ.get('DELIVERY_QUOTE_SUBMISSION_PRICE', 'breakdown'),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
