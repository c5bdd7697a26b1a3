"""
Configuration management for the storefront.

Loads settings from the YAML config file and the environment (.env is read
at import time) and provides typed access.
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

load_dotenv()


def _project_root() -> Path:
    """Return project root (parent of the storefront package)."""
    return Path(__file__).resolve().parent.parent.parent


DEFAULT_CONFIG_PATH = _project_root() / "config" / "default.yaml"

COUPON_TYPES = ("percentage", "fixed")


def _default_coupons() -> Dict[str, Dict[str, Any]]:
    return {
        "WELCOME10": {"discount": 10, "type": "percentage"},
        "FREESHIP": {"discount": 2500, "type": "fixed"},
        "NEWCUSTOMER": {"discount": 15, "type": "percentage"},
        "LUXURY20": {"discount": 20, "type": "percentage"},
    }


@dataclass
class StorefrontConfig:
    """Configuration for the cart and catalog engines."""

    # Cart pricing (whole Naira)
    tax_rate: float = 0.075
    free_shipping_threshold: int = 50000
    standard_shipping: int = 2500
    default_max_quantity: int = 99
    currency: str = "NGN"

    # Coupon table: CODE -> {"discount": number, "type": "percentage" | "fixed"}
    coupons: Dict[str, Dict[str, Any]] = field(default_factory=_default_coupons)

    # Catalog
    items_per_page: int = 12
    default_max_price: int = 100000
    placeholder_image: str = "/window.svg"

    # Data / integrations
    catalog_path: str = "data/products.json"
    database_url: str = field(default_factory=lambda: os.getenv("DATABASE_URL", ""))
    sales_whatsapp: str = field(default_factory=lambda: os.getenv("SALES_WHATSAPP", "2349061819572"))

    def __post_init__(self) -> None:
        if self.items_per_page <= 0:
            raise ValueError(f"items_per_page must be positive, got {self.items_per_page}")
        if self.default_max_quantity <= 0:
            raise ValueError(f"default_max_quantity must be positive, got {self.default_max_quantity}")
        for code, entry in self.coupons.items():
            if entry.get("type") not in COUPON_TYPES:
                raise ValueError(f"Coupon {code!r} has unknown type {entry.get('type')!r}")

    def resolve_path(self, relative: str) -> Path:
        """Resolve a data path relative to the project root unless already absolute."""
        path = Path(relative)
        return path if path.is_absolute() else _project_root() / path

    @classmethod
    def from_yaml(cls, config_path: Optional[Path] = None) -> "StorefrontConfig":
        """Load configuration from YAML file."""
        path = config_path or DEFAULT_CONFIG_PATH
        if not path.exists():
            return cls()

        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}

        pricing = data.get('pricing', {})
        catalog = data.get('catalog', {})
        data_config = data.get('data', {})
        coupons = data.get('coupons')

        return cls(
            tax_rate=float(pricing.get('tax_rate', 0.075)),
            free_shipping_threshold=int(pricing.get('free_shipping_threshold', 50000)),
            standard_shipping=int(pricing.get('standard_shipping', 2500)),
            default_max_quantity=int(pricing.get('default_max_quantity', 99)),
            currency=pricing.get('currency', 'NGN'),
            coupons={str(k).upper(): dict(v) for k, v in coupons.items()} if coupons else _default_coupons(),
            items_per_page=int(catalog.get('items_per_page', 12)),
            default_max_price=int(catalog.get('default_max_price', 100000)),
            placeholder_image=catalog.get('placeholder_image', '/window.svg'),
            catalog_path=os.getenv("CATALOG_PATH") or data_config.get('catalog_path', 'data/products.json'),
        )


# Global config instance (used by the API layer; engines take config explicitly)
_config: Optional[StorefrontConfig] = None


def get_config() -> StorefrontConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = StorefrontConfig.from_yaml()
    return _config


def set_config(config: Optional[StorefrontConfig]) -> None:
    """Set (or with None, reset) the global configuration instance."""
    global _config
    _config = config
