"""
Product records as seen by the catalog engine.

Raw catalog entries are loosely shaped (sizes may be missing, images may be
empty strings). ``ProductRecord.from_dict`` applies the defaulting rules once
so the filter/sort code can rely on every field being present:

  stock          -> 10 when absent
  rating         -> 4.5, review_count -> 15 when absent
  tags           -> [category, subcategory] lower-cased when absent
  sizes          -> None when absent (size facet does not apply)
  images         -> blank entries dropped; an empty list becomes [placeholder]
  is_out_of_stock-> stock <= 0 when the flag is absent
  is_new / is_best_seller / is_pre_order -> False when absent
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

PLACEHOLDER_IMAGE = "/window.svg"

DEFAULT_STOCK = 10
DEFAULT_RATING = 4.5
DEFAULT_REVIEW_COUNT = 15

_KNOWN_KEYS = frozenset({
    "id", "name", "price", "category", "subcategory", "description", "originalPrice",
    "original_price", "colors", "sizes", "materials", "tags", "images", "image", "stock",
    "isOutOfStock", "is_out_of_stock", "isNew", "is_new", "isBestSeller", "is_best_seller",
    "isPreOrder", "is_pre_order", "maxQuantity", "max_quantity", "rating", "reviewCount",
    "review_count", "sku",
})


def _strings(value: Any) -> Tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(v) for v in value)


@dataclass(frozen=True)
class ProductRecord:
    """Read-only product snapshot. The engine never mutates these."""
    id: str
    name: str
    price: int
    category: str
    subcategory: str = ""
    description: str = ""
    original_price: Optional[int] = None
    colors: Tuple[str, ...] = ()
    sizes: Optional[Tuple[str, ...]] = None
    materials: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()
    images: Tuple[str, ...] = (PLACEHOLDER_IMAGE,)
    stock: int = DEFAULT_STOCK
    is_out_of_stock: bool = False
    is_new: bool = False
    is_best_seller: bool = False
    is_pre_order: bool = False
    max_quantity: Optional[int] = None
    rating: float = DEFAULT_RATING
    review_count: int = DEFAULT_REVIEW_COUNT
    sku: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def on_sale(self) -> bool:
        return self.original_price is not None and self.original_price > self.price

    @property
    def image(self) -> str:
        return self.images[0] if self.images else PLACEHOLDER_IMAGE

    @classmethod
    def from_dict(cls, data: Dict[str, Any], placeholder_image: str = PLACEHOLDER_IMAGE) -> "ProductRecord":
        """
        Build a record from a raw catalog entry (camelCase or snake_case keys).

        Raises:
            KeyError: if id, name, price or category is missing
            ValueError: if price/stock are not numeric
        """
        def pick(*names: str, default: Any = None) -> Any:
            for name in names:
                if data.get(name) is not None:
                    return data[name]
            return default

        category = str(data["category"])
        subcategory = str(pick("subcategory", default=""))
        stock = int(pick("stock", default=DEFAULT_STOCK))

        tags = pick("tags")
        if tags is None:
            tags = [t for t in (category.lower(), subcategory.lower()) if t]

        sizes = pick("sizes")
        images = tuple(img.strip() for img in _strings(pick("images", "image")) if img and img.strip())

        out_of_stock = pick("isOutOfStock", "is_out_of_stock")
        original_price = pick("originalPrice", "original_price")
        max_quantity = pick("maxQuantity", "max_quantity")

        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            price=int(data["price"]),
            category=category,
            subcategory=subcategory,
            description=str(pick("description", default="")),
            original_price=int(original_price) if original_price is not None else None,
            colors=_strings(pick("colors")),
            sizes=_strings(sizes) if sizes is not None else None,
            materials=_strings(pick("materials")),
            tags=_strings(tags),
            images=images or (placeholder_image,),
            stock=stock,
            is_out_of_stock=bool(out_of_stock) if out_of_stock is not None else stock <= 0,
            is_new=bool(pick("isNew", "is_new", default=False)),
            is_best_seller=bool(pick("isBestSeller", "is_best_seller", default=False)),
            is_pre_order=bool(pick("isPreOrder", "is_pre_order", default=False)),
            max_quantity=int(max_quantity) if max_quantity is not None else None,
            rating=float(pick("rating", default=DEFAULT_RATING)),
            review_count=int(pick("reviewCount", "review_count", default=DEFAULT_REVIEW_COUNT)),
            sku=pick("sku"),
            extra={k: v for k, v in data.items() if k not in _KNOWN_KEYS},
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "original_price": self.original_price,
            "category": self.category,
            "subcategory": self.subcategory,
            "description": self.description,
            "colors": list(self.colors),
            "sizes": list(self.sizes) if self.sizes is not None else None,
            "materials": list(self.materials),
            "tags": list(self.tags),
            "images": list(self.images),
            "stock": self.stock,
            "is_out_of_stock": self.is_out_of_stock,
            "is_new": self.is_new,
            "is_best_seller": self.is_best_seller,
            "is_pre_order": self.is_pre_order,
            "on_sale": self.on_sale,
            "max_quantity": self.max_quantity,
            "rating": self.rating,
            "review_count": self.review_count,
            "sku": self.sku,
        }
