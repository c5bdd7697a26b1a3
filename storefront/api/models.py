"""
Pydantic models for storefront API requests and responses.
"""
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List


class AddItemRequest(BaseModel):
    """Add a catalog product to the cart. Price and display data come from the catalog."""
    product_id: str = Field(description="Catalog product id")
    quantity: int = Field(default=1, description="Units to add (merged with an existing line)")
    color: Optional[str] = Field(default=None, description="Chosen color (part of the line key)")
    size: Optional[str] = Field(default=None, description="Chosen size (part of the line key)")


class UpdateQuantityRequest(BaseModel):
    quantity: int = Field(description="New quantity; 0 or less removes the line")
    color: Optional[str] = None
    size: Optional[str] = None


class CouponRequest(BaseModel):
    code: str = Field(description="Coupon code (case-insensitive)")


class CartLineModel(BaseModel):
    product_id: str
    name: str
    price: int
    quantity: int
    color: Optional[str] = None
    size: Optional[str] = None
    max_quantity: Optional[int] = None
    image: Optional[str] = None
    category: str = ""
    subcategory: str = ""
    line_total: int


class CouponModel(BaseModel):
    code: str
    discount: float
    type: str


class CartResponse(BaseModel):
    session_id: str
    items: List[CartLineModel] = Field(default_factory=list)
    applied_coupon: Optional[CouponModel] = None
    item_count: int = 0
    subtotal: int = 0
    discount_amount: float = 0.0
    discounted_subtotal: float = 0.0
    shipping: int = 0
    tax: int = 0
    total: int = 0
    formatted_total: str = Field(default="", description="Total formatted for display, e.g. ₦45,000")


class SearchRequest(BaseModel):
    """
    Shop listing request. Only the fields that are sent change the session's
    listing state; any filter or sort change returns to page 1 unless ``page``
    is also given.
    """
    category: Optional[str] = None
    subcategory: Optional[str] = None
    price_min: Optional[int] = None
    price_max: Optional[int] = None
    colors: Optional[List[str]] = None
    sizes: Optional[List[str]] = None
    materials: Optional[List[str]] = None
    in_stock: Optional[bool] = None
    on_sale: Optional[bool] = None
    is_new: Optional[bool] = None
    is_best_seller: Optional[bool] = None
    search_query: Optional[str] = None
    sort: Optional[str] = Field(default=None, description="relevance, newest, price-low, price-high, name-asc, name-desc, popularity")
    page: Optional[int] = Field(default=None, description="1-indexed page")
    items_per_page: Optional[int] = None
    reset: bool = Field(default=False, description="Reset filters before applying this request")


class SearchResponse(BaseModel):
    session_id: str
    products: List[Dict[str, Any]] = Field(default_factory=list)
    total_results: int
    total_pages: int
    current_page: int
    items_per_page: int
    has_next: bool
    has_prev: bool
    sort: str
    filters: Dict[str, Any] = Field(default_factory=dict)
    message: Optional[str] = Field(default=None, description="Set to 'No results found' for an empty page")


class FacetsResponse(BaseModel):
    categories: List[str]
    subcategories: List[str]
    colors: List[str]
    sizes: List[str]
    materials: List[str]
    price_range: List[int]
    sort_options: List[Dict[str, str]]


class RecommendationModel(BaseModel):
    product: Dict[str, Any]
    score: float
    reason: str


class RecommendationsResponse(BaseModel):
    product_id: str
    recommendations: List[RecommendationModel]


class WhatsAppResponse(BaseModel):
    url: str


class HealthResponse(BaseModel):
    """Response model for health check."""
    status: str
    service: str
    version: str
    config: Dict[str, Any]
