"""
FastAPI server exposing the cart and shop engines to the storefront UI.

Each session id gets its own cart engine and catalog engine; the UI reads
their state back as plain JSON.

Usage:
    python -m storefront.api.server
    # or
    uvicorn storefront.api.server:app --reload --port 8000
"""
import os
import traceback
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront import __version__
from storefront.api.models import (
    AddItemRequest,
    CartResponse,
    CouponRequest,
    FacetsResponse,
    HealthResponse,
    RecommendationsResponse,
    SearchRequest,
    SearchResponse,
    UpdateQuantityRequest,
    WhatsAppResponse,
)
from storefront.cart.coupons import StaticCouponTable
from storefront.cart.engine import CartEngine
from storefront.cart.models import CartLineItem
from storefront.cart.persistence import CartPersistence, create_cart_store
from storefront.cart.whatsapp import build_cart_message, whatsapp_url
from storefront.catalog.engine import CatalogEngine
from storefront.catalog.models import ProductRecord
from storefront.catalog.product_source import JsonProductSource, ProductSource, ProductSourceError, get_product
from storefront.catalog.sorting import SORT_OPTIONS
from storefront.core.config import get_config
from storefront.recommendation.scoring import recommend
from storefront.utils.currency import format_price
from storefront.utils.logger import get_logger

logger = get_logger("api.server")

RECENTLY_VIEWED_LIMIT = 20


@dataclass
class StorefrontSession:
    """Per-shopper state: cart, shop listing and recently viewed products."""
    cart: CartEngine
    catalog: CatalogEngine
    viewed_ids: Deque[str] = field(default_factory=lambda: deque(maxlen=RECENTLY_VIEWED_LIMIT))
    price_bounds_ready: bool = False

    def record_view(self, product_id: str) -> None:
        if product_id in self.viewed_ids:
            self.viewed_ids.remove(product_id)
        self.viewed_ids.appendleft(product_id)


app = FastAPI(
    title="Storefront API",
    description="Cart pricing and catalog listing for the storefront",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Session storage: session_id -> StorefrontSession
sessions: Dict[str, StorefrontSession] = {}

_product_source: Optional[ProductSource] = None
_cart_store: Optional[CartPersistence] = None


def set_product_source(source: Optional[ProductSource]) -> None:
    """Swap the catalog source (tests, alternative backends). None restores the configured JSON file."""
    global _product_source
    _product_source = source


def set_cart_store(store: Optional[CartPersistence]) -> None:
    global _cart_store
    _cart_store = store


def get_product_source() -> ProductSource:
    global _product_source
    if _product_source is None:
        config = get_config()
        _product_source = JsonProductSource(
            config.resolve_path(config.catalog_path),
            placeholder_image=config.placeholder_image,
        )
    return _product_source


def get_cart_store() -> CartPersistence:
    global _cart_store
    if _cart_store is None:
        _cart_store = create_cart_store(get_config().database_url)
    return _cart_store


def load_products() -> List[ProductRecord]:
    return get_product_source().list_products()


def get_or_create_session(session_id: str) -> StorefrontSession:
    """Get existing session or create one, restoring any persisted cart."""
    if session_id in sessions:
        return sessions[session_id]

    config = get_config()
    cart = CartEngine(
        config=config,
        coupons=StaticCouponTable.from_config(config),
        persistence=get_cart_store(),
        session_id=session_id,
    )
    cart.load_cart()

    # Catalog price bounds are derived on the first shop request, so the cart
    # keeps working while the product source is down
    sessions[session_id] = StorefrontSession(cart=cart, catalog=CatalogEngine(config))
    logger.info(f"Created new session: {session_id} ({len(cart.items)} restored cart lines)")
    return sessions[session_id]


def get_shop_session(session_id: str, products: List[ProductRecord]) -> StorefrontSession:
    """Session whose listing price bounds have been derived from the catalog."""
    session = get_or_create_session(session_id)
    if not session.price_bounds_ready:
        session.catalog.init_price_bounds(products)
        session.price_bounds_ready = True
    return session


def cart_response(session: StorefrontSession) -> CartResponse:
    cart = session.cart
    data = cart.to_dict()
    data["items"] = [dict(item.to_dict(), line_total=item.line_total) for item in cart.items]
    data["formatted_total"] = format_price(cart.total, cart.config.currency)
    return CartResponse(**data)


def search_response(session_id: str, catalog: CatalogEngine) -> SearchResponse:
    page = catalog.view
    filters = catalog.filters
    return SearchResponse(
        session_id=session_id,
        products=[p.to_dict() for p in page.products],
        total_results=page.total_results,
        total_pages=page.total_pages,
        current_page=page.current_page,
        items_per_page=page.items_per_page,
        has_next=page.has_next,
        has_prev=page.has_prev,
        sort=catalog.active_sort,
        filters={
            "category": filters.category,
            "subcategory": filters.subcategory,
            "price_range": list(filters.price_range),
            "max_price": filters.max_price,
            "colors": filters.colors,
            "sizes": filters.sizes,
            "materials": filters.materials,
            "in_stock": filters.in_stock,
            "on_sale": filters.on_sale,
            "is_new": filters.is_new,
            "is_best_seller": filters.is_best_seller,
            "search_query": filters.search_query,
        },
        message="No results found" if page.is_empty else None,
    )


# Error handlers

@app.exception_handler(ProductSourceError)
async def product_source_error_handler(request: Request, exc: ProductSourceError):
    logger.error(f"Product source failure on {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"detail": "Failed to load products"})


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


# API Endpoints

@app.get("/", response_model=HealthResponse)
async def root():
    """Health check endpoint."""
    config = get_config()
    return HealthResponse(
        status="online",
        service="Storefront API",
        version=__version__,
        config={
            "currency": config.currency,
            "tax_rate": config.tax_rate,
            "free_shipping_threshold": config.free_shipping_threshold,
            "standard_shipping": config.standard_shipping,
            "items_per_page": config.items_per_page,
        }
    )


@app.get("/products")
async def list_products():
    products = load_products()
    return {"total": len(products), "products": [p.to_dict() for p in products]}


@app.get("/products/{product_id}")
async def get_product_detail(product_id: str, session_id: Optional[str] = None):
    """Product detail; with a session id the view is recorded for recommendations."""
    product = get_product(load_products(), product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    if session_id:
        get_or_create_session(session_id).record_view(product_id)
    return product.to_dict()


@app.get("/products/{product_id}/recommendations", response_model=RecommendationsResponse)
async def product_recommendations(product_id: str, session_id: Optional[str] = None, limit: int = 8):
    products = load_products()
    if get_product(products, product_id) is None:
        raise HTTPException(status_code=404, detail="Product not found")

    viewed: List[str] = []
    purchased: List[str] = []
    if session_id and session_id in sessions:
        session = sessions[session_id]
        viewed = list(session.viewed_ids)
        # Items already in the cart stand in for purchase history
        purchased = [item.product_id for item in session.cart.items]

    recs = recommend(products, product_id=product_id, purchased_ids=purchased, viewed_ids=viewed, limit=limit)
    return RecommendationsResponse(product_id=product_id, recommendations=[r.to_dict() for r in recs])


@app.get("/cart/{session_id}", response_model=CartResponse)
async def get_cart(session_id: str):
    return cart_response(get_or_create_session(session_id))


@app.post("/cart/{session_id}/items", response_model=CartResponse)
async def add_cart_item(session_id: str, request: AddItemRequest):
    session = get_or_create_session(session_id)
    product = get_product(load_products(), request.product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    if product.is_out_of_stock and not product.is_pre_order:
        raise HTTPException(status_code=409, detail="Product is out of stock")

    line = CartLineItem(
        product_id=product.id,
        name=product.name,
        price=product.price,
        color=request.color,
        size=request.size,
        max_quantity=product.max_quantity,
        image=product.image,
        category=product.category,
        subcategory=product.subcategory,
        original_price=product.original_price,
        in_stock=not product.is_out_of_stock,
        is_pre_order=product.is_pre_order,
    )
    session.cart.add_item(line, request.quantity)
    return cart_response(session)


@app.patch("/cart/{session_id}/items/{product_id}", response_model=CartResponse)
async def update_cart_item(session_id: str, product_id: str, request: UpdateQuantityRequest):
    session = get_or_create_session(session_id)
    session.cart.update_quantity(product_id, request.quantity, request.color, request.size)
    return cart_response(session)


@app.delete("/cart/{session_id}/items/{product_id}", response_model=CartResponse)
async def remove_cart_item(session_id: str, product_id: str, color: Optional[str] = None, size: Optional[str] = None):
    session = get_or_create_session(session_id)
    session.cart.remove_item(product_id, color, size)
    return cart_response(session)


@app.delete("/cart/{session_id}", response_model=CartResponse)
async def clear_cart(session_id: str):
    session = get_or_create_session(session_id)
    session.cart.clear_cart()
    return cart_response(session)


@app.post("/cart/{session_id}/coupon", response_model=CartResponse)
async def apply_coupon(session_id: str, request: CouponRequest):
    session = get_or_create_session(session_id)
    if not session.cart.apply_coupon(request.code):
        raise HTTPException(status_code=400, detail="Invalid coupon code")
    return cart_response(session)


@app.delete("/cart/{session_id}/coupon", response_model=CartResponse)
async def remove_coupon(session_id: str):
    session = get_or_create_session(session_id)
    session.cart.remove_coupon()
    return cart_response(session)


@app.get("/cart/{session_id}/whatsapp", response_model=WhatsAppResponse)
async def cart_whatsapp_link(session_id: str):
    """Click-to-chat link carrying the cart as an order message."""
    session = get_or_create_session(session_id)
    cart = session.cart
    message = build_cart_message(cart.items, cart.totals, cart.config.currency)
    return WhatsAppResponse(url=whatsapp_url(get_config().sales_whatsapp, message))


@app.post("/shop/{session_id}/search", response_model=SearchResponse)
async def search_products(session_id: str, request: SearchRequest):
    """
    Update the session's listing state and return the current page.

    Filter fields that are sent replace the session's values; fields that are
    omitted keep their previous value.
    """
    try:
        products = load_products()
        session = get_shop_session(session_id, products)
        catalog = session.catalog
        sent = request.model_fields_set

        if request.reset:
            catalog.reset_filters()

        for name in ("category", "subcategory", "colors", "sizes", "materials",
                     "in_stock", "on_sale", "is_new", "is_best_seller"):
            if name in sent:
                catalog.set_filter(name, getattr(request, name))
        if "search_query" in sent:
            catalog.set_search_query(request.search_query or "")
        if "price_min" in sent or "price_max" in sent:
            low, high = catalog.filters.price_range
            catalog.update_price_range(
                request.price_min if request.price_min is not None else low,
                request.price_max if request.price_max is not None else high,
            )
        if request.sort is not None:
            catalog.set_sort(request.sort)
        if request.items_per_page is not None:
            catalog.set_items_per_page(request.items_per_page)
        if request.page is not None:
            catalog.set_page(request.page)

        catalog.filter_products(products)
        return search_response(session_id, catalog)

    except (HTTPException, ProductSourceError, ValueError):
        raise
    except Exception as e:
        logger.error(f"Error in /shop/search: {e}\n{traceback.format_exc()}")
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/shop/{session_id}/facets", response_model=FacetsResponse)
async def shop_facets(session_id: str):
    products = load_products()
    catalog = get_shop_session(session_id, products).catalog
    facets = catalog.facets(products)
    facets["sort_options"] = [{"value": o.value, "label": o.label} for o in SORT_OPTIONS]
    return FacetsResponse(**facets)


@app.delete("/session/{session_id}")
async def delete_session(session_id: str):
    """Forget a session's in-process state (the persisted cart is kept)."""
    if session_id in sessions:
        del sessions[session_id]
        logger.info(f"Deleted session: {session_id}")
        return {"status": "deleted", "session_id": session_id}
    raise HTTPException(status_code=404, detail="Session not found")


@app.get("/sessions")
async def list_sessions():
    """List all active sessions."""
    return {
        "active_sessions": len(sessions),
        "session_ids": list(sessions.keys())
    }


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8000"))
    print("=" * 60)
    print("Storefront API Server")
    print("=" * 60)
    print(f"API Documentation: http://localhost:{port}/docs")
    print("")
    print("Environment variables:")
    print("  DATABASE_URL   - persist carts in a SQL database (default: in memory)")
    print("  CATALOG_PATH   - product catalog JSON file")
    print("  LOG_LEVEL      - DEBUG, INFO, WARNING")
    print("=" * 60)

    uvicorn.run(app, host="0.0.0.0", port=port)
