import logging
import os
import re
import threading
from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, ConfigDict, Field

from bus import NotificationBus
from cart import Cart
from checkout import ONLINE_TABLE, place_order
from database import CART_KEY, Storage, get_storage
from errors import (
    CartError,
    CatalogValidationError,
    CheckoutValidationError,
    InvalidTransitionError,
    OrderValidationError,
    PersistenceError,
    StoreError,
)
from handoff import telegram_link
from pricing import calc_order_total, format_price
from receipt import render_receipt
from reports import active_order_count, dashboard_stats, kitchen_queue, revenue_by_date, search_orders
from schemas import ContactMethod, Order, OrderStatus, Product, Role, SystemConfig, Topping, new_id
from store import Store

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(message)s",
)
logger = logging.getLogger("foodexpress")

app = FastAPI(title="FoodExpress Store API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -----------------------
# Views sharing one store
# -----------------------

class Views:
    """One store per role screen, all attached to the same bus and storage.

    Endpoints run in a threadpool, so every mutation holds ``lock``: the
    stores assume one writer at a time.
    """

    def __init__(self, storage: Storage):
        self.storage = storage
        self.bus = NotificationBus()
        self.lock = threading.RLock()
        self.stores = {role: Store(storage, self.bus) for role in Role}
        self.carts: Dict[str, Cart] = {}

    def cart_for(self, session_id: str) -> Cart:
        with self.lock:
            if session_id not in self.carts:
                self.carts[session_id] = Cart(self.storage, key=f"{CART_KEY}:{session_id}")
            return self.carts[session_id]

    @property
    def customer(self) -> Store:
        return self.stores[Role.CUSTOMER]

    @property
    def staff(self) -> Store:
        return self.stores[Role.STAFF]

    @property
    def admin(self) -> Store:
        return self.stores[Role.ADMIN]

    def close(self):
        for store in self.stores.values():
            store.close()


_views: Optional[Views] = None
_views_lock = threading.Lock()


def get_views() -> Views:
    global _views
    with _views_lock:
        if _views is None:
            _views = Views(get_storage())
        return _views


CART_COOKIE = "cart_id"
SESSION_ID = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def get_cart(request: Request, response: Response, views: Views = Depends(get_views)) -> Cart:
    """The calling customer's own cart, keyed by the X-Cart-Id header or the cart cookie."""
    session_id = request.headers.get("X-Cart-Id")
    if session_id and SESSION_ID.match(session_id):
        return views.cart_for(session_id)
    session_id = request.cookies.get(CART_COOKIE)
    if not session_id or not SESSION_ID.match(session_id):
        session_id = new_id()
        response.set_cookie(CART_COOKIE, session_id, httponly=True, samesite="lax")
    return views.cart_for(session_id)

# --------------
# Error mapping
# --------------

ERROR_STATUS = {
    OrderValidationError: 400,
    CheckoutValidationError: 400,
    CartError: 400,
    CatalogValidationError: 400,
    InvalidTransitionError: 409,
    PersistenceError: 503,
}


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    status = next((code for kind, code in ERROR_STATUS.items() if isinstance(exc, kind)), 500)
    logger.warning("%s %s -> %s: %s", request.method, request.url.path, status, exc)
    return JSONResponse(status_code=status, content={"detail": str(exc)})


def _order_or_404(store: Store, order_id: str) -> Order:
    order = store.get_order(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return order

# ---------
# Root/Test
# ---------

@app.get("/")
def read_root():
    return {"message": "FoodExpress Store API is running"}


@app.get("/test")
def test_storage(views: Views = Depends(get_views)):
    return {
        "backend": "✅ Running",
        "storage": type(views.storage).__name__,
        "storage_backend": os.getenv("STORAGE_BACKEND", "file"),
        "subscribers": views.bus.subscriber_count,
        "products": len(views.customer.products),
        "orders": len(views.staff.orders),
    }

# ---------------
# Catalog Endpoints
# ---------------

@app.get("/api/products")
def list_products(category: Optional[str] = None, q: str = "", include_hidden: bool = False,
                  views: Views = Depends(get_views)):
    if include_hidden:
        return views.admin.products
    return views.customer.available_products(category=category, search=q)


class CreateProduct(BaseModel):
    name: str
    description: str = ""
    price: float = Field(..., ge=0)
    category: str
    image_url: str = ""
    is_available: bool = True
    toppings: List[Topping] = Field(default_factory=list)


@app.post("/api/products", status_code=201)
def create_product(payload: CreateProduct, views: Views = Depends(get_views)):
    product = Product(**payload.model_dump())
    with views.lock:
        return views.admin.add_product(product)


@app.put("/api/products/{product_id}")
def update_product(product_id: str, payload: CreateProduct, views: Views = Depends(get_views)):
    product = Product(id=product_id, **payload.model_dump())
    with views.lock:
        updated = views.admin.update_product(product)
    if not updated:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@app.delete("/api/products/{product_id}")
def delete_product(product_id: str, views: Views = Depends(get_views)):
    with views.lock:
        return {"deleted": views.admin.delete_product(product_id)}


@app.get("/api/categories")
def list_categories(views: Views = Depends(get_views)):
    store = views.admin
    return [
        {**c.model_dump(), "product_count": len(store.products_in_category(c.name))}
        for c in store.categories
    ]


class CategoryName(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1)


@app.post("/api/categories", status_code=201)
def create_category(payload: CategoryName, views: Views = Depends(get_views)):
    with views.lock:
        return views.admin.add_category(payload.name)


@app.put("/api/categories/{category_id}")
def rename_category(category_id: str, payload: CategoryName, views: Views = Depends(get_views)):
    with views.lock:
        renamed = views.admin.update_category(category_id, payload.name)
    if not renamed:
        raise HTTPException(status_code=404, detail="Category not found")
    return views.admin.get_category(category_id)


@app.delete("/api/categories/{category_id}")
def delete_category(category_id: str, views: Views = Depends(get_views)):
    with views.lock:
        return {"deleted": views.admin.delete_category(category_id)}

# ------
# Config
# ------

@app.get("/api/config", response_model=SystemConfig)
def read_config(views: Views = Depends(get_views)):
    return views.customer.config


@app.put("/api/config", response_model=SystemConfig)
def replace_config(payload: SystemConfig, views: Views = Depends(get_views)):
    with views.lock:
        return views.admin.update_config(payload)

# -------------------------
# Pricing endpoints
# -------------------------

@app.get("/api/pricing/format")
def pricing_format(amount: float, views: Views = Depends(get_views)):
    return views.customer.format_price(amount)._asdict()


class QuoteTopping(BaseModel):
    name: str = ""
    price: float = Field(..., ge=0)


class QuoteItem(BaseModel):
    name: str = ""
    price: float = Field(..., ge=0)
    quantity: int = Field(..., ge=1)
    toppings: List[QuoteTopping] = Field(default_factory=list)


class QuoteRequest(BaseModel):
    items: List[QuoteItem]
    khr_rate: Optional[float] = Field(None, gt=0)
    vnd_rate: Optional[float] = Field(None, gt=0)


@app.post("/api/pricing/quote")
def pricing_quote(payload: QuoteRequest, views: Views = Depends(get_views)):
    total = round(sum((i.price + sum(t.price for t in i.toppings)) * i.quantity for i in payload.items), 2)
    config = views.customer.config
    prices = format_price(total,
                          payload.khr_rate or config.exchange_rate_khr,
                          payload.vnd_rate or config.exchange_rate_vnd)
    return {"total": total, **prices._asdict()}

# ----
# Cart
# ----

class AddToCart(BaseModel):
    product_id: str
    quantity: int = 1
    topping_ids: List[str] = Field(default_factory=list)
    note: Optional[str] = None


def _cart_view(views: Views, cart: Cart):
    return {
        "items": cart.items,
        "item_count": cart.item_count,
        "total": cart.total,
        "prices": views.customer.format_price(cart.total)._asdict(),
    }


@app.get("/api/cart")
def read_cart(views: Views = Depends(get_views), cart: Cart = Depends(get_cart)):
    return _cart_view(views, cart)


@app.post("/api/cart/items", status_code=201)
def add_to_cart(payload: AddToCart, views: Views = Depends(get_views), cart: Cart = Depends(get_cart)):
    product = views.customer.get_product(payload.product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    with views.lock:
        cart.add(product, quantity=payload.quantity, topping_ids=payload.topping_ids, note=payload.note)
    return _cart_view(views, cart)


@app.delete("/api/cart/items/{cart_id}")
def remove_from_cart(cart_id: str, views: Views = Depends(get_views), cart: Cart = Depends(get_cart)):
    with views.lock:
        removed = cart.remove(cart_id)
    if not removed:
        raise HTTPException(status_code=404, detail="Cart line not found")
    return _cart_view(views, cart)

# ---------------
# Orders Endpoints
# ---------------

class CheckoutRequest(BaseModel):
    customer_name: str
    contact_method: ContactMethod = ContactMethod.PHONE
    contact_value: str
    delivery_address: Optional[str] = None
    table_number: Optional[str] = ONLINE_TABLE


@app.post("/api/checkout", status_code=201)
def checkout(payload: CheckoutRequest, views: Views = Depends(get_views), cart: Cart = Depends(get_cart)):
    store = views.customer
    with views.lock:
        order = place_order(store, cart, payload.customer_name, payload.contact_method,
                            payload.contact_value, delivery_address=payload.delivery_address,
                            table_number=payload.table_number)
    return {
        "order": order,
        "code": order.display_code,
        "prices": store.format_price(order.total_amount)._asdict(),
        "handoff_url": telegram_link(order, store.config),
    }


@app.get("/api/orders")
def list_orders(q: str = "", views: Views = Depends(get_views)):
    orders = views.admin.orders
    return search_orders(orders, q) if q else orders


@app.get("/api/orders/lookup/{code}")
def lookup_order(code: str, views: Views = Depends(get_views)):
    order = views.customer.find_order(code)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return {"order": order, "prices": views.customer.format_price(order.total_amount)._asdict()}


@app.put("/api/orders/{order_id}")
def edit_order(order_id: str, payload: Order, views: Views = Depends(get_views)):
    if payload.id != order_id:
        raise HTTPException(status_code=400, detail="Order id mismatch")
    order = payload.model_copy(update={"total_amount": calc_order_total(payload.items)})
    with views.lock:
        _order_or_404(views.admin, order_id)
        views.admin.update_order(order)
    return order


@app.post("/api/orders/{order_id}/advance")
def advance_order(order_id: str, views: Views = Depends(get_views)):
    store = views.staff
    with views.lock:
        _order_or_404(store, order_id)
        status = store.advance_order(order_id)
    return {"id": order_id, "status": status, "advanced": status is not None}


class StatusChange(BaseModel):
    status: OrderStatus


@app.post("/api/orders/{order_id}/status")
def change_status(order_id: str, payload: StatusChange, views: Views = Depends(get_views)):
    store = views.staff
    with views.lock:
        _order_or_404(store, order_id)
        store.update_order_status(order_id, payload.status)
        return store.get_order(order_id)


class CancelRequest(BaseModel):
    reason: str = ""


@app.post("/api/orders/{order_id}/cancel")
def cancel_order(order_id: str, payload: CancelRequest, views: Views = Depends(get_views)):
    store = views.staff
    with views.lock:
        _order_or_404(store, order_id)
        store.cancel_order(order_id, payload.reason)
        return store.get_order(order_id)


@app.get("/api/orders/{order_id}/receipt", response_class=PlainTextResponse)
def order_receipt(order_id: str, width: int = 32, views: Views = Depends(get_views)):
    store = views.staff
    return render_receipt(_order_or_404(store, order_id), store.config, width=max(24, width))

# -------------------
# Kitchen and reports
# -------------------

@app.get("/api/kitchen")
def kitchen(q: str = "", views: Views = Depends(get_views)):
    store = views.staff
    return {
        "notice": store.config.kitchen_notification_text,
        "active": active_order_count(store.orders),
        "orders": kitchen_queue(store.orders, q),
    }


@app.get("/api/reports/dashboard")
def dashboard(days: int = 7, views: Views = Depends(get_views)):
    orders = views.admin.orders
    return {
        "stats": dashboard_stats(orders),
        "revenue_by_date": revenue_by_date(orders, days=days),
    }


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
