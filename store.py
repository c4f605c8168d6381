"""
Shared local data store

A ``Store`` owns products, categories, orders and the config singleton. Every
mutation builds the new collection, writes it through the storage adapter and
only then swaps it into memory and publishes on the bus. Every store attached
to the same bus reloads all four records wholesale on each publish, so views
holding different store instances see one another's writes before the
mutating call returns.
"""

import logging
from typing import Callable, List, Optional

from pydantic import TypeAdapter, ValidationError

from bus import NotificationBus
from database import CATEGORIES_KEY, CONFIG_KEY, ORDERS_KEY, PRODUCTS_KEY, Storage
from errors import CatalogValidationError, InvalidTransitionError, OrderValidationError, PersistenceError
from pricing import PriceDisplay, calc_order_total, format_price_for, totals_match
from schemas import Category, Order, OrderStatus, Product, SystemConfig
from seed import default_categories, default_config, default_products

logger = logging.getLogger(__name__)

ProductList = TypeAdapter(List[Product])
CategoryList = TypeAdapter(List[Category])
OrderList = TypeAdapter(List[Order])
ConfigDoc = TypeAdapter(SystemConfig)

ORDER_FLOW = [
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.COMPLETED,
]

Listener = Callable[["Store"], None]


def next_status(current: OrderStatus) -> Optional[OrderStatus]:
    """The single status after ``current``, or None from COMPLETED/CANCELLED."""
    if current not in ORDER_FLOW:
        return None
    idx = ORDER_FLOW.index(current)
    if idx == len(ORDER_FLOW) - 1:
        return None
    return ORDER_FLOW[idx + 1]


def can_cancel(current: OrderStatus) -> bool:
    return current == OrderStatus.PENDING


def _category_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise CatalogValidationError("a category needs a name")
    return name


class Store:
    def __init__(self, storage: Storage, bus: NotificationBus):
        self.storage = storage
        self.bus = bus
        self.products: List[Product] = []
        self.categories: List[Category] = []
        self.orders: List[Order] = []
        self.config: SystemConfig = default_config()
        self._listeners: List[Listener] = []
        self._closed = False
        self._load()
        self.bus.subscribe(self._on_change)

    def close(self) -> None:
        if not self._closed:
            self.bus.unsubscribe(self._on_change)
            self._listeners.clear()
            self._closed = True

    def __enter__(self) -> "Store":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ---------------
    # Loading
    # ---------------

    def _read(self, key, adapter, seed):
        raw = self.storage.read(key)
        if raw is None:
            value = seed()
            if key != ORDERS_KEY:
                self.storage.write(key, adapter.dump_json(value))
                logger.info("seeded %s with defaults", key)
            return value
        try:
            return adapter.validate_json(raw)
        except ValidationError as e:
            raise PersistenceError(key, f"stored record is invalid: {e.error_count()} error(s)") from e

    def _load(self) -> None:
        products = self._read(PRODUCTS_KEY, ProductList, default_products)
        categories = self._read(CATEGORIES_KEY, CategoryList, default_categories)
        orders = self._read(ORDERS_KEY, OrderList, list)
        config = self._read(CONFIG_KEY, ConfigDoc, default_config)
        self.products, self.categories, self.orders, self.config = products, categories, orders, config

    def reload(self) -> None:
        self._load()
        for listener in list(self._listeners):
            listener(self)

    def _on_change(self) -> None:
        self.reload()

    # ---------------
    # Observers
    # ---------------

    def subscribe(self, listener: Listener) -> Listener:
        """Call ``listener(store)`` after every reload of this store's snapshot."""
        self._listeners.append(listener)
        return listener

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ---------------
    # Write path
    # ---------------

    def _commit(self, key, adapter, value, attr) -> None:
        # durable write first; memory and other stores only see committed data
        self.storage.write(key, adapter.dump_json(value))
        setattr(self, attr, value)
        self.bus.publish()

    def _save_orders(self, orders: List[Order]) -> None:
        self._commit(ORDERS_KEY, OrderList, orders, "orders")

    def _save_products(self, products: List[Product]) -> None:
        self._commit(PRODUCTS_KEY, ProductList, products, "products")

    def _save_categories(self, categories: List[Category]) -> None:
        self._commit(CATEGORIES_KEY, CategoryList, categories, "categories")

    # ---------------
    # Orders
    # ---------------

    def get_order(self, order_id: str) -> Optional[Order]:
        return next((o for o in self.orders if o.id == order_id), None)

    def find_order(self, code: str) -> Optional[Order]:
        """Order whose id ends with ``code`` (case-insensitive, leading '#' ignored)."""
        code = code.strip().lstrip("#").lower()
        if not code:
            return None
        return next((o for o in self.orders if o.id.lower().endswith(code)), None)

    def add_order(self, order: Order) -> Order:
        if order.status != OrderStatus.PENDING:
            raise OrderValidationError(f"new orders must be {OrderStatus.PENDING.value}, got {order.status.value}")
        if not order.items:
            raise OrderValidationError("an order needs at least one item")
        expected = calc_order_total(order.items)
        if not totals_match(expected, order.total_amount):
            raise OrderValidationError(f"total_amount {order.total_amount} does not match items total {expected}")
        if self.get_order(order.id) is not None:
            raise OrderValidationError(f"order {order.id} already exists")
        self._save_orders([order] + self.orders)
        logger.info("order %s added (%s)", order.id, order.total_amount)
        return order

    def update_order_status(self, order_id: str, status: OrderStatus) -> bool:
        order = self.get_order(order_id)
        if order is None:
            logger.warning("status update for unknown order %s ignored", order_id)
            return False
        if next_status(order.status) != status:
            logger.warning("rejected %s -> %s for order %s", order.status.value, status.value, order_id)
            raise InvalidTransitionError(order_id, order.status, status)
        updated = order.model_copy(update={"status": status})
        self._save_orders([updated if o.id == order_id else o for o in self.orders])
        logger.info("order %s is now %s", order_id, status.value)
        return True

    def advance_order(self, order_id: str) -> Optional[OrderStatus]:
        """Move an order one step forward; None when it is unknown or final."""
        order = self.get_order(order_id)
        if order is None:
            return None
        status = next_status(order.status)
        if status is None:
            return None
        self.update_order_status(order_id, status)
        return status

    def update_order(self, order: Order) -> bool:
        """Replace an order wholesale. The caller is responsible for its total."""
        if self.get_order(order.id) is None:
            logger.warning("update for unknown order %s ignored", order.id)
            return False
        self._save_orders([order if o.id == order.id else o for o in self.orders])
        logger.info("order %s replaced", order.id)
        return True

    def cancel_order(self, order_id: str, reason: str) -> bool:
        reason = (reason or "").strip()
        if not reason:
            raise OrderValidationError("a cancellation reason is required")
        order = self.get_order(order_id)
        if order is None:
            logger.warning("cancel for unknown order %s ignored", order_id)
            return False
        if not can_cancel(order.status):
            logger.warning("rejected cancel of order %s in %s", order_id, order.status.value)
            raise InvalidTransitionError(order_id, order.status, OrderStatus.CANCELLED)
        updated = order.model_copy(update={"status": OrderStatus.CANCELLED, "cancel_reason": reason})
        self._save_orders([updated if o.id == order_id else o for o in self.orders])
        logger.info("order %s cancelled: %s", order_id, reason)
        return True

    # ---------------
    # Products
    # ---------------

    def get_product(self, product_id: str) -> Optional[Product]:
        return next((p for p in self.products if p.id == product_id), None)

    def available_products(self, category: Optional[str] = None, search: str = "") -> List[Product]:
        term = search.strip().lower()
        return [
            p for p in self.products
            if p.is_available
            and (not category or category == "all" or p.category == category)
            and term in p.name.lower()
        ]

    def add_product(self, product: Product) -> Product:
        if self.get_product(product.id) is not None:
            raise CatalogValidationError(f"product {product.id} already exists")
        self._save_products(self.products + [product])
        logger.info("product %s added", product.id)
        return product

    def update_product(self, product: Product) -> bool:
        if self.get_product(product.id) is None:
            logger.warning("update for unknown product %s ignored", product.id)
            return False
        self._save_products([product if p.id == product.id else p for p in self.products])
        logger.info("product %s updated", product.id)
        return True

    def delete_product(self, product_id: str) -> bool:
        if self.get_product(product_id) is None:
            logger.warning("delete for unknown product %s ignored", product_id)
            return False
        self._save_products([p for p in self.products if p.id != product_id])
        logger.info("product %s deleted", product_id)
        return True

    # ---------------
    # Categories
    # ---------------

    def get_category(self, category_id: str) -> Optional[Category]:
        return next((c for c in self.categories if c.id == category_id), None)

    def category_of(self, product: Product) -> Optional[Category]:
        """Category the product's name reference resolves to; None is uncategorized."""
        return next((c for c in self.categories if c.name == product.category), None)

    def products_in_category(self, name: str) -> List[Product]:
        return [p for p in self.products if p.category == name]

    def add_category(self, name: str) -> Category:
        category = Category(name=_category_name(name))
        self._save_categories(self.categories + [category])
        logger.info("category %s added as %s", name, category.id)
        return category

    def update_category(self, category_id: str, name: str) -> bool:
        category = self.get_category(category_id)
        if category is None:
            logger.warning("rename of unknown category %s ignored", category_id)
            return False
        renamed = Category(id=category.id, name=_category_name(name))
        self._save_categories([renamed if c.id == category_id else c for c in self.categories])
        logger.info("category %s renamed to %s", category_id, renamed.name)
        return True

    def delete_category(self, category_id: str) -> bool:
        if self.get_category(category_id) is None:
            logger.warning("delete for unknown category %s ignored", category_id)
            return False
        self._save_categories([c for c in self.categories if c.id != category_id])
        logger.info("category %s deleted", category_id)
        return True

    # ---------------
    # Config
    # ---------------

    def update_config(self, config: SystemConfig) -> SystemConfig:
        self._commit(CONFIG_KEY, ConfigDoc, config, "config")
        logger.info("config replaced")
        return config

    def format_price(self, usd_amount: float) -> PriceDisplay:
        return format_price_for(self.config, usd_amount)
