"""
Customer cart

The in-progress cart belongs to one customer and is saved under its own key,
never in the shared store records. Lines are snapshots of the product and of
the toppings picked at the time of selection.
"""

import logging
from typing import Iterable, List, Optional

from pydantic import TypeAdapter, ValidationError

from database import CART_KEY, Storage
from errors import CartError, PersistenceError
from pricing import calc_order_total
from schemas import CartItem, Product

logger = logging.getLogger(__name__)

CartLines = TypeAdapter(List[CartItem])


class Cart:
    def __init__(self, storage: Storage, key: str = CART_KEY):
        self.storage = storage
        self.key = key
        self.items: List[CartItem] = self._load()

    def _load(self) -> List[CartItem]:
        raw = self.storage.read(self.key)
        if raw is None:
            return []
        try:
            return CartLines.validate_json(raw)
        except ValidationError as e:
            raise PersistenceError(self.key, f"stored cart is invalid: {e.error_count()} error(s)") from e

    def _save(self, items: List[CartItem]) -> None:
        self.storage.write(self.key, CartLines.dump_json(items))
        self.items = items

    def add(self, product: Product, quantity: int = 1,
            topping_ids: Iterable[str] = (), note: Optional[str] = None) -> CartItem:
        if not product.is_available:
            raise CartError(f"{product.name} is not available")
        if quantity < 1:
            raise CartError("quantity must be at least 1")
        toppings = []
        for topping_id in topping_ids:
            topping = product.find_topping(topping_id)
            if topping is None:
                raise CartError(f"{product.name} has no topping {topping_id}")
            toppings.append(topping)
        item = CartItem.from_product(product, quantity=quantity, toppings=toppings,
                                     note=(note or "").strip() or None)
        self._save(self.items + [item])
        logger.debug("cart line %s added for product %s", item.cart_id, product.id)
        return item

    def remove(self, cart_id: str) -> bool:
        items = [i for i in self.items if i.cart_id != cart_id]
        if len(items) == len(self.items):
            return False
        self._save(items)
        return True

    def clear(self) -> None:
        self._save([])

    @property
    def total(self) -> float:
        return calc_order_total(self.items)

    @property
    def item_count(self) -> int:
        return sum(i.quantity for i in self.items)

    def __len__(self) -> int:
        return len(self.items)
