import logging
from typing import Optional

from cart import Cart
from errors import CheckoutValidationError, PersistenceError
from pricing import calc_order_total
from schemas import ContactMethod, Order, OrderStatus
from store import Store

logger = logging.getLogger(__name__)

ONLINE_TABLE = "Online"


def place_order(store: Store, cart: Cart, customer_name: str, contact_method: ContactMethod,
                contact_value: str, delivery_address: Optional[str] = None,
                table_number: Optional[str] = ONLINE_TABLE) -> Order:
    """Turn the cart into a PENDING order, commit it, then empty the cart.

    Input is validated before the store is touched, so a rejected checkout
    never leaves a partial order behind.
    """
    if len(cart) == 0:
        raise CheckoutValidationError("the cart is empty")
    customer_name = (customer_name or "").strip()
    contact_value = (contact_value or "").strip()
    if not customer_name or not contact_value:
        raise CheckoutValidationError("customer name and contact are required")

    items = [i.model_copy(deep=True) for i in cart.items]
    order = Order(
        items=items,
        total_amount=calc_order_total(items),
        status=OrderStatus.PENDING,
        customer_name=customer_name,
        contact_method=ContactMethod(contact_method),
        contact_value=contact_value,
        delivery_address=(delivery_address or "").strip() or None,
        table_number=table_number,
    )
    store.add_order(order)
    try:
        cart.clear()
    except PersistenceError:
        # order already committed
        logger.exception("order %s placed but the cart could not be cleared", order.id)
    logger.info("checkout %s for %s", order.display_code, customer_name)
    return order
