"""
Read-only views over the order list for the kitchen and manager screens.
"""

from collections import Counter, OrderedDict
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel

from pricing import calc_order_total
from schemas import CartItem, Order, OrderStatus, Product

CLOSED_STATUSES = (OrderStatus.COMPLETED, OrderStatus.CANCELLED)


class DashboardStats(BaseModel):
    total_revenue: float
    total_orders: int
    completed_orders: int
    top_selling: Optional[str] = None


def dashboard_stats(orders: Sequence[Order]) -> DashboardStats:
    revenue = sum(o.total_amount for o in orders if o.status != OrderStatus.CANCELLED)
    sold = Counter()
    for order in orders:
        if order.status == OrderStatus.CANCELLED:
            continue
        for item in order.items:
            sold[item.name] += item.quantity
    top = sold.most_common(1)
    return DashboardStats(
        total_revenue=round(revenue, 2),
        total_orders=len(orders),
        completed_orders=sum(1 for o in orders if o.status == OrderStatus.COMPLETED),
        top_selling=top[0][0] if top else None,
    )


def revenue_by_date(orders: Sequence[Order], days: int = 7) -> Dict[str, float]:
    """Revenue per calendar day, oldest first, limited to the last ``days`` days seen."""
    totals: Dict[str, float] = OrderedDict()
    for order in sorted(orders, key=lambda o: o.created_at):
        if order.status == OrderStatus.CANCELLED:
            continue
        day = order.created_at.strftime("%d/%m/%Y")
        totals[day] = round(totals.get(day, 0.0) + order.total_amount, 2)
    return OrderedDict(list(totals.items())[-days:])


def active_order_count(orders: Sequence[Order]) -> int:
    return sum(1 for o in orders if o.status not in CLOSED_STATUSES)


def kitchen_queue(orders: Sequence[Order], search: str = "") -> List[Order]:
    term = search.strip().lower()
    matched = [
        o for o in orders
        if term in o.id.lower() or term in (o.table_number or "").lower()
    ]
    # pending first, then newest first
    return sorted(matched, key=lambda o: (o.status != OrderStatus.PENDING, -o.created_at.timestamp()))


def search_orders(orders: Sequence[Order], term: str) -> List[Order]:
    term = term.strip()
    lowered = term.lower()
    return [
        o for o in orders
        if lowered in o.id.lower()
        or lowered in o.customer_name.lower()
        or term in o.contact_value
    ]


def newest_pending(previous_count: int, orders: Sequence[Order]) -> Optional[Order]:
    """The order that should ring the kitchen bell, if the list just grew."""
    if len(orders) <= previous_count or not orders:
        return None
    head = orders[0]
    return head if head.status == OrderStatus.PENDING else None


def edit_order_items(order: Order, items: Sequence[CartItem]) -> Order:
    """Copy of ``order`` with new lines and a recomputed total; zero-quantity lines drop out."""
    kept = [i.model_copy(deep=True) for i in items if i.quantity > 0]
    return order.model_copy(update={"items": kept, "total_amount": calc_order_total(kept)})


def set_line_quantity(order: Order, cart_id: str, quantity: int) -> Order:
    if quantity < 0:
        raise ValueError("quantity cannot be negative")
    items = [i.model_copy(update={"quantity": quantity}) if i.cart_id == cart_id else i for i in order.items]
    return edit_order_items(order, items)


def add_product_line(order: Order, product: Product, note: str = "Thêm bởi Admin") -> Order:
    return edit_order_items(order, list(order.items) + [CartItem.from_product(product, note=note)])
