import pytest

from bus import NotificationBus
from database import MemoryStorage
from schemas import CartItem, Order, Topping
from store import Store


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def bus():
    return NotificationBus()


@pytest.fixture
def store(storage, bus):
    s = Store(storage, bus)
    yield s
    s.close()


@pytest.fixture
def other_store(storage, bus):
    s = Store(storage, bus)
    yield s
    s.close()


def make_item(price=2.5, quantity=1, topping_prices=(), name="Trà Sữa"):
    toppings = [Topping(id=f"t{i}", name=f"topping {i}", price=p) for i, p in enumerate(topping_prices)]
    return CartItem(product_id="p1", name=name, price=price, quantity=quantity, selected_toppings=toppings)


def make_order(items=None, **kwargs):
    items = items if items is not None else [make_item()]
    total = round(sum(i.line_total for i in items), 2)
    kwargs.setdefault("customer_name", "Lan")
    kwargs.setdefault("contact_value", "0901234567")
    return Order(items=items, total_amount=total, **kwargs)
