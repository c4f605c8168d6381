import pytest

from cart import Cart
from checkout import place_order
from database import CART_KEY, ORDERS_KEY
from errors import CartError, CheckoutValidationError, PersistenceError
from schemas import ContactMethod, OrderStatus


@pytest.fixture
def cart(storage):
    return Cart(storage)


def test_cart_snapshots_product_and_toppings(store, cart):
    product = store.get_product("p1")
    item = cart.add(product, quantity=2, topping_ids=["t1"], note=" ít đá ")
    assert item.name == product.name
    assert item.price == 2.5
    assert [t.name for t in item.selected_toppings] == ["Trân châu đen"]
    assert item.note == "ít đá"
    assert cart.total == 6.00
    assert cart.item_count == 2


def test_cart_rejects_bad_selection(store, cart):
    product = store.get_product("p1")
    with pytest.raises(CartError):
        cart.add(product, topping_ids=["t5"])
    with pytest.raises(CartError):
        cart.add(product, quantity=0)
    with pytest.raises(CartError):
        cart.add(product.model_copy(update={"is_available": False}))
    assert len(cart) == 0


def test_cart_is_persisted_under_its_own_key(storage, store, cart):
    item = cart.add(store.get_product("p4"))
    assert storage.read(CART_KEY) is not None
    assert Cart(storage).items[0].cart_id == item.cart_id
    assert cart.remove(item.cart_id)
    assert not cart.remove(item.cart_id)
    assert Cart(storage).items == []


def test_checkout_creates_pending_order_and_clears_cart(store, other_store, cart):
    cart.add(store.get_product("p1"), quantity=2, topping_ids=["t1"])
    order = place_order(store, cart, "Lan", ContactMethod.TELEGRAM, "@lan",
                        delivery_address="12 Lê Lợi")
    assert order.status == OrderStatus.PENDING
    assert order.total_amount == 6.00
    assert order.table_number == "Online"
    assert store.orders[0].id == order.id
    assert other_store.orders[0].id == order.id
    assert len(cart) == 0


@pytest.mark.parametrize("name, contact", [("", "0901"), ("Lan", "  "), ("   ", "")])
def test_checkout_validation_touches_nothing(storage, store, cart, name, contact):
    cart.add(store.get_product("p2"))
    with pytest.raises(CheckoutValidationError):
        place_order(store, cart, name, ContactMethod.PHONE, contact)
    assert storage.read(ORDERS_KEY) is None
    assert len(cart) == 1


def test_checkout_empty_cart(store, cart):
    with pytest.raises(CheckoutValidationError):
        place_order(store, cart, "Lan", ContactMethod.PHONE, "0901")


def test_cart_clear_failure_keeps_the_placed_order(store, other_store, cart, monkeypatch):
    cart.add(store.get_product("p2"))

    def fail():
        raise PersistenceError(CART_KEY, "storage quota exceeded")

    monkeypatch.setattr(cart, "clear", fail)
    order = place_order(store, cart, "Lan", ContactMethod.PHONE, "0901")
    assert store.orders[0].id == order.id
    assert other_store.get_order(order.id) is not None
    assert len(cart) == 1
