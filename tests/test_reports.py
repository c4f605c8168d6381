from datetime import datetime, timedelta, timezone

from reports import (
    active_order_count,
    add_product_line,
    dashboard_stats,
    edit_order_items,
    kitchen_queue,
    newest_pending,
    revenue_by_date,
    search_orders,
    set_line_quantity,
)
from schemas import OrderStatus
from seed import default_products
from conftest import make_item, make_order

T0 = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


def _orders():
    return [
        make_order([make_item(price=4.0, quantity=2, name="Cơm Gà")], id="order0004",
                   status=OrderStatus.COMPLETED, created_at=T0 + timedelta(days=2), table_number="Online"),
        make_order([make_item(price=1.0, quantity=5, name="Bánh Plan")], id="order0003",
                   status=OrderStatus.CANCELLED, cancel_reason="hết món", created_at=T0 + timedelta(days=1)),
        make_order([make_item(price=2.5, quantity=1, name="Cơm Gà")], id="order0002",
                   created_at=T0 + timedelta(hours=3), customer_name="Minh", contact_value="0987"),
        make_order([make_item(price=2.0, quantity=1, name="Khoai")], id="order0001",
                   status=OrderStatus.PREPARING, created_at=T0, table_number="Bàn 5"),
    ]


def test_dashboard_stats_skip_cancelled():
    stats = dashboard_stats(_orders())
    assert stats.total_revenue == 12.5
    assert stats.total_orders == 4
    assert stats.completed_orders == 1
    assert stats.top_selling == "Cơm Gà"


def test_dashboard_stats_empty():
    stats = dashboard_stats([])
    assert stats.total_revenue == 0
    assert stats.top_selling is None


def test_revenue_by_date():
    by_day = revenue_by_date(_orders())
    assert list(by_day.items()) == [("01/03/2026", 4.5), ("03/03/2026", 8.0)]
    assert list(revenue_by_date(_orders(), days=1)) == ["03/03/2026"]


def test_kitchen_queue_puts_pending_first():
    queue = kitchen_queue(_orders())
    assert [o.id for o in queue] == ["order0002", "order0004", "order0003", "order0001"]
    assert [o.id for o in kitchen_queue(_orders(), "bàn")] == ["order0001"]
    assert active_order_count(_orders()) == 2


def test_search_orders():
    orders = _orders()
    assert [o.id for o in search_orders(orders, "minh")] == ["order0002"]
    assert [o.id for o in search_orders(orders, "0987")] == ["order0002"]
    assert len(search_orders(orders, "ORDER")) == 4


def test_newest_pending_detects_new_head():
    orders = _orders()
    assert newest_pending(4, orders) is None
    assert newest_pending(3, orders) is None  # head is completed
    assert newest_pending(3, orders[2:3] + orders).id == "order0002"


def test_admin_line_edits_recompute_total():
    order = make_order([make_item(price=2.5, quantity=2, topping_prices=[0.5]), make_item(price=1.0)])
    first, second = order.items
    edited = set_line_quantity(order, first.cart_id, 1)
    assert edited.total_amount == 4.0
    removed = set_line_quantity(edited, second.cart_id, 0)
    assert [i.cart_id for i in removed.items] == [first.cart_id]
    assert removed.total_amount == 3.0
    grown = add_product_line(removed, default_products()[3])
    assert grown.items[-1].note == "Thêm bởi Admin"
    assert grown.total_amount == 5.0
    assert order.total_amount == 7.0
    assert edit_order_items(order, []).total_amount == 0
