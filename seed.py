# Built-in data written to storage the first time a store finds a record missing.

from schemas import Category, ContactLink, Product, SystemConfig, Topping


def default_categories():
    return [
        Category(id="c1", name="Phổ biến"),
        Category(id="c2", name="Món chính"),
        Category(id="c3", name="Đồ ăn vặt"),
        Category(id="c4", name="Đồ uống"),
        Category(id="c5", name="Tráng miệng"),
    ]


def default_products():
    return [
        Product(
            id="p1",
            name="Trà Sữa Trân Châu Đường Đen",
            description="Trà sữa đậm vị kết hợp trân châu đường đen nấu chậm.",
            price=2.5,
            category="Đồ uống",
            image_url="https://picsum.photos/300/300?random=1",
            toppings=[
                Topping(id="t1", name="Trân châu đen", price=0.5),
                Topping(id="t2", name="Pudding trứng", price=0.7),
            ],
        ),
        Product(
            id="p2",
            name="Cơm Gà Xối Mỡ",
            description="Đùi gà góc tư chiên giòn, cơm chiên dương châu.",
            price=4.0,
            category="Món chính",
            image_url="https://picsum.photos/300/300?random=2",
            toppings=[
                Topping(id="t3", name="Thêm Cơm", price=0.5),
                Topping(id="t4", name="Thêm Canh", price=0.2),
            ],
        ),
        Product(
            id="p3",
            name="Bún Bò Huế",
            description="Hương vị chuẩn Huế, có chả cua và giò heo.",
            price=4.5,
            category="Món chính",
            image_url="https://picsum.photos/300/300?random=3",
        ),
        Product(
            id="p4",
            name="Khoai Tây Chiên",
            description="Khoai tây chiên giòn rắc phô mai.",
            price=2.0,
            category="Đồ ăn vặt",
            image_url="https://picsum.photos/300/300?random=4",
        ),
        Product(
            id="p5",
            name="Bánh Plan",
            description="Bánh plan cốt dừa béo ngậy.",
            price=1.0,
            category="Tráng miệng",
            image_url="https://picsum.photos/300/300?random=5",
        ),
        Product(
            id="p6",
            name="Trà Đào Cam Sả",
            description="Thanh mát giải nhiệt mùa hè.",
            price=2.5,
            category="Đồ uống",
            image_url="https://picsum.photos/300/300?random=6",
            toppings=[
                Topping(id="t5", name="Thạch đào", price=0.5),
                Topping(id="t6", name="Trân châu trắng", price=0.5),
            ],
        ),
    ]


def default_config():
    return SystemConfig(
        store_name="FoodExpress",
        store_address="123 Đường Ẩm Thực, Quận 1, TP.HCM",
        store_phone="1900 1234",
        telegram_username="SupportFoodExpress",
        exchange_rate_khr=4100,
        exchange_rate_vnd=25000,
        banner_url="https://images.unsplash.com/photo-1504674900247-0877df9cc836?auto=format&fit=crop&w=1200&q=80",
        notification_text="Chào mừng quý khách đến với FoodExpress! Giảm giá 10% cho đơn hàng trên $20.",
        kitchen_notification_text="Lưu ý: Kiểm tra kỹ ghi chú của khách hàng trước khi chế biến.",
        contact_links=[
            ContactLink(id="cl1", platform="Facebook", label="Fanpage", value="https://facebook.com"),
            ContactLink(id="cl2", platform="Zalo", label="Zalo OA", value="https://zalo.me"),
            ContactLink(id="cl3", platform="Telegram", label="Channel", value="https://t.me/channel"),
            ContactLink(id="cl4", platform="Hotline", label="Hotline", value="tel:19001234"),
        ],
    )
