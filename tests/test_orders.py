import asyncio

import pytest
from beanie import PydanticObjectId
from fastapi import HTTPException

from storefront.commonUtils.enumUtils import OrderStatus, PaymentStatus
from storefront.crud.cartService import CartService
from storefront.crud.orderService import OrderService
from storefront.crud.productService import ProductService
from storefront.models.cartModel import Cart
from storefront.models.orderModel import Order
from storefront.models.productModel import Product
from storefront.schemas.orderSchema import OrderCreate, ShippingAddressSchema
from storefront.schemas.productSchema import ProductUpdate, ReviewCreate


def checkout_payload(shipping_address, **prices):
    payload = {"shippingAddress": shipping_address, "paymentMethod": "credit_card"}
    payload.update(prices)
    return payload


async def test_order_from_single_line_cart(user, product_factory, place_order):
    p1 = await product_factory(price=10.0, stock=10)

    order = await place_order(user, [(p1, 2)])

    assert order.items_price == 20.0
    assert order.order_items[0].price == 10.0
    assert order.order_items[0].quantity == 2
    assert order.order_items[0].name == p1.name

    refreshed = await Product.get(p1.id)
    assert refreshed.stock == 8
    assert refreshed.sold_count == 2


async def test_order_empties_cart_and_adjusts_every_product(user, product_factory, place_order):
    p1 = await product_factory(stock=5)
    p2 = await product_factory(stock=3, sold_count=7)

    await place_order(user, [(p1, 1), (p2, 3)])

    cart = await Cart.find_one(Cart.user_id == user.id)
    assert cart.is_empty
    assert cart.total_items == 0

    assert (await Product.get(p1.id)).stock == 4
    p2_after = await Product.get(p2.id)
    assert p2_after.stock == 0
    assert p2_after.sold_count == 10


async def test_order_snapshot_ignores_later_product_edits(user, product_factory, place_order):
    product = await product_factory(name="Lamp", price=30.0)
    order = await place_order(user, [(product, 1)])

    product.name = "Renamed lamp"
    product.price = 99.0
    await product.save()

    stored = await Order.get(order.id)
    assert stored.order_items[0].name == "Lamp"
    assert stored.order_items[0].price == 30.0


async def test_order_starts_pending_with_history(user, product_factory, place_order):
    order = await place_order(user, [(await product_factory(), 1)])

    assert order.order_status == OrderStatus.PENDING
    assert order.payment_info.status == PaymentStatus.PENDING
    assert order.order_number.startswith("ORD-")
    assert [entry.status for entry in order.status_history] == ["pending"]


async def test_empty_cart_is_rejected(user, shipping_address):
    order_data = OrderCreate(
        shipping_address=ShippingAddressSchema(**shipping_address),
        payment_method="credit_card",
    )

    with pytest.raises(HTTPException) as exc:
        await OrderService.create_order(user.id, order_data)

    assert exc.value.status_code == 400
    assert exc.value.detail == "Cart is empty"
    assert await Order.find_all().count() == 0


async def test_insufficient_stock_changes_nothing(user, product_factory, place_order):
    plenty = await product_factory(name="Plenty", stock=10)
    scarce = await product_factory(name="Scarce", stock=5)
    await CartService.add_item(user.id, plenty.id, 4)
    await CartService.add_item(user.id, scarce.id, 2)

    # someone else buys most of the scarce product meanwhile
    await Product.find_one(Product.id == scarce.id).update({"$set": {"stock": 1}})

    with pytest.raises(HTTPException) as exc:
        await place_order(user, [])

    assert exc.value.status_code == 400
    assert exc.value.detail == "Not enough stock for Scarce"

    plenty_after = await Product.get(plenty.id)
    assert plenty_after.stock == 10
    assert plenty_after.sold_count == 0
    assert (await Product.get(scarce.id)).stock == 1

    cart = await Cart.find_one(Cart.user_id == user.id)
    assert cart.total_items == 6
    assert await Order.find_all().count() == 0


async def test_client_prices_are_stored_as_given(user, product_factory, place_order):
    product = await product_factory(price=10.0)

    order = await place_order(
        user,
        [(product, 2)],
        items_price=20.0,
        tax_price=1.5,
        shipping_price=0.0,
        total_price=21.5,
    )

    assert order.tax_price == 1.5
    assert order.shipping_price == 0.0
    assert order.total_price == 21.5


async def test_omitted_prices_come_from_quote(user, product_factory, place_order):
    product = await product_factory(price=10.0)

    order = await place_order(user, [(product, 2)], discount=2.0)

    assert order.items_price == 20.0
    assert order.tax_price == 2.0
    assert order.shipping_price == 5.99
    assert order.total_price == 25.99


async def test_failed_order_save_puts_stock_and_cart_back(user, product_factory, place_order, monkeypatch):
    product = await product_factory(stock=5, sold_count=1)

    async def failing_insert(self, *args, **kwargs):
        raise RuntimeError("write failed")

    monkeypatch.setattr(Order, "insert", failing_insert)

    with pytest.raises(RuntimeError):
        await place_order(user, [(product, 2)])

    stored = await Product.get(product.id)
    assert stored.stock == 5
    assert stored.sold_count == 1

    cart = await Cart.find_one(Cart.user_id == user.id)
    assert [(item.product_id, item.quantity) for item in cart.items] == [(product.id, 2)]
    assert cart.total_items == 2
    assert cart.total_price == 20.0
    assert await Order.find_all().count() == 0


async def test_deactivated_product_in_cart_blocks_checkout(user, product_factory, place_order):
    product = await product_factory(stock=4)
    await CartService.add_item(user.id, product.id, 1)
    await ProductService.delete_product(product.id)

    with pytest.raises(HTTPException) as exc:
        await place_order(user, [])

    assert exc.value.status_code == 400
    assert exc.value.detail == "Product is not available for purchase"
    assert (await Product.get(product.id)).stock == 4
    assert (await Cart.find_one(Cart.user_id == user.id)).total_items == 1
    assert await Order.find_all().count() == 0


# ---------- Concurrency ----------

async def test_double_submit_places_one_order(user, product_factory, shipping_address):
    product = await product_factory(stock=10)
    await CartService.add_item(user.id, product.id, 2)
    order_data = OrderCreate(
        shipping_address=ShippingAddressSchema(**shipping_address),
        payment_method="credit_card",
    )

    results = await asyncio.gather(
        OrderService.create_order(user.id, order_data),
        OrderService.create_order(user.id, order_data),
        return_exceptions=True,
    )

    placed = [r for r in results if isinstance(r, Order)]
    rejected = [r for r in results if isinstance(r, HTTPException)]
    assert len(placed) == 1
    assert [r.detail for r in rejected] == ["Cart is empty"]

    stored = await Product.get(product.id)
    assert stored.stock == 8
    assert stored.sold_count == 2
    assert await Order.find_all().count() == 1


async def test_review_written_during_checkout_keeps_stock(
        user, other_user, product_factory, place_order, monkeypatch
):
    product = await product_factory(stock=10)
    read_product = ProductService.get_product

    async def read_then_checkout(product_id, include_inactive=False):
        found = await read_product(product_id, include_inactive)
        await place_order(user, [(product, 3)])
        return found

    monkeypatch.setattr(ProductService, "get_product", read_then_checkout)

    reviewed = await ProductService.add_review(product.id, other_user, ReviewCreate(rating=4, comment="Solid"))

    assert reviewed.num_reviews == 1
    stored = await Product.get(product.id)
    assert stored.stock == 7
    assert stored.sold_count == 3
    assert stored.rating == 4
    assert await Order.find_all().count() == 1


async def test_product_edit_during_checkout_keeps_stock(user, product_factory, place_order, monkeypatch):
    product = await product_factory(price=10.0, stock=10)
    read_product = ProductService.get_product

    async def read_then_checkout(product_id, include_inactive=False):
        found = await read_product(product_id, include_inactive)
        await place_order(user, [(product, 3)])
        return found

    monkeypatch.setattr(ProductService, "get_product", read_then_checkout)

    await ProductService.update_product(product.id, ProductUpdate(price=12.0))

    stored = await Product.get(product.id)
    assert stored.price == 12.0
    assert stored.stock == 7
    assert stored.sold_count == 3


# ---------- API ----------

async def test_create_order_api(client, login_as, user, product_factory, shipping_address):
    login_as(user)
    product = await product_factory(price=10.0, stock=3)
    await CartService.add_item(user.id, product.id, 2)

    resp = await client.post("/api/v1/orders", json=checkout_payload(shipping_address, itemsPrice=20.0))

    assert resp.status_code == 201
    body = resp.json()
    assert body["user"] == str(user.id)
    assert body["itemsPrice"] == 20.0
    assert body["orderStatus"] == "pending"
    assert body["paymentInfo"]["status"] == "pending"
    assert body["orderItems"][0]["product"] == str(product.id)
    assert body["orderItems"][0]["subtotal"] == 20.0
    assert body["shippingAddress"]["zipCode"] == "62701"

    cart = await client.get("/api/v1/cart")
    assert cart.json()["items"] == []


async def test_create_order_api_empty_cart(client, login_as, user, shipping_address):
    login_as(user)

    resp = await client.post("/api/v1/orders", json=checkout_payload(shipping_address))

    assert resp.status_code == 400
    assert resp.json()["error"]["message"] == "Cart is empty"


async def test_my_orders_only_lists_own_orders(client, login_as, user, other_user, product_factory, place_order):
    mine = await place_order(user, [(await product_factory(), 1)])
    await place_order(other_user, [(await product_factory(), 1)])

    login_as(user)
    resp = await client.get("/api/v1/orders/myorders")

    assert resp.status_code == 200
    assert [o["_id"] for o in resp.json()] == [str(mine.id)]


async def test_order_visible_to_owner_and_admin_only(
        client, login_as, user, other_user, admin, product_factory, place_order
):
    order = await place_order(user, [(await product_factory(), 1)])

    login_as(user)
    assert (await client.get(f"/api/v1/orders/{order.id}")).status_code == 200

    login_as(admin)
    assert (await client.get(f"/api/v1/orders/{order.id}")).status_code == 200

    login_as(other_user)
    resp = await client.get(f"/api/v1/orders/{order.id}")
    assert resp.status_code == 403
    assert resp.json()["error"]["message"] == "Access denied"

    resp = await client.get(f"/api/v1/orders/{PydanticObjectId()}")
    assert resp.status_code == 404


async def test_list_all_orders_is_admin_only(client, login_as, user, admin, product_factory, place_order):
    await place_order(user, [(await product_factory(), 1)])

    login_as(user)
    assert (await client.get("/api/v1/orders")).status_code == 403

    login_as(admin)
    resp = await client.get("/api/v1/orders")
    assert resp.status_code == 200
    assert len(resp.json()) == 1

    resp = await client.get("/api/v1/orders", params={"status": "shipped"})
    assert resp.json() == []


async def test_mark_order_paid(client, login_as, user, other_user, product_factory, place_order):
    order = await place_order(user, [(await product_factory(), 1)])

    login_as(other_user)
    resp = await client.put(f"/api/v1/orders/{order.id}/pay", json={"transactionId": "txn_1"})
    assert resp.status_code == 403

    login_as(user)
    resp = await client.put(f"/api/v1/orders/{order.id}/pay", json={"transactionId": "txn_1"})
    assert resp.status_code == 200
    payment = resp.json()["paymentInfo"]
    assert payment["status"] == "completed"
    assert payment["transactionId"] == "txn_1"
    assert payment["paidAt"] is not None


async def test_order_paging_is_validated(client, login_as, user, admin):
    login_as(user)
    assert (await client.get("/api/v1/orders/myorders", params={"skip": -1})).status_code == 422
    assert (await client.get("/api/v1/orders/myorders", params={"limit": 0})).status_code == 422

    login_as(admin)
    assert (await client.get("/api/v1/orders", params={"skip": -1})).status_code == 422
    assert (await client.get("/api/v1/orders", params={"limit": 500})).status_code == 422
