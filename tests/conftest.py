import itertools
from types import SimpleNamespace

import pytest
from beanie import init_beanie, PydanticObjectId
from httpx import AsyncClient, ASGITransport
from mongomock_motor import AsyncMongoMockClient

from storefront.main import app
from storefront.commonUtils.enumUtils import PaymentMethod
from storefront.crud.cartService import CartService
from storefront.crud.orderService import OrderService
from storefront.crud.paymentGateway import MockPaymentGateway
from storefront.crud.userService import current_active_user, current_optional_user
from storefront.dependencies.paymentDependencies import get_payment_gateway
from storefront.models.cartModel import Cart
from storefront.models.orderModel import Order
from storefront.models.productModel import Product
from storefront.schemas.orderSchema import OrderCreate, ShippingAddressSchema

SHIPPING_ADDRESS = {
    "fullName": "Jane Doe",
    "address": "1 Main St",
    "city": "Springfield",
    "state": "IL",
    "zipCode": "62701",
    "country": "USA",
    "phone": "+15551234567",
}


@pytest.fixture(autouse=True)
async def db():
    """Fresh in-memory database for every test"""
    client = AsyncMongoMockClient()
    database = client["storefront_test"]
    await init_beanie(database=database, document_models=[Product, Cart, Order])
    yield database


def make_user(is_superuser: bool = False, email: str = None):
    user_id = PydanticObjectId()
    return SimpleNamespace(
        id=user_id,
        email=email or f"user-{user_id}@example.com",
        full_name="Jane Doe",
        is_active=True,
        is_superuser=is_superuser,
    )


@pytest.fixture
def user():
    return make_user()


@pytest.fixture
def other_user():
    return make_user(email="someone.else@example.com")


@pytest.fixture
def admin():
    return make_user(is_superuser=True, email="admin@example.com")


@pytest.fixture
def product_factory():
    counter = itertools.count(1)

    async def _create(**overrides) -> Product:
        n = next(counter)
        data = {
            "name": f"Product {n}",
            "description": "A thing worth buying",
            "price": 10.0,
            "subcategory": "general",
            "brand": "Acme",
            "sku": f"SKU-{n:04d}",
            "images": [f"https://img.example.com/{n}.jpg"],
            "stock": 10,
        }
        data.update(overrides)
        product = Product(**data)
        await product.insert()
        return product

    return _create


@pytest.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def login_as():
    """Make the API treat every request as coming from ``user``"""
    def _login(user):
        app.dependency_overrides[current_active_user] = lambda: user
        app.dependency_overrides[current_optional_user] = lambda: user
        return user

    return _login


@pytest.fixture
def payment_outcome():
    """Force the payment gateway to approve (True) or decline (False) every charge"""
    def _force(success: bool):
        gateway = MockPaymentGateway(success_rate=1.0 if success else 0.0)
        app.dependency_overrides[get_payment_gateway] = lambda: gateway
        return gateway

    return _force


@pytest.fixture
def place_order():
    """Fill the user's cart with ``lines`` of (product, quantity) and check out"""
    async def _place(user, lines, **order_fields) -> Order:
        for product, quantity in lines:
            await CartService.add_item(user.id, product.id, quantity)
        order_data = OrderCreate(
            shipping_address=ShippingAddressSchema(**SHIPPING_ADDRESS),
            payment_method=order_fields.pop("payment_method", PaymentMethod.CREDIT_CARD),
            **order_fields
        )
        return await OrderService.create_order(user.id, order_data)

    return _place


@pytest.fixture
def shipping_address():
    return dict(SHIPPING_ADDRESS)
