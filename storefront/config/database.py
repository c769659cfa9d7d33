from motor.motor_asyncio import AsyncIOMotorClient
from beanie import init_beanie
from storefront.models.productModel import Product
from storefront.models.cartModel import Cart
from storefront.models.orderModel import Order
from storefront.models.userModel import User
from .settings import settings

document_models = [User, Product, Cart, Order]


# Call this from within your event loop to get beanie setup.
async def startDB():
    client = AsyncIOMotorClient(settings.MONGO_URI, uuidRepresentation="standard")
    database = client[settings.MONGO_DATABASE]

    await init_beanie(database=database, document_models=document_models)
    return client
