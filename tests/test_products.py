from beanie import PydanticObjectId

from storefront.models.productModel import Product

NEW_PRODUCT = {
    "name": "Trail Runner",
    "description": "Light running shoe",
    "price": 89.5,
    "category": "sports",
    "subcategory": "shoes",
    "brand": "Stride",
    "sku": "STR-001",
    "sizes": ["42", "43"],
    "countInStock": 12,
    "specifications": [{"name": "weight", "value": "240g"}],
}


async def test_admin_creates_product(client, login_as, admin):
    login_as(admin)

    resp = await client.post("/api/v1/products", json=NEW_PRODUCT)

    assert resp.status_code == 201
    body = resp.json()
    assert body["countInStock"] == 12
    assert body["soldCount"] == 0
    assert body["isActive"] is True
    assert body["specifications"] == [{"name": "weight", "value": "240g"}]
    assert (await Product.get(PydanticObjectId(body["_id"]))).stock == 12


async def test_duplicate_sku_is_rejected(client, login_as, admin):
    login_as(admin)
    assert (await client.post("/api/v1/products", json=NEW_PRODUCT)).status_code == 201

    resp = await client.post("/api/v1/products", json=NEW_PRODUCT)

    assert resp.status_code == 400


async def test_customers_cannot_manage_catalog(client, login_as, user, product_factory):
    login_as(user)
    product = await product_factory()

    assert (await client.post("/api/v1/products", json=NEW_PRODUCT)).status_code == 403
    assert (await client.put(f"/api/v1/products/{product.id}", json={"price": 1})).status_code == 403
    assert (await client.delete(f"/api/v1/products/{product.id}")).status_code == 403


async def test_negative_stock_is_rejected(client, login_as, admin):
    login_as(admin)

    resp = await client.post("/api/v1/products", json={**NEW_PRODUCT, "countInStock": -1})

    assert resp.status_code == 422


async def test_update_only_touches_sent_fields(client, login_as, admin, product_factory):
    login_as(admin)
    product = await product_factory(name="Mug", price=8.0, stock=4)

    resp = await client.put(
        f"/api/v1/products/{product.id}",
        json={"price": 9.5, "dimensions": {"height": 10}}
    )

    assert resp.status_code == 200
    stored = await Product.get(product.id)
    assert stored.price == 9.5
    assert stored.name == "Mug"
    assert stored.stock == 4
    assert stored.dimensions.height == 10


async def test_soft_delete_hides_product(client, login_as, admin, user, product_factory):
    product = await product_factory()
    login_as(admin)

    resp = await client.delete(f"/api/v1/products/{product.id}")
    assert resp.status_code == 200
    assert resp.json()["isActive"] is False

    # still visible to admins
    assert (await client.get(f"/api/v1/products/{product.id}")).status_code == 200

    login_as(user)
    assert (await client.get(f"/api/v1/products/{product.id}")).status_code == 404
    assert (await client.get("/api/v1/products")).json() == []
    assert await Product.get(product.id) is not None


async def test_list_filters_and_sorts(client, product_factory):
    await product_factory(name="Cheap pen", price=2.0, category="other")
    await product_factory(name="Blue kettle", price=30.0, category="home", brand="Boil")
    await product_factory(name="Red kettle", price=45.0, category="home", brand="Boil")
    await product_factory(name="Hidden kettle", price=40.0, category="home", is_active=False)

    resp = await client.get("/api/v1/products", params={"category": "home", "sort": "price_desc"})
    assert [p["name"] for p in resp.json()] == ["Red kettle", "Blue kettle"]

    resp = await client.get("/api/v1/products", params={"search": "KETTLE", "maxPrice": 40})
    assert [p["name"] for p in resp.json()] == ["Blue kettle"]

    resp = await client.get("/api/v1/products", params={"minPrice": 10, "sort": "price_asc", "limit": 1})
    assert [p["name"] for p in resp.json()] == ["Blue kettle"]

    resp = await client.get("/api/v1/products", params={"category": "spaceships"})
    assert resp.status_code == 422


async def test_unknown_product_is_404(client):
    resp = await client.get(f"/api/v1/products/{PydanticObjectId()}")

    assert resp.status_code == 404
    assert resp.json()["error"]["message"] == "Product not found"


async def test_reviews_update_rating(client, login_as, user, other_user, product_factory):
    product = await product_factory()

    login_as(user)
    resp = await client.post(f"/api/v1/products/{product.id}/reviews", json={"rating": 5, "comment": "Great"})
    assert resp.status_code == 201

    login_as(other_user)
    resp = await client.post(f"/api/v1/products/{product.id}/reviews", json={"rating": 2, "comment": "Meh"})
    body = resp.json()
    assert body["numReviews"] == 2
    assert body["rating"] == 3.5
    assert body["reviews"][0]["user"] == str(user.id)


async def test_one_review_per_user(client, login_as, user, product_factory):
    product = await product_factory()
    login_as(user)
    review = {"rating": 4, "comment": "Good"}

    assert (await client.post(f"/api/v1/products/{product.id}/reviews", json=review)).status_code == 201
    resp = await client.post(f"/api/v1/products/{product.id}/reviews", json=review)

    assert resp.status_code == 400
    assert resp.json()["error"]["message"] == "Product already reviewed"
