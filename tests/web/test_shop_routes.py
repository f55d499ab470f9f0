"""
HTTP tests for the storefront: catalog, cart, wishlist and checkout.
"""

from unittest.mock import AsyncMock, patch

import pytest

import config
from enums.order_status import OrderStatus
from enums.user_role import UserRole

SHIPPING_ADDRESS = {"street": "1 Main St", "city": "Springfield", "state": "IL",
                    "postalCode": "62701", "country": "US"}


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"success": True, "status": "healthy", "environment": "TEST"}


class TestCatalog:

    @pytest.mark.asyncio
    async def test_list_is_public_and_camel_case(self, client, make_product):
        await make_product(title="Lipstick", discount_percentage=5.0)

        response = await client.get("/api/products")

        body = response.json()
        assert response.status_code == 200
        assert body["data"][0]["title"] == "Lipstick"
        assert body["data"][0]["discountPercentage"] == 5.0
        assert body["pagination"]["currentPage"] == 1
        assert body["pagination"]["recordsPerPage"] == config.PAGE_ENTRIES

    @pytest.mark.asyncio
    async def test_search_requires_query(self, client):
        response = await client.get("/api/products/search")

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Search query is required"}

    @pytest.mark.asyncio
    async def test_fixed_paths_win_over_product_id(self, client, make_product):
        await make_product(category="beauty")

        categories = await client.get("/api/products/categories")
        stats = await client.get("/api/products/stats")

        assert categories.json()["data"] == ["beauty"]
        assert stats.json()["data"]["totalProducts"] == 1

    @pytest.mark.asyncio
    async def test_unknown_product(self, client):
        response = await client.get("/api/products/404")

        assert response.status_code == 404
        assert response.json()["message"] == "Product not found"

    @pytest.mark.asyncio
    async def test_invalid_limit(self, client):
        response = await client.get("/api/products", params={"limit": 0})

        assert response.status_code == 400
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_guest_cannot_create(self, client):
        response = await client.post("/api/products", json={"title": "x"})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_admin_create_update_delete(self, client, authenticate, make_user):
        authenticate(await make_user(role=UserRole.ADMIN))

        created = await client.post("/api/products", json={
            "title": "Lipstick", "description": "Red", "category": "beauty", "price": 9.99,
            "sku": "LIP-1", "stock": 4, "minimumOrderQuantity": 1,
        })
        product_id = created.json()["data"]["id"]
        duplicate = await client.post("/api/products", json={
            "title": "Other", "description": "Red", "category": "beauty", "price": 1, "sku": "LIP-1",
        })
        updated = await client.put(f"/api/products/{product_id}", json={"price": 12.5})
        deleted = await client.delete(f"/api/products/{product_id}")

        assert created.status_code == 201
        assert duplicate.status_code == 409
        assert updated.json()["data"]["price"] == 12.5
        assert updated.json()["data"]["stock"] == 4
        assert deleted.json() == {"success": True, "message": "Product deleted successfully"}

    @pytest.mark.asyncio
    async def test_bulk_update(self, client, authenticate, make_user, make_product):
        authenticate(await make_user(role=UserRole.ADMIN))
        product = await make_product()

        response = await client.post("/api/products/bulk-update", json={"updates": [
            {"productId": product.id, "updateData": {"stock": 9}},
            {"productId": 404, "updateData": {"stock": 9}},
        ]})

        assert response.json()["data"] == {"updated": 1, "failed": 1}
        assert response.json()["message"] == "Bulk update completed: 1 updated, 1 failed"

    @pytest.mark.asyncio
    async def test_catalog_import_is_super_admin_only(self, client, authenticate, make_user):
        authenticate(await make_user(role=UserRole.ADMIN))

        response = await client.post("/api/products/fetch-store")

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_catalog_import(self, client, authenticate, make_user):
        authenticate(await make_user(role=UserRole.SUPER_ADMIN))

        with patch("web.product_router.CatalogImportService.fetch_and_store",
                   new_callable=AsyncMock, return_value={"stored": 3, "skipped": 1, "failed": 0}) as import_:
            response = await client.post("/api/products/fetch-store", json={"limit": 4})

        assert response.status_code == 200
        assert response.json()["message"] == "Products fetched and stored successfully: 3 new products added"
        assert import_.await_args.kwargs["limit"] == 4


class TestGuestCart:

    @pytest.mark.asyncio
    async def test_guest_cookie_issued_once(self, client, make_product):
        product = await make_product(price=2.5)

        first = await client.post("/api/cart/add", json={"productId": product.id, "quantity": 2})
        second = await client.post("/api/cart/add", json={"productId": product.id, "quantity": 1})

        assert config.GUEST_CART_COOKIE in first.cookies
        assert config.GUEST_CART_COOKIE not in second.cookies
        cart = second.json()["data"]
        assert cart["id"] == first.json()["data"]["id"]
        assert cart["totalItems"] == 3
        assert cart["totalAmount"] == 7.5
        assert cart["items"][0]["productId"] == product.id

    @pytest.mark.asyncio
    async def test_update_beyond_stock(self, client, make_product):
        product = await make_product(stock=2)
        await client.post("/api/cart/add", json={"productId": product.id})

        response = await client.put(f"/api/cart/item/{product.id}", json={"quantity": 3})

        assert response.status_code == 400
        assert response.json()["message"] == "Only 2 items available in stock"

    @pytest.mark.asyncio
    async def test_validate(self, client, make_product):
        product = await make_product(stock=5)
        await client.post("/api/cart/add", json={"productId": product.id, "quantity": 4})

        response = await client.post("/api/cart/validate")

        assert response.json()["data"]["allItemsAvailable"] is True
        assert response.json()["data"]["validationResults"][0]["currentPrice"] == product.price

    @pytest.mark.asyncio
    async def test_other_guest_cart_is_private(self, client, make_product):
        product = await make_product()
        created = await client.post("/api/cart/add", json={"productId": product.id})
        cart_id = created.json()["data"]["id"]
        client.cookies.clear()

        response = await client.get(f"/api/cart/{cart_id}")

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_staff_lists_guest_carts(self, client, authenticate, make_user, make_product):
        product = await make_product()
        await client.post("/api/cart/add", json={"productId": product.id})
        client.cookies.clear()
        authenticate(await make_user(role=UserRole.ADMIN))

        response = await client.get("/api/cart/guest-carts")

        assert response.status_code == 200
        assert response.json()["pagination"]["totalRecords"] == 1

    @pytest.mark.asyncio
    async def test_edit_without_cart_issues_no_cookie(self, client, authenticate, make_user, make_product):
        product = await make_product()

        updated = await client.put(f"/api/cart/item/{product.id}", json={"quantity": 1})
        removed = await client.delete(f"/api/cart/item/{product.id}")

        assert updated.status_code == 404
        assert removed.status_code == 404
        assert config.GUEST_CART_COOKIE not in updated.cookies
        assert config.GUEST_CART_COOKIE not in removed.cookies
        authenticate(await make_user(role=UserRole.ADMIN))
        listed = await client.get("/api/cart/guest-carts")
        assert listed.json()["pagination"]["totalRecords"] == 0

    @pytest.mark.asyncio
    async def test_merge_requires_guest_cookie(self, client, authenticate, make_user):
        authenticate(await make_user())

        response = await client.post("/api/cart/merge-guest")

        assert response.status_code == 400


class TestWishlistRoutes:

    @pytest.mark.asyncio
    async def test_requires_login(self, client):
        assert (await client.get("/api/wishlist")).status_code == 401

    @pytest.mark.asyncio
    async def test_add_remove(self, client, authenticate, make_user, make_product):
        authenticate(await make_user())
        product = await make_product()

        added = await client.post("/api/wishlist/add", json={"productId": product.id})
        stats = await client.get("/api/wishlist/stats")
        removed = await client.delete(f"/api/wishlist/item/{product.id}")
        missing = await client.delete(f"/api/wishlist/item/{product.id}")

        assert added.json()["data"]["items"][0]["productId"] == product.id
        assert stats.json()["data"] == {"itemCount": 1}
        assert removed.json()["data"]["items"] == []
        assert missing.status_code == 404


class TestCheckout:

    @pytest.mark.asyncio
    async def test_cod_order(self, client, authenticate, make_user, make_product):
        authenticate(await make_user())
        product = await make_product(price=4.0, stock=3)
        await client.post("/api/cart/add", json={"productId": product.id, "quantity": 2})

        response = await client.post("/api/orders", json={
            "shippingAddress": SHIPPING_ADDRESS, "paymentMethod": "COD",
        })

        body = response.json()
        assert response.status_code == 201
        assert body["data"]["orderNumber"].startswith("ORD")
        assert body["data"]["totalAmount"] == 8.0
        assert body["data"]["orderStatus"] == "PENDING"
        assert body["data"]["paymentStatus"] == "PENDING"
        assert body["data"]["shippingAddress"]["postalCode"] == "62701"
        assert "checkoutSession" not in body
        assert (await client.get("/api/cart")).json()["data"]["items"] == []

    @pytest.mark.asyncio
    async def test_online_order_returns_checkout_session(self, client, authenticate, make_user, make_product):
        authenticate(await make_user())
        product = await make_product()
        await client.post("/api/cart/add", json={"productId": product.id})

        with patch("services.order.PaymentService.create_checkout_session", new_callable=AsyncMock,
                   return_value={"id": "cs_test_1", "url": "https://checkout.stripe.com/cs_test_1"}):
            response = await client.post("/api/orders", json={
                "shippingAddress": SHIPPING_ADDRESS, "paymentMethod": "ONLINE",
                "successUrl": "https://shop/success", "cancelUrl": "https://shop/cancel",
            })

        body = response.json()
        assert response.status_code == 201
        assert body["checkoutSession"] == {"id": "cs_test_1", "url": "https://checkout.stripe.com/cs_test_1"}
        assert body["data"]["sessionId"] == "cs_test_1"

    @pytest.mark.asyncio
    async def test_online_without_redirect_urls(self, client, authenticate, make_user, make_product):
        authenticate(await make_user())
        product = await make_product()
        await client.post("/api/cart/add", json={"productId": product.id, "quantity": 2})

        response = await client.post("/api/orders", json={
            "shippingAddress": SHIPPING_ADDRESS, "paymentMethod": "ONLINE",
        })

        assert response.status_code == 400
        assert (await client.get("/api/orders")).json()["pagination"]["totalRecords"] == 0
        assert (await client.get("/api/cart")).json()["data"]["totalItems"] == 2

    @pytest.mark.asyncio
    async def test_empty_cart(self, client, authenticate, make_user):
        authenticate(await make_user())

        response = await client.post("/api/orders", json={
            "shippingAddress": SHIPPING_ADDRESS, "paymentMethod": "COD",
        })

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_payment_method(self, client, authenticate, make_user):
        authenticate(await make_user())

        response = await client.post("/api/orders", json={
            "shippingAddress": SHIPPING_ADDRESS, "paymentMethod": "BARTER",
        })

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_orders_are_private(self, client, authenticate, make_user, make_order):
        owner = await make_user()
        order = await make_order(owner)
        authenticate(await make_user())

        response = await client.get(f"/api/orders/{order.id}")

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_cancel_and_stats(self, client, authenticate, make_user, make_order):
        user = await make_user()
        order = await make_order(user, price=5.0, quantity=2)
        authenticate(user)

        cancelled = await client.delete(f"/api/orders/{order.id}/cancel")
        again = await client.delete(f"/api/orders/{order.id}/cancel")
        stats = await client.get("/api/orders/stats")

        assert cancelled.json()["data"]["orderStatus"] == "CANCELLED"
        assert again.status_code == 400
        assert stats.json()["data"]["cancelledOrders"] == 1
        assert stats.json()["data"]["totalSpent"] == 10.0

    @pytest.mark.asyncio
    async def test_admin_status_update(self, client, authenticate, make_user, make_order):
        order = await make_order(await make_user(), order_status=OrderStatus.SHIPPED)
        authenticate(await make_user(role=UserRole.ADMIN))

        delivered = await client.put(f"/api/orders/admin/{order.id}/status", json={"status": "DELIVERED"})
        backwards = await client.put(f"/api/orders/admin/{order.id}/status", json={"status": "PENDING"})
        listed = await client.get("/api/orders/admin/all", params={"status": "DELIVERED"})

        assert delivered.json()["data"]["orderStatus"] == "DELIVERED"
        assert backwards.status_code == 400
        assert backwards.json()["message"] == "Invalid status transition from DELIVERED to PENDING"
        assert listed.json()["pagination"]["totalRecords"] == 1

    @pytest.mark.asyncio
    async def test_customer_cannot_manage_orders(self, client, authenticate, make_user):
        authenticate(await make_user())

        response = await client.get("/api/orders/admin/all")

        assert response.status_code == 403
