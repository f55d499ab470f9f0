"""
HTTP tests for /api/users: the registration flow end to end, cookie based
authentication and the staff-only account administration routes.
"""

from unittest.mock import AsyncMock, patch

import pytest

import config
from enums.user_role import UserRole
from enums.user_status import UserStatus
from repositories.user import UserRepository

ADDRESS = {"street": "1 Main St", "city": "Springfield", "state": "IL", "postalCode": "62701", "country": "US"}


class TestRegistrationFlow:

    @pytest.mark.asyncio
    async def test_register_verify_complete_login(self, client, test_session_maker):
        response = await client.post("/api/users/register", json={
            "username": "jane", "email": "jane@example.com", "password": "secret123",
            "confirmPassword": "secret123", "firstName": "Jane", "lastName": "Doe",
            "phoneNumber": "5550100", "countryCode": "+1",
        })
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["user"]["status"] == "INACTIVE"
        assert "password" not in body["data"]["user"]
        assert "otp" not in body["data"]["user"]

        # Not active yet, the address step is missing
        response = await client.post("/api/users/login", json={"email": "jane@example.com", "password": "secret123"})
        assert response.status_code == 403
        assert response.json()["requiresAddress"] is True

        async with test_session_maker() as session:
            otp = (await UserRepository.get_by_email("jane@example.com", session)).otp
        response = await client.post("/api/users/verify-otp", json={"email": "jane@example.com", "otp": otp})
        assert response.status_code == 200
        assert response.json()["data"]["requiresAddress"] is True

        response = await client.post("/api/users/complete-registration", json={
            "email": "jane@example.com", "addresses": [ADDRESS],
        })
        assert response.status_code == 200
        user = response.json()["data"]["user"]
        assert user["status"] == "ACTIVE"
        assert user["addresses"][0]["postalCode"] == "62701"
        assert user["addresses"][0]["isDefault"] is True

        response = await client.post("/api/users/login", json={"email": "jane@example.com", "password": "secret123"})
        assert response.status_code == 200
        assert config.ACCESS_TOKEN_COOKIE in response.cookies

        response = await client.get("/api/users/profile")
        assert response.status_code == 200
        assert response.json()["data"]["user"]["email"] == "jane@example.com"

    @pytest.mark.asyncio
    async def test_register_validation_error(self, client):
        response = await client.post("/api/users/register", json={"username": "jane"})

        assert response.status_code == 400
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_register_long_password_is_bad_request(self, client):
        response = await client.post("/api/users/register", json={
            "username": "jane", "email": "jane@example.com", "password": "a" * 80,
            "confirmPassword": "a" * 80, "firstName": "Jane", "lastName": "Doe",
            "phoneNumber": "5550100", "countryCode": "+1",
        })

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Password must be at most 72 bytes long"}

    @pytest.mark.asyncio
    async def test_register_duplicate(self, client, make_user):
        user = await make_user()

        response = await client.post("/api/users/register", json={
            "username": "fresh", "email": user.email, "password": "secret123",
            "confirmPassword": "secret123", "firstName": "A", "lastName": "B",
            "phoneNumber": "1", "countryCode": "+1",
        })

        assert response.status_code == 409
        assert response.json() == {"success": False, "message": "User with this email or username already exists"}


class TestSession:

    @pytest.mark.asyncio
    async def test_wrong_password(self, client, make_user):
        user = await make_user()

        response = await client.post("/api/users/login", json={"email": user.email, "password": "nope12"})

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    @pytest.mark.asyncio
    async def test_profile_requires_token(self, client):
        response = await client.get("/api/users/profile")

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Access token required"}

    @pytest.mark.asyncio
    async def test_garbage_token(self, client):
        client.cookies.set(config.ACCESS_TOKEN_COOKIE, "garbage")

        response = await client.get("/api/users/profile")

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid token"

    @pytest.mark.asyncio
    async def test_logout_clears_cookie(self, client, make_user):
        user = await make_user()
        await client.post("/api/users/login", json={"email": user.email, "password": "secret123"})

        response = await client.post("/api/users/logout")

        assert response.status_code == 200
        assert config.ACCESS_TOKEN_COOKIE not in client.cookies
        assert (await client.get("/api/users/profile")).status_code == 401

    @pytest.mark.asyncio
    async def test_login_merges_guest_cart(self, client, make_user, make_product):
        user = await make_user()
        product = await make_product()
        await client.post("/api/cart/add", json={"productId": product.id, "quantity": 2})
        assert config.GUEST_CART_COOKIE in client.cookies

        await client.post("/api/users/login", json={"email": user.email, "password": "secret123"})

        assert config.GUEST_CART_COOKIE not in client.cookies
        cart = (await client.get("/api/cart")).json()["data"]
        assert cart["userId"] == user.id
        assert cart["totalItems"] == 2


class TestOtp:

    @pytest.mark.asyncio
    async def test_partial_content_when_email_fails(self, client, make_user):
        user = await make_user()

        response = await client.post("/api/users/send-otp", json={"email": user.email, "purpose": "password_reset"})

        assert response.status_code == 206
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Email service unavailable. Please try again later."
        assert len(body["data"]["otp"]) == config.OTP_DIGITS

    @pytest.mark.asyncio
    async def test_sent(self, client, make_user):
        user = await make_user()

        with patch("services.user.NotificationService.send_password_reset_otp",
                   new_callable=AsyncMock, return_value=True):
            response = await client.post("/api/users/send-otp",
                                         json={"email": user.email, "purpose": "password_reset"})

        assert response.status_code == 200
        assert response.json()["message"] == "OTP sent to your email"
        assert "otp" not in response.json()["data"]

    @pytest.mark.asyncio
    async def test_profile_update_flow(self, client, authenticate, make_user):
        user = await make_user()
        authenticate(user)
        sent = await client.post("/api/users/send-otp", json={
            "email": user.email, "purpose": "profile_update", "updateData": {"firstName": "Janet"},
        })

        response = await client.post("/api/users/update-profile", json={"otp": sent.json()["data"]["otp"]})

        assert response.status_code == 200
        assert response.json()["data"]["user"]["firstName"] == "Janet"
        assert response.json()["data"]["updatedFields"] == ["firstName"]


class TestAdministration:

    @pytest.mark.asyncio
    async def test_customer_cannot_list_users(self, client, authenticate, make_user):
        authenticate(await make_user())

        response = await client.get("/api/users")

        assert response.status_code == 403
        assert response.json()["message"] == "Access denied. Insufficient permissions"

    @pytest.mark.asyncio
    async def test_admin_lists_users_with_pagination(self, client, authenticate, make_user):
        authenticate(await make_user(role=UserRole.ADMIN))
        for _ in range(3):
            await make_user()

        response = await client.get("/api/users", params={"page": 1, "limit": 2})

        body = response.json()
        assert response.status_code == 200
        assert len(body["data"]) == 2
        assert body["pagination"]["totalRecords"] == 3
        assert body["pagination"]["hasNextPage"] is True

    @pytest.mark.asyncio
    async def test_admin_activates_user(self, client, authenticate, make_user):
        authenticate(await make_user(role=UserRole.ADMIN))
        user = await make_user(status=UserStatus.INACTIVE)

        response = await client.put(f"/api/users/{user.id}", json={"status": "ACTIVE"})

        assert response.status_code == 200
        assert response.json()["data"]["user"]["status"] == "ACTIVE"

    @pytest.mark.asyncio
    async def test_admin_management_is_super_admin_only(self, client, authenticate, make_user):
        authenticate(await make_user(role=UserRole.ADMIN))

        response = await client.post("/api/users/admin/create", json={
            "username": "helper", "email": "helper@example.com", "password": "secret123",
        })

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_super_admin_creates_and_demotes_admin(self, client, authenticate, make_user):
        super_admin = await make_user(role=UserRole.SUPER_ADMIN)
        authenticate(super_admin)

        created = await client.post("/api/users/admin/create", json={
            "username": "helper", "email": "helper@example.com", "password": "secret123",
        })
        admin_id = created.json()["data"]["user"]["id"]
        demoted = await client.patch(f"/api/users/admin/{admin_id}/demote")
        protected = await client.delete(f"/api/users/admin/{super_admin.id}")

        assert created.status_code == 201
        assert demoted.json()["data"]["user"]["role"] == "USER"
        assert protected.status_code == 403
        assert protected.json()["message"] == "Cannot delete super admin"
