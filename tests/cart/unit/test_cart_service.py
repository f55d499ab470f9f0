"""
Unit Tests: CartService

Tests for services/cart.py covering:
- resolve_cart() - guest and user carts, cookie issuance
- add_item() / update_item() / remove_item() - line items and totals
- merge_guest_cart() - guest cart adoption and merging
- get_cart_by_id() - ownership rules
- validate_cart() - live catalog checks
"""

import pytest

from enums.user_role import UserRole
from exceptions.cart import (
    CartAccessDeniedException,
    CartItemNotFoundException,
    GuestCartNotFoundException,
    InvalidCartStateException,
)
from exceptions.order import InsufficientStockException
from exceptions.product import ProductNotFoundException
from repositories.cart import CartRepository
from repositories.product import ProductRepository
from services.cart import CartService


class TestResolveCart:

    @pytest.mark.asyncio
    async def test_guest_without_cookie_gets_new_cart(self, test_session):
        cart, guest_id = await CartService.resolve_cart(None, None, test_session)

        assert guest_id == cart.guest_id
        assert cart.user_id is None
        assert cart.items == []
        assert cart.total_items == 0
        assert cart.total_amount == 0.0

    @pytest.mark.asyncio
    async def test_guest_cookie_reuses_cart(self, test_session):
        cart, guest_id = await CartService.resolve_cart(None, None, test_session)

        again, new_guest_id = await CartService.resolve_cart(None, guest_id, test_session)

        assert again.id == cart.id
        assert new_guest_id is None

    @pytest.mark.asyncio
    async def test_stale_cookie_issues_new_cart(self, test_session):
        cart, new_guest_id = await CartService.resolve_cart(None, "0" * 32, test_session)

        assert new_guest_id == cart.guest_id
        assert new_guest_id != "0" * 32

    @pytest.mark.asyncio
    async def test_user_cart_ignores_guest_cookie(self, test_session, make_user):
        user = await make_user()
        guest_cart, guest_id = await CartService.resolve_cart(None, None, test_session)

        cart, new_guest_id = await CartService.resolve_cart(user, guest_id, test_session)

        assert cart.user_id == user.id
        assert cart.id != guest_cart.id
        assert new_guest_id is None

    @pytest.mark.asyncio
    async def test_user_gets_same_active_cart(self, test_session, make_user):
        user = await make_user()
        first, _ = await CartService.resolve_cart(user, None, test_session)
        second, _ = await CartService.resolve_cart(user, None, test_session)

        assert first.id == second.id


class TestCartItems:

    @pytest.mark.asyncio
    async def test_add_same_product_sums_quantity(self, test_session, make_product):
        product = await make_product(price=12.5)

        cart, guest_id = await CartService.add_item(None, None, product.id, 2, test_session)
        cart, _ = await CartService.add_item(None, guest_id, product.id, 3, test_session)

        assert len(cart.items) == 1
        assert cart.items[0].quantity == 5
        assert cart.total_items == 5
        assert cart.total_amount == 62.5

    @pytest.mark.asyncio
    async def test_add_snapshots_product(self, test_session, make_product):
        product = await make_product(title="Mascara", price=9.99, thumbnail="https://cdn.example.com/m.png")

        cart, _ = await CartService.add_item(None, None, product.id, 1, test_session)

        item = cart.items[0]
        assert (item.title, item.price, item.thumbnail) == ("Mascara", 9.99, "https://cdn.example.com/m.png")

    @pytest.mark.asyncio
    async def test_add_does_not_check_stock(self, test_session, make_product):
        product = await make_product(stock=1)

        cart, _ = await CartService.add_item(None, None, product.id, 10, test_session)

        assert cart.total_items == 10

    @pytest.mark.asyncio
    async def test_add_unknown_product(self, test_session):
        with pytest.raises(ProductNotFoundException):
            await CartService.add_item(None, None, 999, 1, test_session)

    @pytest.mark.asyncio
    async def test_totals_across_lines(self, test_session, make_product):
        first = await make_product(price=10.0)
        second = await make_product(price=2.25)

        cart, guest_id = await CartService.add_item(None, None, first.id, 2, test_session)
        cart, _ = await CartService.add_item(None, guest_id, second.id, 4, test_session)

        assert cart.total_items == 6
        assert cart.total_amount == 29.0

    @pytest.mark.asyncio
    async def test_update_beyond_stock(self, test_session, make_product):
        product = await make_product(stock=5)
        _, guest_id = await CartService.add_item(None, None, product.id, 1, test_session)

        with pytest.raises(InsufficientStockException) as exc_info:
            await CartService.update_item(None, guest_id, product.id, 6, test_session)
        assert exc_info.value.message == "Only 5 items available in stock"

    @pytest.mark.asyncio
    async def test_update_to_zero_removes_line(self, test_session, make_product):
        product = await make_product()
        _, guest_id = await CartService.add_item(None, None, product.id, 2, test_session)

        cart = await CartService.update_item(None, guest_id, product.id, 0, test_session)

        assert cart.items == []
        assert cart.total_items == 0
        assert cart.total_amount == 0.0

    @pytest.mark.asyncio
    async def test_update_missing_line(self, test_session, make_product):
        in_cart = await make_product()
        not_in_cart = await make_product()
        _, guest_id = await CartService.add_item(None, None, in_cart.id, 1, test_session)

        with pytest.raises(CartItemNotFoundException):
            await CartService.update_item(None, guest_id, not_in_cart.id, 1, test_session)

    @pytest.mark.asyncio
    async def test_remove_and_clear(self, test_session, make_product):
        first = await make_product()
        second = await make_product()
        _, guest_id = await CartService.add_item(None, None, first.id, 1, test_session)
        await CartService.add_item(None, guest_id, second.id, 1, test_session)

        cart = await CartService.remove_item(None, guest_id, first.id, test_session)
        assert [item.product_id for item in cart.items] == [second.id]

        cart, _ = await CartService.clear_cart(None, guest_id, test_session)
        assert cart.items == []
        assert cart.total_amount == 0.0

    @pytest.mark.asyncio
    async def test_remove_missing_line(self, test_session):
        with pytest.raises(CartItemNotFoundException):
            await CartService.remove_item(None, None, 1, test_session)

        _, total = await CartService.get_guest_carts(1, 10, test_session)
        assert total == 0

    @pytest.mark.asyncio
    async def test_update_without_cart_creates_none(self, test_session, make_user, make_product):
        product = await make_product()
        user = await make_user()

        with pytest.raises(CartItemNotFoundException):
            await CartService.update_item(None, None, product.id, 1, test_session)
        with pytest.raises(CartItemNotFoundException):
            await CartService.update_item(None, "unknown-guest", product.id, 1, test_session)
        with pytest.raises(CartItemNotFoundException):
            await CartService.remove_item(user, None, product.id, test_session)

        _, total = await CartService.get_guest_carts(1, 10, test_session)
        assert total == 0
        assert await CartRepository.get_active_by_user(user.id, test_session) is None

    @pytest.mark.asyncio
    async def test_stats(self, test_session, make_product):
        product = await make_product(price=4.0)
        _, guest_id = await CartService.add_item(None, None, product.id, 3, test_session)

        stats, _ = await CartService.get_stats(None, guest_id, test_session)

        assert stats == {"totalItems": 3, "totalAmount": 12.0, "itemCount": 1}


class TestMergeGuestCart:

    @pytest.mark.asyncio
    async def test_guest_cart_adopted_when_user_has_none(self, test_session, make_user, make_product):
        user = await make_user()
        product = await make_product()
        guest_cart, guest_id = await CartService.add_item(None, None, product.id, 2, test_session)

        merged = await CartService.merge_guest_cart(user, guest_id, test_session)

        assert merged.id == guest_cart.id
        assert merged.user_id == user.id
        assert merged.total_items == 2

    @pytest.mark.asyncio
    async def test_lines_summed_into_user_cart(self, test_session, make_user, make_product):
        user = await make_user()
        shared = await make_product(price=5.0)
        guest_only = await make_product(price=1.0)
        await CartService.add_item(user, None, shared.id, 1, test_session)
        guest_cart, guest_id = await CartService.add_item(None, None, shared.id, 2, test_session)
        await CartService.add_item(None, guest_id, guest_only.id, 3, test_session)

        merged = await CartService.merge_guest_cart(user, guest_id, test_session)

        quantities = {item.product_id: item.quantity for item in merged.items}
        assert quantities == {shared.id: 3, guest_only.id: 3}
        assert merged.total_amount == 18.0
        assert (await CartRepository.get_by_id(guest_cart.id, test_session)).is_active is False

    @pytest.mark.asyncio
    async def test_merged_guest_cart_unreachable_through_cookie(self, test_session, make_user, make_product):
        user = await make_user()
        product = await make_product()
        await CartService.add_item(user, None, product.id, 1, test_session)
        _, guest_id = await CartService.add_item(None, None, product.id, 1, test_session)
        await CartService.merge_guest_cart(user, guest_id, test_session)

        with pytest.raises(GuestCartNotFoundException):
            await CartService.merge_guest_cart(user, guest_id, test_session)

    @pytest.mark.asyncio
    async def test_requires_guest_id(self, test_session, make_user):
        user = await make_user()

        with pytest.raises(InvalidCartStateException):
            await CartService.merge_guest_cart(user, None, test_session)


class TestCartAccess:

    @pytest.mark.asyncio
    async def test_owner_and_staff_can_view(self, test_session, make_user):
        owner = await make_user()
        admin = await make_user(role=UserRole.ADMIN)
        cart, _ = await CartService.resolve_cart(owner, None, test_session)

        assert (await CartService.get_cart_by_id(cart.id, owner, None, test_session)).id == cart.id
        assert (await CartService.get_cart_by_id(cart.id, admin, None, test_session)).id == cart.id

    @pytest.mark.asyncio
    async def test_other_user_denied(self, test_session, make_user):
        owner = await make_user()
        stranger = await make_user()
        cart, _ = await CartService.resolve_cart(owner, None, test_session)

        with pytest.raises(CartAccessDeniedException):
            await CartService.get_cart_by_id(cart.id, stranger, None, test_session)

    @pytest.mark.asyncio
    async def test_guest_cookie_holder_can_view(self, test_session):
        cart, guest_id = await CartService.resolve_cart(None, None, test_session)

        assert (await CartService.get_cart_by_id(cart.id, None, guest_id, test_session)).id == cart.id
        with pytest.raises(CartAccessDeniedException):
            await CartService.get_cart_by_id(cart.id, None, "f" * 32, test_session)


class TestValidateCart:

    @pytest.mark.asyncio
    async def test_reports_each_line(self, test_session, make_product):
        fine = await make_product(stock=10, price=3.0)
        short = await make_product(stock=1)
        gone = await make_product()
        _, guest_id = await CartService.add_item(None, None, fine.id, 2, test_session)
        await CartService.add_item(None, guest_id, short.id, 4, test_session)
        await CartService.add_item(None, guest_id, gone.id, 1, test_session)
        await ProductRepository.delete(gone.id, test_session)
        await test_session.commit()

        validation, _ = await CartService.validate_cart(None, guest_id, test_session)

        assert validation["allItemsAvailable"] is False
        results = {r["productId"]: r for r in validation["validationResults"]}
        assert results[fine.id]["available"] is True
        assert results[fine.id]["currentPrice"] == 3.0
        assert results[short.id]["reason"] == "Insufficient stock"
        assert results[short.id]["availableStock"] == 1
        assert results[gone.id]["reason"] == "Product not found"
