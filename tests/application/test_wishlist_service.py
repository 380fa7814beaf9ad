"""Tests for the wishlist service."""

from io import BytesIO

import openpyxl
import pytest

from finessee.application.exports import WISHLIST_HEADER_ROW, WISHLIST_HEADERS
from finessee.application.wishlist_service import WishlistService
from finessee.domain.exceptions import ConflictError, NotFoundError


class TestWishlistMembership:
    """Tests for add, remove and membership."""

    @pytest.mark.asyncio
    async def test_add_then_member(self, repos, make_product, customer):
        """Test an added product is reported as a member."""
        product = await repos.products.create(make_product("W-1"))
        service = WishlistService(repos)

        entry = await service.add(customer.id, product.id)

        assert entry.user_id == customer.id
        assert entry.product_id == product.id
        assert await service.is_member(customer.id, product.id) is True

    @pytest.mark.asyncio
    async def test_second_add_conflicts(self, repos, make_product, customer):
        """Test adding the same product twice is rejected."""
        product = await repos.products.create(make_product("W-1"))
        service = WishlistService(repos)
        await service.add(customer.id, product.id)

        with pytest.raises(ConflictError):
            await service.add(customer.id, product.id)
        assert len(await service.list_for_user(customer.id)) == 1

    @pytest.mark.asyncio
    async def test_add_missing_product(self, repos, customer):
        """Test adding an unknown product raises NotFoundError."""
        with pytest.raises(NotFoundError):
            await WishlistService(repos).add(customer.id, 12345)

    @pytest.mark.asyncio
    async def test_remove_is_idempotent(self, repos, make_product, customer):
        """Test the first remove succeeds and the second reports nothing removed."""
        product = await repos.products.create(make_product("W-1"))
        service = WishlistService(repos)
        await service.add(customer.id, product.id)

        assert await service.remove(customer.id, product.id) is True
        assert await service.remove(customer.id, product.id) is False
        assert await service.is_member(customer.id, product.id) is False

    @pytest.mark.asyncio
    async def test_wishlists_are_per_user(self, repos, make_product, customer, primary_admin):
        """Test one user's entries are invisible to another."""
        product = await repos.products.create(make_product("W-1"))
        service = WishlistService(repos)
        await service.add(customer.id, product.id)

        assert await service.is_member(primary_admin.id, product.id) is False
        assert await service.list_for_user(primary_admin.id) == []


class TestWishlistListing:
    """Tests for list_for_user."""

    @pytest.mark.asyncio
    async def test_insertion_order(self, repos, make_product, customer):
        """Test entries come back in the order they were added."""
        first = await repos.products.create(make_product("W-2", name="Zebra Rug"))
        second = await repos.products.create(make_product("W-1", name="Armchair"))
        service = WishlistService(repos)
        await service.add(customer.id, first.id)
        await service.add(customer.id, second.id)

        items = await service.list_for_user(customer.id)
        assert [item.product.code for item in items] == ["W-2", "W-1"]

    @pytest.mark.asyncio
    async def test_deleted_products_disappear(self, repos, make_product, customer):
        """Test deleting a product removes it from the wishlist."""
        product = await repos.products.create(make_product("W-1"))
        service = WishlistService(repos)
        await service.add(customer.id, product.id)

        await repos.products.delete(product.id)
        assert await service.list_for_user(customer.id) == []


class TestWishlistExport:
    """Tests for export_xlsx."""

    @pytest.mark.asyncio
    async def test_empty_wishlist(self, repos, customer):
        """Test exporting an empty wishlist raises NotFoundError."""
        with pytest.raises(NotFoundError):
            await WishlistService(repos).export_xlsx(customer)

    @pytest.mark.asyncio
    async def test_workbook_layout(self, repos, make_product, customer):
        """Test the export has a title block, headers on row 5 and data below."""
        product = await repos.products.create(
            make_product("VF-CT-005", name="Conference Table", material="", length=300,
                         breadth=120, height=75, finish="Mahogany")
        )
        service = WishlistService(repos)
        await service.add(customer.id, product.id)

        content = await service.export_xlsx(customer)
        sheet = openpyxl.load_workbook(BytesIO(content)).active

        assert sheet.cell(row=1, column=1).value == "Vmake Finessee - Customer Wishlist"
        assert sheet.cell(row=2, column=1).value == "Customer: Jane Doe"
        assert str(sheet.cell(row=3, column=1).value).startswith("Generated on: ")
        headers = [sheet.cell(row=WISHLIST_HEADER_ROW, column=c).value for c in range(1, 8)]
        assert headers == WISHLIST_HEADERS

        data = [sheet.cell(row=WISHLIST_HEADER_ROW + 1, column=c).value for c in range(1, 8)]
        assert data == [
            1,
            "VF-CT-005",
            "Conference Table",
            "Tables",
            "Not specified",
            "300×120×75",
            "Mahogany",
        ]
