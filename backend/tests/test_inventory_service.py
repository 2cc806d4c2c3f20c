"""
MedZeal Backend: Inventory Service Tests
=========================================

Covers:
    - Low-stock count, vendor and product listings, dashboard counts
    - Vendor/product form validation (nothing written on failure)
    - Vendor creation push sequence, add product, add stock
    - Sales: stock check and the single multi-path write
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from medzeal.exceptions import FetchError, NotFoundError, StoreError, ValidationError
from medzeal.schemas.inventory import ProductInput, SaleInput, VendorCreate
from medzeal.services.inventory_service import (
    FORM_ERRORS_MESSAGE,
    InventoryService,
    count_low_stock,
    dashboard_counts,
    list_products,
    list_vendors,
    validate_product,
    validate_sale,
    validate_vendor,
)
from medzeal.services.subscriptions import live_snapshots


def _product(**overrides):
    data = {
        "name": "Bandage",
        "avgQuantity": 10,
        "quantity": 5,
        "productPrice": 100,
        "mrpPrice": 120,
        "creditCycleDate": 30,
    }
    data.update(overrides)
    return ProductInput.model_validate(data)


def _sale(*items, **overrides):
    data = {
        "customerName": "Ravi Patel",
        "customerNumber": "9000000002",
        "items": [{"vendorId": v, "productId": p, "quantity": q} for v, p, q in items],
        "discountPercentage": 0,
    }
    data.update(overrides)
    return SaleInput.model_validate(data)


def _vendor(**overrides):
    data = {"name": "Acme Pharma", "number": "9876543210", "address": "Mumbra", "products": []}
    data.update(overrides)
    return VendorCreate.model_validate(data)


class TestReductions:
    """Pure functions over the vendors tree."""

    def test_count_low_stock(self, vendors_tree):
        assert count_low_stock(vendors_tree) == 2

    @pytest.mark.parametrize("snapshot", [None, {}, {"V": {"name": "No products"}}])
    def test_count_low_stock_empty(self, snapshot):
        assert count_low_stock(snapshot) == 0

    def test_equal_quantity_is_not_low(self):
        tree = {"V": {"products": {"P": {"quantity": 10, "avgQuantity": 10}}}}
        assert count_low_stock(tree) == 0

    def test_list_vendors(self, vendors_tree):
        vendors = {v.id: v for v in list_vendors(vendors_tree)}

        assert vendors["V1"].name == "Acme Pharma"
        assert vendors["V1"].product_count == 2
        assert vendors["V2"].product_count == 1

    def test_list_products(self, vendors_tree):
        products = {p.product_id: p for p in list_products(vendors_tree)}

        assert set(products) == {"P1", "P2", "P3"}
        assert products["P1"].low_stock is True
        assert products["P1"].shortfall == 5
        assert products["P2"].low_stock is False
        assert products["P3"].vendor_name == "Zen Supplies"

    def test_list_products_search(self, vendors_tree):
        assert [p.product_id for p in list_products(vendors_tree, "gauze")] == ["P2"]
        assert {p.product_id for p in list_products(vendors_tree, "acme")} == {"P1", "P2"}

    def test_dashboard_counts(self, vendors_tree, appointments_tree):
        counts = dashboard_counts(appointments_tree, {"b1": {}, "b2": {}}, vendors_tree)

        assert counts.appointments == 3
        assert counts.blogs == 2
        assert counts.low_stock == 2

    def test_dashboard_counts_empty(self):
        counts = dashboard_counts(None, None, None)

        assert (counts.appointments, counts.blogs, counts.low_stock) == (0, 0, 0)


class TestValidation:
    """Form rules the admin pages enforce."""

    def test_valid_vendor(self):
        validate_vendor(_vendor(products=[_product().model_dump(by_alias=True)]))

    def test_single_error_uses_its_message(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_vendor(_vendor(number="12345"))

        assert exc_info.value.message == "Vendor number must be a 10-digit number."
        assert exc_info.value.field == "number"

    def test_multiple_errors_listed(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_vendor(_vendor(name="  ", address=""))

        error = exc_info.value
        assert error.message == FORM_ERRORS_MESSAGE
        assert set(error.context["errors"]) == {"name", "address"}

    def test_product_errors_are_prefixed(self):
        bad = _product(creditCycleDate=0).model_dump(by_alias=True)

        with pytest.raises(ValidationError) as exc_info:
            validate_vendor(_vendor(products=[bad]))

        assert "products[0].credit_cycle_date" in exc_info.value.context["errors"]

    @pytest.mark.parametrize(
        "overrides,field",
        [
            ({"name": " "}, "name"),
            ({"quantity": -1}, "quantity"),
            ({"avgQuantity": None}, "avg_quantity"),
            ({"productPrice": -5}, "product_price"),
            ({"mrpPrice": None}, "mrp_price"),
            ({"creditCycleDate": -3}, "credit_cycle_date"),
        ],
    )
    def test_invalid_product(self, overrides, field):
        with pytest.raises(ValidationError) as exc_info:
            validate_product(_product(**overrides))

        assert exc_info.value.field == field

    def test_zero_quantity_allowed(self):
        validate_product(_product(quantity=0))


class TestInventoryService:
    """Service methods against a mocked store."""

    @pytest.fixture
    def service(self):
        return InventoryService()

    @pytest.mark.asyncio
    async def test_get_vendor_history_newest_first(self, service, mock_store, vendors_tree):
        mock_store.get.return_value = vendors_tree["V1"]

        vendor = await service.get_vendor(mock_store, "V1")

        mock_store.get.assert_awaited_once_with("vendors/V1")
        bandage = next(p for p in vendor.products if p.id == "P1")
        assert [h.id for h in bandage.history] == ["H1", "H2"]
        assert bandage.low_stock is True

    @pytest.mark.asyncio
    async def test_get_vendor_missing(self, service, mock_store):
        mock_store.get.return_value = None

        with pytest.raises(NotFoundError):
            await service.get_vendor(mock_store, "nope")

    @pytest.mark.asyncio
    async def test_create_vendor_push_sequence(self, service, mock_store):
        mock_store.push.side_effect = ["V9", "P1", "H1", "P2"]
        payload = _vendor(
            products=[
                _product(quantity=5).model_dump(by_alias=True),
                _product(name="Gauze", quantity=0).model_dump(by_alias=True),
            ]
        )

        created = await service.create_vendor(mock_store, payload)

        assert created.id == "V9"
        assert created.product_ids == ["P1", "P2"]
        pushed_paths = [c.args[0] for c in mock_store.push.await_args_list]
        assert pushed_paths == [
            "vendors",
            "vendors/V9/products",
            "vendors/V9/products/P1/history",
            "vendors/V9/products",
        ]
        vendor_doc = mock_store.push.await_args_list[0].args[1]
        assert vendor_doc == {"name": "Acme Pharma", "number": "9876543210", "address": "Mumbra"}
        history_doc = mock_store.push.await_args_list[2].args[1]
        assert history_doc["addedQuantity"] == 5
        assert history_doc["newQuantity"] == 5
        assert history_doc["payment"] == "pending"
        product_doc = mock_store.push.await_args_list[1].args[1]
        assert product_doc["creditCycleDate"] == 30
        assert history_doc["date"] == product_doc["lastUpdated"]

    @pytest.mark.asyncio
    async def test_create_vendor_invalid_writes_nothing(self, service, mock_store):
        with pytest.raises(ValidationError):
            await service.create_vendor(mock_store, _vendor(name=""))

        mock_store.push.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_vendor_push_failure(self, service, mock_store):
        mock_store.push.side_effect = ConnectionError("offline")

        with pytest.raises(StoreError) as exc_info:
            await service.create_vendor(mock_store, _vendor())

        assert exc_info.value.message == "Failed to add vendor. Please try again."

    @pytest.mark.asyncio
    async def test_add_product(self, service, mock_store):
        mock_store.get.return_value = {"name": "Acme Pharma"}
        mock_store.push.side_effect = ["P7", "H7"]

        created = await service.add_product(mock_store, "V1", _product(quantity=3))

        assert created.id == "P7"
        assert created.message == "New product added successfully!"
        assert mock_store.push.await_count == 2

    @pytest.mark.asyncio
    async def test_add_product_unknown_vendor(self, service, mock_store):
        mock_store.get.return_value = None

        with pytest.raises(NotFoundError):
            await service.add_product(mock_store, "ghost", _product())

        mock_store.push.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_add_stock(self, service, mock_store):
        mock_store.get.return_value = {"name": "Bandage", "quantity": 5}
        mock_store.push.return_value = "H8"

        added = await service.add_stock(mock_store, "V1", "P1", 3)

        update_path, update_values = mock_store.update.await_args.args
        assert update_path == "vendors/V1/products/P1"
        assert update_values["quantity"] == 8
        assert "lastUpdated" in update_values
        history_path, history_doc = mock_store.push.await_args.args
        assert history_path == "vendors/V1/products/P1/history"
        assert history_doc["addedQuantity"] == 3
        assert history_doc["newQuantity"] == 8
        assert history_doc["payment"] == "pending"
        assert history_doc["date"] == update_values["lastUpdated"]
        assert added.history_id == "H8"
        assert added.new_quantity == 8

    @pytest.mark.asyncio
    @pytest.mark.parametrize("quantity", [None, 0, -4])
    async def test_add_stock_rejects_non_positive(self, service, mock_store, quantity):
        with pytest.raises(ValidationError) as exc_info:
            await service.add_stock(mock_store, "V1", "P1", quantity)

        assert exc_info.value.message == "Please enter a valid positive number for additional quantity."
        mock_store.get.assert_not_awaited()
        mock_store.update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_add_stock_history_failure_names_step(self, service, mock_store):
        mock_store.get.return_value = {"quantity": 1}
        mock_store.push = AsyncMock(side_effect=TimeoutError("slow"))

        with pytest.raises(StoreError) as exc_info:
            await service.add_stock(mock_store, "V1", "P1", 2)

        assert exc_info.value.message == "Failed to update product history. Please try again."
        mock_store.update.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_dashboard_reads_each_path(self, service, mock_store, vendors_tree, appointments_tree):
        trees = {"appointments": appointments_tree, "blogs": {"b1": {}}, "vendors": vendors_tree}
        mock_store.get.side_effect = lambda path: trees[path]

        counts = await service.dashboard(mock_store)

        assert (counts.appointments, counts.blogs, counts.low_stock) == (3, 1, 2)

    @pytest.mark.asyncio
    async def test_listing_fetch_failure(self, service, mock_store):
        mock_store.get.side_effect = ConnectionError("offline")

        with pytest.raises(FetchError):
            await service.list_vendors(mock_store)


class TestSales:
    """Point-of-sale: validation, stock check, one multi-path update."""

    @pytest.fixture
    def service(self):
        return InventoryService()

    def test_sale_validation_lists_fields(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_sale(_sale(("V1", "P1", 0), customerNumber="123", discountPercentage=120))

        errors = exc_info.value.context["errors"]
        assert exc_info.value.message == FORM_ERRORS_MESSAGE
        assert errors["customer_number"] == "Customer number must be 10 digits."
        assert errors["discount_percentage"] == "Discount must be between 0 and 100."
        assert errors["items[0].quantity"] == "Quantity must be at least 1."

    def test_sale_needs_items(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_sale(_sale())

        assert exc_info.value.field == "items"

    @pytest.mark.asyncio
    async def test_record_sale_single_update(self, service, mock_store, vendors_tree):
        mock_store.get.return_value = vendors_tree

        result = await service.record_sale(mock_store, _sale(("V1", "P2", 3), ("V1", "P1", 2), discountPercentage=10))

        mock_store.update.assert_awaited_once()
        root, updates = mock_store.update.await_args.args
        assert root == ""
        assert updates["vendors/V1/products/P2/quantity"] == 17
        assert updates["vendors/V1/products/P1/quantity"] == 3

        history = [v for k, v in updates.items() if "/sellhistory/" in k]
        assert sorted(h["soldQuantity"] for h in history) == [2, 3]
        assert {h["saleId"] for h in history} == {result.id}

        sale = updates[f"sales/{result.id}"]
        assert sale["customerName"] == "Ravi Patel"
        assert sale["products"]["productSale-0"]["totalPrice"] == 180
        assert sale["products"]["productSale-1"]["mrpPrice"] == 120
        assert (result.total_amount, result.discount_amount, result.final_amount) == (420, 42, 378)
        assert sale["finalAmount"] == 378
        mock_store.push.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_insufficient_stock_writes_nothing(self, service, mock_store, vendors_tree):
        mock_store.get.return_value = vendors_tree

        with pytest.raises(ValidationError) as exc_info:
            await service.record_sale(mock_store, _sale(("V1", "P2", 1), ("V1", "P1", 6)))

        assert exc_info.value.message == 'Insufficient stock for "Bandage". Available: 5, requested: 6'
        mock_store.update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_repeated_product_shares_stock(self, service, mock_store, vendors_tree):
        mock_store.get.return_value = vendors_tree

        with pytest.raises(ValidationError) as exc_info:
            await service.record_sale(mock_store, _sale(("V1", "P1", 3), ("V1", "P1", 3)))

        assert "Available: 2, requested: 3" in exc_info.value.message
        mock_store.update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_product(self, service, mock_store, vendors_tree):
        mock_store.get.return_value = vendors_tree

        with pytest.raises(NotFoundError):
            await service.record_sale(mock_store, _sale(("V2", "P1", 1)))

        mock_store.update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_sale_updates_low_stock_count(self, service, mock_store, vendors_tree):
        live_snapshots.vendors._on_event(SimpleNamespace(event_type="put", path="/", data=vendors_tree))
        assert await service.count_low_stock(mock_store) == 2

        await service.record_sale(mock_store, _sale(("V1", "P2", 15)))

        assert await service.count_low_stock(mock_store) == 3
        tree = await live_snapshots.vendors.current(mock_store)
        assert tree["V1"]["products"]["P2"]["quantity"] == 5
        assert len(tree["V1"]["products"]["P2"]["sellhistory"]) == 1

    @pytest.mark.asyncio
    async def test_record_sale_failure(self, service, mock_store, vendors_tree):
        mock_store.get.return_value = vendors_tree
        mock_store.update = AsyncMock(side_effect=PermissionError("denied"))

        with pytest.raises(StoreError) as exc_info:
            await service.record_sale(mock_store, _sale(("V1", "P2", 1)))

        assert exc_info.value.message == "Failed to process sale. Please try again."
