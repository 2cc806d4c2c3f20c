"""
MedZeal Backend: Inventory Service
===================================

What:  Vendors, the products they supply, stock deliveries and the low-stock counter.
Who:   /api/vendors and /api/inventory routes; the dashboard.

Every delivery (a product created with stock, or stock added later) pushes a
history entry with `payment: "pending"`; the credit-cycle page settles them.

Writes are sequential pushes/updates without a transaction: if a later step
fails, earlier ones stay written and the error names the step that failed.
A sale is the exception: stock, sell history and the sale record are written
together in one multi-path update, so either all of it lands or none.
"""

import logging
import math
import uuid
from typing import Any, Dict, List, Optional, Tuple, Union

from medzeal.exceptions import NotFoundError, StoreError, ValidationError
from medzeal.models import paths
from medzeal.models.inventory import (
    HistoryDocument,
    ProductDocument,
    SaleDocument,
    SaleLineDocument,
    SellHistoryDocument,
    VendorDocument,
    now_iso,
)
from medzeal.schemas.inventory import (
    DashboardCounts,
    HistoryEntry,
    ProductCreated,
    ProductDetail,
    ProductInput,
    ProductListItem,
    SaleInput,
    SaleRecorded,
    SoldItem,
    StockAdded,
    VendorCreated,
    VendorCreate,
    VendorDetail,
    VendorSummary,
)
from medzeal.services.subscriptions import fetch, live_snapshots
from medzeal.services.tree import as_dict, number, text

logger = logging.getLogger(__name__)

FORM_ERRORS_MESSAGE = "Please fix the errors in the form."


def _is_low(product: Dict[str, Any]) -> bool:
    return number(product.get("quantity")) < number(product.get("avgQuantity"))


# ── Pure reductions over the vendors tree ─────────────────────────────────


def count_low_stock(snapshot: Any) -> int:
    """Products (across all vendors) whose quantity is below their average quantity."""
    return sum(
        1
        for vendor in as_dict(snapshot).values()
        for product in as_dict(as_dict(vendor).get("products")).values()
        if _is_low(as_dict(product))
    )


def list_vendors(snapshot: Any) -> List[VendorSummary]:
    vendors = []
    for vendor_id, vendor in as_dict(snapshot).items():
        vendor = as_dict(vendor)
        vendors.append(
            VendorSummary(
                id=vendor_id,
                name=text(vendor.get("name")),
                number=text(vendor.get("number")),
                address=text(vendor.get("address")),
                product_count=len(as_dict(vendor.get("products"))),
            )
        )
    return vendors


def list_products(snapshot: Any, query: Optional[str] = None) -> List[ProductListItem]:
    """Flatten products across vendors, optionally searching product or vendor name."""
    needle = (query or "").strip().lower()
    items = []
    for vendor_id, vendor in as_dict(snapshot).items():
        vendor = as_dict(vendor)
        vendor_name = text(vendor.get("name"))
        for product_id, product in as_dict(vendor.get("products")).items():
            product = as_dict(product)
            name = text(product.get("name"))
            if needle and needle not in name.lower() and needle not in vendor_name.lower():
                continue
            quantity = number(product.get("quantity"))
            avg_quantity = number(product.get("avgQuantity"))
            items.append(
                ProductListItem(
                    vendor_id=vendor_id,
                    vendor_name=vendor_name,
                    vendor_number=text(vendor.get("number")),
                    product_id=product_id,
                    name=name,
                    quantity=quantity,
                    avg_quantity=avg_quantity,
                    product_price=number(product.get("productPrice")),
                    mrp_price=number(product.get("mrpPrice")),
                    credit_cycle_date=int(number(product.get("creditCycleDate"))),
                    low_stock=quantity < avg_quantity,
                    shortfall=avg_quantity - quantity,
                )
            )
    return items


def dashboard_counts(appointments: Any, blogs: Any, vendors: Any) -> DashboardCounts:
    """Appointments are counted across every user's group."""
    return DashboardCounts(
        appointments=sum(len(as_dict(group)) for group in as_dict(appointments).values()),
        blogs=len(as_dict(blogs)),
        low_stock=count_low_stock(vendors),
    )


def _vendor_detail(vendor_id: str, vendor: Dict[str, Any]) -> VendorDetail:
    products = []
    for product_id, product in as_dict(vendor.get("products")).items():
        product = as_dict(product)
        history = [
            HistoryEntry(
                id=history_id,
                date=text(entry.get("date")),
                added_quantity=number(entry.get("addedQuantity")),
                new_quantity=number(entry.get("newQuantity")),
                payment=text(entry.get("payment")),
            )
            for history_id, entry in ((k, as_dict(v)) for k, v in as_dict(product.get("history")).items())
        ]
        # Push keys and ISO dates both sort chronologically
        history.sort(key=lambda h: (h.date, h.id), reverse=True)
        products.append(
            ProductDetail(
                id=product_id,
                name=text(product.get("name")),
                quantity=number(product.get("quantity")),
                avg_quantity=number(product.get("avgQuantity")),
                product_price=number(product.get("productPrice")),
                mrp_price=number(product.get("mrpPrice")),
                credit_cycle_date=int(number(product.get("creditCycleDate"))),
                last_updated=product.get("lastUpdated"),
                low_stock=_is_low(product),
                history=history,
            )
        )
    return VendorDetail(
        id=vendor_id,
        name=text(vendor.get("name")),
        number=text(vendor.get("number")),
        address=text(vendor.get("address")),
        products=products,
    )


# ── Validation ────────────────────────────────────────────────────────────


def _product_errors(product: ProductInput, prefix: str = "") -> Dict[str, str]:
    errors: Dict[str, str] = {}
    if not product.name.strip():
        errors[f"{prefix}name"] = "Product name is required."

    for field, label in (("avg_quantity", "Average quantity"), ("quantity", "Quantity")):
        value = getattr(product, field)
        if value is None:
            errors[f"{prefix}{field}"] = f"{label} is required."
        elif value < 0:
            errors[f"{prefix}{field}"] = f"{label} cannot be negative."

    for field, label in (("product_price", "Product price"), ("mrp_price", "MRP price")):
        value = getattr(product, field)
        if value is None:
            errors[f"{prefix}{field}"] = f"{label} is required."
        elif value < 0:
            errors[f"{prefix}{field}"] = f"{label} cannot be negative."

    if product.credit_cycle_date is None:
        errors[f"{prefix}credit_cycle_date"] = "Credit cycle date is required."
    elif product.credit_cycle_date <= 0:
        errors[f"{prefix}credit_cycle_date"] = "Credit cycle date must be a positive number."
    return errors


def _raise_if_errors(errors: Dict[str, str]) -> None:
    if not errors:
        return
    first_field = next(iter(errors))
    message = errors[first_field] if len(errors) == 1 else FORM_ERRORS_MESSAGE
    raise ValidationError(message=message, field=first_field, context={"errors": errors})


def validate_vendor(payload: VendorCreate) -> None:
    errors: Dict[str, str] = {}
    if not payload.name.strip():
        errors["name"] = "Vendor name is required."
    number_value = payload.number.strip()
    if not number_value:
        errors["number"] = "Vendor number is required."
    elif not (len(number_value) == 10 and number_value.isdigit()):
        errors["number"] = "Vendor number must be a 10-digit number."
    if not payload.address.strip():
        errors["address"] = "Vendor address is required."
    for index, product in enumerate(payload.products):
        errors.update(_product_errors(product, prefix=f"products[{index}]."))
    _raise_if_errors(errors)


def validate_product(payload: ProductInput) -> None:
    _raise_if_errors(_product_errors(payload))


def validate_sale(payload: SaleInput) -> None:
    errors: Dict[str, str] = {}
    if not payload.customer_name.strip():
        errors["customer_name"] = "Customer name is required."
    number_value = payload.customer_number.strip()
    if not number_value:
        errors["customer_number"] = "Customer number is required."
    elif not (len(number_value) == 10 and number_value.isdigit()):
        errors["customer_number"] = "Customer number must be 10 digits."
    discount = payload.discount_percentage
    if not math.isfinite(discount) or not 0 <= discount <= 100:
        errors["discount_percentage"] = "Discount must be between 0 and 100."
    if not payload.items:
        errors["items"] = "Add at least one product to the sale."
    for index, item in enumerate(payload.items):
        if not item.vendor_id.strip() or not item.product_id.strip():
            errors[f"items[{index}].product_id"] = "Please select a product."
        if item.quantity is None or item.quantity < 1:
            errors[f"items[{index}].quantity"] = "Quantity must be at least 1."
    _raise_if_errors(errors)


def _new_key() -> str:
    return uuid.uuid4().hex


def _product_document(payload: ProductInput) -> ProductDocument:
    return ProductDocument(
        name=payload.name.strip(),
        avg_quantity=payload.avg_quantity,
        quantity=payload.quantity,
        product_price=payload.product_price,
        mrp_price=payload.mrp_price,
        credit_cycle_date=payload.credit_cycle_date,
    )


# ── Service ───────────────────────────────────────────────────────────────


class InventoryService:
    """Vendor and stock operations; reads of the whole tree use the vendors snapshot."""

    async def vendors_tree(self, store) -> Any:
        return await live_snapshots.vendors.current(store)

    async def list_vendors(self, store) -> List[VendorSummary]:
        return list_vendors(await self.vendors_tree(store))

    async def list_products(self, store, query: Optional[str] = None) -> List[ProductListItem]:
        return list_products(await self.vendors_tree(store), query)

    async def count_low_stock(self, store) -> int:
        return count_low_stock(await self.vendors_tree(store))

    async def dashboard(self, store) -> DashboardCounts:
        return dashboard_counts(
            await live_snapshots.appointments.current(store),
            await live_snapshots.blogs.current(store),
            await self.vendors_tree(store),
        )

    async def get_vendor(self, store, vendor_id: str) -> VendorDetail:
        """
        One vendor with products and their delivery history (newest first).

        Raises:
            NotFoundError: no vendor under this id
            FetchError: the read failed
        """
        vendor = await fetch(store, paths.vendor_path(vendor_id))
        if not vendor:
            raise NotFoundError(resource="Vendor", resource_id=vendor_id)
        return _vendor_detail(vendor_id, as_dict(vendor))

    async def create_vendor(self, store, payload: VendorCreate) -> VendorCreated:
        """
        Push the vendor, then each product, then an initial pending delivery for
        every product created with stock.

        Raises:
            ValidationError: any vendor or product field is invalid (nothing written)
            StoreError: a push failed
        """
        validate_vendor(payload)
        vendor_doc = VendorDocument(
            name=payload.name.strip(),
            number=payload.number.strip(),
            address=payload.address.strip(),
        )
        try:
            vendor_id = await store.push(paths.VENDORS, vendor_doc.to_document())
            product_ids = []
            for product in payload.products:
                product_ids.append(await self._push_product(store, vendor_id, product))
        except Exception as e:
            logger.error("Creating vendor '%s' failed: %s", vendor_doc.name, e, exc_info=True)
            raise StoreError(
                message="Failed to add vendor. Please try again.",
                context={"error": type(e).__name__},
            )

        logger.info("Vendor %s created with %d products", vendor_id, len(product_ids))
        return VendorCreated(id=vendor_id, product_ids=product_ids)

    async def _push_product(self, store, vendor_id: str, payload: ProductInput) -> str:
        document = _product_document(payload)
        product_id = await store.push(paths.vendor_products_path(vendor_id), document.to_document())
        if document.quantity > 0:
            history = HistoryDocument(
                date=document.last_updated,
                added_quantity=document.quantity,
                new_quantity=document.quantity,
            )
            await store.push(paths.product_history_path(vendor_id, product_id), history.to_document())
        return product_id

    async def add_product(self, store, vendor_id: str, payload: ProductInput) -> ProductCreated:
        """
        Raises:
            ValidationError: a product field is invalid
            NotFoundError: the vendor does not exist
            StoreError: a push failed
        """
        validate_product(payload)
        if not await fetch(store, paths.vendor_path(vendor_id)):
            raise NotFoundError(resource="Vendor", resource_id=vendor_id)

        try:
            product_id = await self._push_product(store, vendor_id, payload)
        except Exception as e:
            logger.error("Adding product to vendor %s failed: %s", vendor_id, e, exc_info=True)
            raise StoreError(
                message="Failed to add product. Please try again.",
                context={"vendor_id": vendor_id, "error": type(e).__name__},
            )

        logger.info("Product %s added to vendor %s", product_id, vendor_id)
        return ProductCreated(vendor_id=vendor_id, id=product_id)

    async def add_stock(self, store, vendor_id: str, product_id: str, quantity: Optional[int]) -> StockAdded:
        """
        Record a delivery: bump `quantity`, stamp `lastUpdated`, push a pending entry.

        Raises:
            ValidationError: quantity missing or not positive
            NotFoundError: the product does not exist under this vendor
            StoreError: the update or the history push failed
        """
        if quantity is None or quantity <= 0:
            raise ValidationError(
                message="Please enter a valid positive number for additional quantity.",
                field="quantity",
            )

        product_path = paths.vendor_product_path(vendor_id, product_id)
        product = await fetch(store, product_path)
        if not product:
            raise NotFoundError(resource="Product", resource_id=product_id)

        new_quantity = number(as_dict(product).get("quantity")) + quantity
        now = now_iso()
        try:
            await store.update(product_path, {"quantity": new_quantity, "lastUpdated": now})
        except Exception as e:
            logger.error("Updating quantity at %s failed: %s", product_path, e, exc_info=True)
            raise StoreError(
                message="Failed to update quantity. Please try again.",
                context={"path": product_path, "error": type(e).__name__},
            )

        history = HistoryDocument(date=now, added_quantity=quantity, new_quantity=new_quantity)
        try:
            history_id = await store.push(
                paths.product_history_path(vendor_id, product_id), history.to_document()
            )
        except Exception as e:
            logger.error("Pushing history at %s failed: %s", product_path, e, exc_info=True)
            raise StoreError(
                message="Failed to update product history. Please try again.",
                context={"path": product_path, "error": type(e).__name__},
            )

        logger.info("Stock +%d for %s (now %s)", quantity, product_path, new_quantity)
        return StockAdded(
            vendor_id=vendor_id,
            product_id=product_id,
            history_id=history_id,
            added_quantity=quantity,
            new_quantity=new_quantity,
        )


    async def record_sale(self, store, payload: SaleInput) -> SaleRecorded:
        """
        Sell one or more products: deduct stock, add a sell-history entry per line
        and store the sale, all in a single multi-path update.

        Prices are the stored MRPs. Selling the same product on two lines draws
        from one stock count.

        Raises:
            ValidationError: a form field is invalid, or stock is insufficient (nothing written)
            NotFoundError: a selected product does not exist (nothing written)
            StoreError: the update failed (nothing written)
        """
        validate_sale(payload)
        tree = as_dict(await self.vendors_tree(store))

        sale_id = _new_key()
        now = now_iso()
        updates: Dict[str, Any] = {}
        stock: Dict[Tuple[str, str], Union[int, float]] = {}
        lines: Dict[str, SaleLineDocument] = {}
        sold: List[SoldItem] = []

        for index, item in enumerate(payload.items):
            vendor_id, product_id = item.vendor_id.strip(), item.product_id.strip()
            product = as_dict(as_dict(as_dict(tree.get(vendor_id)).get("products")).get(product_id))
            if not product:
                raise NotFoundError(resource="Product", resource_id=product_id)

            name = text(product.get("name"))
            available = stock.get((vendor_id, product_id), number(product.get("quantity")))
            if available < item.quantity:
                raise ValidationError(
                    message=f'Insufficient stock for "{name}". Available: {available}, requested: {item.quantity}',
                    field=f"items[{index}].quantity",
                    context={"vendor_id": vendor_id, "product_id": product_id},
                )
            remaining = available - item.quantity
            stock[(vendor_id, product_id)] = remaining

            mrp_price = number(product.get("mrpPrice"))
            lines[f"productSale-{index}"] = SaleLineDocument(
                product_id=product_id,
                product_name=name,
                vendor_id=vendor_id,
                quantity=item.quantity,
                mrp_price=mrp_price,
                total_price=item.quantity * mrp_price,
            )
            updates[f"{paths.vendor_product_path(vendor_id, product_id)}/quantity"] = remaining
            entry = SellHistoryDocument(
                date=now, sold_quantity=item.quantity, remaining_quantity=remaining, sale_id=sale_id
            )
            updates[paths.product_sell_history_entry_path(vendor_id, product_id, _new_key())] = entry.to_document()
            sold.append(
                SoldItem(
                    vendor_id=vendor_id,
                    product_id=product_id,
                    name=name,
                    quantity=item.quantity,
                    mrp_price=mrp_price,
                    total_price=item.quantity * mrp_price,
                    remaining_quantity=remaining,
                )
            )

        total = sum(line.total_price for line in lines.values())
        discount = total * payload.discount_percentage / 100
        sale = SaleDocument(
            customer_name=payload.customer_name.strip(),
            customer_number=payload.customer_number.strip(),
            date=now,
            products=lines,
            discount_percentage=payload.discount_percentage,
            discount_amount=discount,
            final_amount=total - discount,
        )
        updates[paths.sale_path(sale_id)] = sale.to_document()

        try:
            await store.update("", updates)
        except Exception as e:
            logger.error("Recording sale %s failed: %s", sale_id, e, exc_info=True)
            raise StoreError(
                message="Failed to process sale. Please try again.",
                context={"sale_id": sale_id, "error": type(e).__name__},
            )

        prefix = f"{paths.VENDORS}/"
        live_snapshots.vendors.apply_local(
            "", {path[len(prefix):]: value for path, value in updates.items() if path.startswith(prefix)}
        )
        logger.info("Sale %s recorded: %d lines, final amount %s", sale_id, len(lines), sale.final_amount)
        return SaleRecorded(
            id=sale_id,
            items=sold,
            total_amount=total,
            discount_amount=discount,
            final_amount=total - discount,
        )


inventory_service = InventoryService()
