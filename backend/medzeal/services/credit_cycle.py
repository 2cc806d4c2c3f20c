"""
MedZeal Backend: Credit Cycle Service
======================================

What:  Lists vendor deliveries whose payment is still pending, with due dates,
       and marks them paid.
Why:   Vendors supply on credit: a batch must be paid within the product's
       credit cycle (days). The admin needs the outstanding batches, the amount
       owed and how many days are left.
How:   A pure single pass over the vendors snapshot builds the pending list;
       the service keeps it in a `PaymentLedger` and rebuilds it only when the
       snapshot or the calendar day changes.

Per pending history entry:
    due_date     = added_date + creditCycleDate days
    days_left    = max(0, due_date - today)      0 is shown as "Overdue"
    total_amount = addedQuantity * productPrice

"Today" and aware timestamps are taken in the clinic time zone (CLINIC_TIMEZONE).
"""

import logging
import math
from datetime import date, datetime, timedelta, tzinfo
from typing import Any, List, Optional, Sequence, Tuple
from zoneinfo import ZoneInfo

from medzeal.config import settings
from medzeal.exceptions import NotFoundError, StoreError, ValidationError
from medzeal.models import paths
from medzeal.models.inventory import PAYMENT_DONE, PAYMENT_PENDING
from medzeal.schemas.credit_cycle import MarkPaidResponse, PendingPayment, PendingPaymentPage
from medzeal.services.subscriptions import LiveSnapshot, live_snapshots
from medzeal.services.tree import as_dict, calendar_date, number, text

logger = logging.getLogger(__name__)

NO_MATCHES_MESSAGE = "No matching pending payments found."
ALL_PAID_MESSAGE = "No pending payments at the moment. All payments are up to date!"
MARK_FAILED_MESSAGE = "Failed to update payment."


def clinic_timezone() -> tzinfo:
    return ZoneInfo(settings.clinic_timezone)


def clinic_today() -> date:
    return datetime.now(clinic_timezone()).date()


# ── Pure aggregation ──────────────────────────────────────────────────────


def collect_pending_payments(
    snapshot: Any,
    today: date,
    tz: Optional[tzinfo] = None,
) -> List[PendingPayment]:
    """
    Flatten every `payment == "pending"` history entry of the vendors tree.

    Args:
        snapshot: Raw `vendors` subtree (None or {} when there are no vendors)
        today:    Calendar date the days-left countdown is measured from
        tz:       Zone for aware timestamps (defaults to the clinic zone)

    Entries whose date cannot be parsed are skipped and logged.
    """
    tz = tz or clinic_timezone()
    records: List[PendingPayment] = []

    for vendor_id, vendor in as_dict(snapshot).items():
        vendor = as_dict(vendor)
        for product_id, product in as_dict(vendor.get("products")).items():
            product = as_dict(product)
            price = number(product.get("productPrice"))
            cycle_days = number(product.get("creditCycleDate"))

            for history_id, entry in as_dict(product.get("history")).items():
                entry = as_dict(entry)
                if entry.get("payment") != PAYMENT_PENDING:
                    continue

                added = calendar_date(entry.get("date"), tz)
                if added is None:
                    logger.warning(
                        "Skipping history %s/%s/%s: unparseable date %r",
                        vendor_id, product_id, history_id, entry.get("date"),
                    )
                    continue

                try:
                    due = added + timedelta(days=int(cycle_days))
                except (OverflowError, ValueError):
                    logger.warning(
                        "Skipping history %s/%s/%s: credit cycle %r is out of range",
                        vendor_id, product_id, history_id, product.get("creditCycleDate"),
                    )
                    continue

                quantity = number(entry.get("addedQuantity"))
                records.append(
                    PendingPayment(
                        vendor_id=vendor_id,
                        vendor_name=text(vendor.get("name")),
                        product_id=product_id,
                        product_name=text(product.get("name")),
                        history_id=history_id,
                        added_quantity=quantity,
                        added_date=added.isoformat(),
                        credit_cycle_days=int(cycle_days),
                        due_date=due.isoformat(),
                        days_left=max(0, (due - today).days),
                        product_price=price,
                        total_amount=quantity * price,
                    )
                )

    return records


def history_entry(tree: Any, vendor_id: str, product_id: str, history_id: str) -> dict:
    """The raw history entry, or {} when any level is missing."""
    product = as_dict(as_dict(as_dict(tree).get(vendor_id)).get("products")).get(product_id)
    return as_dict(as_dict(as_dict(product).get("history")).get(history_id))


def filter_payments(payments: Sequence[PendingPayment], query: Optional[str]) -> List[PendingPayment]:
    """Case-insensitive substring search on vendor or product name."""
    needle = (query or "").strip().lower()
    if not needle:
        return list(payments)
    return [
        p for p in payments
        if needle in p.vendor_name.lower() or needle in p.product_name.lower()
    ]


def paginate(items: Sequence[Any], page: int, per_page: int) -> Tuple[List[Any], int]:
    """
    Slice one 1-based page.

    Returns:
        (page items, total pages). A page past the end yields no items.
    """
    if page < 1:
        raise ValidationError(message="Page must be 1 or greater.", field="page")
    if per_page < 1:
        raise ValidationError(message="Page size must be 1 or greater.", field="per_page")

    total_pages = math.ceil(len(items) / per_page)
    start = (page - 1) * per_page
    return list(items[start:start + per_page]), total_pages


# ── In-memory list ────────────────────────────────────────────────────────


class PaymentLedger:
    """
    The current pending-payment list, with the tree and day it was built from.

    Not locked: all access happens on the event loop.
    """

    def __init__(self):
        self._records: List[PendingPayment] = []
        self._source: Any = None
        self._day: Optional[date] = None
        self._built = False

    def is_current(self, source: Any, day: date) -> bool:
        return self._built and source is self._source and day == self._day

    def replace(self, records: Sequence[PendingPayment], source: Any = None, day: Optional[date] = None) -> None:
        self._records = list(records)
        self._source = source
        self._day = day
        self._built = True

    def records(self) -> List[PendingPayment]:
        return list(self._records)

    def remove(self, vendor_id: str, product_id: str, history_id: str) -> bool:
        """Drop the one record with this key. Returns False when it is not listed."""
        key = (vendor_id, product_id, history_id)
        for index, record in enumerate(self._records):
            if record.key == key:
                del self._records[index]
                return True
        return False

    def __len__(self) -> int:
        return len(self._records)


# ── Service ───────────────────────────────────────────────────────────────


class CreditCycleService:
    """
    Credit-cycle page operations.

    Reads go through the vendors live snapshot (FetchError when it failed);
    the only write is the single-field `payment` update.
    """

    def __init__(self, snapshot: Optional[LiveSnapshot] = None, ledger: Optional[PaymentLedger] = None):
        self.snapshot = snapshot or live_snapshots.vendors
        self.ledger = ledger or PaymentLedger()

    async def pending_payments(self, store, today: Optional[date] = None) -> List[PendingPayment]:
        today = today or clinic_today()
        tree = await self.snapshot.current(store)
        if not self.ledger.is_current(tree, today):
            self.ledger.replace(collect_pending_payments(tree, today), source=tree, day=today)
            logger.debug("Credit cycle ledger rebuilt: %d pending", len(self.ledger))
        return self.ledger.records()

    async def list_pending(
        self,
        store,
        query: str = "",
        page: int = 1,
        per_page: Optional[int] = None,
        today: Optional[date] = None,
    ) -> PendingPaymentPage:
        """
        Search and paginate the pending list.

        Raises:
            FetchError: vendors could not be loaded
            ValidationError: page or per_page below 1
        """
        per_page = per_page or settings.credit_cycle_page_size
        matching = filter_payments(await self.pending_payments(store, today), query)
        items, total_pages = paginate(matching, page, per_page)

        message = None
        if not matching:
            message = NO_MATCHES_MESSAGE if (query or "").strip() else ALL_PAID_MESSAGE

        return PendingPaymentPage(
            items=items,
            page=page,
            per_page=per_page,
            total_items=len(matching),
            total_pages=total_pages,
            query=query or "",
            total_amount=sum(p.total_amount for p in matching),
            message=message,
        )

    async def mark_as_done(self, store, vendor_id: str, product_id: str, history_id: str) -> MarkPaidResponse:
        """
        Set `payment = "done"` on one history entry.

        On success the record leaves the ledger and the cached tree is patched
        before the listener echoes the change. Failures are not retried.

        Raises:
            FetchError: vendors could not be loaded
            NotFoundError: no such history entry (nothing written)
            StoreError: the update was rejected or the store is unreachable
        """
        entry_path = paths.history_entry_path(vendor_id, product_id, history_id)
        tree = await self.snapshot.current(store)
        if not history_entry(tree, vendor_id, product_id, history_id):
            raise NotFoundError(resource="Payment", resource_id=history_id)

        try:
            await store.update(entry_path, {"payment": PAYMENT_DONE})
        except Exception as e:
            logger.error("Marking %s as done failed: %s", entry_path, e, exc_info=True)
            raise StoreError(
                message=MARK_FAILED_MESSAGE,
                context={"path": entry_path, "error": type(e).__name__},
            )

        if not self.ledger.remove(vendor_id, product_id, history_id):
            logger.debug("Paid entry %s was not in the ledger", entry_path)
        self.snapshot.apply_local(
            f"{vendor_id}/products/{product_id}/history/{history_id}",
            {"payment": PAYMENT_DONE},
        )
        logger.info("Payment marked as done: %s", entry_path)

        return MarkPaidResponse(
            vendor_id=vendor_id,
            product_id=product_id,
            history_id=history_id,
            remaining=len(self.ledger),
        )


credit_cycle_service = CreditCycleService()
