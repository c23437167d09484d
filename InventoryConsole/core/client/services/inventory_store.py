"""
Stock levels shown in the inventory table, with optimistic +1/-1 adjustments.
"""
import asyncio
from collections import Counter
from dataclasses import replace
from typing import Any, List, Optional

from InventoryConsole.core.logging import get_logger
from InventoryConsole.core.logging.utils import timed
from InventoryConsole.core.sync import ObservableStore, OptimisticMutator, reconcile, replace_where
from InventoryConsole.core.sync.notices import NoticeSink
from ..models.data import QuantityRecord
from ..utils.constants import QUANTITY_FAILED_MESSAGE
from ..utils.exceptions import ValidationError

logger = get_logger(__name__)


def _key(record: QuantityRecord) -> Any:
    return record.id


class InventoryStore(ObservableStore):
    """
    Owns the inventory rows.

    Row order is set by the first load and kept by every later merge. While
    an adjustment for a product is in flight, full refreshes and the
    confirmations of earlier adjustments keep the local quantity of that row.
    """

    def __init__(self, gateway, notices: Optional[NoticeSink] = None):
        super().__init__()
        self._gateway = gateway
        self._records: List[QuantityRecord] = []
        self._in_flight: Counter = Counter()
        self._loaded = False
        self._mutator = OptimisticMutator("inventory", notices, self.is_alive)

    @property
    def records(self) -> List[QuantityRecord]:
        return list(self._records)

    @property
    def loaded(self) -> bool:
        return self._loaded

    def get_by_product(self, product_id: Any) -> Optional[QuantityRecord]:
        for record in self._records:
            if record.product_id == product_id:
                return record
        return None

    def low_stock(self) -> List[QuantityRecord]:
        return [r for r in self._records if r.is_low_stock]

    def has_pending(self, product_id: Any) -> bool:
        return self._in_flight[product_id] > 0

    @timed("load inventory")
    async def load(self) -> None:
        """Fetch every stock record and merge it into the table."""
        snapshot = await self._gateway.list_inventory()
        if self._disposed:
            return
        self._records = reconcile(self._records, snapshot, key=_key, resolve=self._resolve)
        self._loaded = True
        self._notify()

    def _resolve(self, local: QuantityRecord, incoming: QuantityRecord) -> QuantityRecord:
        if self.has_pending(local.product_id):
            return local
        return incoming

    def adjust_quantity(self, product_id: Any, delta: int) -> "asyncio.Task":
        """
        Change the quantity of ``product_id`` by ``delta``.

        The row shows the clamped result immediately. On success only the
        returned record is merged back; on failure the row is reverted by the
        amount that was applied locally.

        Raises:
            ValidationError: ``delta`` is not a non-zero integer, or the product has no row
        """
        if isinstance(delta, bool) or not isinstance(delta, int) or delta == 0:
            raise ValidationError("Quantity change must be a non-zero whole number",
                                  {"delta": delta})
        if self.get_by_product(product_id) is None:
            raise ValidationError("No stock record for product", {"product_id": product_id})

        def local_change():
            record = self.get_by_product(product_id)
            updated = replace(record, quantity=max(0, record.quantity + delta))
            applied = updated.quantity - record.quantity
            self._records = replace_where(self._records, _key, record.id, updated)
            self._in_flight[product_id] += 1
            self._notify()

            def undo():
                self._release(product_id)
                current = self.get_by_product(product_id)
                if current is not None:
                    self._records = replace_where(
                        self._records, _key, current.id,
                        replace(current, quantity=max(0, current.quantity - applied)),
                    )
                self._notify()
            return undo

        def confirm(server_record: Optional[QuantityRecord]):
            self._release(product_id)
            if server_record is not None:
                current = self.get_by_product(product_id)
                if current is not None and self.has_pending(product_id):
                    # Later adjustments are still shown on top of this answer
                    server_record = replace(server_record, quantity=current.quantity)
                self._records = reconcile(self._records, [server_record], key=_key, partial=True)
            self._notify()

        return self._mutator.apply(
            local_change,
            lambda: self._gateway.adjust_quantity(product_id, delta),
            reconcile=confirm,
            failure_message=QUANTITY_FAILED_MESSAGE,
            success_message=f"Quantity {'increased' if delta > 0 else 'decreased'} successfully!",
        )

    def _release(self, product_id: Any) -> None:
        self._in_flight[product_id] -= 1
        if self._in_flight[product_id] <= 0:
            del self._in_flight[product_id]
