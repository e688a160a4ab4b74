"""
Ledgerline - Stock Service

Stock ledger and on-hand balances.

- Every movement appends a StockLedgerEntry row.
- On-hand quantity per (product, warehouse) lives in StockBalance and is
  moved with a compare-and-set on its version column, retried on a lost
  race and never allowed below zero.
- Serialized products move one ProductSerial per unit; a serial is
  in stock in at most one place at a time.

Like the ledger service, this service only flushes; the caller commits.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import desc, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ledgerline.config import settings
from ledgerline.models.masters import Product
from ledgerline.models.stock import (
    ProductSerial,
    SerialStatus,
    StockBalance,
    StockLedgerEntry,
    StockRefType,
)
from ledgerline.services.totals import pick_nonzero, to_decimal
from ledgerline.utils.error_handling import (
    ConcurrentUpdateException,
    InsufficientStockException,
    ProductNotFoundException,
    SerialNumberException,
)

logger = logging.getLogger(__name__)


SERIAL_COUNT_MESSAGE = "Serialized product requires serial count equal to quantity"


@dataclass
class StockMovement:
    """A signed quantity change for one product at one location."""
    product_id: uuid.UUID
    qty_delta: int
    warehouse_id: Optional[uuid.UUID] = None
    serials: List[str] = field(default_factory=list)


def _warehouse_key(warehouse_id: Optional[uuid.UUID]) -> str:
    return str(warehouse_id) if warehouse_id else ""


def _item_value(item: Any, *names: str) -> Any:
    for name in names:
        value = item.get(name) if isinstance(item, dict) else getattr(item, name, None)
        if value is not None:
            return value
    return None


class StockService:
    """Service for stock movements and serial tracking."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ===========================================
    # PRODUCTS & SERIAL VALIDATION
    # ===========================================

    async def get_products_map(
        self,
        product_ids: Iterable[uuid.UUID],
    ) -> Dict[uuid.UUID, Product]:
        """
        Load products by ID.

        Raises:
            ProductNotFoundException: an ID does not match a product
        """
        wanted = set(pid for pid in product_ids if pid)
        if not wanted:
            return {}

        result = await self.db.execute(select(Product).where(Product.id.in_(wanted)))
        products = {product.id: product for product in result.scalars().all()}

        missing = wanted - set(products)
        if missing:
            raise ProductNotFoundException(sorted(str(pid) for pid in missing)[0])
        return products

    async def validate_serials(
        self,
        items: Sequence[Any],
        products: Optional[Dict[uuid.UUID, Product]] = None,
    ) -> Dict[uuid.UUID, Product]:
        """
        Check serial numbers against quantities.

        For serialized products the serial count must equal the quantity,
        and serials must be non-blank and unique within the request.

        Returns the product map so callers can reuse it.
        """
        if products is None:
            products = await self.get_products_map(
                _item_value(item, "product_id") for item in items
            )

        seen: Dict[uuid.UUID, set] = {}
        for item in items:
            product_id = _item_value(item, "product_id")
            product = products.get(product_id)
            if not product or not product.has_serial:
                continue

            serials = list(_item_value(item, "serials") or [])
            qty = to_decimal(pick_nonzero(item, "qty", "quantity"))
            if len(serials) != qty:
                raise SerialNumberException(SERIAL_COUNT_MESSAGE, product_id=product_id)

            cleaned = [str(s).strip() for s in serials]
            if any(not s for s in cleaned):
                raise SerialNumberException("Serial numbers cannot be blank", product_id=product_id)

            product_seen = seen.setdefault(product_id, set())
            duplicates = sorted(
                {s for s in cleaned if cleaned.count(s) > 1} | (product_seen & set(cleaned))
            )
            if duplicates:
                raise SerialNumberException(
                    "Duplicate serial numbers in request",
                    product_id=product_id,
                    serials=duplicates,
                )
            product_seen.update(cleaned)

        return products

    # ===========================================
    # MOVEMENTS
    # ===========================================

    async def apply_movements(
        self,
        ref_type: StockRefType,
        ref_id: uuid.UUID,
        movements: Sequence[StockMovement],
        products: Optional[Dict[uuid.UUID, Product]] = None,
    ) -> List[StockLedgerEntry]:
        """
        Append stock ledger rows and move on-hand balances.

        Raises:
            InsufficientStockException: a movement would leave negative stock
            SerialNumberException: a serial is not in the expected state
            ConcurrentUpdateException: a balance kept changing underneath us
        """
        if not movements:
            return []

        if products is None:
            products = await self.get_products_map(m.product_id for m in movements)

        ref = ref_type.value if isinstance(ref_type, StockRefType) else str(ref_type)
        rows = []

        for movement in movements:
            product = products[movement.product_id]
            serials = [str(s).strip() for s in movement.serials]

            await self._move_balance(product, movement.warehouse_id, movement.qty_delta)

            if product.has_serial and serials:
                if movement.qty_delta > 0:
                    await self._receive_serials(product, serials, movement.warehouse_id, ref_id)
                else:
                    await self._issue_serials(product, serials, movement.warehouse_id, ref_id)

            row = StockLedgerEntry(
                ref_type=ref,
                ref_id=ref_id,
                product_id=movement.product_id,
                warehouse_id=movement.warehouse_id,
                quantity=movement.qty_delta,
                qty_delta=movement.qty_delta,
                serials=serials,
            )
            self.db.add(row)
            rows.append(row)

        await self.db.flush()

        logger.info(f"Applied {len(rows)} stock movements for {ref} {ref_id}")
        return rows

    async def _get_balance(
        self,
        product_id: uuid.UUID,
        warehouse_id: Optional[uuid.UUID],
    ) -> Optional[StockBalance]:
        result = await self.db.execute(
            select(StockBalance)
            .where(
                StockBalance.product_id == product_id,
                StockBalance.warehouse_key == _warehouse_key(warehouse_id),
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _get_or_create_balance(
        self,
        product_id: uuid.UUID,
        warehouse_id: Optional[uuid.UUID],
    ) -> StockBalance:
        balance = await self._get_balance(product_id, warehouse_id)
        if balance:
            return balance

        balance = StockBalance(
            product_id=product_id,
            warehouse_id=warehouse_id,
            warehouse_key=_warehouse_key(warehouse_id),
            quantity=0,
            version=0,
        )
        # A concurrent first receipt trips the unique constraint and fails the unit of work
        self.db.add(balance)
        await self.db.flush()
        return balance

    async def compare_and_set(
        self,
        balance_id: uuid.UUID,
        expected_version: int,
        new_quantity: int,
    ) -> bool:
        """
        Set a balance's quantity if its version is still the one we read.

        Returns False when another writer got there first.
        """
        result = await self.db.execute(
            update(StockBalance)
            .where(
                StockBalance.id == balance_id,
                StockBalance.version == expected_version,
            )
            .values(quantity=new_quantity, version=expected_version + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def _move_balance(
        self,
        product: Product,
        warehouse_id: Optional[uuid.UUID],
        qty_delta: int,
    ) -> StockBalance:
        balance = await self._get_or_create_balance(product.id, warehouse_id)
        attempts = max(1, settings.stock_cas_max_retries)

        for attempt in range(1, attempts + 1):
            new_quantity = balance.quantity + qty_delta
            if new_quantity < 0 and not settings.allow_negative_stock:
                raise InsufficientStockException(
                    product_name=product.name,
                    required=-qty_delta,
                    available=balance.quantity,
                )

            if await self.compare_and_set(balance.id, balance.version, new_quantity):
                return await self._get_balance(product.id, warehouse_id)

            logger.warning(
                f"Stock balance for product {product.id} changed concurrently "
                f"(attempt {attempt}/{attempts})"
            )
            balance = await self._get_balance(product.id, warehouse_id)

        raise ConcurrentUpdateException("StockBalance", balance.id, attempts)

    # ===========================================
    # SERIAL NUMBERS
    # ===========================================

    async def _get_serials(
        self,
        product_id: uuid.UUID,
        serials: List[str],
    ) -> Dict[str, ProductSerial]:
        result = await self.db.execute(
            select(ProductSerial)
            .where(
                ProductSerial.product_id == product_id,
                ProductSerial.serial.in_(serials),
            )
            .execution_options(populate_existing=True)
        )
        return {row.serial: row for row in result.scalars().all()}

    async def _set_serial_status(
        self,
        serial: ProductSerial,
        expected: SerialStatus,
        **values: Any,
    ) -> None:
        result = await self.db.execute(
            update(ProductSerial)
            .where(
                ProductSerial.id == serial.id,
                ProductSerial.status == expected,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ConcurrentUpdateException("ProductSerial", serial.serial, 1)

    async def _receive_serials(
        self,
        product: Product,
        serials: List[str],
        warehouse_id: Optional[uuid.UUID],
        ref_id: uuid.UUID,
    ) -> None:
        existing = await self._get_serials(product.id, serials)

        in_stock = sorted(s for s, row in existing.items() if row.status == SerialStatus.IN_STOCK)
        if in_stock:
            raise SerialNumberException(
                "Serial numbers are already in stock",
                product_id=product.id,
                serials=in_stock,
            )

        for serial in serials:
            row = existing.get(serial)
            if row:
                # Previously delivered unit coming back in
                await self._set_serial_status(
                    row,
                    SerialStatus.DELIVERED,
                    status=SerialStatus.IN_STOCK,
                    warehouse_id=warehouse_id,
                    received_ref_id=ref_id,
                    delivered_ref_id=None,
                )
            else:
                self.db.add(ProductSerial(
                    product_id=product.id,
                    serial=serial,
                    status=SerialStatus.IN_STOCK,
                    warehouse_id=warehouse_id,
                    received_ref_id=ref_id,
                ))
        await self.db.flush()

    async def _issue_serials(
        self,
        product: Product,
        serials: List[str],
        warehouse_id: Optional[uuid.UUID],
        ref_id: uuid.UUID,
    ) -> None:
        existing = await self._get_serials(product.id, serials)

        unavailable = sorted(
            s for s in serials
            if s not in existing
            or existing[s].status != SerialStatus.IN_STOCK
            or (warehouse_id and existing[s].warehouse_id and existing[s].warehouse_id != warehouse_id)
        )
        if unavailable:
            raise SerialNumberException(
                "Serial numbers are not in stock at this location",
                product_id=product.id,
                serials=unavailable,
            )

        for serial in serials:
            await self._set_serial_status(
                existing[serial],
                SerialStatus.IN_STOCK,
                status=SerialStatus.DELIVERED,
                delivered_ref_id=ref_id,
            )

    # ===========================================
    # QUERIES
    # ===========================================

    async def list_stock_ledger(
        self,
        product_id: Optional[uuid.UUID] = None,
        warehouse_id: Optional[uuid.UUID] = None,
        limit: Optional[int] = None,
    ) -> List[Tuple[StockLedgerEntry, str]]:
        """Stock movements with product names, newest first."""
        query = select(StockLedgerEntry, Product.name).join(
            Product, Product.id == StockLedgerEntry.product_id
        )

        if product_id:
            query = query.where(StockLedgerEntry.product_id == product_id)
        if warehouse_id:
            query = query.where(StockLedgerEntry.warehouse_id == warehouse_id)

        query = query.order_by(desc(StockLedgerEntry.created_at))
        if limit:
            query = query.limit(limit)

        result = await self.db.execute(query)
        return [(row, name) for row, name in result.all()]

    async def list_balances(
        self,
        product_id: Optional[uuid.UUID] = None,
        warehouse_id: Optional[uuid.UUID] = None,
    ) -> List[Tuple[StockBalance, str]]:
        """On-hand stock with product names."""
        query = select(StockBalance, Product.name).join(
            Product, Product.id == StockBalance.product_id
        )

        if product_id:
            query = query.where(StockBalance.product_id == product_id)
        if warehouse_id:
            query = query.where(StockBalance.warehouse_id == warehouse_id)

        query = query.order_by(Product.name, StockBalance.warehouse_key)

        result = await self.db.execute(query.execution_options(populate_existing=True))
        return [(row, name) for row, name in result.all()]

    async def get_on_hand(
        self,
        product_id: uuid.UUID,
        warehouse_id: Optional[uuid.UUID] = None,
    ) -> int:
        """On-hand quantity at one location (0 if never stocked)."""
        balance = await self._get_balance(product_id, warehouse_id)
        return balance.quantity if balance else 0

    async def get_serial(self, product_id: uuid.UUID, serial: str) -> Optional[ProductSerial]:
        rows = await self._get_serials(product_id, [serial])
        return rows.get(serial)
