"""
Ledgerline - Stock Service Tests

Tests for serial validation, versioned on-hand balances and serial
number tracking.
"""

from uuid import uuid4

import pytest

from ledgerline.config import settings
from ledgerline.models import SerialStatus, StockRefType
from ledgerline.services.stock_service import SERIAL_COUNT_MESSAGE, StockMovement, StockService
from ledgerline.utils.error_handling import (
    ConcurrentUpdateException,
    InsufficientStockException,
    ProductNotFoundException,
    SerialNumberException,
)


class TestValidateSerials:
    """Test cases for StockService.validate_serials."""

    @pytest.mark.asyncio
    async def test_serial_count_must_match_quantity(self, db_session, test_serialized_product):
        service = StockService(db_session)

        with pytest.raises(SerialNumberException) as exc_info:
            await service.validate_serials([
                {"product_id": test_serialized_product.id, "qty": 2, "serials": ["SN-1"]},
            ])

        assert exc_info.value.message == SERIAL_COUNT_MESSAGE

    @pytest.mark.asyncio
    async def test_quantity_alias_is_accepted(self, db_session, test_serialized_product):
        service = StockService(db_session)

        products = await service.validate_serials([
            {"product_id": test_serialized_product.id, "quantity": 2, "serials": ["SN-1", "SN-2"]},
        ])

        assert test_serialized_product.id in products

    @pytest.mark.asyncio
    async def test_non_serialized_product_ignores_serials(self, db_session, test_product):
        service = StockService(db_session)

        await service.validate_serials([{"product_id": test_product.id, "qty": 5}])

    @pytest.mark.asyncio
    async def test_duplicate_serials_rejected(self, db_session, test_serialized_product):
        service = StockService(db_session)

        with pytest.raises(SerialNumberException) as exc_info:
            await service.validate_serials([
                {"product_id": test_serialized_product.id, "qty": 2, "serials": ["SN-1", "SN-1"]},
            ])

        assert exc_info.value.details["serials"] == ["SN-1"]

    @pytest.mark.asyncio
    async def test_duplicate_serials_across_lines_rejected(self, db_session, test_serialized_product):
        service = StockService(db_session)

        with pytest.raises(SerialNumberException):
            await service.validate_serials([
                {"product_id": test_serialized_product.id, "qty": 1, "serials": ["SN-1"]},
                {"product_id": test_serialized_product.id, "qty": 1, "serials": ["SN-1"]},
            ])

    @pytest.mark.asyncio
    async def test_blank_serials_rejected(self, db_session, test_serialized_product):
        service = StockService(db_session)

        with pytest.raises(SerialNumberException):
            await service.validate_serials([
                {"product_id": test_serialized_product.id, "qty": 1, "serials": ["  "]},
            ])

    @pytest.mark.asyncio
    async def test_unknown_product(self, db_session):
        service = StockService(db_session)

        with pytest.raises(ProductNotFoundException):
            await service.validate_serials([{"product_id": uuid4(), "qty": 1}])


class TestApplyMovements:
    """Test cases for stock movements and on-hand balances."""

    @pytest.mark.asyncio
    async def test_inbound_creates_balance_and_ledger_row(self, db_session, test_product, test_warehouse):
        service = StockService(db_session)
        product_id, warehouse_id, grn_id = test_product.id, test_warehouse.id, uuid4()

        rows = await service.apply_movements(
            StockRefType.GRN,
            grn_id,
            [StockMovement(product_id=product_id, qty_delta=10, warehouse_id=warehouse_id)],
        )
        await db_session.commit()

        assert len(rows) == 1
        assert rows[0].qty_delta == 10
        assert rows[0].ref_type == "GRN"
        assert await service.get_on_hand(product_id, warehouse_id) == 10

        ledger = await service.list_stock_ledger(product_id=product_id)
        assert [(row.ref_id, name) for row, name in ledger] == [(grn_id, "Cable Tray")]

    @pytest.mark.asyncio
    async def test_balances_are_per_warehouse(self, db_session, test_product, test_warehouse):
        service = StockService(db_session)
        product_id, warehouse_id = test_product.id, test_warehouse.id

        await service.apply_movements(StockRefType.GRN, uuid4(), [
            StockMovement(product_id=product_id, qty_delta=4, warehouse_id=warehouse_id),
            StockMovement(product_id=product_id, qty_delta=3),
        ])
        await db_session.commit()

        assert await service.get_on_hand(product_id, warehouse_id) == 4
        assert await service.get_on_hand(product_id, None) == 3

        balances = await service.list_balances(product_id=product_id)
        assert sorted(balance.quantity for balance, _ in balances) == [3, 4]

    @pytest.mark.asyncio
    async def test_each_movement_bumps_version(self, db_session, test_product):
        service = StockService(db_session)
        product_id = test_product.id

        for delta in (5, -2, 1):
            await service.apply_movements(
                StockRefType.GRN if delta > 0 else StockRefType.DELIVERY,
                uuid4(),
                [StockMovement(product_id=product_id, qty_delta=delta)],
            )
        await db_session.commit()

        [(balance, _)] = await service.list_balances(product_id=product_id)
        assert balance.quantity == 4
        assert balance.version == 3

    @pytest.mark.asyncio
    async def test_outbound_cannot_go_negative(self, db_session, test_product):
        service = StockService(db_session)
        product_id = test_product.id

        await service.apply_movements(StockRefType.GRN, uuid4(), [
            StockMovement(product_id=product_id, qty_delta=2),
        ])
        await db_session.commit()

        with pytest.raises(InsufficientStockException) as exc_info:
            await service.apply_movements(StockRefType.DELIVERY, uuid4(), [
                StockMovement(product_id=product_id, qty_delta=-3),
            ])
        await db_session.rollback()

        assert exc_info.value.details["available_quantity"] == 2
        assert exc_info.value.details["required_quantity"] == 3
        assert await service.get_on_hand(product_id) == 2

    @pytest.mark.asyncio
    async def test_negative_stock_when_allowed(self, db_session, test_product, monkeypatch):
        monkeypatch.setattr(settings, "allow_negative_stock", True)
        service = StockService(db_session)
        product_id = test_product.id

        await service.apply_movements(StockRefType.DELIVERY, uuid4(), [
            StockMovement(product_id=product_id, qty_delta=-1),
        ])
        await db_session.commit()

        assert await service.get_on_hand(product_id) == -1


class TestCompareAndSet:
    """Test cases for the versioned balance update."""

    @pytest.mark.asyncio
    async def test_stale_version_is_rejected(self, db_session, test_product):
        service = StockService(db_session)
        product_id = test_product.id

        await service.apply_movements(StockRefType.GRN, uuid4(), [
            StockMovement(product_id=product_id, qty_delta=5),
        ])
        [(balance, _)] = await service.list_balances(product_id=product_id)
        balance_id, version = balance.id, balance.version

        assert await service.compare_and_set(balance_id, version, 7) is True
        assert await service.compare_and_set(balance_id, version, 9) is False
        assert await service.get_on_hand(product_id) == 7

    @pytest.mark.asyncio
    async def test_lost_race_is_retried(self, db_session, test_product):
        service = StockService(db_session)
        product_id = test_product.id
        real_cas = service.compare_and_set
        calls = []

        async def flaky_cas(balance_id, expected_version, new_quantity):
            calls.append(expected_version)
            if len(calls) == 1:
                # Another writer moves the balance first
                await real_cas(balance_id, expected_version, 100)
                return False
            return await real_cas(balance_id, expected_version, new_quantity)

        service.compare_and_set = flaky_cas

        await service.apply_movements(StockRefType.GRN, uuid4(), [
            StockMovement(product_id=product_id, qty_delta=5),
        ])
        await db_session.commit()

        assert calls == [0, 1]
        assert await service.get_on_hand(product_id) == 105

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self, db_session, test_product):
        service = StockService(db_session)
        product_id = test_product.id
        calls = []

        async def always_lose(balance_id, expected_version, new_quantity):
            calls.append(expected_version)
            return False

        service.compare_and_set = always_lose

        with pytest.raises(ConcurrentUpdateException) as exc_info:
            await service.apply_movements(StockRefType.GRN, uuid4(), [
                StockMovement(product_id=product_id, qty_delta=1),
            ])

        assert len(calls) == settings.stock_cas_max_retries
        assert exc_info.value.status_code == 409


class TestSerialTracking:
    """Test cases for serial number status transitions."""

    @pytest.mark.asyncio
    async def test_receive_then_deliver(self, db_session, test_serialized_product, test_warehouse):
        service = StockService(db_session)
        product_id, warehouse_id = test_serialized_product.id, test_warehouse.id
        grn_id, dc_id = uuid4(), uuid4()

        await service.apply_movements(StockRefType.GRN, grn_id, [
            StockMovement(product_id=product_id, qty_delta=2, warehouse_id=warehouse_id, serials=["SN-1", "SN-2"]),
        ])
        await service.apply_movements(StockRefType.DELIVERY, dc_id, [
            StockMovement(product_id=product_id, qty_delta=-1, warehouse_id=warehouse_id, serials=["SN-1"]),
        ])
        await db_session.commit()

        sn1 = await service.get_serial(product_id, "SN-1")
        sn2 = await service.get_serial(product_id, "SN-2")
        assert sn1.status == SerialStatus.DELIVERED
        assert sn1.received_ref_id == grn_id
        assert sn1.delivered_ref_id == dc_id
        assert sn2.status == SerialStatus.IN_STOCK
        assert await service.get_on_hand(product_id, warehouse_id) == 1

    @pytest.mark.asyncio
    async def test_cannot_receive_serial_already_in_stock(self, db_session, test_serialized_product):
        service = StockService(db_session)
        product_id = test_serialized_product.id

        await service.apply_movements(StockRefType.GRN, uuid4(), [
            StockMovement(product_id=product_id, qty_delta=1, serials=["SN-1"]),
        ])
        await db_session.commit()

        with pytest.raises(SerialNumberException) as exc_info:
            await service.apply_movements(StockRefType.GRN, uuid4(), [
                StockMovement(product_id=product_id, qty_delta=1, serials=["SN-1"]),
            ])

        assert exc_info.value.details["serials"] == ["SN-1"]

    @pytest.mark.asyncio
    async def test_cannot_deliver_unknown_serial(self, db_session, test_serialized_product):
        service = StockService(db_session)
        product_id = test_serialized_product.id

        await service.apply_movements(StockRefType.GRN, uuid4(), [
            StockMovement(product_id=product_id, qty_delta=1, serials=["SN-1"]),
        ])
        await db_session.commit()

        with pytest.raises(SerialNumberException) as exc_info:
            await service.apply_movements(StockRefType.DELIVERY, uuid4(), [
                StockMovement(product_id=product_id, qty_delta=-1, serials=["SN-9"]),
            ])

        assert exc_info.value.details["serials"] == ["SN-9"]

    @pytest.mark.asyncio
    async def test_cannot_deliver_serial_twice(self, db_session, test_serialized_product):
        service = StockService(db_session)
        product_id = test_serialized_product.id

        await service.apply_movements(StockRefType.GRN, uuid4(), [
            StockMovement(product_id=product_id, qty_delta=2, serials=["SN-1", "SN-2"]),
        ])
        await service.apply_movements(StockRefType.DELIVERY, uuid4(), [
            StockMovement(product_id=product_id, qty_delta=-1, serials=["SN-1"]),
        ])
        await db_session.commit()

        with pytest.raises(SerialNumberException):
            await service.apply_movements(StockRefType.DELIVERY, uuid4(), [
                StockMovement(product_id=product_id, qty_delta=-1, serials=["SN-1"]),
            ])

    @pytest.mark.asyncio
    async def test_delivered_serial_can_come_back(self, db_session, test_serialized_product):
        service = StockService(db_session)
        product_id = test_serialized_product.id
        return_id = uuid4()

        await service.apply_movements(StockRefType.GRN, uuid4(), [
            StockMovement(product_id=product_id, qty_delta=1, serials=["SN-1"]),
        ])
        await service.apply_movements(StockRefType.DELIVERY, uuid4(), [
            StockMovement(product_id=product_id, qty_delta=-1, serials=["SN-1"]),
        ])
        await service.apply_movements(StockRefType.GRN, return_id, [
            StockMovement(product_id=product_id, qty_delta=1, serials=["SN-1"]),
        ])
        await db_session.commit()

        serial = await service.get_serial(product_id, "SN-1")
        assert serial.status == SerialStatus.IN_STOCK
        assert serial.received_ref_id == return_id
        assert serial.delivered_ref_id is None
