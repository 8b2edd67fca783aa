"""Running stock balances for block sizes and raw materials.

Every ledger entry (a production run, a sale, a material receipt or usage)
contributes one :class:`Effect` to exactly one aggregate row. An effect either
increases stock (produced/received) or decreases it (sold/used). The pure
functions below compute new balances; the ``apply_*`` functions load the
aggregate row under a row lock, run the pure function and write the result
back into the session. Committing or rolling back is the caller's job, so the
ledger row and the aggregate row always move together.

Creates are strict (stock never goes negative). Reversals are lenient: every
counter is clamped at zero, because an old entry may be reversed after later
events have already consumed part of its effect.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from blockstock.core.errors import InsufficientStockError, InventoryError, NotFoundError, ValidationError
from blockstock.models.inventory import MATERIAL_SCALE, Block, RawMaterial

logger = logging.getLogger(__name__)

Quantity = int | Decimal


class Direction(str, Enum):
    INCREASE = "increase"
    DECREASE = "decrease"


class AggregateKind(str, Enum):
    BLOCK = "block"
    MATERIAL = "material"


@dataclass(frozen=True)
class Effect:
    kind: AggregateKind
    key: str
    quantity: Quantity
    direction: Direction

    @property
    def inflow(self) -> Quantity:
        return self.quantity if self.direction == Direction.INCREASE else 0

    @property
    def outflow(self) -> Quantity:
        return self.quantity if self.direction == Direction.DECREASE else 0

    @property
    def stock_delta(self) -> Quantity:
        return self.quantity if self.direction == Direction.INCREASE else -self.quantity


@dataclass(frozen=True)
class Balance:
    """Counters of one aggregate: inflow is produced/received, outflow is sold/used."""

    inflow: Quantity
    outflow: Quantity
    in_stock: Quantity


EMPTY_BALANCE = Balance(inflow=0, outflow=0, in_stock=0)


def coerce_quantity(value: Any, *, integral: bool = False, scale: int | None = None) -> Quantity:
    """Turn user input into a positive quantity or raise ValidationError.

    ``scale`` is the number of decimal places the store keeps; finer values
    are rejected rather than rounded.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError("Quantity must be a positive number")
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError("Quantity must be a positive number") from None
    if not number.is_finite() or number <= 0:
        raise ValidationError("Quantity must be a positive number")
    if integral:
        if number != number.to_integral_value():
            raise ValidationError("Block quantity must be a whole number")
        return int(number)
    if scale is not None and -number.normalize().as_tuple().exponent > scale:
        raise ValidationError(f"Quantity must have at most {scale} decimal places")
    return number


def make_effect(kind: AggregateKind, key: str, quantity: Any, direction: Direction) -> Effect:
    cleaned_key = (key or "").strip()
    if not cleaned_key:
        raise ValidationError("Missing fields: key is required")
    integral = kind == AggregateKind.BLOCK
    return Effect(
        kind=kind,
        key=cleaned_key,
        quantity=coerce_quantity(quantity, integral=integral, scale=None if integral else MATERIAL_SCALE),
        direction=Direction(direction),
    )


def apply_effect(balance: Balance, effect: Effect) -> Balance:
    in_stock = balance.in_stock + effect.stock_delta
    if in_stock < 0:
        raise InsufficientStockError(
            f"Not enough stock for {effect.key}: {balance.in_stock} available, {effect.quantity} requested"
        )
    return Balance(
        inflow=balance.inflow + effect.inflow,
        outflow=balance.outflow + effect.outflow,
        in_stock=in_stock,
    )


def reverse_effect(balance: Balance, effect: Effect) -> Balance:
    return Balance(
        inflow=max(balance.inflow - effect.inflow, 0),
        outflow=max(balance.outflow - effect.outflow, 0),
        in_stock=max(balance.in_stock - effect.stock_delta, 0),
    )


def rebase_effect(balance: Balance, old: Effect, new: Effect) -> Balance:
    """Replace ``old`` with ``new`` on the same aggregate in a single step."""
    if (old.kind, old.key) != (new.kind, new.key):
        raise ValueError("rebase_effect needs both effects on the same aggregate")
    in_stock = balance.in_stock - old.stock_delta + new.stock_delta
    if in_stock < 0:
        raise InsufficientStockError(
            f"Not enough stock for {new.key}: the change would leave {in_stock} in stock"
        )
    return Balance(
        inflow=max(balance.inflow - old.inflow + new.inflow, 0),
        outflow=max(balance.outflow - old.outflow + new.outflow, 0),
        in_stock=in_stock,
    )


@dataclass(frozen=True)
class _AggregateTable:
    model: type
    key_field: str
    inflow_field: str
    outflow_field: str
    missing_detail: str


_TABLES: dict[AggregateKind, _AggregateTable] = {
    AggregateKind.BLOCK: _AggregateTable(Block, "size", "produced", "sold", "Block type not found"),
    AggregateKind.MATERIAL: _AggregateTable(RawMaterial, "name", "received", "used", "Material not found"),
}


def _lock_aggregate(db: Session, kind: AggregateKind, key: str):
    table = _TABLES[kind]
    return db.scalar(
        select(table.model)
        .where(getattr(table.model, table.key_field) == key)
        .with_for_update()
    )


def read_balance(kind: AggregateKind, row) -> Balance:
    table = _TABLES[kind]
    return Balance(
        inflow=getattr(row, table.inflow_field) or 0,
        outflow=getattr(row, table.outflow_field) or 0,
        in_stock=row.in_stock or 0,
    )


def _write_balance(kind: AggregateKind, row, balance: Balance) -> None:
    table = _TABLES[kind]
    setattr(row, table.inflow_field, balance.inflow)
    setattr(row, table.outflow_field, balance.outflow)
    row.in_stock = balance.in_stock


def _apply_to_key(db: Session, effect: Effect, defaults: dict[str, Any] | None):
    table = _TABLES[effect.kind]
    row = _lock_aggregate(db, effect.kind, effect.key)
    if row is None and effect.direction == Direction.DECREASE:
        raise NotFoundError(table.missing_detail)
    balance = read_balance(effect.kind, row) if row is not None else EMPTY_BALANCE
    updated = apply_effect(balance, effect)
    if row is None:
        row = table.model(**{table.key_field: effect.key, **(defaults or {})})
        db.add(row)
        logger.info("Created %s aggregate %r", effect.kind.value, effect.key)
    _write_balance(effect.kind, row, updated)
    db.flush()
    return row


def apply_create(
    db: Session,
    kind: AggregateKind,
    key: str,
    quantity: Any,
    direction: Direction,
    *,
    defaults: dict[str, Any] | None = None,
):
    """Add a new entry's effect to its aggregate, creating the row on first use.

    ``defaults`` supplies extra columns for a lazily created row (a material's unit).
    Returns the aggregate row.
    """
    effect = make_effect(kind, key, quantity, direction)
    try:
        return _apply_to_key(db, effect, defaults)
    except InsufficientStockError:
        logger.warning("Rejected %s of %s on %r: insufficient stock", direction.value, effect.quantity, effect.key)
        raise


def apply_update(db: Session, old: Effect, new: Effect, *, defaults: dict[str, Any] | None = None):
    """Move an entry from ``old`` to ``new``.

    On the same key the net change is applied in one step. On a key change the
    old key is reversed first; if the new key then rejects the effect the old
    row is restored to its exact prior counters before the error propagates.
    Returns the aggregate row that now holds the entry.
    """
    if old.kind != new.kind:
        raise ValueError("An entry cannot move between aggregate kinds")

    if old.key == new.key:
        row = _lock_aggregate(db, new.kind, new.key)
        if row is None:
            return _apply_to_key(db, new, defaults)
        _write_balance(new.kind, row, rebase_effect(read_balance(new.kind, row), old, new))
        db.flush()
        return row

    old_row = _lock_aggregate(db, old.kind, old.key)
    snapshot = read_balance(old.kind, old_row) if old_row is not None else None
    if old_row is not None:
        _write_balance(old.kind, old_row, reverse_effect(snapshot, old))
    try:
        return _apply_to_key(db, new, defaults)
    except InventoryError:
        if old_row is not None:
            _write_balance(old.kind, old_row, snapshot)
        logger.warning("Rolled back move of %s entry from %r to %r", old.kind.value, old.key, new.key)
        raise


def apply_delete(db: Session, effect: Effect):
    """Reverse an entry's effect. Never raises InsufficientStockError.

    Returns the aggregate row, or None when it no longer exists.
    """
    row = _lock_aggregate(db, effect.kind, effect.key)
    if row is None:
        logger.warning("No %s aggregate %r to reverse", effect.kind.value, effect.key)
        return None
    _write_balance(effect.kind, row, reverse_effect(read_balance(effect.kind, row), effect))
    db.flush()
    return row
