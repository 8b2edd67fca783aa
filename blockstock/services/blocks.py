import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from blockstock.core.errors import ConflictError, InventoryError, NotFoundError
from blockstock.models.inventory import Block, Production, Sale
from blockstock.schemas.inventory import ProductionCreate, ProductionUpdate, SaleCreate, SaleUpdate
from blockstock.services.balance import (
    AggregateKind,
    Direction,
    Effect,
    apply_create,
    apply_delete,
    apply_update,
    make_effect,
)

logger = logging.getLogger(__name__)


def production_effect(production: Production) -> Effect:
    return Effect(AggregateKind.BLOCK, production.block_size, production.quantity, Direction.INCREASE)


def sale_effect(sale: Sale) -> Effect:
    return Effect(AggregateKind.BLOCK, sale.block_size, sale.quantity, Direction.DECREASE)


def _commit(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("Block size was created concurrently, retry the request") from exc


def list_blocks(db: Session) -> list[Block]:
    return list(db.scalars(select(Block).order_by(Block.size.asc())).all())


def _ledger_query(
    model,
    *,
    block_size: str | None,
    date_from: datetime | None,
    date_to: datetime | None,
):
    query = select(model).order_by(model.recorded_at.desc(), model.id.desc())
    if block_size:
        query = query.where(model.block_size == block_size.strip())
    if date_from is not None:
        query = query.where(model.recorded_at >= date_from)
    if date_to is not None:
        query = query.where(model.recorded_at <= date_to)
    return query


def list_productions(
    db: Session,
    *,
    block_size: str | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
) -> list[Production]:
    query = _ledger_query(Production, block_size=block_size, date_from=date_from, date_to=date_to)
    return list(db.scalars(query).all())


def list_sales(
    db: Session,
    *,
    block_size: str | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
) -> list[Sale]:
    query = _ledger_query(Sale, block_size=block_size, date_from=date_from, date_to=date_to)
    return list(db.scalars(query).all())


def create_production(db: Session, payload: ProductionCreate) -> Production:
    try:
        block = apply_create(db, AggregateKind.BLOCK, payload.block_size, payload.quantity, Direction.INCREASE)
        production = Production(
            block_size=block.size,
            quantity=payload.quantity,
            recorded_at=payload.recorded_at or datetime.utcnow(),
        )
        db.add(production)
        _commit(db)
    except InventoryError:
        db.rollback()
        raise
    db.refresh(production)
    logger.info("Recorded production #%s: %s x %s", production.id, production.quantity, production.block_size)
    return production


def update_production(db: Session, production_id: int, payload: ProductionUpdate) -> Production:
    production = db.get(Production, production_id)
    if not production:
        raise NotFoundError("Production not found")

    new_size = payload.block_size if payload.block_size is not None else production.block_size
    new_qty = payload.quantity if payload.quantity is not None else production.quantity

    try:
        new_effect = make_effect(AggregateKind.BLOCK, new_size, new_qty, Direction.INCREASE)
        apply_update(db, production_effect(production), new_effect)
        production.block_size = new_effect.key
        production.quantity = new_effect.quantity
        if payload.recorded_at is not None:
            production.recorded_at = payload.recorded_at
        _commit(db)
    except InventoryError:
        db.rollback()
        raise

    db.refresh(production)
    logger.info("Updated production #%s: %s x %s", production.id, production.quantity, production.block_size)
    return production


def delete_production(db: Session, production_id: int) -> Production:
    production = db.get(Production, production_id)
    if not production:
        raise NotFoundError("Production not found")

    apply_delete(db, production_effect(production))
    db.delete(production)
    db.commit()
    logger.info("Deleted production #%s: %s x %s", production.id, production.quantity, production.block_size)
    return production


def create_sale(db: Session, payload: SaleCreate) -> Sale:
    try:
        block = apply_create(db, AggregateKind.BLOCK, payload.block_size, payload.quantity, Direction.DECREASE)
        sale = Sale(
            block_size=block.size,
            quantity=payload.quantity,
            customer=payload.customer or None,
            recorded_at=payload.recorded_at or datetime.utcnow(),
        )
        db.add(sale)
        _commit(db)
    except InventoryError:
        db.rollback()
        raise
    db.refresh(sale)
    logger.info("Recorded sale #%s: %s x %s to %s", sale.id, sale.quantity, sale.block_size, sale.customer or "-")
    return sale


def update_sale(db: Session, sale_id: int, payload: SaleUpdate) -> Sale:
    sale = db.get(Sale, sale_id)
    if not sale:
        raise NotFoundError("Sale not found")

    new_size = payload.block_size if payload.block_size is not None else sale.block_size
    new_qty = payload.quantity if payload.quantity is not None else sale.quantity

    try:
        new_effect = make_effect(AggregateKind.BLOCK, new_size, new_qty, Direction.DECREASE)
        apply_update(db, sale_effect(sale), new_effect)
        sale.block_size = new_effect.key
        sale.quantity = new_effect.quantity
        if "customer" in payload.model_fields_set:
            sale.customer = payload.customer or None
        if payload.recorded_at is not None:
            sale.recorded_at = payload.recorded_at
        _commit(db)
    except InventoryError:
        db.rollback()
        raise

    db.refresh(sale)
    logger.info("Updated sale #%s: %s x %s", sale.id, sale.quantity, sale.block_size)
    return sale


def delete_sale(db: Session, sale_id: int) -> Sale:
    sale = db.get(Sale, sale_id)
    if not sale:
        raise NotFoundError("Sale not found")

    apply_delete(db, sale_effect(sale))
    db.delete(sale)
    db.commit()
    logger.info("Deleted sale #%s: %s x %s", sale.id, sale.quantity, sale.block_size)
    return sale
