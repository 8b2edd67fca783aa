import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from blockstock.core.config import settings
from blockstock.core.errors import ConflictError, InventoryError, NotFoundError
from blockstock.models.inventory import RawMaterial, RawMaterialLog
from blockstock.schemas.inventory import (
    MaterialCreate,
    MaterialKind,
    MaterialLogCreate,
    MaterialLogUpdate,
    MaterialMovementRequest,
    MaterialUpdate,
)
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

DEFAULT_MATERIALS: tuple[tuple[str, str], ...] = (
    ("lime", "kg"),
    ("sand", "tip"),
    ("gypson powder", "kg"),
    ("aluminium powder", "kg"),
    ("soluble oil", "liter"),
)
DEFAULT_UNIT = "unit"

_DIRECTIONS: dict[str, Direction] = {"in": Direction.INCREASE, "out": Direction.DECREASE}


def log_effect(log: RawMaterialLog) -> Effect:
    return Effect(AggregateKind.MATERIAL, log.material_name, Decimal(log.quantity), _DIRECTIONS[log.kind])


def _commit(db: Session, conflict_detail: str) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(conflict_detail) from exc


def ensure_seed(db: Session) -> int:
    """Insert the default materials when the table is empty. Returns rows added."""
    if db.scalar(select(func.count(RawMaterial.id))):
        return 0
    for name, unit in DEFAULT_MATERIALS:
        db.add(RawMaterial(name=name, unit=unit, received=0, used=0, in_stock=0))
    try:
        db.commit()
    except IntegrityError:
        # Another request seeded first.
        db.rollback()
        return 0
    logger.info("Seeded %d default raw materials", len(DEFAULT_MATERIALS))
    return len(DEFAULT_MATERIALS)


def list_materials(db: Session) -> list[RawMaterial]:
    if settings.seed_default_materials:
        ensure_seed(db)
    return list(db.scalars(select(RawMaterial).order_by(RawMaterial.name.asc())).all())


def create_material(db: Session, payload: MaterialCreate) -> RawMaterial:
    existing = db.scalar(select(RawMaterial).where(RawMaterial.name == payload.name))
    if existing:
        raise ConflictError("Material already exists")

    opening = Decimal(payload.in_stock)
    material = RawMaterial(name=payload.name, unit=payload.unit, received=opening, used=0, in_stock=opening)
    db.add(material)
    _commit(db, "Material already exists")
    db.refresh(material)
    logger.info("Added material %r (%s) with opening stock %s", material.name, material.unit, opening)
    return material


def update_material(db: Session, material_id: int, payload: MaterialUpdate) -> RawMaterial:
    material = db.get(RawMaterial, material_id)
    if not material:
        raise NotFoundError("Material not found")

    old_name = material.name
    if payload.name and payload.name != old_name:
        clash = db.scalar(select(RawMaterial.id).where(RawMaterial.name == payload.name))
        if clash is not None:
            raise ConflictError("Another material already uses that name")
        material.name = payload.name
        renamed = db.execute(
            update(RawMaterialLog)
            .where(RawMaterialLog.material_name == old_name)
            .values(material_name=payload.name)
        ).rowcount
        logger.info("Renamed material %r to %r across %s log entries", old_name, payload.name, renamed)
    if payload.unit:
        material.unit = payload.unit

    _commit(db, "Another material already uses that name")
    db.refresh(material)
    return material


def delete_material(db: Session, material_id: int) -> RawMaterial:
    material = db.get(RawMaterial, material_id)
    if not material:
        raise NotFoundError("Material not found")

    logs_count = db.scalar(
        select(func.count(RawMaterialLog.id)).where(RawMaterialLog.material_name == material.name)
    )
    if logs_count:
        raise ConflictError("Cannot delete material with existing logs")

    db.delete(material)
    db.commit()
    logger.info("Deleted material %r", material.name)
    return material


def list_logs(
    db: Session,
    *,
    material_name: str | None = None,
    kind: MaterialKind | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
) -> list[RawMaterialLog]:
    query = select(RawMaterialLog).order_by(RawMaterialLog.recorded_at.desc(), RawMaterialLog.id.desc())
    if material_name:
        query = query.where(RawMaterialLog.material_name == material_name.strip())
    if kind is not None:
        query = query.where(RawMaterialLog.kind == kind)
    if date_from is not None:
        query = query.where(RawMaterialLog.recorded_at >= date_from)
    if date_to is not None:
        query = query.where(RawMaterialLog.recorded_at <= date_to)
    return list(db.scalars(query).all())


def record_movement(db: Session, payload: MaterialMovementRequest, kind: MaterialKind) -> RawMaterialLog:
    """Record an ``in`` (received) or ``out`` (used) transaction."""
    direction = _DIRECTIONS[kind]
    try:
        material = apply_create(
            db,
            AggregateKind.MATERIAL,
            payload.material_name,
            payload.quantity,
            direction,
            defaults={"unit": payload.unit or DEFAULT_UNIT},
        )
        log = RawMaterialLog(
            material_name=material.name,
            kind=kind,
            quantity=Decimal(payload.quantity),
            unit=material.unit,
            notes=payload.notes or None,
            recorded_at=payload.recorded_at or datetime.utcnow(),
        )
        db.add(log)
        _commit(db, "Material was created concurrently, retry the request")
    except InventoryError:
        db.rollback()
        raise
    db.refresh(log)
    logger.info("Recorded %s of %s %s %s (log #%s)", kind, log.quantity, log.unit, log.material_name, log.id)
    return log


def create_log(db: Session, payload: MaterialLogCreate) -> RawMaterialLog:
    return record_movement(db, payload, payload.kind)


def receive_material(db: Session, payload: MaterialMovementRequest) -> RawMaterialLog:
    return record_movement(db, payload, "in")


def use_material(db: Session, payload: MaterialMovementRequest) -> RawMaterialLog:
    return record_movement(db, payload, "out")


def update_log(db: Session, log_id: int, payload: MaterialLogUpdate) -> RawMaterialLog:
    log = db.get(RawMaterialLog, log_id)
    if not log:
        raise NotFoundError("Log not found")

    new_name = payload.material_name if payload.material_name is not None else log.material_name
    new_kind = payload.kind if payload.kind is not None else log.kind
    new_qty = payload.quantity if payload.quantity is not None else log.quantity

    try:
        new_effect = make_effect(AggregateKind.MATERIAL, new_name, new_qty, _DIRECTIONS[new_kind])
        material = apply_update(db, log_effect(log), new_effect, defaults={"unit": log.unit or DEFAULT_UNIT})
        log.material_name = material.name
        log.kind = new_kind
        log.quantity = new_effect.quantity
        log.unit = material.unit
        if "notes" in payload.model_fields_set:
            log.notes = payload.notes or None
        if payload.recorded_at is not None:
            log.recorded_at = payload.recorded_at
        _commit(db, "Material was created concurrently, retry the request")
    except InventoryError:
        db.rollback()
        raise

    db.refresh(log)
    logger.info("Updated log #%s: %s %s %s", log.id, log.kind, log.quantity, log.material_name)
    return log


def delete_log(db: Session, log_id: int) -> RawMaterialLog:
    log = db.get(RawMaterialLog, log_id)
    if not log:
        raise NotFoundError("Log not found")

    apply_delete(db, log_effect(log))
    db.delete(log)
    db.commit()
    logger.info("Deleted log #%s: %s %s %s", log.id, log.kind, log.quantity, log.material_name)
    return log
