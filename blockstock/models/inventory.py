from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from blockstock.db.database import Base

MATERIAL_SCALE = 3
MATERIAL_QUANTITY = Numeric(14, MATERIAL_SCALE)


class Block(Base):
    __tablename__ = "blocks"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    size: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    produced: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    sold: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    in_stock: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )


class Production(Base):
    __tablename__ = "productions"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    block_size: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    recorded_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False, index=True)


class Sale(Base):
    __tablename__ = "sales"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    block_size: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    customer: Mapped[str | None] = mapped_column(String(160), nullable=True)
    recorded_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False, index=True)


class RawMaterial(Base):
    __tablename__ = "raw_materials"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(120), unique=True, index=True, nullable=False)
    unit: Mapped[str] = mapped_column(String(24), nullable=False)
    received: Mapped[Decimal] = mapped_column(MATERIAL_QUANTITY, default=Decimal("0"), nullable=False)
    used: Mapped[Decimal] = mapped_column(MATERIAL_QUANTITY, default=Decimal("0"), nullable=False)
    in_stock: Mapped[Decimal] = mapped_column(MATERIAL_QUANTITY, default=Decimal("0"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)


class RawMaterialLog(Base):
    __tablename__ = "raw_material_logs"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    # Linked by name, not by foreign key; renames cascade explicitly.
    material_name: Mapped[str] = mapped_column(String(120), index=True, nullable=False)
    kind: Mapped[str] = mapped_column(String(8), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(MATERIAL_QUANTITY, nullable=False)
    unit: Mapped[str] = mapped_column(String(24), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    recorded_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False, index=True)
