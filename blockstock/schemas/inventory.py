from datetime import date, datetime, time
from decimal import Decimal
from typing import Annotated, Literal

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer

from blockstock.models.inventory import MATERIAL_SCALE

MaterialKind = Literal["in", "out"]

# Material quantities are stored as Decimal but travel as JSON numbers.
MaterialQuantity = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


def _end_of_day(value):
    """A bare date as an upper bound covers that whole day."""
    if isinstance(value, str):
        try:
            value = date.fromisoformat(value.strip())
        except ValueError:
            return value
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, time.max)
    return value


DateUpperBound = Annotated[datetime, BeforeValidator(_end_of_day)]

REQUEST_CONFIG = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class BlockOut(BaseModel):
    id: int
    size: str
    produced: int
    sold: int
    in_stock: int = Field(serialization_alias="inStock")

    model_config = {"from_attributes": True}


class ProductionCreate(BaseModel):
    model_config = REQUEST_CONFIG

    block_size: str = Field(min_length=1, max_length=64, alias="blockSize")
    quantity: int = Field(gt=0)
    recorded_at: datetime | None = Field(default=None, alias="date")


class ProductionUpdate(BaseModel):
    model_config = REQUEST_CONFIG

    block_size: str | None = Field(default=None, min_length=1, max_length=64, alias="blockSize")
    quantity: int | None = Field(default=None, gt=0)
    recorded_at: datetime | None = Field(default=None, alias="date")


class ProductionOut(BaseModel):
    id: int
    block_size: str = Field(serialization_alias="blockSize")
    quantity: int
    recorded_at: datetime = Field(serialization_alias="date")

    model_config = {"from_attributes": True}


class SaleCreate(BaseModel):
    model_config = REQUEST_CONFIG

    block_size: str = Field(min_length=1, max_length=64, alias="blockSize")
    quantity: int = Field(gt=0)
    customer: str | None = Field(default=None, max_length=160)
    recorded_at: datetime | None = Field(default=None, alias="date")


class SaleUpdate(BaseModel):
    model_config = REQUEST_CONFIG

    block_size: str | None = Field(default=None, min_length=1, max_length=64, alias="blockSize")
    quantity: int | None = Field(default=None, gt=0)
    customer: str | None = Field(default=None, max_length=160)
    recorded_at: datetime | None = Field(default=None, alias="date")


class SaleOut(BaseModel):
    id: int
    block_size: str = Field(serialization_alias="blockSize")
    quantity: int
    customer: str | None
    recorded_at: datetime = Field(serialization_alias="date")

    model_config = {"from_attributes": True}


class MaterialCreate(BaseModel):
    model_config = REQUEST_CONFIG

    name: str = Field(min_length=1, max_length=120)
    unit: str = Field(min_length=1, max_length=24)
    in_stock: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=MATERIAL_SCALE, alias="inStock")


class MaterialUpdate(BaseModel):
    model_config = REQUEST_CONFIG

    name: str | None = Field(default=None, min_length=1, max_length=120)
    unit: str | None = Field(default=None, min_length=1, max_length=24)


class MaterialOut(BaseModel):
    id: int
    name: str
    unit: str
    received: MaterialQuantity
    used: MaterialQuantity
    in_stock: MaterialQuantity = Field(serialization_alias="inStock")
    created_at: datetime = Field(serialization_alias="createdAt")

    model_config = {"from_attributes": True}


class MaterialMovementRequest(BaseModel):
    """Body of the receive/use shortcuts; the direction comes from the endpoint."""

    model_config = REQUEST_CONFIG

    material_name: str = Field(min_length=1, max_length=120, alias="materialName")
    quantity: Decimal = Field(gt=0, decimal_places=MATERIAL_SCALE)
    unit: str | None = Field(default=None, max_length=24)
    notes: str | None = None
    recorded_at: datetime | None = Field(default=None, alias="date")


class MaterialLogCreate(MaterialMovementRequest):
    kind: MaterialKind = Field(alias="type")


class MaterialLogUpdate(BaseModel):
    model_config = REQUEST_CONFIG

    material_name: str | None = Field(default=None, min_length=1, max_length=120, alias="materialName")
    kind: MaterialKind | None = Field(default=None, alias="type")
    quantity: Decimal | None = Field(default=None, gt=0, decimal_places=MATERIAL_SCALE)
    notes: str | None = None
    recorded_at: datetime | None = Field(default=None, alias="date")


class MaterialLogOut(BaseModel):
    id: int
    material_name: str = Field(serialization_alias="materialName")
    kind: MaterialKind = Field(serialization_alias="type")
    quantity: MaterialQuantity
    unit: str
    notes: str | None
    recorded_at: datetime = Field(serialization_alias="date")

    model_config = {"from_attributes": True}


class BlockSummaryOut(BaseModel):
    size: str
    produced: int
    sold: int
    in_stock: int = Field(serialization_alias="inStock")


class StockTotalsOut(BaseModel):
    produced: int
    sold: int
    in_stock: int = Field(serialization_alias="inStock")


class StockSummaryOut(BaseModel):
    blocks: list[BlockSummaryOut]
    totals: StockTotalsOut
    low_stock: list[BlockSummaryOut] = Field(serialization_alias="lowStock")
    low_stock_threshold: int = Field(serialization_alias="lowStockThreshold")
