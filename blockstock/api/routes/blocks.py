from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from blockstock.db.database import get_db
from blockstock.schemas.inventory import (
    DateUpperBound,
    BlockOut,
    ProductionCreate,
    ProductionOut,
    ProductionUpdate,
    SaleCreate,
    SaleOut,
    SaleUpdate,
)
from blockstock.services import blocks as block_service

router = APIRouter(prefix="/api/blocks", tags=["Blocks"])


@router.get("", response_model=list[BlockOut])
def list_blocks(db: Session = Depends(get_db)):
    return block_service.list_blocks(db)


@router.post("/production", response_model=ProductionOut, status_code=status.HTTP_201_CREATED)
def create_production(payload: ProductionCreate, db: Session = Depends(get_db)):
    return block_service.create_production(db, payload)


@router.get("/production", response_model=list[ProductionOut])
def list_productions(
    block_size: str | None = Query(default=None, alias="blockSize"),
    date_from: datetime | None = Query(default=None, alias="dateFrom"),
    date_to: DateUpperBound | None = Query(default=None, alias="dateTo"),
    db: Session = Depends(get_db),
):
    return block_service.list_productions(db, block_size=block_size, date_from=date_from, date_to=date_to)


@router.api_route("/production/{production_id}", methods=["PUT", "PATCH"], response_model=ProductionOut)
def update_production(production_id: int, payload: ProductionUpdate, db: Session = Depends(get_db)):
    return block_service.update_production(db, production_id, payload)


@router.delete("/production/{production_id}", response_model=ProductionOut)
def delete_production(production_id: int, db: Session = Depends(get_db)):
    return block_service.delete_production(db, production_id)


@router.post("/sales", response_model=SaleOut, status_code=status.HTTP_201_CREATED)
def create_sale(payload: SaleCreate, db: Session = Depends(get_db)):
    return block_service.create_sale(db, payload)


@router.get("/sales", response_model=list[SaleOut])
def list_sales(
    block_size: str | None = Query(default=None, alias="blockSize"),
    date_from: datetime | None = Query(default=None, alias="dateFrom"),
    date_to: DateUpperBound | None = Query(default=None, alias="dateTo"),
    db: Session = Depends(get_db),
):
    return block_service.list_sales(db, block_size=block_size, date_from=date_from, date_to=date_to)


@router.api_route("/sales/{sale_id}", methods=["PUT", "PATCH"], response_model=SaleOut)
def update_sale(sale_id: int, payload: SaleUpdate, db: Session = Depends(get_db)):
    return block_service.update_sale(db, sale_id, payload)


@router.delete("/sales/{sale_id}", response_model=SaleOut)
def delete_sale(sale_id: int, db: Session = Depends(get_db)):
    return block_service.delete_sale(db, sale_id)
