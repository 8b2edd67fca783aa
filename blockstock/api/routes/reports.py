from datetime import datetime

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from blockstock.db.database import get_db
from blockstock.schemas.inventory import DateUpperBound, StockSummaryOut
from blockstock.services import blocks as block_service
from blockstock.services import reports as report_service

router = APIRouter(prefix="/api/reports", tags=["Reports"])


@router.get("/summary", response_model=StockSummaryOut)
def stock_summary(
    threshold: int | None = Query(default=None, ge=0),
    db: Session = Depends(get_db),
):
    return report_service.stock_summary(db, low_stock_threshold=threshold)


@router.get("/stock/pdf")
def export_stock_pdf(db: Session = Depends(get_db)):
    summary = report_service.stock_summary(db)
    sales = block_service.list_sales(db)
    return Response(
        content=report_service.stock_report_pdf(summary, sales),
        media_type="application/pdf",
        headers={"Content-Disposition": 'attachment; filename="stock-report.pdf"'},
    )


@router.get("/sales/csv")
def export_sales_csv(
    block_size: str | None = Query(default=None, alias="blockSize"),
    date_from: datetime | None = Query(default=None, alias="dateFrom"),
    date_to: DateUpperBound | None = Query(default=None, alias="dateTo"),
    db: Session = Depends(get_db),
):
    items = block_service.list_sales(db, block_size=block_size, date_from=date_from, date_to=date_to)
    return Response(
        content=report_service.sales_csv(items),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="sales.csv"'},
    )


@router.get("/production/csv")
def export_production_csv(
    block_size: str | None = Query(default=None, alias="blockSize"),
    date_from: datetime | None = Query(default=None, alias="dateFrom"),
    date_to: DateUpperBound | None = Query(default=None, alias="dateTo"),
    db: Session = Depends(get_db),
):
    items = block_service.list_productions(db, block_size=block_size, date_from=date_from, date_to=date_to)
    return Response(
        content=report_service.productions_csv(items),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="production.csv"'},
    )
