from datetime import datetime

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from blockstock.db.database import get_db
from blockstock.schemas.inventory import (
    DateUpperBound,
    MaterialCreate,
    MaterialKind,
    MaterialLogCreate,
    MaterialLogOut,
    MaterialLogUpdate,
    MaterialMovementRequest,
    MaterialOut,
    MaterialUpdate,
)
from blockstock.services import materials as material_service
from blockstock.services import reports as report_service

router = APIRouter(prefix="/api/raw-materials", tags=["Raw Materials"])


@router.get("", response_model=list[MaterialOut])
def list_materials(db: Session = Depends(get_db)):
    return material_service.list_materials(db)


@router.post("", response_model=MaterialOut, status_code=status.HTTP_201_CREATED)
def create_material(payload: MaterialCreate, db: Session = Depends(get_db)):
    return material_service.create_material(db, payload)


@router.get("/logs", response_model=list[MaterialLogOut])
def list_logs(
    material_name: str | None = Query(default=None, alias="materialName"),
    kind: MaterialKind | None = Query(default=None, alias="type"),
    date_from: datetime | None = Query(default=None, alias="dateFrom"),
    date_to: DateUpperBound | None = Query(default=None, alias="dateTo"),
    db: Session = Depends(get_db),
):
    return material_service.list_logs(
        db,
        material_name=material_name,
        kind=kind,
        date_from=date_from,
        date_to=date_to,
    )


@router.post("/logs", response_model=MaterialLogOut, status_code=status.HTTP_201_CREATED)
def create_log(payload: MaterialLogCreate, db: Session = Depends(get_db)):
    return material_service.create_log(db, payload)


@router.post("/receive", response_model=MaterialLogOut, status_code=status.HTTP_201_CREATED)
def receive_material(payload: MaterialMovementRequest, db: Session = Depends(get_db)):
    return material_service.receive_material(db, payload)


@router.post("/use", response_model=MaterialLogOut, status_code=status.HTTP_201_CREATED)
def use_material(payload: MaterialMovementRequest, db: Session = Depends(get_db)):
    return material_service.use_material(db, payload)


@router.api_route("/logs/{log_id}", methods=["PUT", "PATCH"], response_model=MaterialLogOut)
def update_log(log_id: int, payload: MaterialLogUpdate, db: Session = Depends(get_db)):
    return material_service.update_log(db, log_id, payload)


@router.delete("/logs/{log_id}", response_model=MaterialLogOut)
def delete_log(log_id: int, db: Session = Depends(get_db)):
    return material_service.delete_log(db, log_id)


@router.get("/export/csv")
def export_materials_csv(db: Session = Depends(get_db)):
    materials = material_service.list_materials(db)
    logs = material_service.list_logs(db)
    filename = f"raw-materials-report-{datetime.utcnow().strftime('%Y-%m-%d')}.csv"
    return Response(
        content=report_service.materials_csv(materials, logs),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.api_route("/{material_id}", methods=["PUT", "PATCH"], response_model=MaterialOut)
def update_material(material_id: int, payload: MaterialUpdate, db: Session = Depends(get_db)):
    return material_service.update_material(db, material_id, payload)


@router.delete("/{material_id}", response_model=MaterialOut)
def delete_material(material_id: int, db: Session = Depends(get_db)):
    return material_service.delete_material(db, material_id)
