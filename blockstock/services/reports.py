import csv
import io
from datetime import datetime

from sqlalchemy.orm import Session

from blockstock.core.config import settings
from blockstock.models.inventory import Production, RawMaterial, RawMaterialLog, Sale
from blockstock.schemas.inventory import BlockSummaryOut, StockSummaryOut, StockTotalsOut
from blockstock.services.blocks import list_blocks

PDF_PAGE_SIZE = (595, 842)
PDF_MARGIN = 50
PDF_LINE_LIMIT = 52


def stock_summary(db: Session, *, low_stock_threshold: int | None = None) -> StockSummaryOut:
    threshold = settings.low_stock_threshold if low_stock_threshold is None else low_stock_threshold
    by_size = {block.size: block for block in list_blocks(db)}

    # Configured sizes come first and always appear, even before any production.
    sizes = list(settings.block_sizes) + sorted(size for size in by_size if size not in settings.block_sizes)
    rows = []
    for size in sizes:
        block = by_size.get(size)
        rows.append(
            BlockSummaryOut(
                size=size,
                produced=block.produced if block else 0,
                sold=block.sold if block else 0,
                in_stock=block.in_stock if block else 0,
            )
        )

    totals = StockTotalsOut(
        produced=sum(row.produced for row in rows),
        sold=sum(row.sold for row in rows),
        in_stock=sum(row.in_stock for row in rows),
    )
    return StockSummaryOut(
        blocks=rows,
        totals=totals,
        low_stock=[row for row in rows if row.in_stock <= threshold],
        low_stock_threshold=threshold,
    )


def _csv_text(header: list[str], rows: list[list]) -> str:
    sio = io.StringIO()
    writer = csv.writer(sio)
    writer.writerow(header)
    writer.writerows(rows)
    return sio.getvalue()


def productions_csv(items: list[Production]) -> str:
    return _csv_text(
        ["id", "block_size", "quantity", "date"],
        [[p.id, p.block_size, p.quantity, p.recorded_at.isoformat()] for p in items],
    )


def sales_csv(items: list[Sale]) -> str:
    return _csv_text(
        ["id", "customer", "block_size", "quantity", "date"],
        [[s.id, s.customer or "", s.block_size, s.quantity, s.recorded_at.isoformat()] for s in items],
    )


def materials_csv(materials: list[RawMaterial], logs: list[RawMaterialLog]) -> str:
    sio = io.StringIO()
    writer = csv.writer(sio)
    writer.writerow(["Raw Materials Summary"])
    writer.writerow(["name", "unit", "received", "used", "in_stock"])
    for m in materials:
        writer.writerow([m.name, m.unit, str(m.received), str(m.used), str(m.in_stock)])
    writer.writerow([])
    writer.writerow(["Transaction Logs"])
    writer.writerow(["date", "material", "type", "quantity", "unit", "notes"])
    for log in logs:
        writer.writerow(
            [
                log.recorded_at.isoformat(),
                log.material_name,
                log.kind,
                str(log.quantity),
                log.unit,
                log.notes or "",
            ]
        )
    return sio.getvalue()


def _pdf_text(text: str) -> str:
    for char in ("\\", "(", ")"):
        text = text.replace(char, "\\" + char)
    return f"({text})"


def _page_content(lines: list[str]) -> bytes:
    # Helvetica 10pt, 14pt leading, starting near the top-left of an A4 page.
    ops = ["BT", "/F1 10 Tf", "14 TL", f"{PDF_MARGIN} {PDF_PAGE_SIZE[1] - 42} Td"]
    ops.extend(f"{_pdf_text(line)} Tj T*" for line in lines[:PDF_LINE_LIMIT])
    ops.append("ET")
    return "\n".join(ops).encode("latin-1", errors="replace")


def _pdf_document(objects: list[bytes]) -> bytes:
    """Serialise numbered objects with a cross-reference table; object 1 is the catalog."""
    buf = io.BytesIO()
    buf.write(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(buf.tell())
        buf.write(b"%d 0 obj\n%s\nendobj\n" % (number, body))
    xref_at = buf.tell()
    buf.write(b"xref\n0 %d\n" % (len(objects) + 1))
    buf.write(b"0000000000 65535 f \n")
    buf.writelines(b"%010d 00000 n \n" % offset for offset in offsets)
    buf.write(b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (len(objects) + 1, xref_at))
    return buf.getvalue()


def simple_pdf(lines: list[str]) -> bytes:
    """Single-page text PDF; lines past the page are dropped."""
    content = _page_content(lines)
    width, height = PDF_PAGE_SIZE
    return _pdf_document(
        [
            b"<< /Type /Catalog /Pages 2 0 R >>",
            b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
            b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 %d %d] /Contents 4 0 R "
            b"/Resources << /Font << /F1 5 0 R >> >> >>" % (width, height),
            b"<< /Length %d >>\nstream\n%s\nendstream" % (len(content), content),
            b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
        ]
    )


def stock_report_pdf(summary: StockSummaryOut, sales: list[Sale], *, generated_at: datetime | None = None) -> bytes:
    generated_at = generated_at or datetime.utcnow()
    lines = [
        f"{settings.business_name} - STOCK REPORT",
        f"Address: {settings.business_address}",
        f"Date: {generated_at.strftime('%Y-%m-%d')}",
        "",
        "Block Size | Produced | Sold | In Stock",
    ]
    for row in summary.blocks:
        lines.append(f"{row.size} | {row.produced} | {row.sold} | {row.in_stock}")
    lines.append(
        f"Total | {summary.totals.produced} | {summary.totals.sold} | {summary.totals.in_stock}"
    )
    if sales:
        lines.append("")
        lines.append("Customer | Block Size | Quantity | Date")
        for s in sales:
            lines.append(f"{s.customer or '-'} | {s.block_size} | {s.quantity} | {s.recorded_at.strftime('%Y-%m-%d')}")
    return simple_pdf(lines)
