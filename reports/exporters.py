"""报表导出 - PDF 文档与 XLSX 工作簿。

两个导出器都基于*已过滤*的预约及其 ``AggregationResult`` 渲染，
不会再次获取或过滤数据。

- ``export_document``: 连续排版的 PDF（表头、汇总区、重复表头行的明细表、
  "Page i of n" 页脚），使用 reportlab 生成。
- ``export_workbook``: 三个工作表（Summary、Detail、Statistics），
  使用 openpyxl 生成。

渲染在内存中完成。失败时抛出 ``ExportError``，不会返回残缺的字节；
``save_artifact`` 通过临时文件写入，原因相同。
"""
import os
import tempfile
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from functools import partial
from io import BytesIO
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence, Union
from zipfile import ZIP_DEFLATED, ZipFile
from xml.sax.saxutils import escape

from loguru import logger
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.writer.excel import ExcelWriter
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from config.business_config import business_config
from config.settings import settings

from .commission import CommissionCalculator, validate_price
from .errors import ExportError, NothingToExportError
from .filters import FilterCriteria
from .models import (
    AggregationResult, Appointment, Client, Service, StaffMember, quantize,
)
from .resolver import NameResolver

PDF_MEDIA_TYPE = "application/pdf"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

DETAIL_HEADERS = [
    "Client", "Staff", "Service", "Price",
    "Staff share", "House share", "Net profit", "Date",
]
STAFF_HEADERS = [
    "Staff", "Appointments", "Revenue", "Staff share", "House share", "Net profit",
]

# 品牌配色
ACCENT = colors.HexColor("#FDB913")
INK = colors.HexColor("#2D3436")
STRIPE = colors.HexColor("#FFF8EB")
XLSX_ACCENT = "FDB913"


@dataclass(frozen=True)
class ExportArtifact:
    """渲染完成的报表，可保存或直接返回。"""
    filename: str
    content: bytes
    media_type: str


@dataclass(frozen=True)
class DetailRow:
    """明细表中的一行预约。"""
    client: str
    staff: str
    service: str
    price: Decimal
    staff_share: Decimal
    house_share: Decimal
    net_owner_profit: Decimal
    occurred_on: date
    notes: str


def money(amount: Decimal) -> str:
    return f"${amount:,.2f}"


def format_rate(rate: Decimal) -> str:
    """``Decimal("45.00")`` -> ``"45"``."""
    return f"{rate.normalize():f}"


def report_filename(extension: str, generated_at: datetime,
                    prefix: Optional[str] = None) -> str:
    """确定性的文件名：``{prefix}_{YYYY-MM-DD}.{extension}``。"""
    prefix = prefix or settings.report_prefix
    return f"{prefix}_{generated_at:%Y-%m-%d}.{extension}"


def build_detail_rows(appointments: Iterable[Appointment],
                      resolver: NameResolver,
                      calculator: CommissionCalculator) -> List[DetailRow]:
    """按顺序为每笔预约解析名称并计算分成。"""
    rows = []
    for appointment in appointments:
        shares = calculator.split(appointment, resolver.staff_member(appointment))
        rows.append(DetailRow(
            client=resolver.client_name(appointment),
            staff=resolver.staff_name(appointment),
            service=resolver.service_name(appointment),
            price=quantize(validate_price(appointment.price)),
            staff_share=shares.staff_share,
            house_share=shares.house_share,
            net_owner_profit=shares.net_owner_profit,
            occurred_on=appointment.occurred_at.date(),
            notes=appointment.notes or "-",
        ))
    return rows


class _ReportInput:
    """两个导出器共用的输入，只校验一次。"""

    def __init__(self, kind: str,
                 appointments: Iterable[Appointment],
                 aggregation: AggregationResult,
                 staff_members: Iterable[StaffMember],
                 services: Iterable[Service],
                 clients: Iterable[Client],
                 criteria: Optional[FilterCriteria],
                 generated_at: Optional[datetime]) -> None:
        self.appointments: Sequence[Appointment] = list(appointments)
        if not self.appointments:
            raise NothingToExportError(kind)
        self.aggregation = aggregation
        self.generated_at = generated_at or datetime.now()
        self.resolver = NameResolver(staff_members, services, clients)
        self.calculator = CommissionCalculator(aggregation.house_rate)
        self.rows = build_detail_rows(self.appointments, self.resolver, self.calculator)
        criteria = criteria or FilterCriteria()
        self.filters = criteria.describe(
            {k: v.name for k, v in self.resolver.staff.items()},
            {k: v.name for k, v in self.resolver.clients.items()},
        )

    @property
    def house_label(self) -> str:
        return f"House commission ({format_rate(self.aggregation.house_rate)}%)"


# ================================================================
# PDF 文档
# ================================================================

class NumberedCanvas(canvas.Canvas):
    """延迟输出页面直到总页数已知，再在每页盖上 "Page i of n" 页脚。"""

    def __init__(self, *args, footer_text: str = "", **kwargs) -> None:
        canvas.Canvas.__init__(self, *args, **kwargs)
        self._saved_page_states: List[dict] = []
        self._footer_text = footer_text

    def showPage(self) -> None:
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self) -> None:
        total = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self._draw_footer(total)
            canvas.Canvas.showPage(self)
        canvas.Canvas.save(self)

    def _draw_footer(self, total: int) -> None:
        width, _ = self._pagesize
        self.saveState()
        self.setFont("Helvetica", 8)
        self.setFillColor(colors.grey)
        self.drawString(14 * mm, 10 * mm, self._footer_text)
        self.drawRightString(width - 14 * mm, 10 * mm,
                             f"Page {self._pageNumber} of {total}")
        self.restoreState()


def _pdf_story(report: _ReportInput) -> list:
    styles = getSampleStyleSheet()
    title = ParagraphStyle("ReportTitle", parent=styles["Title"],
                           textColor=INK, alignment=0, spaceAfter=2)
    muted = ParagraphStyle("Muted", parent=styles["Normal"],
                           textColor=colors.grey, fontSize=9)
    heading = ParagraphStyle("Heading", parent=styles["Heading3"], textColor=INK)
    cell = ParagraphStyle("Cell", parent=styles["Normal"], fontSize=8, leading=10)

    totals = report.aggregation.totals
    story: list = [
        Paragraph(escape(settings.business_name.upper()), title),
        Paragraph(escape(business_config.get_report_subtitle()), muted),
        Spacer(1, 4 * mm),
        Paragraph(escape(business_config.get_report_title().upper()), heading),
        Paragraph(f"Date: {report.generated_at:%Y-%m-%d %H:%M}", muted),
        Paragraph(f"Filters: {escape(report.filters)}", muted),
        Spacer(1, 6 * mm),
        Paragraph("SUMMARY", heading),
    ]

    summary = Table(
        [
            ["Appointments", str(totals.count)],
            ["Gross revenue", money(totals.gross_revenue)],
            ["Staff commission", money(totals.total_staff_share)],
            [report.house_label, money(totals.total_house_share)],
            ["Net owner profit", money(totals.total_net_owner_profit)],
        ],
        colWidths=[70 * mm, 40 * mm],
    )
    summary.setStyle(TableStyle([
        ("FONTNAME", (0, 0), (-1, -1), "Helvetica"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("ALIGN", (1, 0), (1, -1), "RIGHT"),
        ("TEXTCOLOR", (0, 0), (-1, -1), INK),
        ("LINEBELOW", (0, 0), (-1, -2), 0.25, colors.lightgrey),
        ("BACKGROUND", (0, -1), (-1, -1), ACCENT),
        ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
    ]))
    story += [summary, Spacer(1, 8 * mm)]

    data: List[List[Any]] = [DETAIL_HEADERS]
    for row in report.rows:
        data.append([
            Paragraph(escape(row.client), cell),
            Paragraph(escape(row.staff), cell),
            Paragraph(escape(row.service), cell),
            money(row.price),
            money(row.staff_share),
            money(row.house_share),
            money(row.net_owner_profit),
            row.occurred_on.isoformat(),
        ])
    widths = [30, 24, 26, 18, 20, 20, 20, 20]
    detail = Table(data, colWidths=[w * mm for w in widths], repeatRows=1)
    detail.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), ACCENT),
        ("TEXTCOLOR", (0, 0), (-1, -1), INK),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
        ("ALIGN", (0, 0), (-1, 0), "CENTER"),
        ("ALIGN", (3, 1), (6, -1), "RIGHT"),
        ("ALIGN", (7, 1), (7, -1), "CENTER"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, STRIPE]),
    ]))
    story.append(detail)
    return story


def export_document(appointments: Iterable[Appointment],
                    aggregation: AggregationResult,
                    staff_members: Iterable[StaffMember] = (),
                    services: Iterable[Service] = (),
                    clients: Iterable[Client] = (),
                    *,
                    criteria: Optional[FilterCriteria] = None,
                    generated_at: Optional[datetime] = None) -> ExportArtifact:
    """把已过滤的预约渲染为分页 PDF。

    Args:
        appointments: 已过滤的预约。
        aggregation: 对同一批预约调用 ``aggregate()`` 的结果。
        staff_members: 员工目录（名称与提成比例）。
        services: 服务目录（名称）。
        clients: 顾客目录（名称）。
        criteria: 产生 ``appointments`` 的过滤条件，打印在表头。
        generated_at: 生成时间，省略时取当前时间。

    Returns:
        文件名为 ``{prefix}_{YYYY-MM-DD}.pdf`` 的 ``ExportArtifact``。

    Raises:
        NothingToExportError: ``appointments`` 为空。
        ExportError: reportlab 渲染失败。
    """
    report = _ReportInput("document", appointments, aggregation, staff_members,
                          services, clients, criteria, generated_at)
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=14 * mm,
        rightMargin=14 * mm,
        topMargin=14 * mm,
        bottomMargin=18 * mm,
        title=business_config.get_report_title(),
        author=settings.business_name,
        invariant=1,
    )
    footer = f"{settings.business_name} © {report.generated_at.year}"
    try:
        doc.build(_pdf_story(report),
                  canvasmaker=partial(NumberedCanvas, footer_text=footer))
    except Exception as e:
        raise ExportError(f"PDF rendering failed: {e}") from e

    artifact = ExportArtifact(
        filename=report_filename("pdf", report.generated_at),
        content=buffer.getvalue(),
        media_type=PDF_MEDIA_TYPE,
    )
    logger.info(f"Rendered {artifact.filename}: {len(report.rows)} appointments, "
                f"{len(artifact.content)} bytes")
    return artifact


# ================================================================
# XLSX 工作簿
# ================================================================

MONEY_FORMAT = "#,##0.00"
DATE_FORMAT = "yyyy-mm-dd"


def _style_header(ws, row: int, width: int) -> None:
    fill = PatternFill(start_color=XLSX_ACCENT, end_color=XLSX_ACCENT, fill_type="solid")
    for col in range(1, width + 1):
        c = ws.cell(row=row, column=col)
        c.font = Font(bold=True)
        c.fill = fill
        c.alignment = Alignment(horizontal="center")


def _set_widths(ws, widths: Sequence[int]) -> None:
    for idx, width in enumerate(widths, start=1):
        ws.column_dimensions[get_column_letter(idx)].width = width


def _format_money(ws, row: int, columns: Iterable[int]) -> None:
    for col in columns:
        ws.cell(row=row, column=col).number_format = MONEY_FORMAT


def _summary_sheet(ws, report: _ReportInput) -> None:
    totals = report.aggregation.totals
    ws.title = "Summary"
    ws.append([settings.business_name.upper()])
    ws["A1"].font = Font(bold=True, size=14)
    ws.append([business_config.get_report_title()])
    ws.append(["Date", report.generated_at.date()])
    ws["B3"].number_format = DATE_FORMAT
    ws.append(["Filters", report.filters])
    ws.append([])

    ws.append(["Main figures", "Value"])
    _style_header(ws, ws.max_row, 2)
    ws.append(["Appointments", totals.count])
    for label, amount in (
        ("Gross revenue", totals.gross_revenue),
        ("Staff commission", totals.total_staff_share),
        (report.house_label, totals.total_house_share),
        ("Net owner profit", totals.total_net_owner_profit),
        ("Average price", totals.average_price),
    ):
        ws.append([label, amount])
        _format_money(ws, ws.max_row, [2])
    ws.append([])

    ws.append(["Per staff"])
    ws.cell(row=ws.max_row, column=1).font = Font(bold=True)
    ws.append(STAFF_HEADERS)
    _style_header(ws, ws.max_row, len(STAFF_HEADERS))
    for name, b in report.aggregation.by_staff.items():
        ws.append([name, b.count, b.gross_revenue, b.staff_share,
                   b.house_share, b.net_owner_profit])
        _format_money(ws, ws.max_row, range(3, 7))
    _set_widths(ws, [28, 18, 18, 18, 18, 18])


def _detail_sheet(ws, report: _ReportInput) -> None:
    headers = DETAIL_HEADERS + ["Notes"]
    ws.append(headers)
    _style_header(ws, 1, len(headers))
    for row in report.rows:
        ws.append([row.client, row.staff, row.service, row.price,
                   row.staff_share, row.house_share, row.net_owner_profit,
                   row.occurred_on, row.notes])
        _format_money(ws, ws.max_row, range(4, 8))
        ws.cell(row=ws.max_row, column=8).number_format = DATE_FORMAT
    ws.freeze_panes = "A2"
    _set_widths(ws, [20, 16, 16, 12, 14, 16, 14, 14, 24])


def _statistics_sheet(ws, report: _ReportInput) -> None:
    headers = STAFF_HEADERS + ["Average price"]
    ws.append(["Statistics per staff"])
    ws["A1"].font = Font(bold=True)
    ws.append(headers)
    _style_header(ws, 2, len(headers))
    for name, b in report.aggregation.by_staff.items():
        ws.append([name, b.count, b.gross_revenue, b.staff_share,
                   b.house_share, b.net_owner_profit, b.average_price])
        _format_money(ws, ws.max_row, range(3, 8))
    _set_widths(ws, [22, 14, 14, 14, 14, 14, 14])


def export_workbook(appointments: Iterable[Appointment],
                    aggregation: AggregationResult,
                    staff_members: Iterable[StaffMember] = (),
                    services: Iterable[Service] = (),
                    clients: Iterable[Client] = (),
                    *,
                    criteria: Optional[FilterCriteria] = None,
                    generated_at: Optional[datetime] = None) -> ExportArtifact:
    """把已过滤的预约渲染为包含三个工作表的 XLSX 工作簿。

    工作表：
        Summary: 总计与按员工汇总表。
        Detail: 一行表头，之后每笔预约恰好一行。
        Statistics: 按员工汇总表，附每位员工的平均价格。

    文档属性 "created" 和 "modified" 都固定为 ``generated_at``。

    参数同 ``export_document``。

    Raises:
        NothingToExportError: ``appointments`` 为空。
        ExportError: openpyxl 构建或序列化工作簿失败。
    """
    report = _ReportInput("workbook", appointments, aggregation, staff_members,
                          services, clients, criteria, generated_at)
    buffer = BytesIO()
    try:
        wb = Workbook()
        _summary_sheet(wb.active, report)
        _detail_sheet(wb.create_sheet("Detail"), report)
        _statistics_sheet(wb.create_sheet("Statistics"), report)
        wb.properties.creator = settings.business_name
        wb.properties.title = business_config.get_report_title()
        wb.properties.created = report.generated_at
        wb.properties.modified = report.generated_at
        # Workbook.save 会把 "modified" 改写为当前时间，这里直接写入
        with ZipFile(buffer, "w", ZIP_DEFLATED, allowZip64=True) as archive:
            ExcelWriter(wb, archive).save()
    except Exception as e:
        raise ExportError(f"Workbook rendering failed: {e}") from e

    artifact = ExportArtifact(
        filename=report_filename("xlsx", report.generated_at),
        content=buffer.getvalue(),
        media_type=XLSX_MEDIA_TYPE,
    )
    logger.info(f"Rendered {artifact.filename}: {len(report.rows)} appointments, "
                f"{len(artifact.content)} bytes")
    return artifact


def save_artifact(artifact: ExportArtifact,
                  directory: Union[str, Path]) -> Path:
    """通过临时文件把导出结果写入 ``directory``。

    目标文件只有在全部字节写完后才会出现。

    Returns:
        写入文件的路径。
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    target = directory / artifact.filename
    fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".tmp-", suffix=target.suffix)
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(artifact.content)
        os.replace(tmp_path, target)
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise
    logger.info(f"Saved {target}")
    return target
