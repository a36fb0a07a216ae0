"""
Printable budget and adjustment documents.

Both documents are one LETTER page built with reportlab's platypus layer: a
header box with the museum name, the document title and its code; the money
table; the people who created and reviewed it; and, once decided, a rotated
APROBADO or RECHAZADO stamp.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple
from xml.sax.saxutils import escape

from fastapi.responses import Response
from reportlab.lib import colors
from reportlab.lib.pagesizes import LETTER
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import Flowable, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from mis_compras.core.database.entities import AdjustmentSource, Budget, BudgetAdjustment, User
from mis_compras.core.errors import NotFoundError, PermissionDeniedError
from mis_compras.core.formatters import format_currency, format_date
from mis_compras.core.logging_config import get_logger
from mis_compras.core.models.domain.enums import AdjustmentStatus, AdjustmentType, BudgetStatus
from mis_compras.server.core.constant import ADJUSTMENT_REVIEWER_ROLES

from .base import ServiceBase, has_role

logger = get_logger(__name__)

PDF_MEDIA_TYPE = "application/pdf"
ORGANIZATION = "MUSEO DE ANTIOQUIA"
PENDING = "Pendiente"
NOT_AVAILABLE = "N/A"

_styles = getSampleStyleSheet()
BODY = ParagraphStyle("Body", parent=_styles["Normal"], fontSize=9, leading=12)
CENTER = ParagraphStyle("Center", parent=BODY, alignment=1)
TITLE = ParagraphStyle("DocTitle", parent=_styles["Title"], fontSize=14, leading=17, spaceAfter=0)
HEADING = ParagraphStyle("Heading", parent=BODY, fontName="Helvetica-Bold", fontSize=10, leading=13)

TABLE_STYLE = TableStyle(
    [
        ("GRID", (0, 0), (-1, -1), 0.5, colors.black),
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#f0f0f0")),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
    ]
)


@dataclass
class Stamp:
    """Rotated verdict drawn over the first page."""

    label: str
    color: colors.Color
    by: Optional[str] = None
    on: Optional[str] = None


def _p(text: object, style: ParagraphStyle = BODY) -> Paragraph:
    return Paragraph(escape("" if text is None else str(text)), style)


def _header(title_lines: Sequence[str], subtitle_lines: Sequence[str], code_box: Sequence[tuple]) -> Table:
    title = Paragraph("<br/>".join(f"<b>{escape(line)}</b>" for line in title_lines), TITLE)
    middle = [title, Paragraph("<br/>".join(escape(line) for line in subtitle_lines), CENTER)]
    right = [Paragraph(f"<b>{escape(label)}</b> {escape(str(value))}", BODY) for label, value in code_box]
    header = Table([[_p(ORGANIZATION, CENTER), middle, right]], colWidths=[90, 300, 120])
    header.setStyle(
        TableStyle(
            [
                ("BOX", (0, 0), (0, 0), 0.8, colors.black),
                ("BOX", (2, 0), (2, 0), 0.8, colors.black),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ]
        )
    )
    return header


def _signatures(pairs: Sequence[tuple]) -> Table:
    labels = [Paragraph(f"<b>{escape(label)}</b>", BODY) for label, _ in pairs]
    names = [_p(name) for _, name in pairs]
    return Table([labels, names], colWidths=[510 / len(pairs)] * len(pairs))


def _stamp_painter(stamp: Optional[Stamp]) -> Callable:
    def paint(canvas, doc) -> None:
        if stamp is None:
            return
        canvas.saveState()
        canvas.translate(330, 390)
        canvas.rotate(25)
        canvas.setFillColor(stamp.color)
        canvas.setFont("Helvetica-Bold", 26)
        canvas.drawString(0, 0, stamp.label)
        canvas.setFont("Helvetica", 10)
        if stamp.by:
            canvas.drawString(0, -16, f"Por: {stamp.by}")
        if stamp.on:
            canvas.drawString(0, -30, stamp.on)
        canvas.restoreState()

    return paint


def build_pdf(title: str, story: List[Flowable], stamp: Optional[Stamp] = None) -> bytes:
    output = io.BytesIO()
    doc = SimpleDocTemplate(
        output,
        pagesize=LETTER,
        leftMargin=50,
        rightMargin=50,
        topMargin=50,
        bottomMargin=50,
        title=title,
        author=ORGANIZATION,
    )
    painter = _stamp_painter(stamp)
    doc.build(story, onFirstPage=painter, onLaterPages=painter)
    return output.getvalue()


def document_file_name(code: str) -> str:
    return f"{code}.pdf"


def pdf_response(content: bytes, file_name: str) -> Response:
    return Response(
        content=content,
        media_type=PDF_MEDIA_TYPE,
        headers={"Content-Disposition": f"inline; filename={file_name}"},
    )


class DocumentService(ServiceBase):
    """Renders budget and adjustment PDFs from the current database state."""

    async def _name(self, user_id: Optional[str], default: str = NOT_AVAILABLE) -> str:
        if not user_id:
            return default
        user = await self.repos.users.get_by_id(user_id)
        return user.name if user else default

    async def _rubro(self, budget: Budget) -> str:
        """Category shown for a budget line, falling back to the budget title."""
        if budget.category_id:
            category = await self.repos.categories.get_by_id(budget.category_id)
            if category is not None:
                return f"{category.code} {category.name}"
        return budget.title

    async def _project_name(self, budget: Budget) -> str:
        project = await self.repos.projects.get_by_id(budget.project_id)
        return project.name if project else ""

    # ----- budgets -----

    async def budget_pdf(self, user: User, budget_id: str) -> Tuple[str, bytes]:
        """File name and content of a budget the user can see."""
        from .budgets import BudgetService  # local import: budgets -> adjustments -> documents cycle

        budgets = BudgetService(self.session, self.repos)
        budget = await budgets.get_budget(budget_id)
        if not await budgets.can_view(user, budget):
            raise PermissionDeniedError("You do not have access to this budget")
        return document_file_name(budget.code), await self.render_budget(budget)

    async def render_budget(self, budget: Budget) -> bytes:
        area = await self.repos.areas.get_by_id(budget.area_id)
        executed = budget.amount - budget.available
        approver = await self._name(budget.approved_by_id, PENDING)

        story: List[Flowable] = [
            _header(
                ["PRESUPUESTO"],
                [
                    f"{budget.code} {await self._project_name(budget)}",
                    f"Fecha de ejecución: {format_date(budget.created_at)}",
                ],
                [("Código", budget.code), ("VERSIÓN:", budget.version), ("Año:", budget.year)],
            ),
            Spacer(1, 18),
            _p(f"{budget.code} {budget.title} Presupuesto total: {format_currency(budget.amount)}", HEADING),
            Spacer(1, 12),
        ]

        money = [format_currency(budget.amount), format_currency(executed), format_currency(budget.available)]
        table = Table(
            [
                ["Rubro", "Presupuesto", "Ejecutado", "Saldo"],
                [_p(await self._rubro(budget)), *money],
                ["Total:", *money],
            ],
            colWidths=[200, 105, 105, 100],
        )
        table.setStyle(TABLE_STYLE)
        funding = Table(
            [
                [Paragraph("<b>Financiador:</b>", BODY), Paragraph("<b>Valor:</b>", BODY)],
                [_p(area.name if area else NOT_AVAILABLE, CENTER), _p(format_currency(budget.amount), CENTER)],
            ],
            colWidths=[260, 250],
        )
        funding.setStyle(
            TableStyle([("BOX", (0, 0), (0, -1), 0.5, colors.black), ("BOX", (1, 0), (1, -1), 0.5, colors.black)])
        )

        story += [
            table,
            Spacer(1, 18),
            funding,
            Spacer(1, 24),
            _signatures(
                [
                    ("Creado por:", await self._name(budget.created_by_id)),
                    ("Líder responsable:", await self._name(budget.manager_id, PENDING)),
                    ("Aprobado por:", approver),
                ]
            ),
            Spacer(1, 24),
            _p(f"Fecha de creación: {format_date(budget.created_at)}", CENTER),
        ]

        stamp = None
        if budget.status == BudgetStatus.approved.value:
            stamp = Stamp("APROBADO", colors.HexColor("#00aa00"), approver, format_date(budget.approved_at))
        elif budget.status == BudgetStatus.rejected.value:
            stamp = Stamp("RECHAZADO", colors.HexColor("#cc0000"), approver, format_date(budget.approved_at))

        logger.debug(f"Rendering budget document {budget.code}")
        return build_pdf(f"Presupuesto {budget.code}", story, stamp)

    # ----- adjustments -----

    async def adjustment_pdf(self, user: User, adjustment_id: str) -> Tuple[str, bytes]:
        """File name and content of an adjustment the user requested or reviews."""
        adjustment = await self.repos.adjustments.get_by_id(adjustment_id)
        if adjustment is None:
            raise NotFoundError("Adjustment", adjustment_id)
        if adjustment.requested_by_id != user.id and not has_role(user, ADJUSTMENT_REVIEWER_ROLES):
            raise PermissionDeniedError("You do not have access to this adjustment")
        return document_file_name(adjustment.code), await self.render_adjustment(adjustment)

    async def render_adjustment(self, adjustment: BudgetAdjustment) -> bytes:
        target = await self.repos.budgets.get_by_id(adjustment.budget_id)
        if target is None:
            raise NotFoundError("Budget", adjustment.budget_id)
        sources: List[AdjustmentSource] = await self.repos.adjustments.sources(adjustment.id)
        is_transfer = adjustment.type == AdjustmentType.transfer.value
        requester = await self._name(adjustment.requested_by_id)
        reviewer = await self._name(adjustment.reviewed_by_id, PENDING)

        story: List[Flowable] = [
            _header(
                ["AJUSTE", "PRESUPUESTAL"],
                [f"{target.code} {await self._project_name(target)}"],
                [("Código", adjustment.code), ("Tipo:", "Movimiento" if is_transfer else "Aumento")],
            ),
            Spacer(1, 18),
            _p(
                f"Solicitud de {'traslado' if is_transfer else 'aumento'} para el Rubro: {await self._rubro(target)}",
                HEADING,
            ),
            Spacer(1, 8),
            _p(f"Fecha de solicitud: {format_date(adjustment.requested_at)}"),
            _p(f"Solicitado por: {requester}"),
            _p(f"Cantidad a aumentar: {format_currency(adjustment.requested_amount)}", HEADING),
            Spacer(1, 12),
        ]

        if is_transfer and sources:
            rows: List[list] = [["Rubro", "Presupuesto", "Ejecutado", "Disminuido"]]
            for source in sources:
                budget = await self.repos.budgets.get_by_id(source.budget_id)
                if budget is None:
                    rows.append([_p(source.budget_id), "-", "-", format_currency(source.amount)])
                    continue
                rows.append(
                    [
                        _p(await self._rubro(budget)),
                        format_currency(budget.amount),
                        format_currency(budget.amount - budget.available),
                        format_currency(source.amount),
                    ]
                )
            rows.append(["Total a disminuir:", "", "", format_currency(sum(s.amount for s in sources))])
            table = Table(rows, colWidths=[200, 105, 105, 100])
            table.setStyle(TABLE_STYLE)
            story += [table, Spacer(1, 12)]

        story += [
            _p("MOTIVO DEL AJUSTE PRESUPUESTAL:", HEADING),
            _p(adjustment.reason),
            Spacer(1, 12),
        ]

        stamp = None
        if adjustment.status != AdjustmentStatus.pending.value:
            approved = adjustment.status == AdjustmentStatus.approved.value
            verdict = "aprobado" if approved else "rechazado"
            story += [
                _p(f"Este documento fue {verdict} por: {reviewer}", HEADING),
                _p(f"Fecha de revisión: {format_date(adjustment.reviewed_at)}"),
            ]
            if adjustment.review_comment:
                story.append(_p(f"Observaciones: {adjustment.review_comment}"))
            stamp = Stamp(
                "APROBADO" if approved else "RECHAZADO",
                colors.HexColor("#00aa00" if approved else "#cc0000"),
                reviewer,
                format_date(adjustment.reviewed_at),
            )

        story += [
            Spacer(1, 24),
            _p(f"Creado por: {requester}", CENTER),
            _p(f"Fecha de creación: {format_date(adjustment.requested_at)}", CENTER),
        ]

        logger.debug(f"Rendering adjustment document {adjustment.code}")
        return build_pdf(f"Ajuste {adjustment.code}", story, stamp)
