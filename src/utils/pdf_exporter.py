"""Printable PDF driver manifests."""

from __future__ import annotations

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Sequence

from ..core.calendar_math import format_time
from ..core.collection import display_label, format_amount
from ..core.manifest import ManifestEntry, collection_total
from ..core.models import Driver, passenger_summary, payment_method_label

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Driver Manifest"
APP_NAME = "Dispatch Board"

_REPORTLAB_CACHE: dict[str, object] | None = None


def _load_reportlab() -> dict[str, object]:
    global _REPORTLAB_CACHE
    if _REPORTLAB_CACHE is None:
        try:
            from reportlab.lib import colors  # type: ignore
            from reportlab.lib.pagesizes import A4  # type: ignore
            from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet  # type: ignore
            from reportlab.lib.units import mm  # type: ignore
            from reportlab.pdfbase import pdfmetrics  # type: ignore
            from reportlab.pdfbase.ttfonts import TTFont  # type: ignore
            from reportlab.platypus import (  # type: ignore
                HRFlowable,
                Paragraph,
                SimpleDocTemplate,
                Spacer,
                Table,
                TableStyle,
            )
        except ImportError as exc:  # pragma: no cover - dependency guard
            raise RuntimeError(
                "ReportLab is required for PDF export. Install it with 'pip install reportlab'."
            ) from exc
        _REPORTLAB_CACHE = {
            "colors": colors,
            "A4": A4,
            "ParagraphStyle": ParagraphStyle,
            "getSampleStyleSheet": getSampleStyleSheet,
            "mm": mm,
            "pdfmetrics": pdfmetrics,
            "TTFont": TTFont,
            "HRFlowable": HRFlowable,
            "Paragraph": Paragraph,
            "SimpleDocTemplate": SimpleDocTemplate,
            "Spacer": Spacer,
            "Table": Table,
            "TableStyle": TableStyle,
        }
    return _REPORTLAB_CACHE


def _ensure_font_registered(pdfmetrics, TTFont) -> None:
    """Register Segoe UI if present to match the dashboard typography."""

    try:
        pdfmetrics.getFont("SegoeUI")
    except KeyError:
        candidate_paths = [
            "C:/Windows/Fonts/segoeui.ttf",
            "/System/Library/Fonts/Segoe UI.ttf",
        ]
        for path in candidate_paths:
            font_path = Path(path)
            if font_path.exists():
                pdfmetrics.registerFont(TTFont("SegoeUI", str(font_path)))
                break


def _escape(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def export_manifest_pdf(
    output_path: Path | str,
    driver: Driver,
    day: date | datetime,
    entries: Sequence[ManifestEntry],
    *,
    time_format: str = "12h",
    currency: str = "$",
    generated_at: datetime | None = None,
    title: str = DEFAULT_TITLE,
) -> Path:
    """Render one driver's daily manifest to an A4 PDF and return the written path."""

    path = Path(output_path)
    if path.suffix.lower() != ".pdf":
        path = path.with_suffix(".pdf")
    path.parent.mkdir(parents=True, exist_ok=True)

    rl = _load_reportlab()
    colors = rl["colors"]
    A4 = rl["A4"]
    ParagraphStyle = rl["ParagraphStyle"]
    getSampleStyleSheet = rl["getSampleStyleSheet"]
    mm = rl["mm"]
    pdfmetrics = rl["pdfmetrics"]
    TTFont = rl["TTFont"]
    Paragraph = rl["Paragraph"]
    SimpleDocTemplate = rl["SimpleDocTemplate"]
    Spacer = rl["Spacer"]
    Table = rl["Table"]
    TableStyle = rl["TableStyle"]
    HRFlowable = rl["HRFlowable"]

    _ensure_font_registered(pdfmetrics, TTFont)

    styles = getSampleStyleSheet()
    base_font = "SegoeUI" if "SegoeUI" in pdfmetrics.getRegisteredFontNames() else "Helvetica"

    title_style = ParagraphStyle(
        "ManifestTitle",
        parent=styles["Heading1"],
        fontName=base_font,
        fontSize=22,
        leading=26,
        spaceAfter=4,
        textColor=colors.HexColor("#0f1623"),
    )
    subtitle_style = ParagraphStyle(
        "ManifestSubtitle",
        parent=styles["Normal"],
        fontName=base_font,
        fontSize=11,
        textColor=colors.HexColor("#4e5d78"),
        spaceAfter=12,
    )
    body_style = ParagraphStyle(
        "ManifestBody",
        parent=styles["Normal"],
        fontName=base_font,
        fontSize=10,
        leading=14,
        textColor=colors.HexColor("#1a2739"),
    )
    secondary_style = ParagraphStyle(
        "ManifestSecondary",
        parent=body_style,
        fontSize=9,
        textColor=colors.HexColor("#4e5d78"),
    )
    collect_style = ParagraphStyle(
        "ManifestCollect",
        parent=body_style,
        fontSize=11,
        leading=15,
        alignment=1,
    )

    generated = generated_at or datetime.now()
    day_text = f"{day.strftime('%A')}, {day.strftime('%B')} {day.day}, {day.year}"

    doc = SimpleDocTemplate(
        str(path),
        pagesize=A4,
        leftMargin=18 * mm,
        rightMargin=18 * mm,
        topMargin=22 * mm,
        bottomMargin=18 * mm,
        title=f"{title}: {driver.name} - {day_text}",
    )

    def _scaled_widths(*fractions: float) -> list[float]:
        total = sum(fractions)
        if total == 0:
            raise ValueError("Column width fractions must not sum to zero.")
        return [doc.width * (fraction / total) for fraction in fractions]

    to_collect = collection_total(entries)
    info_table = Table(
        [
            ["Driver", driver.name],
            ["Date", day_text],
            ["Jobs", str(len(entries))],
            ["Cash to collect", format_amount(to_collect, currency)],
        ],
        colWidths=_scaled_widths(0.28, 0.72),
    )
    info_table.setStyle(
        TableStyle(
            [
                ("FONTNAME", (0, 0), (-1, -1), base_font),
                ("FONTSIZE", (0, 0), (-1, -1), 9),
                ("TEXTCOLOR", (0, 0), (0, -1), colors.HexColor("#4e5d78")),
                ("ALIGN", (0, 0), (-1, -1), "LEFT"),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
            ]
        )
    )

    story: list = [
        Paragraph(_escape(title), title_style),
        Paragraph(_escape(f"{driver.name} - {day_text}"), subtitle_style),
        HRFlowable(width="100%", thickness=1, color=colors.HexColor("#35c4c7")),
        Spacer(1, 12),
        info_table,
        Spacer(1, 12),
    ]

    if not entries:
        story.append(Paragraph("No jobs scheduled for this day.", secondary_style))

    for entry in entries:
        booking = entry.booking
        start_text = format_time(booking.start_time, time_format)
        end_text = format_time(booking.end_time, time_format) if booking.end_time else ""
        time_block = Paragraph(
            f"<b>{start_text}</b>"
            + (f"<br/><font size=8 color='#4e5d78'>- {end_text}</font>" if end_text else "")
            + f"<br/><font size=8>Job {entry.job_number}</font>",
            body_style,
        )

        route_lines = [f"<b>Pickup:</b> {_escape(booking.pickup_address)}"]
        if booking.stop_address:
            route_lines.append(f"<b>Stop:</b> <i>{_escape(booking.stop_address)}</i>")
        route_lines.append(f"<b>Dropoff:</b> {_escape(booking.dropoff_address)}")
        client_line = f"<b>Client:</b> {_escape(booking.client_name)}"
        if booking.payment_method is not None:
            client_line += f" | <b>Payment:</b> {_escape(payment_method_label(booking))}"
        info_lines = [
            f"<b>{_escape(booking.title)}</b> "
            f"<font size=8 color='#4e5d78'>Pax: {passenger_summary(booking)}</font>",
            *route_lines,
            client_line,
        ]
        if booking.notes:
            info_lines.append(f"<font color='#4e5d78'><b>Note:</b> {_escape(booking.notes)}</font>")
        info_block = Paragraph("<br/>".join(info_lines), body_style)

        if entry.collection is not None:
            collect_block = Paragraph(
                "<font size=8>COLLECT</font><br/>"
                f"<b>{format_amount(entry.collection.amount, currency)}</b><br/>"
                f"<font size=8>{display_label(entry.collection)}</font>",
                collect_style,
            )
        else:
            collect_block = Paragraph("", collect_style)

        job_table = Table(
            [[time_block, info_block, collect_block]],
            colWidths=_scaled_widths(0.16, 0.62, 0.22),
        )
        job_table.setStyle(
            TableStyle(
                [
                    ("FONTNAME", (0, 0), (-1, -1), base_font),
                    ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                    ("BACKGROUND", (0, 0), (0, 0), colors.HexColor("#eef3ff")),
                    (
                        "BACKGROUND",
                        (2, 0),
                        (2, 0),
                        colors.HexColor("#fff4d6" if entry.collection else "#ffffff"),
                    ),
                    ("BOX", (0, 0), (-1, -1), 0.8, colors.HexColor("#0f1623")),
                    ("INNERGRID", (0, 0), (-1, -1), 0.4, colors.HexColor("#cad8f4")),
                    ("TOPPADDING", (0, 0), (-1, -1), 8),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 8),
                ]
            )
        )
        story.append(job_table)
        story.append(Spacer(1, 10))

    accent_color = colors.HexColor("#0f1623")

    def _draw_header_footer(canvas, doc) -> None:  # pragma: no cover - rendering only
        canvas.saveState()
        canvas.setFillColor(accent_color)
        canvas.rect(
            doc.leftMargin,
            doc.height + doc.topMargin - 14,
            doc.width,
            0.8,
            stroke=0,
            fill=1,
        )
        canvas.setFont(base_font, 9)
        canvas.drawString(doc.leftMargin, doc.height + doc.topMargin - 10, APP_NAME)
        canvas.drawRightString(
            doc.leftMargin + doc.width,
            doc.bottomMargin - 12,
            f"Page {doc.page}",
        )
        canvas.setFillColor(colors.HexColor("#4e5d78"))
        canvas.drawString(
            doc.leftMargin,
            doc.bottomMargin - 12,
            f"Generated {generated.strftime('%d %b %Y %H:%M')}",
        )
        canvas.restoreState()

    doc.build(story, onFirstPage=_draw_header_footer, onLaterPages=_draw_header_footer)
    logger.info("Manifest PDF for %s written to %s", driver.name, path)
    return path


__all__ = ["export_manifest_pdf"]
