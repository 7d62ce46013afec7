"""Excel formateado con objetivos, registro del día y recomendaciones."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd
from openpyxl.styles import Alignment, Border, Font, Side

from hidro_tool.session import SessionSnapshot

_SUMMARY_COLUMNS = ["Concepto", "Valor", "Unidad"]
_LOG_COLUMNS = ["Hora", "Cantidad (ml)", "Registrado"]
_RECOMMENDATION_COLUMNS = ["Tipo", "Recomendación"]

_SEVERITY_LABELS: dict[str, str] = {"info": "Info", "warning": "Atención"}


@dataclass(frozen=True)
class ReportLayout:
    """Sheet names of the hydration report."""

    summary_sheet: str = "Resumen"
    log_sheet: str = "Registro"
    recommendations_sheet: str = "Recomendaciones"


def summary_frame(snapshot: SessionSnapshot) -> pd.DataFrame:
    """Goals and today's progress as Concepto/Valor/Unidad rows."""
    rows: list[tuple[str, object, str]] = [("Fecha", snapshot.day, "")]
    if snapshot.profile is not None:
        rows.append(("Peso", round(snapshot.profile.weight_kg, 1), "kg"))
        rows.append(("Edad", snapshot.profile.age, "años"))
    if snapshot.goals is not None:
        rows.extend(
            [
                ("Agua", snapshot.goals.water_ml, "ml"),
                ("Sodio", snapshot.goals.sodium_mg, "mg"),
                ("Potasio", snapshot.goals.potassium_mg, "mg"),
                ("Magnesio", snapshot.goals.magnesium_mg, "mg"),
                ("Calcio", snapshot.goals.calcium_mg, "mg"),
            ]
        )
    rows.append(("Consumido hoy", snapshot.total_ml, "ml"))
    rows.append(("Progreso", round(snapshot.progress_percentage), "%"))
    return pd.DataFrame(rows, columns=_SUMMARY_COLUMNS)


def log_frame(snapshot: SessionSnapshot) -> pd.DataFrame:
    """Today's entries, newest first."""
    rows = [
        (
            entry.time_label,
            entry.amount_ml,
            entry.timestamp.replace(tzinfo=None, microsecond=0),
        )
        for entry in snapshot.entries
    ]
    return pd.DataFrame(rows, columns=_LOG_COLUMNS)


def recommendations_frame(snapshot: SessionSnapshot) -> pd.DataFrame:
    rows = [
        (_SEVERITY_LABELS.get(rec.severity, rec.severity), rec.text)
        for rec in snapshot.recommendations
    ]
    rows.extend((_SEVERITY_LABELS["warning"], text) for text in snapshot.warnings)
    return pd.DataFrame(rows, columns=_RECOMMENDATION_COLUMNS)


def write_hydration_xlsx(
    snapshot: SessionSnapshot,
    out_path: Path,
    layout: ReportLayout,
) -> None:
    """Write a formatted Excel file suitable for printing.

    Args:
        snapshot: Read-only session snapshot; it is not modified.
        out_path: Output path for the XLSX file.
        layout: Sheet names.
    """
    out_path.parent.mkdir(parents=True, exist_ok=True)

    sheets = [
        (layout.summary_sheet, summary_frame(snapshot)),
        (layout.log_sheet, log_frame(snapshot)),
        (layout.recommendations_sheet, recommendations_frame(snapshot)),
    ]
    with pd.ExcelWriter(out_path, engine="openpyxl") as writer:
        for name, frame in sheets:
            frame.to_excel(writer, index=False, sheet_name=name)
            _format_sheet(writer.book[name])


def _style_header_row(ws: Any) -> None:
    """Aplica fuente negrita, alineación y borde a la fila de cabecera."""
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    header_font = Font(bold=True)
    center = Alignment(horizontal="center", vertical="center", wrap_text=True)
    for cell in ws[1]:
        cell.font = header_font
        cell.alignment = center
        cell.border = border


def _style_body_rows(ws: Any) -> None:
    """Bordes en todas las celdas; texto largo alineado a la izquierda."""
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    center = Alignment(horizontal="center", vertical="center", wrap_text=True)
    left = Alignment(horizontal="left", vertical="center", wrap_text=True)
    for row in ws.iter_rows(min_row=2):
        for cell in row:
            cell.alignment = left if isinstance(cell.value, str) else center
            cell.border = border


def _get_header_col_index(ws: Any) -> dict[str, int]:
    """Devuelve mapa nombre de cabecera -> índice de columna (1-based)."""
    headers = [str(cell.value) for cell in ws[1]]
    return {name: idx + 1 for idx, name in enumerate(headers)}


def _apply_column_widths(ws: Any, col_index: dict[str, int]) -> None:
    widths = [
        ("Concepto", 18),
        ("Valor", 12),
        ("Unidad", 8),
        ("Hora", 8),
        ("Cantidad (ml)", 14),
        ("Registrado", 18),
        ("Tipo", 10),
        ("Recomendación", 90),
    ]
    for header, width in widths:
        idx = col_index.get(header)
        if idx is not None:
            letter = ws.cell(row=1, column=idx).column_letter
            ws.column_dimensions[letter].width = width


def _apply_number_formats(ws: Any, col_index: dict[str, int]) -> None:
    fmt_map: dict[str, str] = {
        "Cantidad (ml)": "#,##0",
        "Registrado": "dd/mm/yyyy hh:mm",
    }
    for row in ws.iter_rows(min_row=2):
        for header, fmt in fmt_map.items():
            idx = col_index.get(header)
            if idx is not None:
                row[idx - 1].number_format = fmt


def _format_sheet(ws: Any) -> None:
    """Apply borders, widths and number formats to a worksheet.

    Args:
        ws: openpyxl worksheet.
    """
    _style_header_row(ws)
    _style_body_rows(ws)
    col_index = _get_header_col_index(ws)
    _apply_column_widths(ws, col_index)
    _apply_number_formats(ws, col_index)
