"""Churn workbook: a cover sheet plus one styled sheet per analysis."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pandas as pd
from loguru import logger
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, NamedStyle, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from churn_analytics.analyses.base import AnalysisResult
from churn_analytics.formatting import excel_number_format, is_percentage_column
from churn_analytics.models import enum_value

TEAL = "0F4C5C"
STRIPE = "F2F6F7"
RISK_RED = "FDE2E1"
RISK_TEXT = "9C0006"
GRID = Side(style="thin", color="C8D3D5")
CELL_BORDER = Border(left=GRID, right=GRID, top=GRID, bottom=GRID)
MAX_COLUMN_WIDTH = 32

# name -> (font kwargs, fill colour or None)
STYLE_SPECS: dict[str, tuple[dict, str | None]] = {
    "churn_header": ({"bold": True, "color": "FFFFFF"}, TEAL),
    "churn_row": ({}, None),
    "churn_row_alt": ({}, STRIPE),
    "churn_at_risk": ({"bold": True, "color": RISK_TEXT}, RISK_RED),
}


def _register_styles(wb: Workbook) -> None:
    for name, (font_kwargs, fill) in STYLE_SPECS.items():
        style = NamedStyle(name=name)
        style.font = Font(name="Calibri", size=10, **font_kwargs)
        if fill:
            style.fill = PatternFill(start_color=fill, end_color=fill, fill_type="solid")
        style.alignment = Alignment(
            horizontal="center", vertical="center", wrap_text=name == "churn_header"
        )
        style.border = CELL_BORDER
        wb.add_named_style(style)


def _cover_details(result) -> list[tuple[str, str]]:
    criteria = result.settings.filters
    details = [
        ("Generated", datetime.now().strftime("%Y-%m-%d %H:%M")),
        ("Data source", result.settings.source_name),
        ("Customers loaded", f"{len(result.df):,}"),
        ("Customers in view", f"{len(result.filtered):,}"),
        ("Contract filter", enum_value(criteria.contract)),
        ("Internet filter", enum_value(criteria.internet_service)),
        ("Tenure window", f"{criteria.tenure_min}-{criteria.tenure_max} months"),
        ("Risk cut", str(result.settings.risk_cut)),
        ("Analyses", f"{sum(1 for a in result.analyses if a.error is None)}/{len(result.analyses)}"),
    ]
    if result.kpis is not None:
        details.append(
            ("Worker KPIs", f"{result.kpis.count:,} customers, {result.kpis.churn:.1f}% churn")
        )
    return details


def _write_cover_sheet(wb: Workbook, result) -> None:
    ws = wb.active
    ws.title = "Report Info"
    ws.sheet_properties.showGridLines = False

    ws["A1"] = "Customer Churn Analysis"
    ws["A1"].font = Font(name="Calibri", size=20, bold=True, color=TEAL)

    for row_idx, (label, value) in enumerate(_cover_details(result), start=3):
        ws.cell(row=row_idx, column=1, value=label).font = Font(name="Calibri", bold=True)
        ws.cell(row=row_idx, column=2, value=value)

    ws.column_dimensions["A"].width = 22
    ws.column_dimensions["B"].width = 48


def _cell_value(val, col_name: str):
    """Booleans become Yes/No; percentage columns are stored as fractions."""
    if isinstance(val, bool):
        return "Yes" if val else "No"
    if is_percentage_column(col_name.lower()) and isinstance(val, (int, float)) and not pd.isna(val):
        return val / 100.0
    return val


def _row_style(row_idx: int, col_name: str, val) -> str:
    if col_name == "at_risk" and bool(val):
        return "churn_at_risk"
    return "churn_row_alt" if row_idx % 2 else "churn_row"


def _fit_columns(ws: Worksheet, df: pd.DataFrame) -> None:
    for col_idx, col_name in enumerate(df.columns, start=1):
        sample = [str(col_name), *(str(v) for v in df[col_name].head(25))]
        width = max(len(s) for s in sample) + 3
        ws.column_dimensions[get_column_letter(col_idx)].width = min(width, MAX_COLUMN_WIDTH)


def _write_analysis_sheet(wb: Workbook, analysis: AnalysisResult) -> None:
    df = analysis.df
    if df.empty:
        logger.debug("No rows for {name}; sheet skipped", name=analysis.name)
        return

    ws = wb.create_sheet(analysis.sheet_name)
    ws.freeze_panes = "A2"
    columns = [str(c) for c in df.columns]

    for col_idx, col_name in enumerate(columns, start=1):
        ws.cell(row=1, column=col_idx, value=col_name).style = "churn_header"

    for row_idx, record in enumerate(df.to_dict("records"), start=2):
        for col_idx, col_name in enumerate(columns, start=1):
            raw = record[col_name]
            cell = ws.cell(row=row_idx, column=col_idx, value=_cell_value(raw, col_name))
            cell.style = _row_style(row_idx, col_name, raw)
            cell.number_format = excel_number_format(col_name)

    ws.auto_filter.ref = f"A1:{get_column_letter(len(columns))}{len(df) + 1}"
    _fit_columns(ws, df)


def write_excel_report(result, output_path: Path) -> None:
    """Save the workbook for a pipeline result; failed analyses get no sheet."""
    wb = Workbook()
    _register_styles(wb)
    _write_cover_sheet(wb, result)

    for analysis in result.analyses:
        if analysis.error is None:
            _write_analysis_sheet(wb, analysis)

    wb.save(output_path)
    logger.info("Excel report saved: {path}", path=output_path)
