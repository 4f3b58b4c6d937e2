"""Shared formatting helpers for Excel and console output."""

from __future__ import annotations


def format_value(val, col_name: str) -> str:
    """Format a cell value for display based on column name heuristics."""
    if val is None or (isinstance(val, float) and val != val):
        return ""
    if isinstance(val, bool):
        return "Yes" if val else "No"
    col_lower = col_name.lower()
    if is_currency_column(col_lower):
        return f"${float(val):,.2f}"
    if is_percentage_column(col_lower):
        return f"{float(val):.1f}%"
    if col_lower == "lift":
        return f"x{float(val):.2f}"
    try:
        num = float(val)
        if num == int(num):
            return f"{int(num):,}"
        return f"{num:,.2f}"
    except (ValueError, TypeError):
        return str(val)


def excel_number_format(col_name: str) -> str:
    """Return openpyxl number format string for a column."""
    col_lower = col_name.lower()
    if is_percentage_column(col_lower):
        return "0.0%"
    if is_currency_column(col_lower):
        return "$#,##0.00"
    if col_lower == "lift":
        return '0.00"x"'
    if col_lower == "value":
        return "#,##0.##"
    return "#,##0"


def is_currency_column(col_lower: str) -> bool:
    return any(kw in col_lower for kw in ("monthly", "spend", "$"))


def is_percentage_column(col_lower: str) -> bool:
    return any(kw in col_lower for kw in ("%", "pct", "percent", "rate"))
