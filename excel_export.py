"""
Excel export functionality for QuickInvoice
"""
from __future__ import annotations
import os
import re
from typing import Sequence

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from config import employee_display_name
from models import Company, Employee, LineItem
from utils import range_labels, safe_float

# Sheet layout (1-based rows)
COMPANY_INFO_START = 10
TABLE_HEADER_ROW = 16
TABLE_BODY_START = 17

# Table columns
DATE_COL = 1       # A
ROOM_COL = 3       # C
DESCRIPTION_COL = 8  # H
TIME_COL = 12      # L
AMOUNT_COL = 13    # M

TABLE_HEADERS = {
    DATE_COL: "DATE",
    ROOM_COL: "ROOM NUMBER AND TYPE",
    DESCRIPTION_COL: "DESCRIPTION",
    TIME_COL: "TIME",
    AMOUNT_COL: "AMOUNT",
}

_UNSAFE_FILENAME = re.compile(r'[\\/:*?"<>|\x00-\x1f]+')


def _text(value) -> str:
    """Cell text with control characters worksheets cannot hold removed"""
    return ILLEGAL_CHARACTERS_RE.sub("", "" if value is None else str(value))


def _style_header(ws, row: int):
    """Apply header styling to the table header cells"""
    header_font = Font(bold=True, color="FFFFFF")
    fill = PatternFill("solid", fgColor="4F81BD")
    align = Alignment(horizontal="center", vertical="center")
    thin = Side(style="thin", color="A0A0A0")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    for col in TABLE_HEADERS:
        cell = ws.cell(row, col)
        cell.font = header_font
        cell.fill = fill
        cell.alignment = align
        cell.border = border


def _autosize_columns(ws, min_width=6, max_width=45):
    """Auto-size table columns based on content"""
    for col in TABLE_HEADERS:
        letter = get_column_letter(col)
        max_len = 0
        for r in range(TABLE_HEADER_ROW, ws.max_row + 1):
            v = ws.cell(r, col).value
            if v is None:
                continue
            max_len = max(max_len, len(str(v)))
        ws.column_dimensions[letter].width = max(min_width, min(max_width, max_len + 2))


def export_filename(employee: Employee, start_date: str, end_date: str) -> str:
    """File name like 'Invoice_John_Doe_Jan 6_to_January 9.xlsx'"""
    start_label, end_label = range_labels(start_date, end_date)
    name = f"Invoice_{employee.name}_{employee.lastname}_{start_label}_to_{end_label}.xlsx"
    return _UNSAFE_FILENAME.sub("-", name)


def export_invoice_excel(
    employee: Employee,
    company: Company,
    items: Sequence[LineItem],
    start_date: str,
    end_date: str,
    invoice_number: int,
    total_amount: float,
    filepath: str,
) -> None:
    """
    Write a single-sheet tax invoice:
    - header block with employee identity, banking fields, invoice number and period
    - recipient block with the company address
    - table header, one row per item, trailing total row
    """
    wb = Workbook()
    ws = wb.active
    ws.title = f"Invoice {invoice_number}"

    # Employee block, invoice number and period on the right
    header = [
        (f"Name: {employee_display_name(employee)}", f"Invoice: {invoice_number}"),
        (f"ABN: {employee.abn}", f"Date: {start_date} to {end_date}"),
        (f"BSB: {employee.bsb}", None),
        (f"ACC: {employee.acc}", None),
        (f"Address: {employee.address}", None),
    ]
    for r, (left, right) in enumerate(header, start=1):
        ws.cell(r, 1).value = _text(left)
        if right is not None:
            ws.cell(r, DESCRIPTION_COL).value = _text(right)
            ws.cell(r, DESCRIPTION_COL).font = Font(bold=True)
    ws.cell(6, 6).value = "Tax Invoice"
    ws.cell(6, 6).font = Font(bold=True, size=14)

    # Recipient block
    r = COMPANY_INFO_START
    ws.cell(r, 1).value = _text(company.name)
    ws.cell(r, 1).font = Font(bold=True)
    ws.cell(r, 7).value = _text(company.address)
    ws.cell(r + 1, 1).value = _text(company.address)
    ws.cell(r + 2, 1).value = _text(company.city)
    ws.cell(r + 3, 1).value = _text(f"{company.state} {company.postcode}".strip())

    # Table
    for col, label in TABLE_HEADERS.items():
        ws.cell(TABLE_HEADER_ROW, col).value = label
    _style_header(ws, TABLE_HEADER_ROW)
    ws.freeze_panes = f"A{TABLE_BODY_START}"

    for i, item in enumerate(items):
        row = TABLE_BODY_START + i
        ws.cell(row, DATE_COL).value = _text(item.date)
        ws.cell(row, ROOM_COL).value = _text(item.room)
        ws.cell(row, DESCRIPTION_COL).value = _text(item.description)
        ws.cell(row, TIME_COL).value = _text(item.time)
        ws.cell(row, AMOUNT_COL).value = safe_float(item.amount)
        ws.cell(row, AMOUNT_COL).number_format = "0.00"

    total_row = TABLE_BODY_START + len(items)
    ws.cell(total_row, TIME_COL).value = "Total"
    ws.cell(total_row, TIME_COL).font = Font(bold=True)
    ws.cell(total_row, AMOUNT_COL).value = safe_float(total_amount)
    ws.cell(total_row, AMOUNT_COL).number_format = "0.00"
    ws.cell(total_row, AMOUNT_COL).font = Font(bold=True)

    _autosize_columns(ws)

    directory = os.path.dirname(filepath)
    if directory:
        os.makedirs(directory, exist_ok=True)
    wb.save(filepath)
