"""Workbook helpers shared by the tests."""

import io

import openpyxl
from starlette.datastructures import UploadFile


def xlsx_bytes(rows):
    """Build an in-memory xlsx whose first row is a header."""
    wb = openpyxl.Workbook()
    ws = wb.active
    for row in rows:
        ws.append(list(row))
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def make_upload(content, filename="users.xlsx"):
    return UploadFile(file=io.BytesIO(content), filename=filename)


def load_sheet(content):
    """Load exported xlsx bytes and return the active worksheet."""
    return openpyxl.load_workbook(io.BytesIO(content)).active
