"""
Product import/export as .xlsx workbooks.

One product per row, header row first. `images` is a comma separated list
of URLs, boolean columns accept true/false/yes/no/1/0.
"""
from io import BytesIO
from typing import BinaryIO, List, Optional, Tuple

from openpyxl import Workbook, load_workbook

PRODUCT_COLUMNS = [
    "name",
    "description",
    "price",
    "originalPrice",
    "category",
    "subcategory",
    "fabric",
    "color",
    "occasion",
    "pattern",
    "workType",
    "blousePiece",
    "sareeLength",
    "stockQuantity",
    "inStock",
    "images",
    "rating",
    "reviewCount",
    "isNewArrival",
    "isBestseller",
    "isTrending",
]

BOOL_COLUMNS = {"blousePiece", "inStock", "isNewArrival", "isBestseller", "isTrending"}


class SpreadsheetError(ValueError):
    pass


def _to_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    text = str(value).strip().lower()
    if text in ("true", "yes", "y", "1"):
        return True
    if text in ("false", "no", "n", "0", ""):
        return False
    raise SpreadsheetError(f"not a boolean: {value!r}")


def _cell_to_field(column: str, value):
    if column in BOOL_COLUMNS:
        return _to_bool(value)
    if column == "images":
        return [part.strip() for part in str(value).split(",") if part.strip()]
    if isinstance(value, str):
        return value.strip()
    return value


def read_products(stream: BinaryIO) -> List[Tuple[int, Optional[dict], Optional[str]]]:
    """Return (row_number, fields, error) triples.

    Empty cells are left out of fields. A row whose cells cannot be converted
    comes back with fields None and the conversion error.
    """
    try:
        workbook = load_workbook(stream, read_only=True, data_only=True)
    except Exception as exc:
        raise SpreadsheetError(f"Unreadable workbook: {exc}")

    sheet = workbook.active
    rows = sheet.iter_rows(values_only=True)
    header = next(rows, None)
    if not header:
        raise SpreadsheetError("Workbook is empty")
    columns = [str(h).strip() if h is not None else "" for h in header]
    unknown = [c for c in columns if c and c not in PRODUCT_COLUMNS]
    if unknown:
        raise SpreadsheetError(f"Unknown columns: {', '.join(unknown)}")

    out = []
    for row_number, row in enumerate(rows, start=2):
        if row is None or all(v is None or v == "" for v in row):
            continue
        fields = {}
        try:
            for column, value in zip(columns, row):
                if not column or value is None or value == "":
                    continue
                fields[column] = _cell_to_field(column, value)
        except SpreadsheetError as exc:
            out.append((row_number, None, f"{column}: {exc}"))
            continue
        out.append((row_number, fields, None))
    workbook.close()
    return out


def write_products(products: List[dict]) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Products"
    sheet.append(PRODUCT_COLUMNS)
    for product in products:
        row = []
        for column in PRODUCT_COLUMNS:
            value = product.get(column)
            if column == "images":
                value = ", ".join(value or [])
            row.append(value)
        sheet.append(row)
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
