"""XLSX exports.

Builds the wishlist and user-list workbooks with openpyxl and returns them
as bytes ready to stream to the client.
"""

from collections.abc import Sequence
from datetime import date, datetime, timezone
from io import BytesIO

import openpyxl
from openpyxl.styles import Font

from finessee.catalog.models import Product
from finessee.infrastructure.models import User

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

BRAND_NAME = "Vmake Finessee"

WISHLIST_HEADERS = [
    "No.",
    "Code",
    "Name",
    "Category",
    "Material",
    "Dimensions (cm)",
    "Finish",
]

USER_HEADERS = [
    "No.",
    "Name",
    "WhatsApp Number",
    "City",
    "Admin",
    "Primary Admin",
    "Registered On",
]

# Row where the wishlist column headers start (1-indexed); rows above hold
# the title block.
WISHLIST_HEADER_ROW = 5


def _to_bytes(workbook: openpyxl.Workbook) -> bytes:
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def export_filename(kind: str, owner: str | None = None) -> str:
    """Build a download filename such as ``Vmake_Finessee_Wishlist_Jane_Doe_1700000000.xlsx``."""
    parts = [BRAND_NAME.replace(" ", "_"), kind]
    if owner:
        parts.append("_".join(owner.split()))
    parts.append(str(int(datetime.now(timezone.utc).timestamp())))
    return "_".join(parts) + ".xlsx"


# ===============================
# WISHLIST EXPORT
# ===============================
def build_wishlist_workbook(
    customer_name: str,
    products: Sequence[Product],
    generated_on: date | None = None,
) -> bytes:
    """Build a customer's wishlist workbook.

    Layout: three merged title rows (brand, customer, generation date), a
    blank row, the column headers on row 5, then one row per product.

    Args:
        customer_name: Name shown in the title block.
        products: Wishlist products in display order.
        generated_on: Date shown in the title block (defaults to today).

    Returns:
        XLSX file content.
    """
    generated_on = generated_on or datetime.now(timezone.utc).date()

    workbook = openpyxl.Workbook()
    sheet = workbook.active
    sheet.title = "Wishlist"

    title_rows = [
        f"{BRAND_NAME} - Customer Wishlist",
        f"Customer: {customer_name}",
        f"Generated on: {generated_on.isoformat()}",
    ]
    last_column = len(WISHLIST_HEADERS) - 1
    for row_number, text in enumerate(title_rows, start=1):
        sheet.cell(row=row_number, column=1, value=text)
        sheet.merge_cells(
            start_row=row_number,
            start_column=1,
            end_row=row_number,
            end_column=last_column,
        )
    sheet.cell(row=1, column=1).font = Font(bold=True, size=14)

    for column, header in enumerate(WISHLIST_HEADERS, start=1):
        sheet.cell(row=WISHLIST_HEADER_ROW, column=column, value=header).font = Font(bold=True)

    for index, product in enumerate(products, start=1):
        row = WISHLIST_HEADER_ROW + index
        values = [
            index,
            product.code,
            product.name,
            product.category,
            product.material or "Not specified",
            product.dimensions_label,
            product.finish,
        ]
        for column, value in enumerate(values, start=1):
            sheet.cell(row=row, column=column, value=value)

    return _to_bytes(workbook)


# ===============================
# USERS EXPORT
# ===============================
def build_users_workbook(users: Sequence[User]) -> bytes:
    """Build the user-list workbook. Password hashes are never exported.

    Args:
        users: Users in display order.

    Returns:
        XLSX file content.
    """
    workbook = openpyxl.Workbook()
    sheet = workbook.active
    sheet.title = "Users"

    sheet.append(USER_HEADERS)
    for index, user in enumerate(users, start=1):
        sheet.append([
            index,
            user.name,
            user.whatsapp_number,
            user.city or "",
            _yes_no(user.is_admin),
            _yes_no(user.is_primary_admin),
            user.created_at.date().isoformat() if user.created_at else "",
        ])

    return _to_bytes(workbook)
