"""Product import from spreadsheets.

Parses uploaded CSV or XLSX files in memory and bulk-creates the valid
rows. Header names are trimmed and lower-cased; common aliases for name
and code are accepted.
"""

import csv
import io
import zipfile
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Any

import openpyxl
import structlog
from openpyxl.utils.exceptions import InvalidFileException

from finessee.catalog.models import Product
from finessee.domain.exceptions import ValidationError
from finessee.infrastructure.storage import Repositories

logger = structlog.get_logger()

NAME_KEYS = ("name", "product_name", "productname", "product name")
CODE_KEYS = ("code", "product_code", "productcode", "product code", "sku")
IMAGE_KEYS = ("imageurl", "image_url", "image url", "image")

SUPPORTED_EXTENSIONS = (".csv", ".xlsx")


@dataclass
class ImportRow:
    """One parsed spreadsheet row."""

    name: str
    code: str
    category: str
    length: float
    breadth: float
    height: float
    finish: str
    material: str = ""
    image_url: str | None = None
    description: str | None = None

    @property
    def is_valid(self) -> bool:
        """Whether the row can become a product."""
        required = (self.name, self.code, self.category, self.finish)
        return all(required) and min(self.length, self.breadth, self.height) > 0

    def to_product(self) -> Product:
        return Product(
            name=self.name,
            code=self.code,
            category=self.category,
            length=self.length,
            breadth=self.breadth,
            height=self.height,
            finish=self.finish,
            material=self.material,
            image_url=self.image_url or None,
            image_urls=[],
            description=self.description or None,
        )


@dataclass
class ImportBatch:
    """Parsed upload."""

    rows: list[ImportRow] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.rows)

    @property
    def valid_rows(self) -> list[ImportRow]:
        return [row for row in self.rows if row.is_valid]


@dataclass
class ImportResult:
    """Outcome of an import."""

    imported: int
    total: int
    skipped: int
    success: bool = True


# ============================================================================
# Parsing
# ============================================================================


def _clean(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _to_float(value: Any) -> float:
    try:
        return float(_clean(value) or 0)
    except ValueError:
        return 0.0


def _first(
    row: dict[str, Any],
    keys: tuple[str, ...],
    fallback_fragments: tuple[str, ...] = (),
) -> str:
    for key in keys:
        value = _clean(row.get(key))
        if value:
            return value
    for key, value in row.items():
        if any(fragment in key for fragment in fallback_fragments) and _clean(value):
            return _clean(value)
    return ""


def _normalize_keys(row: dict[Any, Any]) -> dict[str, Any]:
    return {
        _clean(key).lstrip("\ufeff").strip().lower(): value
        for key, value in row.items()
        if key is not None
    }


def row_from_mapping(raw: dict[Any, Any]) -> ImportRow:
    """Build an ImportRow from a header-keyed mapping."""
    row = _normalize_keys(raw)
    return ImportRow(
        name=_first(row, NAME_KEYS, ("name",)),
        code=_first(row, CODE_KEYS, ("code", "sku")),
        category=_clean(row.get("category")),
        length=_to_float(row.get("length")),
        breadth=_to_float(row.get("breadth")),
        height=_to_float(row.get("height")),
        finish=_clean(row.get("finish")),
        material=_clean(row.get("material")),
        image_url=_first(row, IMAGE_KEYS) or None,
        description=_clean(row.get("description")) or None,
    )


def parse_csv(content: bytes) -> list[ImportRow]:
    """Parse CSV content, tolerating a UTF-8 byte order mark."""
    text = content.decode("utf-8-sig")
    reader = csv.DictReader(io.StringIO(text))
    return [row_from_mapping(raw) for raw in reader]


def parse_xlsx(content: bytes) -> list[ImportRow]:
    """Parse the first sheet of an XLSX workbook; its first row holds headers."""
    workbook = openpyxl.load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    try:
        sheet = workbook.worksheets[0]
        rows = sheet.iter_rows(values_only=True)
        headers = next(rows, None)
        if headers is None:
            return []
        parsed = []
        for values in rows:
            if values is None or all(v is None for v in values):
                continue
            parsed.append(row_from_mapping(dict(zip(headers, values))))
        return parsed
    finally:
        workbook.close()


def parse_upload(filename: str, content: bytes) -> ImportBatch:
    """Parse an uploaded spreadsheet.

    Args:
        filename: Original file name, used to pick the format.
        content: File bytes.

    Returns:
        Parsed batch, including invalid rows.

    Raises:
        ValidationError: If the format is unsupported or the file is unreadable.
    """
    extension = PurePath(filename or "").suffix.lower()
    if extension not in SUPPORTED_EXTENSIONS:
        raise ValidationError(
            "Unsupported file format. Please upload XLSX or CSV file.",
            details={"filename": filename},
        )

    try:
        if extension == ".csv":
            rows = parse_csv(content)
        else:
            rows = parse_xlsx(content)
    except (
        UnicodeDecodeError,
        csv.Error,
        zipfile.BadZipFile,
        InvalidFileException,
        KeyError,
        ValueError,
    ) as e:
        raise ValidationError(
            "Could not read uploaded file",
            details={"filename": filename, "reason": str(e)},
        ) from e

    return ImportBatch(rows=rows)


# ============================================================================
# Import Service
# ============================================================================


class ImportService:
    """Imports product spreadsheets into the catalog."""

    def __init__(self, repos: Repositories, request_id: str | None = None) -> None:
        self.repos = repos
        self.request_id = request_id

    async def import_products(self, filename: str, content: bytes) -> ImportResult:
        """Parse an upload and create its valid products.

        Invalid rows, codes that already exist and codes repeated within the
        file are skipped.

        Args:
            filename: Original file name.
            content: File bytes.

        Returns:
            Import counts.
        """
        batch = parse_upload(filename, content)
        existing = await self.repos.products.find_codes(row.code for row in batch.valid_rows)

        seen: set[str] = set(existing)
        products = []
        for row in batch.valid_rows:
            if row.code in seen:
                continue
            seen.add(row.code)
            products.append(row.to_product())

        created = await self.repos.products.bulk_create(products) if products else []
        result = ImportResult(
            imported=len(created),
            total=batch.total,
            skipped=batch.total - len(created),
        )
        logger.info(
            "Products imported",
            filename=filename,
            imported=result.imported,
            total=result.total,
            skipped=result.skipped,
            request_id=self.request_id,
        )
        return result
