from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional, Protocol, Tuple, Union

import numpy as np
import pandas as pd

from core.config import DEFAULT_SETTINGS, DashboardSettings
from core.models import Dataset, Transaction

logger = logging.getLogger(__name__)

NUMERIC_COLUMNS = ("quantity", "revenue")
TEXT_COLUMNS = ("date", "product")
LEADING_NUMBER = r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"


class UploadLike(Protocol):
    name: str
    size: int


@dataclass(frozen=True)
class SourceFile:
    """In-memory upload; mirrors the parts of Streamlit's UploadedFile the ingestor reads."""

    name: str
    content: bytes = field(repr=False)

    @property
    def size(self) -> int:
        return len(self.content)

    def getvalue(self) -> bytes:
        return self.content

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "SourceFile":
        p = Path(path)
        return cls(name=p.name, content=p.read_bytes())


class IngestErrorKind(str, Enum):
    MISSING_FILE = "MissingFile"
    INVALID_EXTENSION = "InvalidExtension"
    FILE_TOO_LARGE = "FileTooLarge"
    MISSING_COLUMNS = "MissingColumns"
    EMPTY_FILE = "EmptyFile"
    PARSE_FAILURE = "ParseFailure"


@dataclass(frozen=True)
class IngestError:
    kind: IngestErrorKind
    message: str
    columns: Tuple[str, ...] = ()


@dataclass(frozen=True)
class IngestResult:
    dataset: Optional[Dataset] = None
    error: Optional[IngestError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.dataset is not None


# ---------------- Helpers ----------------
def numericize(df: pd.DataFrame, cols: Iterable[str]) -> pd.DataFrame:
    """Coerce columns to float from their leading number ("3 units" -> 3); anything else or non-finite becomes 0."""
    for col in cols:
        if col in df.columns:
            leading = df[col].fillna("").astype(str).str.extract(LEADING_NUMBER, expand=False)
            values = pd.to_numeric(leading, errors="coerce").astype(float)
            df[col] = values.replace([np.inf, -np.inf], np.nan).fillna(0.0)
    return df


def coerce_text(df: pd.DataFrame, cols: Iterable[str]) -> pd.DataFrame:
    for col in cols:
        if col in df.columns:
            df[col] = df[col].fillna("").astype(str)
    return df


def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def format_currency(value: object, decimals: int = 2) -> str:
    if value is None or pd.isna(value):
        return "N/A"
    return f"${float(value):,.{decimals}f}"


def format_number(value: object, decimals: int = 1) -> str:
    if value is None or pd.isna(value):
        return "N/A"
    return f"{float(value):,.{decimals}f}"


def read_content(file: UploadLike) -> bytes:
    getvalue = getattr(file, "getvalue", None)
    if callable(getvalue):
        return getvalue()
    return file.read()  # type: ignore[attr-defined]


def _fail(kind: IngestErrorKind, message: str, filename: Optional[str], columns: Tuple[str, ...] = ()) -> IngestResult:
    logger.warning("upload rejected (%s): %s [file=%s]", kind.value, message, filename)
    return IngestResult(error=IngestError(kind=kind, message=message, columns=columns))


def frame_to_dataset(df: pd.DataFrame) -> Dataset:
    df = df[["date", "product", "quantity", "revenue"]].copy()
    df = coerce_text(df, TEXT_COLUMNS)
    df = numericize(df, NUMERIC_COLUMNS)
    return tuple(
        Transaction(date=d, product=p, quantity=float(q), revenue=float(r))
        for d, p, q, r in df.itertuples(index=False, name=None)
    )


# ---------------- Loader ----------------
def ingest(file: Optional[UploadLike], settings: DashboardSettings = DEFAULT_SETTINGS) -> IngestResult:
    """Validate and parse an uploaded sales CSV.

    Checks run in order and stop at the first failure: presence, ``.csv``
    suffix, size cap, CSV syntax, required header columns, at least one row.
    Failures come back as ``IngestResult.error``; nothing is raised.
    """
    if file is None:
        return _fail(IngestErrorKind.MISSING_FILE, "Please select a file to upload.", None)

    name = str(getattr(file, "name", "") or "")
    if not name.endswith(".csv"):
        return _fail(IngestErrorKind.INVALID_EXTENSION, "Please upload a valid CSV file.", name)

    if int(file.size) > settings.max_upload_bytes:
        return _fail(
            IngestErrorKind.FILE_TOO_LARGE,
            f"File size must be less than {settings.max_upload_mb:g}MB.",
            name,
        )

    required = tuple(settings.required_columns)
    missing_msg = f"CSV must contain: {', '.join(required)}"
    try:
        raw = pd.read_csv(
            io.BytesIO(read_content(file)),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            encoding="utf-8-sig",
        )
    except pd.errors.EmptyDataError:
        # no header row at all
        return _fail(IngestErrorKind.MISSING_COLUMNS, missing_msg, name, required)
    except (pd.errors.ParserError, UnicodeDecodeError) as exc:
        logger.exception("csv parse failed [file=%s]", name)
        return _fail(IngestErrorKind.PARSE_FAILURE, f"Error parsing CSV: {exc}", name)

    headers = [str(c) for c in raw.columns]
    if not all(col in headers for col in required):
        return _fail(IngestErrorKind.MISSING_COLUMNS, missing_msg, name, required)

    if raw.empty:
        return _fail(IngestErrorKind.EMPTY_FILE, "CSV file is empty.", name)

    dataset = frame_to_dataset(raw)
    logger.info("loaded %d transactions from %s", len(dataset), name)
    return IngestResult(dataset=dataset)
