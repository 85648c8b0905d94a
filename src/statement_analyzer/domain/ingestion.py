from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from statement_analyzer.domain.parsers import parse_amount, parse_date
from statement_analyzer.logger import get_logger
from statement_analyzer.models import (
    UNCATEGORIZED,
    AccountLabel,
    IngestionResult,
    ProcessingError,
    Transaction,
)

logger = get_logger(__name__)

CSV_DELIMITERS = ",;\t|"


class IngestionError(Exception):
    """The batch as a whole cannot be ingested."""


class CsvFormatError(IngestionError):
    def __init__(self, message: str, details: list[dict[str, Any]]) -> None:
        super().__init__(message)
        self.details = details


def _text_or(value: Any, default: str) -> str:
    return value if value else default


def _account_number(value: Any) -> str:
    # The browser keyed a missing number as "undefined"; here it stays empty.
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_transaction(row: Mapping[str, Any]) -> Transaction:
    if not isinstance(row, Mapping):
        raise TypeError(f"Expected a mapping row, got {type(row).__name__}")

    balance_raw = row.get("accountbalance")
    return Transaction(
        operation_date=parse_date(row.get("dateOp")),
        value_date=parse_date(row.get("dateVal")),
        label=_text_or(row.get("label"), ""),
        category=_text_or(row.get("category"), ""),
        category_parent=_text_or(row.get("categoryParent"), UNCATEGORIZED),
        supplier_found=row.get("supplierFound") or None,
        amount=parse_amount(row.get("amount")),
        comment=_text_or(row.get("comment"), ""),
        account_number=_account_number(row.get("accountNum")),
        account_label=AccountLabel.coerce(row.get("accountLabel")),
        account_balance=parse_amount(balance_raw) if balance_raw else None,
    )


def ingest_rows(rows: Sequence[Any]) -> IngestionResult:
    """Normalise raw export rows and drop duplicates, keeping first occurrences."""
    if isinstance(rows, (str, bytes, Mapping)) or not isinstance(rows, Iterable):
        raise IngestionError(f"Expected a sequence of rows, got {type(rows).__name__}")
    rows = list(rows)

    transactions: list[Transaction] = []
    seen_keys: set[str] = set()
    errors: list[ProcessingError] = []

    for index, row in enumerate(rows):
        try:
            tx = build_transaction(row)
        except Exception as exc:
            logger.warning("[INGEST] Error processing row %d: %s", index, exc)
            errors.append(ProcessingError(row=row, error=str(exc) or type(exc).__name__))
            continue

        key = tx.key
        if key in seen_keys:
            logger.debug("[INGEST] Duplicate row %d skipped (key=%s)", index, key)
            continue
        seen_keys.add(key)
        transactions.append(tx)

    total = len(rows)
    duplicates = total - len(transactions) - len(errors)
    logger.info(
        "[INGEST] Processed %d rows: %d kept, %d duplicates, %d errors.",
        total,
        len(transactions),
        duplicates,
        len(errors),
    )
    return IngestionResult(
        transactions=transactions,
        total_processed=total,
        duplicates_skipped=duplicates,
        processing_errors=errors or None,
    )


def _sniff_delimiter(sample: str) -> str:
    try:
        return csv.Sniffer().sniff(sample, delimiters=CSV_DELIMITERS).delimiter
    except csv.Error:
        return ","


def _is_blank(record: list[str]) -> bool:
    return not any(field.strip() for field in record)


def parse_csv(text: str) -> list[dict[str, str]]:
    """Read a header-first CSV export into row dicts, skipping blank records."""
    sample = [line for line in text.splitlines() if line.strip()][:20]
    if not sample:
        return []

    delimiter = _sniff_delimiter("\n".join(sample))
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter, strict=True)

    details: list[dict[str, Any]] = []
    rows: list[dict[str, str]] = []
    header: list[str] | None = None
    try:
        for record in reader:
            if _is_blank(record):
                continue
            if header is None:
                header = [name.strip() for name in record]
                continue
            if len(record) != len(header):
                details.append({
                    "row": reader.line_num,
                    "message": f"Expected {len(header)} fields but parsed {len(record)}",
                })
                continue
            rows.append(dict(zip(header, record)))
    except csv.Error as exc:
        details.append({"row": reader.line_num, "message": str(exc)})

    if details:
        raise CsvFormatError("CSV parsing error", details)
    return rows


def ingest_csv(data: bytes | str) -> IngestionResult:
    if isinstance(data, bytes):
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise IngestionError(f"File is not valid UTF-8: {exc}") from exc
    else:
        text = data.lstrip("\ufeff")
    return ingest_rows(parse_csv(text))
