from __future__ import annotations

import calendar
import unicodedata
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any

from statement_analyzer.domain.categories import is_builtin_essential
from statement_analyzer.models import (
    NUMERIC_FIELDS,
    CategoryMode,
    FilterState,
    PeriodPreset,
    SortState,
    Transaction,
    TransactionAnnotation,
)

AnnotationLookup = Callable[[str], TransactionAnnotation | None]
EssentialPredicate = Callable[[str], bool]


def _no_annotations(key: str) -> TransactionAnnotation | None:
    return None


@dataclass(frozen=True)
class CollectionBounds:
    min_date: str
    max_date: str
    accounts: list[str]


def collection_bounds(transactions: Sequence[Transaction]) -> CollectionBounds:
    dates = sorted(tx.operation_date for tx in transactions)
    accounts: list[str] = []
    for tx in transactions:
        label = tx.account_label.value
        if label not in accounts:
            accounts.append(label)
    return CollectionBounds(
        min_date=dates[0] if dates else "",
        max_date=dates[-1] if dates else "",
        accounts=accounts,
    )


def default_filters(transactions: Sequence[Transaction]) -> FilterState:
    bounds = collection_bounds(transactions)
    return FilterState(
        date_from=bounds.min_date,
        date_to=bounds.max_date,
        selected_accounts=bounds.accounts,
        period_preset="custom",
    )


def has_active_filters(filters: FilterState, transactions: Sequence[Transaction]) -> bool:
    bounds = collection_bounds(transactions)
    return (
        filters.date_from != bounds.min_date
        or filters.date_to != bounds.max_date
        or len(filters.selected_accounts) != len(bounds.accounts)
        or filters.search_text != ""
        or filters.selected_category_parent is not None
    )


def _month_span(preset: PeriodPreset, today: date) -> tuple[str, str]:
    year, month = today.year, today.month
    if preset == "lastMonth":
        year, month = (year - 1, 12) if month == 1 else (year, month - 1)
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1).isoformat(), date(year, month, last_day).isoformat()


def _clamped_period(
    preset: PeriodPreset,
    transactions: Sequence[Transaction],
    today: date | None,
) -> tuple[str, str]:
    start, end = _month_span(preset, today or date.today())
    bounds = collection_bounds(transactions)
    if bounds.min_date:
        start = max(start, bounds.min_date)
    if bounds.max_date:
        end = min(end, bounds.max_date)
    return start, end


def apply_period_preset(
    filters: FilterState,
    preset: PeriodPreset,
    transactions: Sequence[Transaction],
    *,
    today: date | None = None,
) -> FilterState:
    """Switch to a month preset, clamped to the dates present in the collection."""
    if preset == "custom":
        return filters.model_copy(update={"period_preset": "custom"})
    date_from, date_to = _clamped_period(preset, transactions, today)
    return filters.model_copy(update={
        "period_preset": preset,
        "date_from": date_from,
        "date_to": date_to,
    })


def quick_preset(
    filters: FilterState,
    preset: PeriodPreset,
    account: str,
    category_mode: CategoryMode,
    transactions: Sequence[Transaction],
    *,
    today: date | None = None,
) -> FilterState:
    accounts = collection_bounds(transactions).accounts
    selected = [account] if account in accounts else accounts
    updated = apply_period_preset(filters, preset, transactions, today=today)
    return updated.model_copy(update={
        "selected_accounts": selected,
        "category_mode": category_mode,
    })


def _search_fields(tx: Transaction) -> tuple[str, ...]:
    return (tx.label, tx.supplier_found or "", tx.comment)


def _matches(
    tx: Transaction,
    filters: FilterState,
    query: str,
    lookup: AnnotationLookup,
    is_essential: EssentialPredicate,
) -> bool:
    if tx.operation_date < filters.date_from or tx.operation_date > filters.date_to:
        return False

    if tx.account_label.value not in filters.selected_accounts:
        return False

    if filters.selected_category_parent and tx.category_parent != filters.selected_category_parent:
        return False

    if filters.selected_category_parents and tx.category_parent not in filters.selected_category_parents:
        return False

    if filters.category_mode == "essentials" and not is_essential(tx.category_parent):
        return False
    if filters.category_mode == "nonEssentials" and is_essential(tx.category_parent):
        return False

    annotation: TransactionAnnotation | None = None
    if query or filters.show_flagged_only:
        annotation = lookup(tx.key)

    if query:
        haystack = _search_fields(tx) + ((annotation.note,) if annotation else ())
        if not any(query in field.casefold() for field in haystack):
            return False

    if filters.show_flagged_only and not (annotation and annotation.flagged):
        return False

    return True


def apply_filters(
    transactions: Sequence[Transaction],
    filters: FilterState,
    *,
    annotations: AnnotationLookup | None = None,
    is_essential: EssentialPredicate | None = None,
) -> list[Transaction]:
    lookup = annotations or _no_annotations
    essential = is_essential or is_builtin_essential
    query = filters.search_text.casefold()
    return [tx for tx in transactions if _matches(tx, filters, query, lookup, essential)]


def collation_key(value: str) -> tuple[str, str, str]:
    """Accent and case insensitive first, then accents, then lower case before upper."""
    decomposed = unicodedata.normalize("NFKD", value)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), value.casefold(), value.swapcase()


def _sort_value(tx: Transaction, field: str) -> Any:
    value = getattr(tx, field)
    if field in NUMERIC_FIELDS:
        return (0, 0.0) if value is None else (1, value)
    if isinstance(value, Enum):
        value = value.value
    return collation_key(value if value is not None else "")


def sort_transactions(transactions: Sequence[Transaction], sort: SortState) -> list[Transaction]:
    if sort.field not in Transaction.model_fields:
        return list(transactions)
    return sorted(
        transactions,
        key=lambda tx: _sort_value(tx, sort.field),
        reverse=sort.direction == "desc",
    )


def filter_and_sort(
    transactions: Sequence[Transaction],
    filters: FilterState,
    sort: SortState,
    *,
    annotations: AnnotationLookup | None = None,
    is_essential: EssentialPredicate | None = None,
) -> list[Transaction]:
    filtered = apply_filters(
        transactions,
        filters,
        annotations=annotations,
        is_essential=is_essential,
    )
    return sort_transactions(filtered, sort)
