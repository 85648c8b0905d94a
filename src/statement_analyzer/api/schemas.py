from typing import Any

from pydantic import Field

from statement_analyzer.models import (
    CamelModel,
    CategoryMode,
    FilterState,
    PeriodPreset,
    SortState,
    Totals,
    Transaction,
)


class IngestRequest(CamelModel):
    rows: list[Any]


class QueryRequest(CamelModel):
    filters: FilterState | None = None
    sort: SortState = Field(default_factory=SortState)


class QueryResponse(CamelModel):
    transactions: list[Transaction]
    shown: int
    total: int
    totals: Totals
    active_filters: bool


class SummaryRequest(CamelModel):
    filters: FilterState | None = None


class PresetRequest(CamelModel):
    filters: FilterState | None = None
    preset: PeriodPreset
    account: str | None = None
    category_mode: CategoryMode | None = None


class AnnotationUpdate(CamelModel):
    flagged: bool | None = None
    note: str | None = None


class EssentialUpdate(CamelModel):
    essential: bool


class EssentialsResponse(CamelModel):
    builtin: list[str]
    custom: list[str]
