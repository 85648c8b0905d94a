from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from statement_analyzer.domain.keys import transaction_key

UNCATEGORIZED = "Non catégorisé"

PeriodPreset = Literal["thisMonth", "lastMonth", "custom"]
CategoryMode = Literal["all", "essentials", "nonEssentials"]
SortDirection = Literal["asc", "desc"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AccountLabel(str, Enum):
    PRIMARY = "BoursoBank"
    JOINT = "BoursoBank (joint)"

    @classmethod
    def coerce(cls, raw: Any) -> "AccountLabel":
        # Only the exact joint label is recognised; everything else is primary.
        if raw == cls.JOINT.value:
            return cls.JOINT
        return cls.PRIMARY


class Transaction(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    operation_date: str = Field(default="", alias="dateOp")
    value_date: str = Field(default="", alias="dateVal")
    label: str = ""
    category: str = ""
    category_parent: str = Field(default=UNCATEGORIZED, alias="categoryParent")
    supplier_found: str | None = Field(default=None, alias="supplierFound")
    amount: float = 0.0
    comment: str = ""
    account_number: str = Field(default="", alias="accountNum")
    account_label: AccountLabel = Field(default=AccountLabel.PRIMARY, alias="accountLabel")
    account_balance: float | None = Field(default=None, alias="accountbalance")

    @property
    def key(self) -> str:
        return transaction_key(self.operation_date, self.label, self.amount, self.account_number)


NUMERIC_FIELDS = frozenset({"amount", "account_balance"})

_FIELD_ALIASES = {
    (info.alias or name): name for name, info in Transaction.model_fields.items()
}


def resolve_field_name(name: str) -> str | None:
    """Map a wire alias (``dateOp``) or attribute name to the attribute name."""
    if name in Transaction.model_fields:
        return name
    return _FIELD_ALIASES.get(name)


class TransactionAnnotation(BaseModel):
    flagged: bool = False
    note: str = ""


class ProcessingError(BaseModel):
    row: Any
    error: str


class IngestionResult(CamelModel):
    transactions: list[Transaction]
    total_processed: int
    duplicates_skipped: int
    processing_errors: list[ProcessingError] | None = None


class FilterState(CamelModel):
    date_from: str = ""
    date_to: str = ""
    selected_accounts: list[str] = Field(default_factory=list)
    search_text: str = ""
    selected_category_parent: str | None = None
    period_preset: PeriodPreset = "custom"
    category_mode: CategoryMode = "all"
    selected_category_parents: list[str] = Field(default_factory=list)
    show_flagged_only: bool = False


class SortState(CamelModel):
    field: str = "operation_date"
    direction: SortDirection = "desc"

    @field_validator("field")
    @classmethod
    def _known_field(cls, value: str) -> str:
        resolved = resolve_field_name(value)
        if resolved is None:
            raise ValueError(f"Unknown sort field '{value}'")
        return resolved

    def toggle(self, field: str) -> "SortState":
        resolved = resolve_field_name(field) or field
        if resolved == self.field:
            return SortState(field=self.field, direction="asc" if self.direction == "desc" else "desc")
        return SortState(field=resolved, direction="desc")


class Totals(CamelModel):
    expenses: float = 0.0
    income: float = 0.0
    net: float = 0.0


class EssentialsSplit(CamelModel):
    essential: float = 0.0
    non_essential: float = 0.0


class CategoryAmount(CamelModel):
    category_parent: str
    amount: float


class Summary(CamelModel):
    count: int
    totals: Totals
    by_account: dict[str, Totals]
    essentials: EssentialsSplit
    expenses_by_category: list[CategoryAmount]
    income_by_category: list[CategoryAmount]
