"""Summary figures over a filtered view.

Everything here is recomputed from the view on each call. Annotations can
change between calls, so the view itself is not stable enough to cache.
"""

from __future__ import annotations

from collections.abc import Sequence

from statement_analyzer.domain.categories import is_builtin_essential
from statement_analyzer.domain.filters import EssentialPredicate
from statement_analyzer.models import (
    CategoryAmount,
    EssentialsSplit,
    Summary,
    Totals,
    Transaction,
)


def compute_totals(transactions: Sequence[Transaction]) -> Totals:
    expenses = sum((abs(tx.amount) for tx in transactions if tx.amount < 0), 0.0)
    income = sum((tx.amount for tx in transactions if tx.amount >= 0), 0.0)
    return Totals(expenses=expenses, income=income, net=income - expenses)


def totals_by_account(transactions: Sequence[Transaction]) -> dict[str, Totals]:
    groups: dict[str, list[Transaction]] = {}
    for tx in transactions:
        groups.setdefault(tx.account_label.value, []).append(tx)
    return {account: compute_totals(txs) for account, txs in groups.items()}


def essentials_split(
    transactions: Sequence[Transaction],
    is_essential: EssentialPredicate | None = None,
) -> EssentialsSplit:
    essential_check = is_essential or is_builtin_essential
    essential = 0.0
    non_essential = 0.0
    for tx in transactions:
        if tx.amount >= 0:
            continue
        if essential_check(tx.category_parent):
            essential += abs(tx.amount)
        else:
            non_essential += abs(tx.amount)
    return EssentialsSplit(essential=essential, non_essential=non_essential)


def _ranked(amounts: dict[str, float]) -> list[CategoryAmount]:
    ranked = sorted(amounts.items(), key=lambda item: item[1], reverse=True)
    return [CategoryAmount(category_parent=name, amount=amount) for name, amount in ranked]


def category_breakdown(
    transactions: Sequence[Transaction],
) -> tuple[list[CategoryAmount], list[CategoryAmount]]:
    """Expenses and income per category parent, largest first."""
    expenses: dict[str, float] = {}
    income: dict[str, float] = {}
    for tx in transactions:
        if tx.amount < 0:
            expenses[tx.category_parent] = expenses.get(tx.category_parent, 0.0) + abs(tx.amount)
        else:
            income[tx.category_parent] = income.get(tx.category_parent, 0.0) + tx.amount
    return _ranked(expenses), _ranked(income)


def summarize(
    transactions: Sequence[Transaction],
    is_essential: EssentialPredicate | None = None,
) -> Summary:
    expenses_by_category, income_by_category = category_breakdown(transactions)
    return Summary(
        count=len(transactions),
        totals=compute_totals(transactions),
        by_account=totals_by_account(transactions),
        essentials=essentials_split(transactions, is_essential),
        expenses_by_category=expenses_by_category,
        income_by_category=income_by_category,
    )
