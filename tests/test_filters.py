from datetime import date

import pytest

from statement_analyzer.domain.filters import (
    apply_filters,
    apply_period_preset,
    collation_key,
    default_filters,
    filter_and_sort,
    has_active_filters,
    quick_preset,
    sort_transactions,
)
from statement_analyzer.models import (
    AccountLabel,
    FilterState,
    SortState,
    Transaction,
    TransactionAnnotation,
)
from statement_analyzer.services.annotations import InMemoryAnnotationStore

JOINT = AccountLabel.JOINT.value
PRIMARY = AccountLabel.PRIMARY.value


def _tx(date_op: str, label: str, amount: float, **extra) -> Transaction:
    return Transaction(operation_date=date_op, label=label, amount=amount, account_number="123", **extra)


@pytest.fixture
def transactions() -> list[Transaction]:
    return [
        _tx("2024-01-05", "Carrefour Market", -41.8, category_parent="Alimentation"),
        _tx("2024-01-10", "Loyer janvier", -900.0, category_parent="Logement", account_label=AccountLabel.JOINT),
        _tx("2024-01-15", "Salaire", 2500.0, category_parent="Revenus", comment="ACME payroll"),
        _tx("2024-02-01", "CB Fnac", -89.99, category_parent="Loisirs", supplier_found="Fnac Darty"),
        _tx("2024-02-03", "Cinema", -12.0, category_parent="Loisirs", account_label=AccountLabel.JOINT),
    ]


@pytest.fixture
def filters(transactions: list[Transaction]) -> FilterState:
    return default_filters(transactions)


def _labels(txs: list[Transaction]) -> list[str]:
    return [tx.label for tx in txs]


def test_default_filters_cover_collection(transactions, filters):
    assert filters.date_from == "2024-01-05"
    assert filters.date_to == "2024-02-03"
    assert filters.selected_accounts == [PRIMARY, JOINT]
    assert filters.category_mode == "all"
    assert apply_filters(transactions, filters) == transactions
    assert not has_active_filters(filters, transactions)


def test_default_filters_on_empty_collection():
    filters = default_filters([])
    assert filters.date_from == ""
    assert filters.date_to == ""
    assert filters.selected_accounts == []


def test_date_range_is_inclusive(transactions, filters):
    narrowed = filters.model_copy(update={"date_from": "2024-01-10", "date_to": "2024-02-01"})
    assert _labels(apply_filters(transactions, narrowed)) == ["Loyer janvier", "Salaire", "CB Fnac"]
    assert has_active_filters(narrowed, transactions)


def test_out_of_range_or_inverted_bounds_yield_empty(transactions, filters):
    future = filters.model_copy(update={"date_from": "2030-01-01", "date_to": "2030-12-31"})
    inverted = filters.model_copy(update={"date_from": "2024-02-01", "date_to": "2024-01-01"})
    assert apply_filters(transactions, future) == []
    assert apply_filters(transactions, inverted) == []


def test_account_membership(transactions, filters):
    joint_only = filters.model_copy(update={"selected_accounts": [JOINT]})
    assert _labels(apply_filters(transactions, joint_only)) == ["Loyer janvier", "Cinema"]
    assert apply_filters(transactions, filters.model_copy(update={"selected_accounts": []})) == []


def test_search_matches_label_supplier_comment_and_note(transactions, filters):
    store = InMemoryAnnotationStore()
    store.upsert(transactions[4].key, {"note": "Avec Julie"})

    def search(text: str) -> list[str]:
        state = filters.model_copy(update={"search_text": text})
        return _labels(apply_filters(transactions, state, annotations=store.get))

    assert search("carrefour") == ["Carrefour Market"]
    assert search("DARTY") == ["CB Fnac"]
    assert search("payroll") == ["Salaire"]
    assert search("julie") == ["Cinema"]
    assert search("") == _labels(transactions)
    assert search("nothing like this") == []


def test_category_pin_and_allow_list(transactions, filters):
    pinned = filters.model_copy(update={"selected_category_parent": "Loisirs"})
    assert _labels(apply_filters(transactions, pinned)) == ["CB Fnac", "Cinema"]

    allowed = filters.model_copy(update={"selected_category_parents": ["Logement", "Revenus"]})
    assert _labels(apply_filters(transactions, allowed)) == ["Loyer janvier", "Salaire"]

    both = allowed.model_copy(update={"selected_category_parent": "Loisirs"})
    assert apply_filters(transactions, both) == []


def test_category_modes_use_the_essential_predicate(transactions, filters):
    essentials = filters.model_copy(update={"category_mode": "essentials"})
    non_essentials = filters.model_copy(update={"category_mode": "nonEssentials"})

    assert _labels(apply_filters(transactions, essentials)) == ["Carrefour Market", "Loyer janvier"]
    assert _labels(apply_filters(transactions, non_essentials)) == ["Salaire", "CB Fnac", "Cinema"]

    def loisirs_only(category_parent: str) -> bool:
        return category_parent == "Loisirs"

    assert _labels(apply_filters(transactions, essentials, is_essential=loisirs_only)) == ["CB Fnac", "Cinema"]


def test_flagged_only(transactions, filters):
    store = InMemoryAnnotationStore({
        transactions[1].key: TransactionAnnotation(flagged=True),
        transactions[3].key: TransactionAnnotation(flagged=False, note="check"),
    })
    flagged = filters.model_copy(update={"show_flagged_only": True})

    assert _labels(apply_filters(transactions, flagged, annotations=store.get)) == ["Loyer janvier"]
    assert apply_filters(transactions, flagged) == []


def test_filtering_is_a_repeatable_subset(transactions, filters):
    state = filters.model_copy(update={"search_text": "c", "selected_accounts": [PRIMARY]})
    first = apply_filters(transactions, state)
    second = apply_filters(transactions, state)

    assert first == second
    assert all(tx in transactions for tx in first)
    assert len(transactions) == 5


def test_sort_by_amount(transactions):
    asc = sort_transactions(transactions, SortState(field="amount", direction="asc"))
    desc = sort_transactions(transactions, SortState(field="amount", direction="desc"))

    assert [tx.amount for tx in asc] == sorted(tx.amount for tx in transactions)
    assert [tx.amount for tx in desc] == sorted((tx.amount for tx in transactions), reverse=True)


def test_sort_is_stable_for_ties(transactions):
    by_category_asc = sort_transactions(transactions, SortState(field="category_parent", direction="asc"))
    by_category_desc = sort_transactions(transactions, SortState(field="category_parent", direction="desc"))

    assert _labels(by_category_asc)[2:4] == ["CB Fnac", "Cinema"]
    assert _labels(by_category_desc)[1:3] == ["CB Fnac", "Cinema"]


def test_sort_uses_collation_for_strings():
    txs = [_tx("2024-01-01", label, -1.0) for label in ["banane", "Éclair", "abricot", "eau", "Abricot"]]

    result = sort_transactions(txs, SortState(field="label", direction="asc"))

    assert _labels(result) == ["abricot", "Abricot", "banane", "eau", "Éclair"]


def test_sort_treats_missing_values_as_empty():
    txs = [
        _tx("2024-01-01", "a", -1.0, supplier_found="Zara"),
        _tx("2024-01-02", "b", -1.0),
        _tx("2024-01-03", "c", -1.0, account_balance=10.0),
        _tx("2024-01-04", "d", -1.0, account_balance=-5.0),
    ]

    by_supplier = sort_transactions(txs, SortState(field="supplier_found", direction="asc"))
    by_balance = sort_transactions(txs, SortState(field="account_balance", direction="asc"))

    assert _labels(by_supplier) == ["b", "c", "d", "a"]
    assert _labels(by_balance) == ["a", "b", "d", "c"]


def test_sort_does_not_mutate_input(transactions):
    before = list(transactions)
    sort_transactions(transactions, SortState(field="label", direction="asc"))
    assert transactions == before


def test_sort_state_accepts_wire_aliases():
    assert SortState(field="dateOp").field == "operation_date"
    with pytest.raises(ValueError):
        SortState(field="nope")


def test_sort_toggle():
    state = SortState()
    assert state.field == "operation_date"
    assert state.direction == "desc"

    flipped = state.toggle("operation_date")
    assert flipped.direction == "asc"
    assert flipped.toggle("operation_date").direction == "desc"

    changed = flipped.toggle("amount")
    assert changed.field == "amount"
    assert changed.direction == "desc"


def test_filter_and_sort_default_is_newest_first(transactions, filters):
    result = filter_and_sort(transactions, filters, SortState())
    assert [tx.operation_date for tx in result] == sorted((tx.operation_date for tx in transactions), reverse=True)


def test_collation_key_orders_case_after_base():
    assert collation_key("a") < collation_key("A") < collation_key("b")


def test_period_presets_clamp_to_data(transactions, filters):
    this_month = apply_period_preset(filters, "thisMonth", transactions, today=date(2024, 2, 20))
    assert this_month.period_preset == "thisMonth"
    assert (this_month.date_from, this_month.date_to) == ("2024-02-01", "2024-02-03")

    last_month = apply_period_preset(filters, "lastMonth", transactions, today=date(2024, 2, 20))
    assert (last_month.date_from, last_month.date_to) == ("2024-01-05", "2024-01-31")

    custom = apply_period_preset(last_month, "custom", transactions)
    assert custom.period_preset == "custom"
    assert (custom.date_from, custom.date_to) == ("2024-01-05", "2024-01-31")


def test_last_month_wraps_year(transactions, filters):
    state = apply_period_preset(filters, "lastMonth", [], today=date(2024, 1, 10))
    assert (state.date_from, state.date_to) == ("2023-12-01", "2023-12-31")


def test_quick_preset(transactions, filters):
    state = quick_preset(filters, "thisMonth", JOINT, "nonEssentials", transactions, today=date(2024, 2, 10))
    assert state.selected_accounts == [JOINT]
    assert state.category_mode == "nonEssentials"
    assert _labels(apply_filters(transactions, state)) == ["Cinema"]

    primary_only = [tx for tx in transactions if tx.account_label is AccountLabel.PRIMARY]
    fallback = quick_preset(filters, "thisMonth", JOINT, "essentials", primary_only, today=date(2024, 2, 10))
    assert fallback.selected_accounts == [PRIMARY]
