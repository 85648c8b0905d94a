from collections.abc import Sequence
from typing import Any

from statement_analyzer.domain.aggregates import summarize
from statement_analyzer.domain.filters import default_filters, filter_and_sort
from statement_analyzer.domain.ingestion import ingest_csv, ingest_rows
from statement_analyzer.logger import get_logger
from statement_analyzer.models import (
    FilterState,
    IngestionResult,
    SortState,
    Summary,
    Transaction,
    TransactionAnnotation,
)
from statement_analyzer.services.annotations import AnnotationStore, InMemoryAnnotationStore
from statement_analyzer.services.essentials import EssentialCategories

logger = get_logger(__name__)


class StatementWorkspace:
    """
    The session's transaction collection plus the stores consulted when
    filtering it. Each ingestion replaces the collection wholesale.
    """

    def __init__(
        self,
        annotations: AnnotationStore | None = None,
        essentials: EssentialCategories | None = None,
    ) -> None:
        self.annotations = annotations or InMemoryAnnotationStore()
        self.essentials = essentials or EssentialCategories()
        self.transactions: list[Transaction] = []

    def _replace(self, result: IngestionResult) -> IngestionResult:
        self.transactions = list(result.transactions)
        logger.info("[WORKSPACE] Collection now holds %d transactions.", len(self.transactions))
        return result

    def load_rows(self, rows: Sequence[Any]) -> IngestionResult:
        return self._replace(ingest_rows(rows))

    def load_csv(self, data: bytes | str) -> IngestionResult:
        return self._replace(ingest_csv(data))

    def default_filters(self) -> FilterState:
        return default_filters(self.transactions)

    def view(self, filters: FilterState, sort: SortState | None = None) -> list[Transaction]:
        result = filter_and_sort(
            self.transactions,
            filters,
            sort or SortState(),
            annotations=self.annotations.get,
            is_essential=self.essentials.is_essential,
        )
        logger.debug("[FILTER] %d of %d transactions shown.", len(result), len(self.transactions))
        return result

    def summary(self, filters: FilterState) -> Summary:
        return summarize(self.view(filters), self.essentials.is_essential)

    def annotate(self, key: str, partial: dict[str, Any]) -> TransactionAnnotation:
        updated = self.annotations.upsert(key, partial)
        logger.info("[ANNOTATE] %s -> flagged=%s", key, updated.flagged)
        return updated
