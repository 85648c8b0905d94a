import json
import os
from abc import ABC, abstractmethod
from typing import Any

from pydantic import ValidationError

from statement_analyzer.logger import get_logger
from statement_analyzer.models import TransactionAnnotation

logger = get_logger(__name__)


class AnnotationStore(ABC):
    """Per-transaction flag/note storage keyed by the transaction identity key."""

    @abstractmethod
    def get(self, key: str) -> TransactionAnnotation | None:
        pass

    @abstractmethod
    def upsert(self, key: str, partial: dict[str, Any]) -> TransactionAnnotation:
        """Merge ``partial`` onto the stored (or default) annotation and return it."""
        pass

    @abstractmethod
    def all(self) -> dict[str, TransactionAnnotation]:
        pass


def _merge(existing: TransactionAnnotation | None, partial: dict[str, Any]) -> TransactionAnnotation:
    base = existing or TransactionAnnotation()
    values = {k: v for k, v in partial.items() if k in TransactionAnnotation.model_fields}
    return TransactionAnnotation.model_validate({**base.model_dump(), **values})


class InMemoryAnnotationStore(AnnotationStore):
    def __init__(self, initial: dict[str, TransactionAnnotation] | None = None):
        self.annotations: dict[str, TransactionAnnotation] = dict(initial or {})

    def get(self, key: str) -> TransactionAnnotation | None:
        return self.annotations.get(key)

    def upsert(self, key: str, partial: dict[str, Any]) -> TransactionAnnotation:
        updated = _merge(self.annotations.get(key), partial)
        self.annotations[key] = updated
        return updated

    def all(self) -> dict[str, TransactionAnnotation]:
        return dict(self.annotations)


class JsonAnnotationStore(InMemoryAnnotationStore):
    """Annotations kept in a JSON object on disk, rewritten on every update."""

    def __init__(self, data_path: str = "annotations.json"):
        super().__init__()
        self.data_path = data_path
        self.load()

    def load(self):
        self.annotations = {}
        if not os.path.exists(self.data_path):
            return
        try:
            with open(self.data_path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("[ANNOTATE] Could not read %s (%s); starting empty.", self.data_path, e)
            return
        if not isinstance(raw, dict):
            logger.warning("[ANNOTATE] %s does not hold an object; starting empty.", self.data_path)
            return
        for key, value in raw.items():
            if not isinstance(value, dict):
                logger.warning("[ANNOTATE] Skipping malformed entry %s.", key)
                continue
            try:
                self.annotations[key] = _merge(None, value)
            except ValidationError as e:
                logger.warning("[ANNOTATE] Skipping invalid entry %s: %s", key, e.errors()[0]["msg"])

    def save(self):
        payload = {key: ann.model_dump() for key, ann in self.annotations.items()}
        with open(self.data_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)

    def upsert(self, key: str, partial: dict[str, Any]) -> TransactionAnnotation:
        updated = super().upsert(key, partial)
        self.save()
        return updated
