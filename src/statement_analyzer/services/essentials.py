import json
import os
from collections.abc import Iterable

from statement_analyzer.domain.categories import ESSENTIAL_CATEGORIES
from statement_analyzer.logger import get_logger

logger = get_logger(__name__)


class EssentialCategories:
    """Built-in essential category parents plus a user-maintained custom set."""

    def __init__(self, data_path: str = "essentials.json", extra: Iterable[str] = ()):
        self.data_path = data_path
        self.base = ESSENTIAL_CATEGORIES | frozenset(extra)
        self.custom_categories: set[str] = set()
        self.load()

    def load(self):
        self.custom_categories = set()
        if not os.path.exists(self.data_path):
            return
        try:
            with open(self.data_path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("[ESSENTIALS] Could not read %s (%s); ignoring custom categories.", self.data_path, e)
            return
        if isinstance(raw, list):
            self.custom_categories = {str(item) for item in raw}

    def save(self):
        with open(self.data_path, "w", encoding="utf-8") as f:
            json.dump(sorted(self.custom_categories), f, indent=2, ensure_ascii=False)

    def is_essential(self, category_parent: str) -> bool:
        return category_parent in self.base or category_parent in self.custom_categories

    def mark(self, category_parent: str, flag: bool) -> None:
        if flag:
            self.custom_categories.add(category_parent)
        else:
            self.custom_categories.discard(category_parent)
        self.save()
        logger.info("[ESSENTIALS] '%s' marked %s.", category_parent, "essential" if flag else "non-essential")

    def custom(self) -> set[str]:
        return set(self.custom_categories)

    def all(self) -> set[str]:
        return set(self.base) | self.custom_categories
