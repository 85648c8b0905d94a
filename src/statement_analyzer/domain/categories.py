ESSENTIAL_CATEGORIES: frozenset[str] = frozenset({
    "Alimentation",
    "Logement",
    "Santé",
    "Voyages & Transports",
    "Carburant",
    "Assurances",
    "Impôts",
    "Services publics",
})


def is_builtin_essential(category_parent: str) -> bool:
    return category_parent in ESSENTIAL_CATEGORIES
