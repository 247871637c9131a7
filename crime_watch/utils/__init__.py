from .crime_taxonomy import category_label, category_group, expand_groups, CATEGORY_LABELS

__all__ = [
    "category_label",
    "category_group",
    "expand_groups",
    "CATEGORY_LABELS",
]
