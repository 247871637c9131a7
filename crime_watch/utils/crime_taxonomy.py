"""Display labels and groupings for the category slugs used by data.police.uk."""

from __future__ import annotations

from typing import Dict, Iterable, Optional, Tuple


# Slugs as returned in the `category` field of crimes-street records.
CATEGORY_LABELS: Dict[str, str] = {
    "anti-social-behaviour": "Anti-social behaviour",
    "bicycle-theft": "Bicycle theft",
    "burglary": "Burglary",
    "criminal-damage-arson": "Criminal damage and arson",
    "drugs": "Drugs",
    "other-theft": "Other theft",
    "possession-of-weapons": "Possession of weapons",
    "public-order": "Public order",
    "robbery": "Robbery",
    "shoplifting": "Shoplifting",
    "theft-from-the-person": "Theft from the person",
    "vehicle-crime": "Vehicle crime",
    "violent-crime": "Violence and sexual offences",
    "other-crime": "Other crime",
}

CATEGORY_GROUPS: Dict[str, str] = {
    # Violent crime
    "violent-crime": "Violent",
    "robbery": "Violent",
    "possession-of-weapons": "Violent",

    # Property crime
    "burglary": "Property",
    "bicycle-theft": "Property",
    "other-theft": "Property",
    "shoplifting": "Property",
    "theft-from-the-person": "Property",
    "vehicle-crime": "Property",
    "criminal-damage-arson": "Property",

    # Narcotics
    "drugs": "Narcotics",

    # Quality-of-life / disorder
    "anti-social-behaviour": "Disorder",
    "public-order": "Disorder",
}


def category_label(slug: Optional[str]) -> str:
    """Human-readable label for a category slug; unknown slugs are capitalised."""
    if not slug:
        return "Unclassified"
    key = slug.strip().lower()
    if key in CATEGORY_LABELS:
        return CATEGORY_LABELS[key]
    return key.replace("-", " ").capitalize()


def category_group(slug: Optional[str]) -> str:
    """Map a category slug to a broader analytical group."""
    if not slug:
        return "Unclassified"
    return CATEGORY_GROUPS.get(slug.strip().lower(), "Other")


def expand_groups(slugs: Iterable[str]) -> Dict[str, Tuple[str, ...]]:
    """Group category slugs by their assigned group."""
    grouped: Dict[str, set] = {}
    for slug in slugs:
        grouped.setdefault(category_group(slug), set()).add(slug)
    # Sorted tuples for deterministic presentation
    return {group: tuple(sorted(values)) for group, values in grouped.items()}


__all__ = ["category_label", "category_group", "expand_groups", "CATEGORY_LABELS", "CATEGORY_GROUPS"]
