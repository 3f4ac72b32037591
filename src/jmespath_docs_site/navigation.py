"""Ordering of navigation pages and selection of a version's landing page."""

import unicodedata
from collections.abc import Callable, Sequence
from functools import cmp_to_key
from typing import Any

from jmespath_docs_site.models import NavigationPage

PREFERRED_DEFAULT_FILES = ("_index.html", "index.html", "spec.html", "readme.html")

Comparator = Callable[[NavigationPage, NavigationPage], int]


def compare_text(a: Any, b: Any) -> int:
    """Case-insensitive comparison with a case-sensitive tie-break."""
    a, b = str(a), str(b)
    key_a = unicodedata.normalize("NFKD", a).casefold()
    key_b = unicodedata.normalize("NFKD", b).casefold()
    if key_a != key_b:
        return -1 if key_a < key_b else 1
    return (a > b) - (a < b)


def compare_numbers(a: Any, b: Any) -> int:
    try:
        x, y = float(a), float(b)
    except (TypeError, ValueError):
        return 0
    return (x > y) - (x < y)


def make_comparator(get_value: Callable[[NavigationPage], Any], compare_values: Callable[[Any, Any], int]) -> Comparator:
    """Build a comparator that puts pages with a value before pages without one.

    Args:
        get_value: Reads the compared field from a page.
        compare_values: Orders two present values.

    Returns:
        Comparator over navigation pages.
    """

    def compare(a: NavigationPage, b: NavigationPage) -> int:
        value_a, value_b = get_value(a), get_value(b)
        if value_a is not None and value_b is None:
            return -1
        if value_a is None and value_b is not None:
            return 1
        if value_a is not None and value_b is not None:
            return compare_values(value_a, value_b)
        return 0

    return compare


compare_parent = make_comparator(lambda page: page.parent, compare_text)
compare_nav_order = make_comparator(lambda page: page.nav_order, compare_numbers)
compare_title = make_comparator(lambda page: page.title, compare_text)


def compare_nav_pages(a: NavigationPage, b: NavigationPage) -> int:
    """Order pages by parent, then navigation order, then title."""
    return compare_parent(a, b) or compare_nav_order(a, b) or compare_title(a, b)


def sort_nav_pages(pages: Sequence[NavigationPage]) -> list[NavigationPage]:
    """Return the pages in navigation order.

    This is a flat sort; children are not moved next to their parents.
    """
    return sorted(pages, key=cmp_to_key(compare_nav_pages))


def determine_default_file(pages: Sequence[NavigationPage]) -> str:
    """Pick the landing page of a version.

    Args:
        pages: Navigation pages in sorted order.

    Returns:
        The first page whose file matches a preferred name (case-insensitive),
        else the first page, else the first preferred name.
    """
    for preferred in PREFERRED_DEFAULT_FILES:
        for page in pages:
            if page.file.lower() == preferred:
                return page.file
    if pages:
        return pages[0].file
    return PREFERRED_DEFAULT_FILES[0]
