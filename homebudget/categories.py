from typing import Dict, Iterable, Iterator, List, Tuple

from homebudget.filters import category_key
from homebudget.domain import Transaction


def category_breakdown(trans: Iterable[Transaction]) -> List[Tuple[str, float]]:
    """(category, total) pairs in the order categories first appear.

    Blank or missing categories are grouped under "Uncategorized".
    """
    totals_by_category: Dict[str, float] = {}

    for t in trans:
        key = category_key(t.category)
        totals_by_category[key] = totals_by_category.get(key, 0.0) + t.amount

    return list(totals_by_category.items())


def top_categories(trans: Iterable[Transaction], k: int = 5) -> Iterator[Tuple[str, float]]:
    # sorted() is stable, so equal totals keep first-seen order
    ordered = sorted(category_breakdown(trans), key=lambda item: item[1], reverse=True)

    for name, total in ordered[: max(0, k)]:
        yield name, total
