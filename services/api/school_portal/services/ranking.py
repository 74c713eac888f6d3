"""Class ranking service.

Ranking logic for one (class, term, session):
1. Collect every result record for the tuple
2. Stable sort by total_score DESC
3. Assign sequential ordinal positions (ties keep arrival order, no shared ranks)
4. Write position + class_population back onto every record

Ordinal suffixes special-case exactly 1, 2 and 3. 11/12/13 come out as "th",
but so do 21/22/23 ("21th"); report cards have always printed it this way.
"""

import logging
from collections.abc import Iterable
from typing import Any

from school_portal.services.sync import TableAccessor
from school_portal.stores.tables import RESULTS

logger = logging.getLogger("uvicorn.error")

_SUFFIXES = {1: "st", 2: "nd", 3: "rd"}


def ordinal_suffix(n: int) -> str:
    """Suffix for a rank number: "st", "nd", "rd" or "th"."""
    return _SUFFIXES.get(n, "th")


def ordinal(n: int) -> str:
    """Rank label such as "1st" or "4th"."""
    return f"{n}{ordinal_suffix(n)}"


def _total(record: dict[str, Any]) -> float:
    try:
        return float(record.get("total_score") or 0)
    except (TypeError, ValueError):
        return 0.0


def assign_positions(records: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    """Rank records by total score.

    Args:
        records: Result records sharing one (class, term, session).

    Returns:
        New dicts in rank order, each with `position` and `class_population` set.
    """
    # sorted() is stable with reverse=True, so equal totals keep input order
    ordered = sorted(records, key=_total, reverse=True)
    population = len(ordered)
    return [
        {**record, "position": ordinal(rank), "class_population": population}
        for rank, record in enumerate(ordered, start=1)
    ]


def matches(record: dict[str, Any], class_level: str, term: str, session: str) -> bool:
    return (
        record.get("class_level") == class_level
        and record.get("term") == term
        and record.get("session") == session
    )


async def compute_ranks(
    accessor: TableAccessor,
    class_level: str,
    term: str,
    session: str,
) -> list[dict[str, Any]]:
    """Rank one class for a term and persist positions.

    Returns:
        The ranked records, or an empty list when nothing matches.
    """
    rows = await accessor.fetch(RESULTS)
    selected = [r for r in rows if matches(r, class_level, term, session)]
    if not selected:
        return []

    ranked = assign_positions(selected)
    for record in ranked:
        await accessor.write(
            RESULTS,
            {"id": record["id"], "position": record["position"], "class_population": record["class_population"]},
        )

    logger.info(
        f"[ranking] class={class_level} term={term} session={session} population={len(ranked)}"
    )
    return ranked


async def compute_ranks_for_classes(
    accessor: TableAccessor,
    classes: Iterable[str],
    term: str,
    session: str,
) -> dict[str, int]:
    """Run the ranking pass for every class.

    Returns:
        Mapping of class name to number of ranked records.
    """
    summary: dict[str, int] = {}
    for class_level in classes:
        ranked = await compute_ranks(accessor, class_level, term, session)
        summary[class_level] = len(ranked)
    return summary
