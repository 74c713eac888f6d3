import pytest

from school_portal.services.ranking import (
    assign_positions,
    compute_ranks,
    compute_ranks_for_classes,
    ordinal,
    ordinal_suffix,
)
from school_portal.stores.tables import RESULTS


def _result(rid: str, total: float, class_level: str = "JSS 1", term: str = "1st Term", session: str = "2024/2025"):
    return {
        "id": rid,
        "student_id": f"stu-{rid}",
        "class_level": class_level,
        "term": term,
        "session": session,
        "total_score": total,
    }


@pytest.mark.parametrize(
    ("n", "expected"),
    [(1, "st"), (2, "nd"), (3, "rd"), (4, "th"), (11, "th"), (12, "th"), (13, "th"), (100, "th")],
)
def test_ordinal_suffix(n: int, expected: str) -> None:
    assert ordinal_suffix(n) == expected


def test_ordinal_suffix_treats_twenty_first_as_th() -> None:
    # Report cards print "21th", "22th" and "23th"
    assert ordinal(21) == "21th"
    assert ordinal(22) == "22th"
    assert ordinal(23) == "23th"


def test_assign_positions_orders_by_total_desc() -> None:
    ranked = assign_positions([_result("a", 85), _result("b", 92), _result("c", 78)])
    assert [(r["id"], r["position"]) for r in ranked] == [("b", "1st"), ("a", "2nd"), ("c", "3rd")]
    assert {r["class_population"] for r in ranked} == {3}


def test_assign_positions_ties_keep_input_order_with_distinct_ranks() -> None:
    ranked = assign_positions([_result("a", 70), _result("b", 90), _result("c", 70), _result("d", 70)])
    assert [r["id"] for r in ranked] == ["b", "a", "c", "d"]
    assert [r["position"] for r in ranked] == ["1st", "2nd", "3rd", "4th"]


def test_assign_positions_does_not_mutate_input() -> None:
    records = [_result("a", 10)]
    assign_positions(records)
    assert "position" not in records[0]


@pytest.mark.asyncio
async def test_compute_ranks_writes_positions_back(accessor, remote, seed):
    await seed(
        RESULTS,
        [
            _result("a", 85),
            _result("b", 92),
            _result("c", 78),
            _result("x", 99, class_level="JSS 2"),
            _result("y", 99, term="2nd Term"),
        ],
    )

    ranked = await compute_ranks(accessor, "JSS 1", "1st Term", "2024/2025")
    assert [r["id"] for r in ranked] == ["b", "a", "c"]

    by_id = {r["id"]: r for r in remote.tables[RESULTS]}
    assert by_id["b"]["position"] == "1st"
    assert by_id["a"]["position"] == "2nd"
    assert by_id["c"]["position"] == "3rd"
    assert by_id["a"]["class_population"] == 3
    # Other classes and terms are untouched
    assert "position" not in by_id["x"]
    assert "position" not in by_id["y"]


@pytest.mark.asyncio
async def test_compute_ranks_with_no_records_is_a_no_op(accessor, remote, seed):
    await seed(RESULTS, [_result("a", 50, class_level="JSS 3")])

    assert await compute_ranks(accessor, "JSS 1", "1st Term", "2024/2025") == []
    assert remote.upserts == []


@pytest.mark.asyncio
async def test_compute_ranks_positions_are_one_to_n(accessor, remote, seed):
    await seed(RESULTS, [_result(f"r{i}", (i * 37) % 101) for i in range(25)])

    ranked = await compute_ranks(accessor, "JSS 1", "1st Term", "2024/2025")
    numbers = [int(r["position"].rstrip("stndrh")) for r in ranked]
    assert numbers == list(range(1, 26))
    totals = [r["total_score"] for r in ranked]
    assert totals == sorted(totals, reverse=True)


@pytest.mark.asyncio
async def test_compute_ranks_for_classes_summarizes(accessor, seed):
    await seed(RESULTS, [_result("a", 50), _result("b", 60), _result("c", 70, class_level="JSS 2")])

    summary = await compute_ranks_for_classes(accessor, ["JSS 1", "JSS 2", "SSS 3"], "1st Term", "2024/2025")
    assert summary == {"JSS 1": 2, "JSS 2": 1, "SSS 3": 0}
