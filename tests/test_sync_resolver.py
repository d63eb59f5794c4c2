from __future__ import annotations

import pytest

from focusflow_backend.domain.sync_resolver import Decision, resolve


@pytest.mark.parametrize(
    "case",
    [
        {"name": "new entity creates", "existing": None, "incoming": 1, "deleted": False, "expect": Decision.CREATE},
        {"name": "new entity at version zero creates", "existing": None, "incoming": 0, "deleted": False, "expect": Decision.CREATE},
        {"name": "delete of unknown id acknowledges", "existing": None, "incoming": 3, "deleted": True, "expect": Decision.DELETE},
        {"name": "same version is a no-op", "existing": 4, "incoming": 4, "deleted": False, "expect": Decision.NO_CHANGE},
        {"name": "same version delete is a no-op", "existing": 4, "incoming": 4, "deleted": True, "expect": Decision.NO_CHANGE},
        {"name": "newer client version updates", "existing": 4, "incoming": 5, "deleted": False, "expect": Decision.UPDATE},
        {"name": "version jump still updates", "existing": 1, "incoming": 40, "deleted": False, "expect": Decision.UPDATE},
        {"name": "newer client delete deletes", "existing": 4, "incoming": 5, "deleted": True, "expect": Decision.DELETE},
        {"name": "stale edit conflicts", "existing": 5, "incoming": 4, "deleted": False, "expect": Decision.CONFLICT},
        {"name": "stale delete conflicts", "existing": 5, "incoming": 2, "deleted": True, "expect": Decision.CONFLICT},
    ],
    ids=lambda c: c["name"],
)
def test_resolve_matrix(case: dict[str, object]) -> None:
    decision = resolve(
        existing_version=case["existing"],  # pyright: ignore[reportArgumentType]
        incoming_version=case["incoming"],  # pyright: ignore[reportArgumentType]
        deleted=case["deleted"],  # pyright: ignore[reportArgumentType]
    )
    assert decision is case["expect"]


def test_resolve_is_deterministic() -> None:
    first = resolve(existing_version=2, incoming_version=7, deleted=False)
    for _ in range(5):
        assert resolve(existing_version=2, incoming_version=7, deleted=False) is first


def test_decision_values_are_stable_strings() -> None:
    assert Decision.NO_CHANGE.value == "no_change"
    assert Decision("conflict") is Decision.CONFLICT
