"""
Root conftest.py for the pgnode test suite.

Every test declares the responsibility it protects and how fast it must be:

    @pytest.mark.tier(1)
    @pytest.mark.tra("UseCase.PromotionCoordinator")
    class TestPromotion:
        ...

Collection fails when a test lacks exactly one of each marker. Each tier
carries a pytest-timeout budget (scaled by TIER_TIMEOUT_MULTIPLIER on slow
machines).

Set PGNODE_MARKER_ENFORCE=warn to report marker problems without failing
collection, or PGNODE_MARKER_ENFORCE=off to skip the checks.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from _pytest.config import Config
    from _pytest.nodes import Item


_anchors_key = pytest.StashKey[dict[str, tuple[int | None, str | None]]]()

# Responsibility anchors, e.g. "Adapter.HttpxClusterStatusStore"
VALID_TRA_PREFIXES = frozenset(
    [
        "Domain.Invariant.",
        "Domain.Policy.",
        "UseCase.",
        "Port.",
        "Adapter.",
    ]
)

# Seconds per tier. 0 means no limit.
TIER_TIMEOUTS: dict[int, float] = {
    1: 2.0,  # pure logic against fakes
    2: 30.0,  # property sweeps, threads, real sleeps
    3: 0,  # needs a running PostgreSQL
}

TIER_NAMES: dict[int, str] = {
    1: "fast",
    2: "standard",
    3: "engine",
}


def _enforce_mode() -> str:
    return os.environ.get("PGNODE_MARKER_ENFORCE", "strict")


def pytest_configure(config: Config) -> None:
    """Register the tier and TRA markers."""
    config.addinivalue_line(
        "markers",
        "tra(anchor): responsibility this test protects. Starts with one of: "
        + ", ".join(sorted(p.rstrip(".") for p in VALID_TRA_PREFIXES)),
    )
    config.addinivalue_line(
        "markers",
        "tier(level): 1=fast, 2=standard, 3=engine. Sets the test timeout.",
    )


def _get_tier(item: Item) -> int | None:
    for marker in item.iter_markers(name="tier"):
        if marker.args and marker.args[0] in TIER_TIMEOUTS:
            return marker.args[0]
    return None


def _marker_errors(item: Item) -> list[str]:
    """Problems with the tier and TRA markers of one test."""
    errors = []
    test_id = item.nodeid

    tra_markers = list(item.iter_markers(name="tra"))
    if len(tra_markers) != 1:
        errors.append(f"{test_id}: expected one @tra marker, found {len(tra_markers)}")
    else:
        anchor = tra_markers[0].args[0] if tra_markers[0].args else None
        if not isinstance(anchor, str) or not any(
            anchor.startswith(prefix) for prefix in VALID_TRA_PREFIXES
        ):
            errors.append(f"{test_id}: invalid TRA anchor {anchor!r}")

    tier_markers = list(item.iter_markers(name="tier"))
    if len(tier_markers) != 1:
        errors.append(
            f"{test_id}: expected one @tier marker, found {len(tier_markers)}"
        )
    elif _get_tier(item) is None:
        errors.append(f"{test_id}: tier must be one of {sorted(TIER_TIMEOUTS)}")

    return errors


def _apply_tier_timeouts(items: list[Item]) -> None:
    multiplier = float(os.environ.get("TIER_TIMEOUT_MULTIPLIER", "1.0"))

    for item in items:
        tier = _get_tier(item)
        if tier is None or any(item.iter_markers(name="timeout")):
            continue
        timeout = TIER_TIMEOUTS[tier]
        if timeout > 0:
            item.add_marker(pytest.mark.timeout(timeout * multiplier))


@pytest.hookimpl(tryfirst=True)
def pytest_collection_modifyitems(config: Config, items: list[Item]) -> None:
    """Check markers, then attach tier timeouts."""
    mode = _enforce_mode()
    if mode != "off":
        errors = [error for item in items for error in _marker_errors(item)]
        if errors and mode == "warn":
            print("\nTier/TRA marker warnings:")
            for error in errors:
                print(f"  {error}")
        elif errors:
            pytest.fail(
                "Tier/TRA marker errors:\n" + "\n".join(f"  - {e}" for e in errors),
                pytrace=False,
            )

    _apply_tier_timeouts(items)

    anchors: dict[str, tuple[int | None, str | None]] = {}
    for item in items:
        tra = item.get_closest_marker("tra")
        namespace = str(tra.args[0]).split(".")[0] if tra and tra.args else None
        anchors[item.nodeid] = (_get_tier(item), namespace)
    config.stash[_anchors_key] = anchors


def pytest_report_header(config: Config) -> str:
    return f"pgnode marker enforcement: {_enforce_mode()}"


def pytest_terminal_summary(
    terminalreporter: pytest.TerminalReporter, exitstatus: int, config: Config
) -> None:
    """Count executed tests per tier and TRA namespace."""
    anchors = config.stash.get(_anchors_key, {})
    by_tier: dict[int, int] = {}
    by_namespace: dict[str, int] = {}

    for outcome in ("passed", "failed"):
        for report in terminalreporter.stats.get(outcome, []):
            if getattr(report, "when", None) != "call":
                continue
            tier, namespace = anchors.get(report.nodeid, (None, None))
            if tier is not None:
                by_tier[tier] = by_tier.get(tier, 0) + 1
            if namespace is not None:
                by_namespace[namespace] = by_namespace.get(namespace, 0) + 1

    if not by_tier and not by_namespace:
        return

    terminalreporter.write_sep("=", "pgnode tier/TRA summary")
    for tier in sorted(by_tier):
        terminalreporter.write_line(
            f"  tier({tier}) [{TIER_NAMES[tier]}]: {by_tier[tier]}"
        )
    for namespace in sorted(by_namespace):
        terminalreporter.write_line(f"  {namespace}: {by_namespace[namespace]}")
