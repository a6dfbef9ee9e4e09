"""
Rules Loader — builds the ExclusionRuleSet for a run and keeps a
time-limited cached snapshot for long-running (scheduled) processes.
"""

import sqlite3
import time
from typing import Callable, Optional

import yaml

from config.settings import settings
from models.rules import ExclusionRuleSet
from tools.file_handler import load_exclusion_rules
from tools.job_store import load_excluded_companies


def load_rule_set(
    rules_path: str = None,
    db_path: str = None,
    include_store: bool = True,
    boundary_max_length: int = None,
    min_salary: float = None,
) -> ExclusionRuleSet:
    """
    Static YAML catalogues, optionally merged with the excluded_companies table.

    A missing or unreadable table only drops the merge; the static rules
    are always returned.
    """
    rules = load_exclusion_rules(
        rules_path or settings.exclusion_rules_path,
        boundary_max_length=boundary_max_length,
        min_salary=min_salary,
    )
    print(
        f"[Rules] Loaded {len(rules.excluded_companies)} excluded companies, "
        f"{len(rules.fast_food_chains)} fast food chains, "
        f"{len(rules.restaurant_chains)} restaurant chains"
    )

    if include_store:
        try:
            rows = load_excluded_companies(db_path)
        except sqlite3.Error as e:
            print(f"[Rules] ⚠️  Could not read excluded companies table: {e}")
            rows = []
        if rows:
            rules = rules.merged_with(rows)
            print(f"[Rules] Merged {len(rows)} companies from the excluded companies table")

    return rules


class ExclusionRulesCache:
    """
    Holds the current rule snapshot and rebuilds it once the TTL expires.

    A refresh builds a complete new ExclusionRuleSet and then replaces the
    (rules, loaded_at) pair in one assignment, so a reader gets either the
    old snapshot or the new one. If a refresh fails and an older snapshot
    exists, the older one stays in use.
    """

    def __init__(
        self,
        loader: Callable[[], ExclusionRuleSet],
        ttl_seconds: float = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._loader = loader
        self._ttl = settings.rules_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._snapshot: Optional[tuple[ExclusionRuleSet, float]] = None

    def _expired(self, loaded_at: float) -> bool:
        return self._clock() - loaded_at >= self._ttl

    def get(self) -> ExclusionRuleSet:
        """Current snapshot, reloading first if it is missing or stale."""
        snapshot = self._snapshot
        if snapshot is None or self._expired(snapshot[1]):
            return self.refresh()
        return snapshot[0]

    def refresh(self) -> ExclusionRuleSet:
        """Build a new snapshot now and swap it in."""
        previous = self._snapshot
        try:
            rules = self._loader()
        except (OSError, ValueError, yaml.YAMLError) as e:
            if previous is None:
                raise
            print(f"[Rules] ⚠️  Refresh failed, keeping previous rules: {e}")
            return previous[0]

        self._snapshot = (rules, self._clock())
        return rules
