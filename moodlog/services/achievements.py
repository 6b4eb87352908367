"""
Achievement rule engine.

evaluate() is pure: given the entry snapshot, the unlock set and the
cumulative used-factor set, it returns the catalog ids whose condition now
holds and which are not unlocked yet. Rules are independent; re-evaluating
an unlocked achievement is a no-op, so running the engine twice on the
same state returns nothing the second time.

AchievementService wraps it with the side effects, run under the user's
lock after every committed entry:
  1. load unlock state (local cache ∪ remote store)
  2. evaluate
  3. persist the grown set (local first; the remote write is
     fire-and-forget)
  4. emit one achievement_unlocked notification per new id

The catalog (moodlog/core/catalog.json) supplies ids, thresholds and
factor names; see moodlog.core.catalog for the rule categories.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from moodlog.core.catalog import AchievementDefinition, Catalog, get_catalog
from moodlog.services.locks import user_lock
from moodlog.services.notifications import Notifier
from moodlog.services.records import MoodRecord
from moodlog.services.stores import (
    EntryStore,
    RemoteUnlockStore,
    UnlockStateRepository,
    UsedFactorStore,
    local_unlock_cache,
)
from moodlog.services.streaks import current_streak

logger = logging.getLogger("moodlog.achievements")


# ---------------------------------------------------------------------------
# Mood buckets
# ---------------------------------------------------------------------------

class MoodBucket:
    VERY_LOW  = "very_low"     # [0, 2)
    LOW       = "low"          # [2, 4)
    NEUTRAL   = "neutral"      # [4, 6)
    HIGH      = "high"         # [6, 8)
    VERY_HIGH = "very_high"    # [8, 10]


def mood_bucket(level: float) -> str:
    if level < 2:
        return MoodBucket.VERY_LOW
    if level < 4:
        return MoodBucket.LOW
    if level < 6:
        return MoodBucket.NEUTRAL
    if level < 8:
        return MoodBucket.HIGH
    return MoodBucket.VERY_HIGH


# ---------------------------------------------------------------------------
# Facts the rules read
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AchievementFacts:
    total_entries: int
    streak: int
    used_factors: frozenset[str]
    mood_buckets: frozenset[str]
    note_count: int


def collect_facts(
    records: list[MoodRecord],
    used_factors: Optional[Iterable[str]] = None,
) -> AchievementFacts:
    """`used_factors` is unioned with every factor recorded in `records`."""
    used = set(used_factors or ())
    for record in records:
        used.update(record.factors.keys())
    return AchievementFacts(
        total_entries=len(records),
        streak=current_streak(records),
        used_factors=frozenset(used),
        mood_buckets=frozenset(mood_bucket(r.mood_level) for r in records),
        note_count=sum(1 for r in records if r.has_note),
    )


def rule_satisfied(
    definition: AchievementDefinition,
    facts: AchievementFacts,
    catalog: Catalog,
) -> bool:
    rule = definition.rule
    if rule == "first_log":
        return facts.total_entries == 1
    if rule == "streak":
        return facts.streak >= definition.threshold
    if rule == "factor_use":
        return definition.factor in facts.used_factors
    if rule == "factor_sampler":
        return bool(catalog.factors) and set(catalog.factors) <= facts.used_factors
    if rule == "mood_variety":
        return len(facts.mood_buckets) >= definition.threshold
    if rule == "entry_count":
        return facts.total_entries >= definition.threshold
    if rule == "note_count":
        return facts.note_count >= definition.threshold
    return False


def evaluate(
    records: list[MoodRecord],
    unlocked: Iterable[str],
    used_factors: Optional[Iterable[str]] = None,
    catalog: Optional[Catalog] = None,
) -> list[str]:
    """Ids newly satisfied and not already in `unlocked`, in catalog order."""
    catalog = catalog or get_catalog()
    already = set(unlocked)
    facts = collect_facts(records, used_factors)
    return [
        d.id for d in catalog.achievements
        if d.id not in already and rule_satisfied(d, facts, catalog)
    ]


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

@dataclass
class EvaluationResult:
    newly_unlocked: list[AchievementDefinition] = field(default_factory=list)
    unlocked: set[str] = field(default_factory=set)


@dataclass(frozen=True)
class AchievementStatus:
    definition: AchievementDefinition
    unlocked: bool


class AchievementService:
    def __init__(
        self,
        db: Session,
        notifier: Notifier,
        catalog: Optional[Catalog] = None,
        unlock_state: Optional[UnlockStateRepository] = None,
    ):
        self.db = db
        self.notifier = notifier
        self.catalog = catalog or get_catalog()
        self.unlock_state = unlock_state or UnlockStateRepository(
            local_unlock_cache, RemoteUnlockStore(db)
        )
        self.entries = EntryStore(db)
        self.used_factors = UsedFactorStore(db)

    def unlocked_ids(self, user_id: str) -> set[str]:
        return self.unlock_state.load(user_id)

    def statuses(self, user_id: str) -> list[AchievementStatus]:
        unlocked = self.unlocked_ids(user_id)
        return [
            AchievementStatus(definition=d, unlocked=d.id in unlocked)
            for d in self.catalog.achievements
        ]

    def evaluate_and_unlock(
        self,
        user_id: str,
        records: Optional[list[MoodRecord]] = None,
    ) -> EvaluationResult:
        """Run the rule engine for one user. Serialized per user."""
        with user_lock(user_id):
            snapshot = records if records is not None else self.entries.list_entries(user_id)
            unlocked = self.unlock_state.load(user_id)
            used = self.used_factors.add(
                user_id, {name for r in snapshot for name in r.factors}
            )
            new_ids = evaluate(snapshot, unlocked, used_factors=used, catalog=self.catalog)
            if not new_ids:
                return EvaluationResult(unlocked=unlocked)

            unlocked |= set(new_ids)
            self.unlock_state.save(user_id, unlocked)

            result = EvaluationResult(unlocked=unlocked)
            for achievement_id in new_ids:
                definition = self.catalog.get(achievement_id)
                result.newly_unlocked.append(definition)
                logger.info("User %s unlocked %s", user_id, achievement_id)
                self.notifier.achievement_unlocked(user_id, definition)
            return result
