"""
Snapshot types and stored-row decoding.

The analytics, streak, achievement and review code only ever sees these
plain dataclasses (no ORM, no Pydantic), materialised once per request
from the store. Rows that cannot be decoded are skipped and logged; one
bad record never aborts a whole fetch.

Public API
----------
decode_entries(rows)  -> list[MoodRecord]     (bad rows skipped)
decode_reviews(rows)  -> list[ReviewRecord]   (bad rows skipped)
entry_from_row(row)   -> MoodRecord           (raises RecordDecodeError)
review_from_row(row)  -> ReviewRecord         (raises RecordDecodeError)
encode_factors / encode_summary / encode_highlights -> str (JSON)
"""
from __future__ import annotations

import enum
import json
import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Iterable, Optional

from moodlog.models.mood_entry import MoodEntry
from moodlog.models.weekly_review import WeeklyReview

logger = logging.getLogger("moodlog.records")


class Impact(str, enum.Enum):
    positive = "positive"
    negative = "negative"

    @classmethod
    def parse(cls, raw: Any) -> "Impact":
        # Unknown stored values decode as positive.
        if isinstance(raw, str) and raw.lower() == "negative":
            return cls.negative
        return cls.positive


class RecordDecodeError(ValueError):
    pass


# ---------------------------------------------------------------------------
# Snapshot types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MoodRecord:
    date: datetime
    mood_level: float
    factors: dict[str, Impact] = field(default_factory=dict)
    note: str = ""
    photo_asset_ref: Optional[str] = None
    id: Optional[int] = None    # None until persisted

    @property
    def day(self) -> date:
        return self.date.date()

    @property
    def has_note(self) -> bool:
        return bool(self.note.strip())


@dataclass(frozen=True)
class FactorImpactPair:
    factor: str
    impact: Impact


@dataclass(frozen=True)
class MoodSummary:
    average_mood: float
    highest_mood: float
    lowest_mood: float
    best_day: datetime
    most_frequent_factors: list[FactorImpactPair] = field(default_factory=list)


@dataclass
class ReviewRecord:
    id: str
    week_start: datetime
    week_end: datetime
    mood_summary: MoodSummary
    highlights: list[MoodRecord] = field(default_factory=list)
    photo_refs: list[str] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)
    viewed: bool = False

    def contains(self, moment: datetime) -> bool:
        return self.week_start <= moment < self.week_end


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

def encode_factors(factors: dict[str, Impact]) -> str:
    return json.dumps({name: Impact(v).value for name, v in factors.items()}, sort_keys=True)


def _record_dict(r: MoodRecord) -> dict[str, Any]:
    return {
        "id": r.id,
        "date": r.date.isoformat(),
        "mood_level": r.mood_level,
        "factors": {k: v.value for k, v in r.factors.items()},
        "note": r.note,
        "photo_asset_ref": r.photo_asset_ref,
    }


def encode_highlights(highlights: list[MoodRecord]) -> str:
    return json.dumps([_record_dict(r) for r in highlights], ensure_ascii=False)


def encode_summary(summary: MoodSummary) -> str:
    return json.dumps({
        "average_mood": summary.average_mood,
        "highest_mood": summary.highest_mood,
        "lowest_mood": summary.lowest_mood,
        "best_day": summary.best_day.isoformat(),
        "most_frequent_factors": [
            {"factor": p.factor, "impact": p.impact.value}
            for p in summary.most_frequent_factors
        ],
    })


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def _decode_factors(raw: Any) -> dict[str, Impact]:
    if isinstance(raw, str):
        try:
            raw = json.loads(raw) if raw else {}
        except ValueError as exc:
            raise RecordDecodeError(f"factors is not valid JSON: {exc}") from exc
    if not isinstance(raw, dict):
        raise RecordDecodeError("factors must be a mapping")
    return {str(name): Impact.parse(value) for name, value in raw.items()}


def _decode_level(raw: Any) -> float:
    try:
        level = float(raw)
    except (TypeError, ValueError) as exc:
        raise RecordDecodeError(f"mood level {raw!r} is not a number") from exc
    if math.isnan(level):
        raise RecordDecodeError("mood level is NaN")
    return level


def _decode_datetime(raw: Any) -> datetime:
    if isinstance(raw, datetime):
        return raw
    try:
        return datetime.fromisoformat(str(raw))
    except ValueError as exc:
        raise RecordDecodeError(f"bad timestamp {raw!r}") from exc


def _record_from_dict(d: dict[str, Any]) -> MoodRecord:
    if not isinstance(d, dict):
        raise RecordDecodeError(f"highlight must be a mapping, got {type(d).__name__}")
    try:
        return MoodRecord(
            id=d.get("id"),
            date=_decode_datetime(d["date"]),
            mood_level=_decode_level(d["mood_level"]),
            factors=_decode_factors(d.get("factors") or {}),
            note=d.get("note") or "",
            photo_asset_ref=d.get("photo_asset_ref"),
        )
    except KeyError as exc:
        raise RecordDecodeError(f"missing field {exc}") from exc


def entry_from_row(row: MoodEntry) -> MoodRecord:
    if row.logged_at is None:
        raise RecordDecodeError("entry has no date")
    return MoodRecord(
        id=row.id,
        date=row.logged_at,
        mood_level=_decode_level(row.mood_level),
        factors=_decode_factors(row.factors),
        note=row.note or "",
        photo_asset_ref=row.photo_asset_ref,
    )


def review_from_row(row: WeeklyReview) -> ReviewRecord:
    try:
        summary = json.loads(row.mood_summary)
        highlights = json.loads(row.highlights or "[]")
        photo_refs = json.loads(row.photo_refs or "[]")
        notes = json.loads(row.notes or "[]")
        highlight_records = [_record_from_dict(h) for h in highlights]
        mood_summary = MoodSummary(
            average_mood=_decode_level(summary["average_mood"]),
            highest_mood=_decode_level(summary["highest_mood"]),
            lowest_mood=_decode_level(summary["lowest_mood"]),
            best_day=_decode_datetime(summary["best_day"]),
            most_frequent_factors=[
                FactorImpactPair(factor=p["factor"], impact=Impact.parse(p["impact"]))
                for p in summary.get("most_frequent_factors", [])
            ],
        )
    except (ValueError, TypeError, KeyError, AttributeError) as exc:
        raise RecordDecodeError(f"review {row.id}: {exc}") from exc
    return ReviewRecord(
        id=row.id,
        week_start=row.week_start,
        week_end=row.week_end,
        mood_summary=mood_summary,
        highlights=highlight_records,
        photo_refs=[str(p) for p in photo_refs],
        notes=[str(n) for n in notes],
        viewed=bool(row.viewed),
    )


def decode_entries(rows: Iterable[MoodEntry]) -> list[MoodRecord]:
    records: list[MoodRecord] = []
    for row in rows:
        try:
            records.append(entry_from_row(row))
        except RecordDecodeError as exc:
            logger.warning("Skipping undecodable mood entry %s: %s", row.id, exc)
    return records


def decode_reviews(rows: Iterable[WeeklyReview]) -> list[ReviewRecord]:
    reviews: list[ReviewRecord] = []
    for row in rows:
        try:
            reviews.append(review_from_row(row))
        except RecordDecodeError as exc:
            logger.warning("Skipping undecodable weekly review %s: %s", row.id, exc)
    return reviews
