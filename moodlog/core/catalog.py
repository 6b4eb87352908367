"""
Declarative catalog: factor vocabulary + achievement definitions.

The catalog is data, not code. The packaged `catalog.json` holds the 8
factor names and the 15 achievements; CATALOG_PATH may point at another
file, and tests build a `Catalog` directly with a shorter list.

Rule categories understood by the achievement engine
----------------------------------------------------
  first_log       total entries == 1
  streak          current streak >= params.threshold
  factor_use      params.factor appeared in any entry (either sign)
  factor_sampler  every vocabulary factor appeared at least once
  mood_variety    distinct mood buckets >= params.threshold
  entry_count     total entries >= params.threshold
  note_count      entries with a non-blank note >= params.threshold
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from moodlog.core.config import settings
from moodlog.core.errors import CatalogError

DEFAULT_CATALOG_PATH = Path(__file__).with_name("catalog.json")

RULE_CATEGORIES = frozenset({
    "first_log",
    "streak",
    "factor_use",
    "factor_sampler",
    "mood_variety",
    "entry_count",
    "note_count",
})

_THRESHOLD_RULES = frozenset({"streak", "mood_variety", "entry_count", "note_count"})


class AchievementDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1, max_length=64)
    title: str
    description: str
    icon: str = ""
    rule: str
    params: dict[str, Any] = Field(default_factory=dict)

    @property
    def threshold(self) -> int:
        return int(self.params.get("threshold", 0))

    @property
    def factor(self) -> Optional[str]:
        return self.params.get("factor")


class Catalog(BaseModel):
    model_config = ConfigDict(frozen=True)

    factors: tuple[str, ...]
    achievements: tuple[AchievementDefinition, ...]

    def get(self, achievement_id: str) -> Optional[AchievementDefinition]:
        for definition in self.achievements:
            if definition.id == achievement_id:
                return definition
        return None

    @property
    def ids(self) -> list[str]:
        return [d.id for d in self.achievements]


def validate_catalog(catalog: Catalog, source: str | None = None) -> Catalog:
    """Reject unknown rule categories, duplicate ids and dangling factor names."""
    seen: set[str] = set()
    if len(set(catalog.factors)) != len(catalog.factors):
        raise CatalogError("Factor vocabulary contains duplicates.", source)
    for definition in catalog.achievements:
        if definition.id in seen:
            raise CatalogError(f"Duplicate achievement id '{definition.id}'.", source)
        seen.add(definition.id)
        if definition.rule not in RULE_CATEGORIES:
            raise CatalogError(
                f"Achievement '{definition.id}' uses unknown rule '{definition.rule}'.", source
            )
        if definition.rule in _THRESHOLD_RULES and definition.threshold <= 0:
            raise CatalogError(
                f"Achievement '{definition.id}' needs a positive 'threshold' param.", source
            )
        if definition.rule == "factor_use" and definition.factor not in catalog.factors:
            raise CatalogError(
                f"Achievement '{definition.id}' references unknown factor "
                f"'{definition.factor}'.",
                source,
            )
    return catalog


def load_catalog(path: Optional[str | Path] = None) -> Catalog:
    """Read and validate a catalog JSON file (defaults to the packaged one)."""
    source = Path(path) if path else DEFAULT_CATALOG_PATH
    try:
        raw = source.read_text(encoding="utf-8")
    except OSError as exc:
        raise CatalogError(f"Cannot read catalog: {exc}", str(source)) from exc
    try:
        catalog = Catalog.model_validate_json(raw)
    except ValidationError as exc:
        raise CatalogError(f"Invalid catalog: {exc.error_count()} error(s).", str(source)) from exc
    return validate_catalog(catalog, str(source))


@lru_cache(maxsize=1)
def get_catalog() -> Catalog:
    return load_catalog(settings.CATALOG_PATH)
