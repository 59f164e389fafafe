"""Prompt cache with atomic full reloads.

The cache holds an immutable CacheSnapshot: a read-only name -> definition
mapping plus the statistics of the load that produced it. ``reload()`` builds
a complete new snapshot from a fresh directory load and publishes it with a
single reference assignment, so readers always see either the old or the new
snapshot, never a partially populated one. Reloads are serialised with a lock;
readers never take it.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from promptforge.prompts.loader import PromptLoader
from promptforge.prompts.models import LoadReport, LoadStats, PromptDefinition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheSnapshot:
    """An immutable view of the accepted definitions."""

    prompts: Mapping[str, PromptDefinition] = field(
        default_factory=lambda: MappingProxyType({})
    )
    stats: LoadStats = field(default_factory=LoadStats)

    @classmethod
    def from_report(cls, report: LoadReport) -> CacheSnapshot:
        prompts = {p.name: p for p in sorted(report.definitions, key=lambda p: p.name)}
        return cls(prompts=MappingProxyType(prompts), stats=report.stats)


def matches_keyword(prompt: PromptDefinition, keyword: str) -> bool:
    """Case-insensitive substring match across name, title, description and tags."""
    needle = keyword.lower()
    if needle in prompt.name.lower():
        return True
    if needle in prompt.title.lower():
        return True
    if needle in prompt.description.lower():
        return True
    return any(needle in tag.lower() for tag in prompt.tags)


class PromptCache:
    """Owned cache of accepted prompt definitions.

    Example usage:
        ```python
        cache = PromptCache()
        report = cache.reload("prompts/")
        prompt = cache.get("code-review")
        results = cache.search("review")
        ```
    """

    def __init__(self, loader: PromptLoader | None = None):
        self._loader = loader or PromptLoader()
        self._snapshot = CacheSnapshot()
        self._reload_lock = threading.Lock()

    def reload(self, directory: str | Path) -> LoadReport:
        """Rebuild the cache from a full scan of ``directory``.

        If loading raises, the previous snapshot stays live.
        """
        with self._reload_lock:
            report = self._loader.load_directory(directory)
            snapshot = CacheSnapshot.from_report(report)
            self._snapshot = snapshot
            logger.info(
                f"Prompt cache reloaded: {len(snapshot.prompts)} prompts "
                f"({report.stats.failed_loads} files rejected)"
            )
            return report

    def clear(self) -> None:
        """Drop every cached definition."""
        with self._reload_lock:
            self._snapshot = CacheSnapshot()
        logger.debug("Prompt cache cleared")

    def snapshot(self) -> CacheSnapshot:
        """Return the current snapshot; it never changes after being returned."""
        return self._snapshot

    @property
    def stats(self) -> LoadStats:
        return self._snapshot.stats

    def get(self, name: str) -> PromptDefinition | None:
        """Exact-match lookup by prompt name."""
        return self._snapshot.prompts.get(name)

    def list_all(self) -> list[PromptDefinition]:
        """All cached prompts, ordered by name."""
        return list(self._snapshot.prompts.values())

    def filter_by_category(self, category: str) -> list[PromptDefinition]:
        return [p for p in self.list_all() if p.category == category]

    def filter_by_tag(self, tag: str) -> list[PromptDefinition]:
        return [p for p in self.list_all() if tag in p.tags]

    def filter_by_tags(
        self, tags: Iterable[str], match_all: bool = False
    ) -> list[PromptDefinition]:
        """Prompts carrying any (or, with ``match_all``, every) of ``tags``."""
        wanted = set(tags)
        if not wanted:
            return self.list_all()
        if match_all:
            return [p for p in self.list_all() if wanted <= p.tags]
        return [p for p in self.list_all() if wanted & p.tags]

    def search(self, keyword: str) -> list[PromptDefinition]:
        """Keyword search; an empty keyword returns every prompt."""
        if not keyword:
            return self.list_all()
        return [p for p in self.list_all() if matches_keyword(p, keyword)]

    def categories(self) -> list[str]:
        """Distinct categories of cached prompts, sorted."""
        return sorted({p.category for p in self.list_all() if p.category})

    def __len__(self) -> int:
        return len(self._snapshot.prompts)

    def __contains__(self, name: object) -> bool:
        return name in self._snapshot.prompts
