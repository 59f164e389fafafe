"""Prompt service: the operations consumed by adaptation layers.

PromptService owns one PromptCache and one TemplateRenderer and exposes
``load``, ``get``, ``search`` and ``render``. A process-wide default instance
is available through get_default_service(); configure_default_service()
replaces it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from promptforge.config.app import PromptForgeConfig, load_config
from promptforge.prompts.cache import PromptCache
from promptforge.prompts.loader import PromptLoader
from promptforge.prompts.models import LoadReport, LoadStats, PromptDefinition
from promptforge.prompts.renderer import RenderResult, TemplateRenderer

logger = logging.getLogger(__name__)

# Module-level default service (configured by configure_default_service)
_default_service: PromptService | None = None


class PromptService:
    """Load, look up, search and render prompt definitions.

    Usage:
        service = PromptService(prompts_directory=Path("prompts"))
        report = service.load()
        prompt = service.get("code-review")
        result = service.render(prompt, {"language": "Go"})
    """

    def __init__(
        self,
        prompts_directory: str | Path | None = None,
        max_workers: int = 1,
        cache: PromptCache | None = None,
        renderer: TemplateRenderer | None = None,
    ):
        """Initialize the service.

        Args:
            prompts_directory: Default directory for load() calls
            max_workers: Threads used when reading prompt files
            cache: Cache to use (a new one is created by default)
            renderer: Renderer to use (a new one is created by default)
        """
        self.prompts_directory = Path(prompts_directory) if prompts_directory else None
        self._cache = cache or PromptCache(PromptLoader(max_workers=max_workers))
        self._renderer = renderer or TemplateRenderer()

    @classmethod
    def from_config(cls, config: PromptForgeConfig) -> PromptService:
        return cls(
            prompts_directory=Path(config.prompts_directory).expanduser(),
            max_workers=config.max_workers,
        )

    @property
    def cache(self) -> PromptCache:
        return self._cache

    @property
    def stats(self) -> LoadStats:
        return self._cache.stats

    def load(self, directory: str | Path | None = None) -> LoadReport:
        """Fully reload the cache from ``directory`` (or the configured one).

        Raises:
            ValueError: If no directory is given and none is configured
        """
        target = Path(directory) if directory is not None else self.prompts_directory
        if target is None:
            raise ValueError("No prompts directory given or configured")
        return self._cache.reload(target)

    def get(self, name: str) -> PromptDefinition | None:
        return self._cache.get(name)

    def list_prompts(self, category: str | None = None) -> list[PromptDefinition]:
        if category is None:
            return self._cache.list_all()
        return self._cache.filter_by_category(category)

    def categories(self) -> list[str]:
        return self._cache.categories()

    def search(
        self,
        keyword: str,
        category: str | None = None,
        tags: Iterable[str] | None = None,
    ) -> list[PromptDefinition]:
        """Keyword search, optionally narrowed by category and any-of tags.

        Args:
            keyword: Case-insensitive substring (empty matches everything)
            category: Exact category to keep
            tags: Keep prompts carrying at least one of these tags

        Returns:
            Matching prompts ordered by name
        """
        results = self._cache.search(keyword)
        if category:
            results = [p for p in results if p.category == category]
        wanted = set(tags or ())
        if wanted:
            results = [p for p in results if wanted & p.tags]
        return results

    def render(
        self,
        prompt: PromptDefinition | str,
        variables: Mapping[str, Any] | None = None,
    ) -> RenderResult:
        """Render a definition (or the cached definition with that name)."""
        if isinstance(prompt, str):
            definition = self._cache.get(prompt)
            if definition is None:
                logger.warning(f"Prompt not found: {prompt}")
                return RenderResult(
                    success=False, errors=[f"Prompt not found: {prompt}"], error_kind="not_found"
                )
            prompt = definition
        return self._renderer.render(prompt, variables or {})


def configure_default_service(
    prompts_directory: str | Path | None = None,
    max_workers: int = 1,
    config: PromptForgeConfig | None = None,
) -> PromptService:
    """Replace the module-level default service.

    Args:
        prompts_directory: Directory to load prompts from
        max_workers: Worker threads used while loading
        config: Build the service from this config instead of the arguments

    Returns:
        The newly configured PromptService
    """
    global _default_service
    if config is not None:
        _default_service = PromptService.from_config(config)
    else:
        _default_service = PromptService(
            prompts_directory=prompts_directory, max_workers=max_workers
        )
    return _default_service


def get_default_service() -> PromptService:
    """Get or create the default prompt service.

    When nothing was configured the service is built from load_config(),
    so it points at the configured prompts directory.
    """
    global _default_service
    if _default_service is None:
        _default_service = PromptService.from_config(load_config())
    return _default_service
