"""PromptLoader - load and validate prompt definitions from the filesystem.

Each file passes through four stages:

1. Parser: YAML text -> mapping
2. Schema validation: mapping -> PromptDefinition
3. Cross-reference validation: semantic invariants
4. Acceptance: the definition gets its source path and is returned

Nothing raised by a stage escapes the loader: every failure becomes a
PromptValidationError in the result, and one bad file never stops the rest
of a directory from loading.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime
from pathlib import Path

from promptforge.prompts.errors import FileSystemError, ParseError
from promptforge.prompts.models import (
    LoadReport,
    LoadResult,
    LoadStats,
    PromptDefinition,
    PromptValidationError,
)
from promptforge.prompts.parser import parse_prompt_file
from promptforge.prompts.references import validate_references
from promptforge.prompts.scanner import scan_prompt_files
from promptforge.prompts.schema import validate_schema

logger = logging.getLogger(__name__)


class PromptLoader:
    """Load prompt definitions from single files or whole directories.

    Example usage:
        ```python
        from promptforge.prompts.loader import PromptLoader

        loader = PromptLoader()

        # Load a single file
        result = loader.load_file("prompts/code-review.yaml")
        if result.success:
            print(result.prompt.title)

        # Load every .yaml/.yml file under a directory
        report = loader.load_directory("prompts/")
        print(report.stats.successful_loads, report.stats.failed_loads)
        ```
    """

    def __init__(self, max_workers: int = 1):
        """Initialize the loader.

        Args:
            max_workers: Number of threads used to read and validate files.
                Results are always assembled in scan order.
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self._max_workers = max_workers

    def load_file(self, path: str | Path) -> LoadResult:
        """Load and validate a single prompt file.

        Args:
            path: Path to a .yaml/.yml prompt file

        Returns:
            LoadResult carrying the definition or every error found
        """
        path = Path(path)
        try:
            return self._load_file(path)
        except Exception as e:
            logger.error(f"Unexpected error loading prompt file {path}: {e}", exc_info=True)
            return self._failed(
                [
                    PromptValidationError(
                        file=str(path),
                        message=f"Unexpected validation error: {e}",
                        kind="schema",
                    )
                ]
            )

    def _load_file(self, path: Path) -> LoadResult:
        file_str = str(path)

        try:
            data = parse_prompt_file(path)
        except FileSystemError as e:
            return self._failed(
                [PromptValidationError(file=file_str, message=str(e), kind="filesystem")]
            )
        except ParseError as e:
            return self._failed(
                [PromptValidationError(file=file_str, message=str(e), kind="parse")]
            )

        schema_result = validate_schema(data, file_str)
        if schema_result.prompt is None:
            return self._failed(schema_result.errors)

        references = validate_references(schema_result.prompt, file_str)
        for warning in references.warnings:
            logger.debug(f"{file_str}: {warning}")
        if not references.valid:
            return self._failed(references.errors, references.warnings)

        prompt = schema_result.prompt.model_copy(update={"source_path": file_str})
        logger.debug(f"Loaded prompt '{prompt.name}' from {file_str}")
        return LoadResult.ok(prompt, references.warnings)

    def load_directory(self, directory: str | Path) -> LoadReport:
        """Load every prompt file under a directory.

        A file whose definition reuses the name of an earlier accepted file
        (in scan order) is rejected.

        Args:
            directory: Root directory to scan recursively

        Returns:
            LoadReport with accepted definitions, all errors and statistics
        """
        directory = Path(directory)
        logger.info(f"Loading prompts from {directory}")

        scan = scan_prompt_files(directory)
        results = self._load_all(scan.files)

        definitions: list[PromptDefinition] = []
        errors: list[PromptValidationError] = []
        warnings: list[str] = list(scan.warnings)
        accepted: dict[str, str] = {}

        for path, result in zip(scan.files, results, strict=True):
            warnings.extend(f"{path}: {w}" for w in result.warnings)

            if result.success and result.prompt is not None:
                prompt = result.prompt
                if prompt.name in accepted:
                    result = self._failed(
                        [
                            PromptValidationError(
                                file=str(path),
                                field="name",
                                message=(
                                    f"Duplicate prompt name '{prompt.name}' "
                                    f"(already loaded from {accepted[prompt.name]})"
                                ),
                                kind="cross_reference",
                            )
                        ]
                    )
                else:
                    accepted[prompt.name] = str(path)
                    definitions.append(prompt)
                    continue

            errors.extend(result.errors)
            for error in result.errors:
                logger.warning(f"Rejected prompt file {error}")

        stats = LoadStats(
            total_files=len(scan.files),
            successful_loads=len(definitions),
            failed_loads=len(scan.files) - len(definitions),
            errors=tuple(errors),
            warnings=tuple(warnings),
            directory=str(directory),
            loaded_at=datetime.now(UTC),
        )
        logger.info(
            f"Loaded {stats.successful_loads} of {stats.total_files} prompt files "
            f"from {directory} ({stats.failed_loads} failed)"
        )
        return LoadReport(definitions=definitions, errors=errors, stats=stats)

    def _load_all(self, files: list[Path]) -> list[LoadResult]:
        if self._max_workers == 1 or len(files) < 2:
            return [self.load_file(path) for path in files]

        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            return list(executor.map(self.load_file, files))

    @staticmethod
    def _failed(
        errors: list[PromptValidationError], warnings: list[str] | None = None
    ) -> LoadResult:
        return LoadResult.failed(errors, warnings)
