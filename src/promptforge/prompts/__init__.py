"""Prompt definitions: loading, validation, caching and rendering.

This module provides:
- Recursive discovery of .yaml/.yml definition files
- Schema and cross-reference validation with per-file error reports
- An atomically reloaded in-memory cache with search and filters
- Handlebars rendering with typed variable validation and helpers
"""

from promptforge.prompts.cache import CacheSnapshot, PromptCache, matches_keyword
from promptforge.prompts.errors import (
    CrossReferenceError,
    FileSystemError,
    ParseError,
    PromptForgeError,
    PromptNotFoundError,
    RenderError,
    SchemaValidationError,
    VariableValidationError,
)
from promptforge.prompts.helpers import HELPER_NAMES, HELPERS
from promptforge.prompts.loader import PromptLoader
from promptforge.prompts.models import (
    Example,
    LoadReport,
    LoadResult,
    LoadStats,
    PromptDefinition,
    PromptValidationError,
    VariableSpec,
)
from promptforge.prompts.parser import parse_prompt_file, parse_prompt_text
from promptforge.prompts.references import (
    ValidationResult,
    extract_template_references,
    extract_template_variables,
    validate_category,
    validate_prompt_name,
    validate_references,
)
from promptforge.prompts.renderer import RenderResult, TemplateRenderer
from promptforge.prompts.scanner import ScanResult, scan_prompt_files
from promptforge.prompts.schema import validate_schema
from promptforge.prompts.service import (
    PromptService,
    configure_default_service,
    get_default_service,
)

__all__ = [
    # Models
    "Example",
    "LoadReport",
    "LoadResult",
    "LoadStats",
    "PromptDefinition",
    "PromptValidationError",
    "VariableSpec",
    # Errors
    "CrossReferenceError",
    "FileSystemError",
    "ParseError",
    "PromptForgeError",
    "PromptNotFoundError",
    "RenderError",
    "SchemaValidationError",
    "VariableValidationError",
    # Loading
    "PromptLoader",
    "ScanResult",
    "parse_prompt_file",
    "parse_prompt_text",
    "scan_prompt_files",
    "validate_schema",
    # Validation
    "ValidationResult",
    "extract_template_references",
    "extract_template_variables",
    "validate_category",
    "validate_prompt_name",
    "validate_references",
    # Cache
    "CacheSnapshot",
    "PromptCache",
    "matches_keyword",
    # Rendering
    "HELPERS",
    "HELPER_NAMES",
    "RenderResult",
    "TemplateRenderer",
    # Service
    "PromptService",
    "configure_default_service",
    "get_default_service",
]
