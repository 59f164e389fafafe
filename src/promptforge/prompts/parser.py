"""Decode prompt files into plain data trees.

This is purely a syntax step: YAML text becomes nested dicts, lists and
scalars. No schema interpretation happens here.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from promptforge.prompts.errors import FileSystemError, ParseError


def parse_prompt_text(text: str, source: str | Path | None = None) -> dict[str, Any]:
    """Parse YAML text into a mapping.

    Args:
        text: Raw file content
        source: Path used in error messages

    Returns:
        Decoded mapping

    Raises:
        ParseError: If the text is not valid YAML, is empty, or its root
            is not a mapping
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        line = mark.line + 1 if mark is not None else None
        column = mark.column + 1 if mark is not None else None
        problem = getattr(e, "problem", None) or str(e)
        raise ParseError(f"Invalid YAML: {problem}", source, line=line, column=column) from e

    if data is None:
        raise ParseError("File is empty", source)

    if not isinstance(data, dict):
        raise ParseError(
            f"Prompt file root must be a mapping, got {type(data).__name__}", source
        )

    return data


def parse_prompt_file(path: str | Path) -> dict[str, Any]:
    """Read and parse a prompt file.

    Raises:
        FileSystemError: If the file cannot be read
        ParseError: If the content cannot be decoded
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ParseError(f"File is not valid UTF-8: {e.reason}", path) from e
    except OSError as e:
        raise FileSystemError(f"Failed to read prompt file ({e.strerror or e})", path) from e

    return parse_prompt_text(content, path)
