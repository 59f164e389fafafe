"""Pytest configuration and shared fixtures for PromptForge tests."""

import logging
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

CODE_REVIEW_YAML = """\
name: code-review
title: Code Review
description: Perform a code review of a change for correctness and style
category: development
tags: [code, review]
variables:
  - name: language
    type: enum
    required: true
    values: [Python, Go, Rust]
  - name: focus
    type: text
    required: false
    default: correctness
template: |
  Language: {{language}}
  Focus: {{focus}}
examples:
  - title: Go review
    variables:
      language: Go
"""

API_DOCS_YAML = """\
name: api-docs
title: API Documentation
description: Write reference documentation for an endpoint
category: documentation
tags: [docs, api]
variables:
  - name: endpoint
    type: text
    required: true
    max_length: 50
template: "Document {{endpoint}}"
"""

COMMIT_MESSAGE_YAML = """\
name: commit-message
title: Commit Message
description: Draft a conventional commit message
category: development
tags: [git]
variables:
  - name: summary
    type: text
    required: true
template: "feat: {{summary}}"
"""


@pytest.fixture
def write_prompt(tmp_path: Path) -> Callable[..., Path]:
    """Return a function that writes a prompt file under tmp_path."""

    def _write(relative: str, content: str, root: Path | None = None) -> Path:
        path = (root or tmp_path) / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def prompts_dir(tmp_path: Path, write_prompt: Callable[..., Path]) -> Path:
    """A directory holding three valid prompt definitions."""
    root = tmp_path / "prompts"
    write_prompt("code-review.yaml", CODE_REVIEW_YAML, root)
    write_prompt("docs/api-docs.yml", API_DOCS_YAML, root)
    write_prompt("git/commit-message.yaml", COMMIT_MESSAGE_YAML, root)
    return root


@pytest.fixture(autouse=True)
def reset_root_logging() -> Iterator[None]:
    """Restore root logger handlers replaced by setup_logging()."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture(autouse=True)
def reset_default_service() -> Iterator[None]:
    """Restore the module-level default prompt service after each test."""
    from promptforge.prompts import service as service_module

    previous = service_module._default_service
    yield
    service_module._default_service = previous
