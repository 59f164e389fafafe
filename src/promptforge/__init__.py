"""PromptForge - a library of reusable, validated prompt templates."""

__version__ = "0.1.0"
