"""Board view over Obsidian-style checklist tasks."""

__version__ = "0.1.0"
