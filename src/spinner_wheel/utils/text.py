"""Comma-separated list helpers for command-line options and form fields."""

from typing import Iterable, List, Optional


def split_csv(text: Optional[str]) -> List[str]:
    """Split ``text`` on commas, trimming entries and dropping empty ones."""
    if not text:
        return []
    return [part.strip() for part in text.split(",") if part.strip()]


def join_csv(values: Iterable[str]) -> str:
    return ",".join(values)


__all__ = ["split_csv", "join_csv"]
