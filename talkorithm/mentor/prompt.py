"""Mentor persona prompt and long-term memory formatting."""

import logging
import re
from pathlib import Path

from talkorithm.config import settings
from talkorithm.store.models import MemoryFields, MemoryItem

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).resolve().parent.parent.parent / "config"

EMPTY_MEMORY = "No saved memory yet."
FALLBACK_MEMORY_TITLE = "Saved insight"
MEMORY_TITLE_CHARS = 64
MEMORY_DETAIL_CHARS = 220

DEFAULT_MENTOR_PROMPT = """\
You are the Professor: a top-tier data structures and algorithms mentor.

The student explains their intuition in their own words, sometimes by voice
and sometimes with a sketch. Your job is to refine that intuition into a
rigorous algorithm.

- Start from what the student said; name what is right before what is wrong.
- Ask one probing question when the idea has a gap instead of handing over
  the answer.
- When an approach is correct, state its invariant, prove correctness, and
  give time and space complexity.
- Offer at least one alternative approach and compare the trade-offs.
- If a sketch is attached, describe what you see before you reason about it.
- Keep replies short enough to be read aloud: plain sentences, no tables.
"""

_WHITESPACE_RE = re.compile(r"\s+")


def _read_config(filename: str) -> str:
    """Read a config markdown file, returning empty string if missing."""
    path = CONFIG_DIR / filename
    if path.exists():
        return path.read_text(encoding="utf-8")
    return ""


def build_mentor_prompt() -> str:
    """The system prompt for the mentor persona.

    ``config/MENTOR.md`` overrides the built-in prompt when present.
    """
    custom = _read_config("MENTOR.md").strip()
    if custom:
        logger.debug("Using mentor prompt from %s", CONFIG_DIR / "MENTOR.md")
        return custom
    return DEFAULT_MENTOR_PROMPT


def summarize_memories(items: list[MemoryItem], limit: int | None = None) -> str:
    """Format saved memories for injection into the prompt.

    *items* are expected newest-first; only the first *limit* are used.
    """
    if not items:
        return EMPTY_MEMORY
    if limit is None:
        limit = settings.memory_summary_size
    return "\n".join(f"- {item.title}: {item.detail}" for item in items[:limit])


def _excerpt(text: str, max_chars: int) -> str:
    return _WHITESPACE_RE.sub(" ", text[:max_chars]).strip()


def memory_from_text(text: str) -> MemoryFields:
    """Build a memory note from an assistant reply."""
    title = _excerpt(text, MEMORY_TITLE_CHARS)
    detail = _excerpt(text, MEMORY_DETAIL_CHARS)
    return MemoryFields(title=title or FALLBACK_MEMORY_TITLE, detail=detail)
