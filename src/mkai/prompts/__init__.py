"""Prompt management module.

Keeps the persona instruction in a packaged text file rather than inline
in the gateway code.
"""

from functools import lru_cache
from pathlib import Path

_PROMPTS_DIR = Path(__file__).parent


@lru_cache(maxsize=16)
def load_prompt(name: str) -> str:
    """Load a packaged prompt.

    Args:
        name: Prompt name (without .txt extension)

    Returns:
        Prompt text content, stripped of surrounding whitespace

    Raises:
        FileNotFoundError: If no prompt file with that name is packaged
    """
    path = _PROMPTS_DIR / f"{name}.txt"
    if not path.exists():
        raise FileNotFoundError(f"Prompt '{name}' not found at {path}")
    return path.read_text(encoding="utf-8").strip()


def get_persona_prompt() -> str:
    """Get the system instruction sent with every reply request."""
    return load_prompt("persona")


__all__ = [
    "load_prompt",
    "get_persona_prompt",
]
