"""
Input collection helpers: preset examples, random strings and validation.

These sit in front of :meth:`TimelineController.start`. The trace engine itself
accepts any string; the rules here describe what the interactive front end
offers to learners (1 to ``max_input_length`` lowercase Latin letters).
"""

from __future__ import annotations

import random
import re
import string

from windowtrace.core.result import Result, err, ok
from windowtrace.core.settings import load_settings

EXAMPLES: tuple[str, ...] = (
    "abcabcbb",
    "bbbbb",
    "pwwkew",
    "abcdefgh",
    "aab",
    "abcdefghijk",
    "zyxwvutsrqp",
)

_LOWERCASE_ONLY = re.compile(r"^[a-z]+$")
_REUSE_PROBABILITY = 0.3


def validate_input(text: str) -> Result[str, str]:
    """Check ``text`` against the front-end input rules.

    Returns
    -------
    Result[str, str]
        ``Ok(text)`` when accepted, otherwise ``Err(message)`` describing the
        first rule that failed.
    """
    limit = load_settings().max_input_length
    if not text.strip():
        return err("Input must not be empty.")
    if len(text) > limit:
        return err(f"Input must be at most {limit} characters long.")
    if not _LOWERCASE_ONLY.match(text):
        return err("Input may only contain lowercase letters a-z.")
    return ok(text)


def random_input(
    rng: random.Random | None = None,
    min_length: int | None = None,
    max_length: int | None = None,
) -> str:
    """Generate a random lowercase string that usually contains repeats.

    Once at least three characters exist, each further position reuses an
    already generated character with 30% probability, which makes the
    duplicate-handling phases show up often.

    Bounds taken from settings are capped at ``max_input_length`` so the result
    always passes :func:`validate_input`; explicit bounds are used as given.
    """
    cfg = load_settings()
    rng = rng if rng is not None else random.Random()
    hi = min(cfg.random_max_length, cfg.max_input_length) if max_length is None else max_length
    lo = min(cfg.random_min_length, hi) if min_length is None else min_length
    if lo < 1 or lo > hi:
        raise ValueError(f"invalid length range [{lo}, {hi}]")

    length = rng.randint(lo, hi)
    chars: list[str] = []
    for _ in range(length):
        if len(chars) > 2 and rng.random() < _REUSE_PROBABILITY:
            chars.append(rng.choice(chars))
        else:
            chars.append(rng.choice(string.ascii_lowercase))
    return "".join(chars)


__all__ = ["EXAMPLES", "random_input", "validate_input"]
