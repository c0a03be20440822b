"""Motivational and completion phrases.

The ledger's phrase service is best-effort: any failure falls back to a
phrase drawn uniformly from the local pool.
"""

from __future__ import annotations

import logging
import random

from .errors import PhraseUnavailable

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT = "general study"

FALLBACK_PHRASES: tuple[str, ...] = (
    "Every minute of study is a step towards success!",
    "Discipline is the bridge between goals and results.",
    "You are investing in your future, keep going!",
    "Knowledge is the one treasure nobody can steal from you.",
    "Today you are closer to your goals than yesterday!",
)

SUCCESS_PHRASES: tuple[str, ...] = (
    "Fantastic! You completed the session!",
    "Excellent! One more session on your path to success!",
    "Well done! You are building great study habits!",
    "Done! Every session brings you closer to your goals!",
)


class PhraseProvider:
    """Fetches phrases from the ledger, never raising to the caller.

    `ledger` may be None for offline use, in which case only the local
    pools are used.
    """

    def __init__(self, ledger=None, rng: random.Random | None = None) -> None:
        self.ledger = ledger
        self._rng = rng or random.Random()

    def motivational(self, context: str | None = None) -> str:
        context = context or DEFAULT_CONTEXT
        if self.ledger is None:
            return self.fallback()
        try:
            return self.ledger.motivational_phrase(context)
        except PhraseUnavailable as exc:
            logger.info(f"Phrase service unavailable, using local phrase: {exc}")
            return self.fallback()

    def fallback(self) -> str:
        return self._rng.choice(FALLBACK_PHRASES)

    def success(self) -> str:
        return self._rng.choice(SUCCESS_PHRASES)
