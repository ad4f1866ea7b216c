"""
Fuzzy village suggestions.

Offered when a village filter matches nothing, so a misspelt search can
still reach the right village before falling back to manual entry.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from rapidfuzz import fuzz, process, utils

from ..utils.data_utils import is_null_or_empty


class VillageSuggester:
    """Ranks village names by similarity to a typed query."""

    def __init__(self, limit: int = 5, score_cutoff: int = 70,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the suggester.

        Args:
            limit: Maximum number of suggestions returned
            score_cutoff: Minimum WRatio score (0-100) for a suggestion
            logger: Optional logger instance
        """
        if not 0 <= score_cutoff <= 100:
            raise ValueError("Score cutoff must be between 0 and 100")

        self.limit = limit
        self.score_cutoff = score_cutoff
        self.logger = logger or logging.getLogger(__name__)

    def suggest_with_scores(self, query: str, villages: Sequence[str]) -> List[Tuple[str, float]]:
        """
        Find the villages closest to ``query``.

        Args:
            query: Text typed into the village filter
            villages: Candidate village names

        Returns:
            ``(village, score)`` pairs, best first
        """
        if is_null_or_empty(query) or not villages or self.limit == 0:
            return []

        matches = process.extract(
            query.strip(),
            list(villages),
            scorer=fuzz.WRatio,
            processor=utils.default_process,
            limit=self.limit,
            score_cutoff=self.score_cutoff
        )

        if matches:
            self.logger.debug(f"Found {len(matches)} suggestions for '{query}'")
        return [(name, score) for name, score, _ in matches]

    def suggest(self, query: str, villages: Sequence[str]) -> List[str]:
        """Village names closest to ``query``, best first."""
        return [name for name, _ in self.suggest_with_scores(query, villages)]
