"""
Ranking module.
Filters scored matches by a threshold and orders them for display.
"""

from typing import List, Optional

from loguru import logger

from . import config
from .models import MatchResult


class Ranker:
	"""
	Keeps matches scoring strictly above the threshold, sorted by overall score
	(descending). The sort is stable, so equal scores keep corpus order.
	"""

	def __init__(self, threshold: int = config.BASELINE_THRESHOLD, k: int = config.DEFAULT_TOP_K):
		self.threshold = threshold
		self.k = k

	def rank(self, matches: List[MatchResult], k: Optional[int] = None) -> List[MatchResult]:
		k = self.k if k is None else k
		kept = [m for m in matches if m.overall > self.threshold]
		ranked = sorted(kept, key=lambda m: m.overall, reverse=True)[:max(0, k)]
		logger.debug(f"[Ranker] {len(matches)} scored, {len(kept)} above {self.threshold}, returning {len(ranked)}")
		return ranked

	@staticmethod
	def average_overall(matches: List[MatchResult]) -> float:
		"""Mean overall score (0.0 for no matches)."""
		if not matches:
			return 0.0
		return sum(m.overall for m in matches) / len(matches)
