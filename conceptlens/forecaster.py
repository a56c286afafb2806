"""
Forecasting module.
Turns ranked comparables into a box office range, an ROI and a confidence score.
Falls back to genre baselines when no comparable carries outcome data.
"""

from typing import Any, Dict, List, Optional, Tuple

import numpy as np  # weighted averages and deviations
from loguru import logger

from . import config
from .models import ComparableEntry, ForecastResult, MatchResult


class Forecaster:
	"""
	Weighted comparable forecasting:
	- weight per match = (overall / 100) ** WEIGHT_EXPONENT, so close matches dominate
	- domestic, worldwide and ROI are averaged separately, each over the matches that have it
	- the range comes from the relative spread of the domestic values
	Never raises; thin data yields a genre-baseline forecast.
	"""

	def __init__(self, tables: Dict[str, Any]):
		self.baselines: Dict[str, Dict[str, Any]] = tables.get('genre_baselines', {})
		self.default_baseline: Dict[str, Any] = tables.get('default_baseline', {'domestic': 40, 'worldwide': 90, 'roi': 2.5, 'titles': []})
		self.baseline_notes: Dict[str, str] = tables.get('genre_baseline_notes', {})
		self.timing: Dict[str, str] = tables.get('market_timing', {})

	def forecast(
		self,
		matches: List[MatchResult],
		budget_tier: Optional[str],
		genre: str,
		fmt: str,
	) -> ForecastResult:
		domestic = self._values(matches, lambda e: e.domestic_gross)
		worldwide = self._values(matches, lambda e: e.worldwide_gross)
		if not matches or not domestic[0] or not worldwide[0]:
			logger.info(f"[Forecaster] No usable comparable outcomes, using {genre or 'default'} baseline")
			return self.baseline_forecast(genre, fmt, budget_tier)

		mult = self.budget_multiplier(budget_tier)
		dom_likely = self._weighted(*domestic) * mult
		ww_likely = self._weighted(*worldwide) * mult
		roi_values = self._values(matches, self.entry_roi)
		roi = self._weighted(*roi_values) if roi_values[0] else config.DEFAULT_ROI

		variance = self.variance_factor(domestic[0])
		usable = [m for m in matches if self._usable(m.entry)]
		confidence = self.confidence(len(usable), float(np.mean([m.overall for m in matches])))

		top = matches[0]
		result = ForecastResult(
			domestic_low=round(dom_likely * (1 - variance), 1),
			domestic_likely=round(dom_likely, 1),
			domestic_high=round(dom_likely * (1 + variance), 1),
			worldwide_low=round(ww_likely * (1 - variance), 1),
			worldwide_likely=round(ww_likely, 1),
			worldwide_high=round(ww_likely * (1 + variance), 1),
			roi=round(roi, 2),
			confidence=confidence,
			confidence_label=config.band_label(confidence, config.CONFIDENCE_LABELS),
			based_on=[f"{m.entry.title} ({m.entry.year})" for m in usable],
			rationale=(
				f"Based on {len(usable)} similar titles, weighted by match quality. "
				f"Primary comparable: {top.entry.title} ({top.overall}% match) - {top.why_it_matches}"
			),
			key_risk=self.key_risk(matches, genre),
			upside=self.upside(matches),
			genre_baseline=self.genre_note(genre),
			format_note=self.format_note(fmt),
			market_timing=self.timing.get(genre, 'Avoid crowded release windows'),
		)
		logger.debug(
			"[Forecaster] domestic={}-{}-{} ww_likely={} roi={} confidence={} (variance={:.2f}, mult={})",
			result.domestic_low, result.domestic_likely, result.domestic_high,
			result.worldwide_likely, result.roi, confidence, variance, mult,
		)
		return result

	def baseline_forecast(self, genre: str, fmt: str, budget_tier: Optional[str]) -> ForecastResult:
		"""Genre-average forecast for when no comparable carries outcome data."""
		baseline = self.baselines.get(genre, self.default_baseline)
		mult = self.budget_multiplier(budget_tier)
		low, likely, high = config.FALLBACK_RANGE
		dom = float(baseline.get('domestic', 0)) * mult
		ww = float(baseline.get('worldwide', 0)) * mult
		return ForecastResult(
			domestic_low=round(dom * low, 1),
			domestic_likely=round(dom * likely, 1),
			domestic_high=round(dom * high, 1),
			worldwide_low=round(ww * low, 1),
			worldwide_likely=round(ww * likely, 1),
			worldwide_high=round(ww * high, 1),
			roi=float(baseline.get('roi', config.DEFAULT_ROI)),
			confidence=config.FALLBACK_CONFIDENCE,
			confidence_label=config.band_label(config.FALLBACK_CONFIDENCE, config.CONFIDENCE_LABELS),
			based_on=list(baseline.get('titles', [])),
			rationale=f"Based on {genre or 'overall'} genre averages - limited comparable data",
			key_risk='No closely matched comparables found',
			upside='Strong execution could outperform baseline',
			genre_baseline=self.genre_note(genre),
			format_note=self.format_note(fmt),
			market_timing=self.timing.get(genre, 'Avoid crowded release windows'),
			used_fallback=True,
		)

	# ------------------------------------------------------------------
	# Numeric helpers
	# ------------------------------------------------------------------

	@staticmethod
	def match_weight(overall: int) -> float:
		return (overall / 100.0) ** config.WEIGHT_EXPONENT

	def _values(self, matches: List[MatchResult], getter) -> Tuple[List[float], List[float]]:
		"""(values, weights) over the matches whose getter returns a number."""
		values, weights = [], []
		for m in matches:
			v = getter(m.entry)
			if v is not None:
				values.append(float(v))
				weights.append(self.match_weight(m.overall))
		return values, weights

	@staticmethod
	def _weighted(values: List[float], weights: List[float]) -> float:
		if sum(weights) <= 0:
			return float(np.mean(values))
		return float(np.average(values, weights=weights))

	@staticmethod
	def _usable(entry: ComparableEntry) -> bool:
		return entry.domestic_gross is not None or entry.worldwide_gross is not None

	@staticmethod
	def entry_roi(entry: ComparableEntry) -> Optional[float]:
		"""Recorded ROI, else worldwide / budget, else the default for grossing titles."""
		if entry.roi is not None:
			return entry.roi
		if entry.worldwide_gross is not None and entry.budget:
			return entry.worldwide_gross / entry.budget
		if entry.domestic_gross is not None or entry.worldwide_gross is not None:
			return config.DEFAULT_ROI
		return None

	@staticmethod
	def budget_multiplier(budget_tier: Optional[str]) -> float:
		return config.BUDGET_MULTIPLIERS.get((budget_tier or '').lower(), 1.0)

	@staticmethod
	def variance_factor(domestic: List[float]) -> float:
		"""Mean absolute deviation relative to the mean, clamped to [VARIANCE_MIN, VARIANCE_MAX]."""
		if len(domestic) < 2:
			return config.VARIANCE_DEFAULT
		arr = np.asarray(domestic, dtype=float)
		mean = arr.mean()
		if mean == 0:
			return config.VARIANCE_DEFAULT
		mad = float(np.abs(arr - mean).mean() / mean)
		return config.clamp(mad, config.VARIANCE_MIN, config.VARIANCE_MAX)

	@staticmethod
	def confidence(usable: int, mean_overall: float) -> int:
		for min_count, min_mean, value in config.CONFIDENCE_STEPS:
			if usable >= min_count and mean_overall >= min_mean:
				return value
		return config.CONFIDENCE_FLOOR

	# ------------------------------------------------------------------
	# Text helpers
	# ------------------------------------------------------------------

	def key_risk(self, matches: List[MatchResult], genre: str) -> str:
		for m in matches:
			if m.entry.domestic_gross is not None and m.entry.domestic_gross < 30:
				return f"Genre can underperform without strong marketing (see: {m.entry.title})"
		return f"Market saturation in {genre} space"

	def upside(self, matches: List[MatchResult]) -> str:
		for m in matches:
			if m.entry.roi is not None and m.entry.roi > 5:
				return f"Breakout potential like {m.entry.title} ({m.entry.roi:.1f}x ROI)"
		return 'Strong word-of-mouth can exceed projections'

	def genre_note(self, genre: str) -> str:
		return self.baseline_notes.get(genre, f"{genre} genre has variable performance")

	@staticmethod
	def format_note(fmt: str) -> str:
		if 'series' in (fmt or '').lower():
			return 'Series format: focus on streaming value over theatrical'
		return 'Feature format: theatrical-first strategy recommended'
