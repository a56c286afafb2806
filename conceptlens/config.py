"""
Tunable constants for the concept analysis engine.
Weight profiles, thresholds, clamps and data file names live here so the
scoring code reads as pure logic and tests can pin the numbers directly.
"""

from pathlib import Path  # resolve bundled data files
from typing import Dict, List, Tuple  # type hints for tables


# Bundled data directory (JSON / JSONL tables shipped with the package)
DATA_DIR = Path(__file__).resolve().parent / 'data'  # conceptlens/data
CORPUS_FILE = 'comparables.jsonl'  # reference corpus, one entry per line
VOCABULARY_FILE = 'vocabulary.json'  # ordered category -> keyword tables
ANALOGY_FILE = 'analogies.json'  # known title -> inferred elements
MARKET_FILE = 'market.json'  # related genres/tones, baselines, positioning tables
DEEP_FILE = 'deep.json'  # deep-pass keyword tables
PARTNERS_FILE = 'partners.json'  # distribution / financing partner profiles
TALENT_FILE = 'talent.json'  # director / actor / writer profiles
FRANCHISE_FILE = 'franchise.json'  # franchise dimension profiles and success examples

# Sentinel for categorical tags that were not detected
UNSET = 'unset'

# First-pass (baseline) weight profile, sums to 1.0
BASELINE_WEIGHTS: Dict[str, float] = {
	'genre': 0.25,
	'narrative': 0.25,
	'tone': 0.15,
	'theme': 0.15,
	'format': 0.10,
	'market': 0.05,
	'keyword': 0.05,
}

# Deep-pass (precision) weight profile, sums to 1.0
PRECISION_WEIGHTS: Dict[str, float] = {
	'narrative': 0.35,
	'tone': 0.25,
	'market': 0.25,
	'audience': 0.15,
}

# A match must score strictly above these to be ranked
BASELINE_THRESHOLD = 25
PRECISION_THRESHOLD = 30
DEFAULT_TOP_K = 5

# Per-dimension cut-offs used to build rationale lists
MATCHING_ELEMENT_THRESHOLDS: Dict[str, int] = {'genre': 70, 'narrative': 50, 'tone': 70, 'theme': 50, 'format': 80}
DIFFERENTIATOR_THRESHOLDS: Dict[str, int] = {'genre': 50, 'narrative': 30, 'tone': 40, 'format': 50}
PRECISION_DIFFERENTIATOR_THRESHOLDS: Dict[str, int] = {'narrative': 45, 'tone': 45, 'market': 45, 'audience': 50}  # under base + 15

# Match strength labels: (minimum overall, label), checked top-down
MATCH_STRENGTH_BANDS: List[Tuple[int, str]] = [(70, 'Strong'), (50, 'Moderate'), (0, 'Weak')]

# Forecasting
WEIGHT_EXPONENT = 2  # w = (overall / 100) ** WEIGHT_EXPONENT
BUDGET_MULTIPLIERS: Dict[str, float] = {
	'micro': 0.3,
	'low': 0.6,
	'medium': 1.0,
	'high': 1.8,
	'blockbuster': 3.0,
}
VARIANCE_MIN = 0.2
VARIANCE_MAX = 0.6
VARIANCE_DEFAULT = 0.4  # fewer than two usable comparables
DEFAULT_ROI = 2.0  # assumed when a comparable carries grosses but no ROI and no budget
# (minimum usable comparables, minimum mean overall, confidence), checked top-down
CONFIDENCE_STEPS: List[Tuple[int, float, int]] = [
	(4, 70.0, 90),
	(3, 60.0, 75),
	(2, 50.0, 60),
	(1, 40.0, 45),
]
CONFIDENCE_FLOOR = 30
CONFIDENCE_LABELS: List[Tuple[int, str]] = [(80, 'Very High'), (65, 'High'), (45, 'Medium'), (0, 'Low')]
FALLBACK_CONFIDENCE = 35
FALLBACK_RANGE = (0.6, 1.0, 1.4)  # low / likely / high multipliers on the genre baseline

# Budget tiers in ascending order and their budget bands in $M (min inclusive, max exclusive)
BUDGET_TIERS: List[str] = ['micro', 'low', 'medium', 'high', 'blockbuster']
BUDGET_BANDS: Dict[str, Tuple[float, float]] = {
	'micro': (0, 5),
	'low': (5, 15),
	'medium': (15, 50),
	'high': (50, 100),
	'blockbuster': (100, 500),
}

# Affinity matching
AFFINITY_MIN_SCORE = 50
PARTNER_TOP_N = 8
TALENT_TOP_N: Dict[str, int] = {'director': 5, 'actor': 8, 'supporting': 5, 'writer': 4}  # per role
FRANCHISE_TOP_N = 5
PARTNER_BASE = 50
TALENT_BASE = 40

# Franchise summary
FRANCHISE_WEIGHTS: Dict[str, float] = {'Sequel': 0.4, 'Spinoff': 0.3, 'Universe': 0.3}
SEQUEL_VIABLE_AT = 60
WORLD_BUILDABLE_AT = 55

# Deep pass blend, each component is a 0-100 score
DEEP_BLEND_WEIGHTS: Dict[str, float] = {
	'empathy': 0.15,
	'thematic_depth': 0.10,
	'structural_integrity': 0.15,
	'word_of_mouth': 0.15,
	'social_relevance': 0.10,
	'precision_match': 0.15,
}
DEEP_SCORE_BASE = 50  # score before any component adds its share
GREEN_FLAG_POINTS = 3
RED_FLAG_POINTS = 2
DEEP_SCORE_MIN = 35
DEEP_SCORE_MAX = 98
VERDICT_BANDS: List[Tuple[int, str]] = [
	(85, 'STRONG GREENLIGHT'),
	(75, 'GREENLIGHT'),
	(65, 'CAUTIOUS GREENLIGHT'),
	(55, 'DEVELOPMENT NEEDED'),
	(45, 'SIGNIFICANT REWORK'),
	(0, 'PASS'),
]

# Emotional intensity floor (a text with no intensifiers still carries some charge)
INTENSITY_FLOOR = 0.3


def band_label(value: float, bands: List[Tuple[int, str]]) -> str:
	"""Return the label of the first (threshold, label) band the value reaches."""
	for threshold, label in bands:
		if value >= threshold:
			return label
	return bands[-1][1]


def clamp(value: float, low: float = 0, high: float = 100) -> float:
	return max(low, min(high, value))
