"""
Similarity scoring module.
Scores a concept against one corpus entry, dimension by dimension, and writes
the human-readable rationale that goes with the number.

Two scorers live here:
 - SimilarityScorer: the first-pass (baseline) seven-dimension score
 - PrecisionScorer: the deep-pass four-dimension score over precision tags
Both are pure functions of their inputs.
"""

from typing import Any, Dict, List, Optional  # type annotations

from . import config  # weights, thresholds, budget bands
from .keywords import mentions  # whole-word title containment
from .models import (  # data models
	AnalogyParse,
	ComparableEntry,
	ConceptInput,
	DimensionScore,
	MatchResult,
	NarrativeFeatureProfile,
)


def format_family(fmt: Optional[str]) -> str:
	"""'film' for features, 'series' for series and limited series, '' when unknown."""
	f = (fmt or '').lower()
	if 'series' in f or 'limited' in f:
		return 'series'
	if 'film' in f or 'feature' in f:
		return 'film'
	return ''


def tone_words(tone: Optional[str]) -> List[str]:
	"""Comma-separated tone text -> lowercase words, order kept."""
	return [t.strip().lower() for t in (tone or '').split(',') if t.strip()]


def is_set(tag: Optional[str]) -> bool:
	return bool(tag) and tag != config.UNSET


def same_tag(a: Optional[str], b: Optional[str]) -> bool:
	"""Two tags match only when both are set; unset never matches unset."""
	return is_set(a) and is_set(b) and a == b


def in_same_group(a: str, b: str, groups: List[List[str]]) -> bool:
	return any(a in g and b in g for g in groups)


def _capitalize(s: str) -> str:
	return s[:1].upper() + s[1:] if s else s


def _build_result(entry: ComparableEntry, scores: Dict[str, int], weights: Dict[str, float]) -> MatchResult:
	"""Weighted overall, strength band and primary reason shared by both scorers."""
	overall = sum(weights[name] * scores[name] for name in weights)
	overall = int(config.clamp(round(overall), 0, 100))
	dimensions = [DimensionScore(name=name, score=scores[name]) for name in weights]
	primary = max(dimensions, key=lambda d: d.score)  # max() keeps the first on ties
	return MatchResult(
		entry=entry,
		dimensions=dimensions,
		overall=overall,
		match_strength=config.band_label(overall, config.MATCH_STRENGTH_BANDS),
		primary_reason=primary.name,
	)


class SimilarityScorer:
	"""
	First-pass scorer: genre, narrative, tone, theme, format, market and keyword
	dimensions, each 0-100, blended by a weight profile.
	"""

	ELEMENT_LABELS = {
		'genre': 'Same genre space',
		'narrative': 'Similar story structure',
		'tone': 'Matching tone',
		'theme': 'Shared themes',
		'format': 'Compatible format',
	}
	DIFFERENTIATOR_LABELS = {
		'genre': 'Different genre approach',
		'narrative': 'Unique narrative structure',
		'tone': 'Distinct tonal identity',
		'format': 'Different format/length',
	}
	# Narrative points per matching tag
	NARRATIVE_POINTS = {
		'protagonist_type': 30,
		'central_conflict': 35,
		'setting': 20,
		'stakes_level': 15,
	}
	KEYWORD_POINTS = 25  # per inferred element hit

	def __init__(self, tables: Dict[str, Any], weights: Optional[Dict[str, float]] = None):
		self.related_genres: Dict[str, List[str]] = tables.get('related_genres', {})
		self.related_tones: Dict[str, List[str]] = tables.get('related_tones', {})
		self.weights = dict(weights or config.BASELINE_WEIGHTS)

	def score(
		self,
		concept: ConceptInput,
		profile: NarrativeFeatureProfile,
		entry: ComparableEntry,
		analogy: Optional[AnalogyParse] = None,
	) -> MatchResult:
		scores = {
			'genre': self.genre_score(concept, entry),
			'narrative': self.narrative_score(profile, entry.features),
			'tone': self.tone_score(concept, entry),
			'theme': self.theme_score(profile, entry.features),
			'format': self.format_score(concept.format, entry.format),
			'market': self.market_score(concept.budget_tier, entry.budget),
			'keyword': self.keyword_score(analogy, entry),
		}
		result = _build_result(entry, scores, self.weights)
		result.matching_elements = [
			label for name, label in self.ELEMENT_LABELS.items()
			if scores[name] >= config.MATCHING_ELEMENT_THRESHOLDS[name]
		]
		result.differentiators = [
			label for name, label in self.DIFFERENTIATOR_LABELS.items()
			if scores[name] < config.DIFFERENTIATOR_THRESHOLDS[name]
		]
		result.why_it_matches = self.why_it_matches(entry, scores)
		result.how_it_differs = self.how_it_differs(entry, result.differentiators)
		result.market_insight = self.market_insight(entry)
		result.strategic_takeaway = self.strategic_takeaway(entry, result.overall)
		return result

	# ------------------------------------------------------------------
	# Dimensions
	# ------------------------------------------------------------------

	def genre_score(self, concept: ConceptInput, entry: ComparableEntry) -> int:
		if concept.genre == entry.genre:
			score = 100
		elif concept.genre in entry.sub_genres:
			score = 70
		elif entry.genre in self.related_genres.get(concept.genre, []):
			score = 40
		else:
			score = 0
		secondary = concept.secondary_genre
		if secondary and (secondary == entry.genre or secondary in entry.sub_genres):
			score = min(100, score + 20)
		return score

	def narrative_score(self, profile: NarrativeFeatureProfile, other: NarrativeFeatureProfile) -> int:
		score = 0
		for attr, points in self.NARRATIVE_POINTS.items():
			if same_tag(getattr(profile, attr), getattr(other, attr)):
				score += points
		return min(100, score)

	def tone_score(self, concept: ConceptInput, entry: ComparableEntry) -> int:
		words = tone_words(concept.tone)
		if not words:
			return 50  # neutral when no tone was given
		entry_tones = [t.lower() for t in entry.tones]
		if any(t in entry_tones for t in words):
			return 100
		for word in words:
			for t in entry_tones:
				if t in self.related_tones.get(word, []) or word in self.related_tones.get(t, []):
					return 60
		return 20

	def theme_score(self, profile: NarrativeFeatureProfile, other: NarrativeFeatureProfile) -> int:
		if not profile.themes or not other.themes:
			return 40  # neutral
		overlap = sum(1 for t in profile.themes if t in other.themes)
		return round(overlap / len(profile.themes) * 100)

	def format_score(self, concept_format: str, entry_format: str) -> int:
		a, b = format_family(concept_format), format_family(entry_format)
		if a and a == b:
			return 100
		pair = {(concept_format or '').lower(), (entry_format or '').lower()}
		if any('limited' in f for f in pair) and any('feature' in f for f in pair):
			return 50
		return 0

	def market_score(self, budget_tier: Optional[str], budget: Optional[float]) -> int:
		band = config.BUDGET_BANDS.get((budget_tier or '').lower())
		if band is None or budget is None:
			return 50
		low, high = band
		if low <= budget <= high:
			return 100
		if low - 10 <= budget <= high + 20:
			return 70
		return 30

	def keyword_score(self, analogy: Optional[AnalogyParse], entry: ComparableEntry) -> int:
		if analogy is None:
			return 50  # neutral when no comparable was supplied
		title = entry.title.lower()
		for t in analogy.titles():
			t = t.lower()
			if mentions(title, t) or mentions(t, title):
				return 100
		inferred = [e.lower() for e in analogy.inferred_elements]
		candidates = [k.lower() for k in entry.keywords + entry.features.genre_elements]
		hits = sum(1 for k in candidates if any(k in e or e in k for e in inferred))
		return min(100, hits * self.KEYWORD_POINTS)

	# ------------------------------------------------------------------
	# Rationale
	# ------------------------------------------------------------------

	def why_it_matches(self, entry: ComparableEntry, scores: Dict[str, int]) -> str:
		reasons = []
		if scores['genre'] >= 70:
			reasons.append(f"operates in the same {entry.genre.lower()} space")
		if scores['narrative'] >= 50:
			reasons.append('shares similar story DNA')
		if scores['tone'] >= 60:
			reasons.append(f"matches the {entry.tones[0] if entry.tones else 'intended'} tone")
		if is_set(entry.features.central_conflict):
			reasons.append(f"explores {entry.features.central_conflict} conflict")
		if not reasons:
			reasons.append('offers relevant market positioning insights')
		text = f"{entry.title} ({entry.year}) {', '.join(reasons)}."
		if entry.rt_score is not None:
			text += f" Achieved {entry.rt_score}% RT score"
		return text

	def how_it_differs(self, entry: ComparableEntry, differentiators: List[str]) -> str:
		differences = differentiators[:2]
		if not differences:
			if entry.platform in ('Netflix', 'Streaming'):
				differences = ['Released direct-to-streaming']
			else:
				differences = ['Had theatrical release strategy']
		return 'Your concept differs through: ' + '; '.join(differences)

	def market_insight(self, entry: ComparableEntry) -> str:
		if entry.roi is not None and entry.roi > 3:
			return f"Strong ROI of {entry.roi:.1f}x proves market appetite for this type of content"
		if entry.rt_score is not None and entry.rt_score >= 85:
			return f"Critical acclaim ({entry.rt_score}% RT) drove strong word-of-mouth"
		if entry.audience_score is not None and entry.audience_score >= 85:
			return f"High audience score ({entry.audience_score}%) indicates strong commercial appeal"
		if entry.worldwide_gross is not None and entry.worldwide_gross > 100:
			return f"Worldwide gross of ${entry.worldwide_gross:.0f}M demonstrates broad appeal"
		return f"Platform strategy of {entry.platform} worked well for this content type"

	def strategic_takeaway(self, entry: ComparableEntry, overall: int) -> str:
		if overall >= 70:
			return f"Study {entry.title}'s marketing and positioning as a close blueprint"
		if overall >= 50:
			return f"Reference {entry.title} for buyer pitch - shows market precedent"
		return f"Use {entry.title} as contrast point to highlight your unique angle"


class PrecisionScorer:
	"""
	Deep-pass scorer over the precision tags: narrative, tone, market and audience.
	Every dimension starts from a base, so entries with unset tags still collect it.
	"""

	DIFFERENTIATOR_LABELS = {
		'narrative': 'Different narrative DNA',
		'tone': 'Distinct emotional register',
		'market': 'Different market position',
		'audience': 'Different target audience',
	}

	def __init__(self, tables: Dict[str, Any], weights: Optional[Dict[str, float]] = None):
		self.related_archetypes: List[List[str]] = tables.get('related_archetypes', [])
		self.related_conflicts: List[List[str]] = tables.get('related_conflicts', [])
		self.budget_levels: List[str] = tables.get('budget_implications', ['Micro', 'Low', 'Medium', 'High', 'Tentpole'])
		self.weights = dict(weights or config.PRECISION_WEIGHTS)

	def score(self, concept: ConceptInput, profile: NarrativeFeatureProfile, entry: ComparableEntry) -> MatchResult:
		other = entry.features
		scores = {
			'narrative': self.narrative_score(profile, other),
			'tone': self.tone_score(profile, other),
			'market': self.market_score(concept, profile, entry),
			'audience': self.audience_score(profile, other),
		}
		result = _build_result(entry, scores, self.weights)
		shared_narrative = self.shared_narrative(profile, other)
		shared_tone = self.shared_tone(profile, other)
		shared_audience = self.shared_audience(profile, other)
		result.matching_elements = shared_narrative + shared_tone + shared_audience
		result.differentiators = [
			label for name, label in self.DIFFERENTIATOR_LABELS.items()
			if scores[name] < config.PRECISION_DIFFERENTIATOR_THRESHOLDS[name]
		]
		result.why_it_matches = self.precise_reason(profile, other, shared_narrative, shared_tone)
		result.how_it_differs = self.key_difference(profile, other)
		result.market_insight = self.box_office_implication(entry)
		result.strategic_takeaway = self.strategic_learning(entry)
		return result

	# ------------------------------------------------------------------
	# Dimensions
	# ------------------------------------------------------------------

	def narrative_score(self, profile: NarrativeFeatureProfile, other: NarrativeFeatureProfile) -> int:
		score = 30
		a, b = profile.narrative_archetype, other.narrative_archetype
		if same_tag(a, b):
			score += 25
		elif in_same_group(a, b, self.related_archetypes):
			score += 12
		if same_tag(profile.protagonist_archetype, other.protagonist_archetype):
			score += 15
		a, b = profile.conflict_type, other.conflict_type
		if same_tag(a, b):
			score += 15
		elif in_same_group(a, b, self.related_conflicts):
			score += 7
		if same_tag(profile.stakes_scope, other.stakes_scope):
			score += 10
		beats = sum(1 for x in profile.story_beats if x in other.story_beats)
		score += min(beats * 5, 15)
		return int(config.clamp(score))

	def tone_score(self, profile: NarrativeFeatureProfile, other: NarrativeFeatureProfile) -> int:
		score = 30
		if same_tag(profile.primary_emotion, other.primary_emotion):
			score += 20
		score += min(len(self._tone_overlap(profile, other)) * 10, 30)
		diff = abs(profile.emotional_intensity - other.emotional_intensity)
		if diff < 0.2:
			score += 15
		elif diff < 0.4:
			score += 8
		return int(config.clamp(score))

	def market_score(self, concept: ConceptInput, profile: NarrativeFeatureProfile, entry: ComparableEntry) -> int:
		score = 30
		platform = profile.platform_affinity
		if same_tag(platform, entry.platform):
			score += 20
		elif self._platforms_compatible(platform, entry.platform):
			score += 10
		a, b = profile.budget_implication, entry.features.budget_implication
		if same_tag(a, b):
			score += 20
		elif self._budgets_adjacent(a, b):
			score += 10
		family = format_family(concept.format)
		if family and family == format_family(entry.format):
			score += 15
		return int(config.clamp(score))

	def audience_score(self, profile: NarrativeFeatureProfile, other: NarrativeFeatureProfile) -> int:
		score = 40
		a, b = profile.audience_quadrant, other.audience_quadrant
		if same_tag(a, b):
			score += 30
		elif is_set(a) and is_set(b) and 'Four Quadrant' in (a, b):
			score += 15
		markers = sum(1 for m in profile.genre_markers if m in other.genre_markers)
		score += min(markers * 8, 24)
		return int(config.clamp(score))

	def _tone_overlap(self, profile: NarrativeFeatureProfile, other: NarrativeFeatureProfile) -> List[str]:
		theirs = {t.lower() for t in other.emotional_tones}
		return [t for t in profile.emotional_tones if t.lower() in theirs]

	def _platforms_compatible(self, a: str, b: str) -> bool:
		if not is_set(a) or not b:
			return False
		if 'Theatrical' in a and 'Theatrical' in b:
			return True
		return 'Streaming' in a and any(p in b for p in ('Netflix', 'HBO', 'Amazon'))

	def _budgets_adjacent(self, a: str, b: str) -> bool:
		if a not in self.budget_levels or b not in self.budget_levels:
			return False
		return abs(self.budget_levels.index(a) - self.budget_levels.index(b)) <= 1

	# ------------------------------------------------------------------
	# Shared elements and rationale
	# ------------------------------------------------------------------

	def shared_narrative(self, profile: NarrativeFeatureProfile, other: NarrativeFeatureProfile) -> List[str]:
		shared = []
		if same_tag(profile.narrative_archetype, other.narrative_archetype):
			shared.append(profile.narrative_archetype)
		if same_tag(profile.protagonist_archetype, other.protagonist_archetype):
			shared.append(f"{profile.protagonist_archetype} protagonist")
		if same_tag(profile.conflict_type, other.conflict_type):
			shared.append(profile.conflict_type)
		if same_tag(profile.stakes_scope, other.stakes_scope):
			shared.append(f"{profile.stakes_scope} stakes")
		shared.extend(b for b in profile.story_beats if b in other.story_beats)
		return shared

	def shared_tone(self, profile: NarrativeFeatureProfile, other: NarrativeFeatureProfile) -> List[str]:
		shared = self._tone_overlap(profile, other)
		if same_tag(profile.primary_emotion, other.primary_emotion):
			shared.append(f"Primary emotion: {profile.primary_emotion}")
		return shared

	def shared_audience(self, profile: NarrativeFeatureProfile, other: NarrativeFeatureProfile) -> List[str]:
		shared = []
		if same_tag(profile.audience_quadrant, other.audience_quadrant):
			shared.append(profile.audience_quadrant)
		shared.extend(m for m in profile.genre_markers if m in other.genre_markers)
		return shared

	def precise_reason(
		self,
		profile: NarrativeFeatureProfile,
		other: NarrativeFeatureProfile,
		shared_narrative: List[str],
		shared_tone: List[str],
	) -> str:
		reasons = []
		if shared_narrative:
			reasons.append(f"shares {' and '.join(shared_narrative[:2])} DNA")
		if shared_tone:
			reasons.append(f"similar {shared_tone[0].lower()} tone")
		if same_tag(profile.audience_quadrant, other.audience_quadrant):
			reasons.append(f"targets same {profile.audience_quadrant.lower()} audience")
		return _capitalize(', '.join(reasons)) if reasons else 'Genre and market alignment'

	def key_difference(self, profile: NarrativeFeatureProfile, other: NarrativeFeatureProfile) -> str:
		if is_set(profile.stakes_scope) and is_set(other.stakes_scope) and profile.stakes_scope != other.stakes_scope:
			return f"Your concept has {profile.stakes_scope.lower()} stakes vs {other.stakes_scope.lower()}"
		if is_set(profile.narrative_archetype) and is_set(other.narrative_archetype) and profile.narrative_archetype != other.narrative_archetype:
			return f"Different narrative structure: {profile.narrative_archetype} vs {other.narrative_archetype}"
		return 'Your unique hook and contemporary relevance'

	def box_office_implication(self, entry: ComparableEntry) -> str:
		if entry.domestic_gross is None:
			return 'Limited theatrical data (streaming-focused)'
		if entry.domestic_gross > 100:
			performance = 'strong'
		elif entry.domestic_gross > 50:
			performance = 'solid'
		else:
			performance = 'modest'
		if entry.roi is not None and entry.roi > 5:
			roi = 'exceptional ROI'
		elif entry.roi is not None and entry.roi > 2:
			roi = 'healthy ROI'
		else:
			roi = 'standard returns'
		return f"Suggests {performance} domestic potential with {roi}"

	def strategic_learning(self, entry: ComparableEntry) -> str:
		if entry.rt_score is not None and entry.rt_score >= 90:
			return 'Critical acclaim drove word-of-mouth - prioritize quality'
		if entry.roi is not None and entry.roi > 8:
			return 'Low budget, high return model - keep production lean'
		return 'Study marketing campaign and release timing'
