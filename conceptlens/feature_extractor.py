"""
Feature extraction module.
Turns free pitch text into a NarrativeFeatureProfile using ordered keyword tables.
Never fails: a missing signal leaves the tag unset.
"""

from typing import Any, Dict, List, Optional  # type annotations

from loguru import logger  # console logging

from . import config  # intensity floor, UNSET
from .keywords import all_matches, best_match, first_match, mentions, mentions_any  # keyword matching
from .models import NarrativeFeatureProfile  # structured profile


class FeatureExtractor:
	"""
	Extracts categorical tags and tag lists from lowercased text.

	Single-valued dimensions take the first category (table order) whose keywords
	appear in the text, so table order is a priority order. Multi-valued dimensions
	collect every category that appears. The narrative archetype is a best-score
	dimension (2 points per keyword, earlier category wins ties).
	"""

	# Single-valued, first-match-wins dimensions
	FIRST_MATCH_DIMENSIONS = (
		'protagonist_type',
		'protagonist_trait',
		'central_conflict',
		'setting',
		'stakes_level',
		'protagonist_archetype',
		'conflict_type',
		'stakes_scope',
		'structure_type',
	)
	# Multi-valued dimensions
	MULTI_DIMENSIONS = ('themes', 'genre_elements', 'story_beats', 'emotional_tones', 'unique_hooks', 'key_imagery')
	# Defaults applied only when the text is non-empty
	DEFAULTS = {
		'protagonist_archetype': 'Complex Protagonist',
		'conflict_type': 'Person vs Person',
		'stakes_scope': 'Personal',
		'structure_type': 'Linear',
		'narrative_archetype': 'Character Study',
	}
	ARCHETYPE_POINTS = 2  # per keyword hit

	def __init__(self, vocabulary: Dict[str, Any]):
		self.vocabulary = vocabulary  # read-only tables
		self.intensifiers: List[str] = list(vocabulary.get('intensifiers', []))
		logger.debug(f"[Extractor] Initialized with {len(vocabulary)} vocabulary tables")

	def extract(self, text: str, hints: Optional[Dict[str, str]] = None) -> NarrativeFeatureProfile:
		"""
		Main entry: produce a NarrativeFeatureProfile from raw text.
		hints may carry 'genre' (drives genre-dependent tags) and 'tone' (unioned into tones).
		"""
		hints = hints or {}
		t = (text or '').strip().lower()  # normalize casing
		profile = NarrativeFeatureProfile(emotional_intensity=config.INTENSITY_FLOOR)
		if not t:  # empty input yields a fully unset profile
			logger.debug("[Extractor] Empty text, returning unset profile")
			return profile

		genre = hints.get('genre') or ''

		# 1) First-match dimensions
		for dim in self.FIRST_MATCH_DIMENSIONS:
			tag = first_match(t, self.vocabulary.get(dim, {}))
			if tag is None:
				tag = self.DEFAULTS.get(dim, config.UNSET)
			setattr(profile, dim, tag)

		# 2) Best-score archetype
		profile.narrative_archetype = best_match(t, self.vocabulary.get('narrative_archetype', {}), self.ARCHETYPE_POINTS) or self.DEFAULTS['narrative_archetype']

		# 3) Multi-valued dimensions
		for dim in self.MULTI_DIMENSIONS:
			setattr(profile, dim, all_matches(t, self.vocabulary.get(dim, {})))
		profile.genre_markers = [m for m in self.vocabulary.get('genre_markers', {}).get(genre, []) if mentions(t, m)]

		# 4) Tones: union user hints, case-insensitive dedupe
		profile.emotional_tones = self._merge_tones(profile.emotional_tones, hints.get('tone'))

		# 5) Genre-driven and derived tags
		profile.emotional_intensity = self._intensity(t)
		profile.primary_emotion = self.vocabulary.get('primary_emotion', {}).get(genre, 'Engagement')
		profile.audience_quadrant = self._audience_quadrant(t, genre)
		profile.budget_implication = self._budget_implication(t, genre)
		profile.platform_affinity = self._platform_affinity(t, genre)

		logger.debug(
			"[Extractor] Extracted | protagonist={}/{} | conflict={} | setting={} | stakes={} | archetype={} | themes={}",
			profile.protagonist_type,
			profile.protagonist_trait,
			profile.central_conflict,
			profile.setting,
			profile.stakes_level,
			profile.narrative_archetype,
			profile.themes,
		)
		return profile

	def _merge_tones(self, tones: List[str], tone_hint: Optional[str]) -> List[str]:
		merged = list(tones)
		seen = {x.lower() for x in merged}
		for tone in (tone_hint or '').split(','):
			tone = tone.strip()
			if tone and tone.lower() not in seen:
				merged.append(tone)
				seen.add(tone.lower())
		return merged or ['Dramatic']

	def _intensity(self, t: str) -> float:
		if not self.intensifiers:
			return config.INTENSITY_FLOOR
		hits = sum(1 for w in self.intensifiers if mentions(t, w))
		return round(config.clamp(hits / len(self.intensifiers), config.INTENSITY_FLOOR, 1.0), 3)

	def _audience_quadrant(self, t: str, genre: str) -> str:
		signals = self.vocabulary.get('audience_signals', {})
		male = mentions_any(t, signals.get('male', []))
		female = mentions_any(t, signals.get('female', []))
		if genre in ('Animation', 'Family'):
			return 'Four Quadrant'
		if mentions_any(t, signals.get('adult', [])):
			return 'Adult'
		if female and not male:
			return 'Female 25-54'
		if male and not female:
			return 'Male 18-34'
		if genre in ('Action', 'Sci-Fi'):
			return 'Male 18-34'
		if genre == 'Romance':
			return 'Female 25-54'
		return 'Four Quadrant'

	def _budget_implication(self, t: str, genre: str) -> str:
		signals = self.vocabulary.get('budget_signals', {})
		for level in ('High', 'Low'):  # spectacle words outrank containment words
			if mentions_any(t, signals.get(level, [])):
				return level
		return self.vocabulary.get('budget_by_genre', {}).get(genre, 'Medium')

	def _platform_affinity(self, t: str, genre: str) -> str:
		signals = self.vocabulary.get('platform_signals', {})
		if genre == 'Action' or mentions_any(t, signals.get('spectacle', [])):
			return 'Theatrical'
		if genre == 'Horror' and mentions_any(t, signals.get('elevated', [])):
			return 'Theatrical (A24/Neon)'
		if mentions_any(t, signals.get('serialized', [])):
			return 'Premium Streaming'
		return 'Theatrical/Streaming'
