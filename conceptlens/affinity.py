"""
Affinity matching module.
One table-driven scorer serves distribution partners, talent and franchise dimensions:
each profile starts from a base score and collects the points of every criterion
whose predicate fires against the concept signals.
"""

from dataclasses import dataclass, field  # criterion and signal records
from typing import Any, Callable, Dict, List, Optional, Tuple  # type annotations

from loguru import logger  # console logging

from . import config  # bases, cut-offs, franchise weights
from .keywords import mentions_any  # cue detection
from .models import (  # data models
	AffinityProfile,
	AffinityResult,
	ConceptInput,
	FranchisePotential,
	NarrativeFeatureProfile,
	TalentPackage,
)
from .similarity import format_family, is_set, tone_words  # shared helpers


@dataclass(frozen=True)
class Criterion:
	"""
	One scoring rule of an affinity table.
	attribute names the predicate (see AffinityMatcher.PREDICATES, or "cue:<group>").
	"""
	name: str  # label reported in AffinityResult.matched
	attribute: str  # predicate key
	points: int  # may be negative
	per_match: bool = False  # multiply points by the number of hits
	cap: Optional[int] = None  # upper bound for per-match points
	clause: Optional[str] = None  # rationale template (str.format keys: name, genre, tone, theme, need, protagonist, title)
	unless: Optional[str] = None  # skip when this criterion already fired


@dataclass
class AffinitySignals:
	"""Concept facts the affinity predicates read."""
	genre: str
	format: str
	secondary_genre: Optional[str] = None
	tone_words: List[str] = field(default_factory=list)  # lowercase
	budget_tier: Optional[str] = None  # canonical tier
	themes: List[str] = field(default_factory=list)  # extracted themes
	protagonist_type: Optional[str] = None  # extracted protagonist, None when unset
	setting: Optional[str] = None  # extracted setting, None when unset
	comparable_titles: List[str] = field(default_factory=list)  # analogy and ranked comparable titles
	text: str = ''  # lowercased logline + synopsis

	@classmethod
	def from_concept(
		cls,
		concept: ConceptInput,
		profile: NarrativeFeatureProfile,
		comparable_titles: Optional[List[str]] = None,
	) -> 'AffinitySignals':
		return cls(
			genre=concept.genre,
			format=concept.format,
			secondary_genre=concept.secondary_genre,
			tone_words=tone_words(concept.tone),
			budget_tier=concept.budget_tier,
			themes=list(profile.themes),
			protagonist_type=profile.protagonist_type if is_set(profile.protagonist_type) else None,
			setting=profile.setting if is_set(profile.setting) else None,
			comparable_titles=list(comparable_titles or []),
			text=concept.text(),
		)


# A predicate returns (hits, clause context); zero hits means the criterion does not fire
Predicate = Callable[[AffinitySignals, AffinityProfile], Tuple[int, Dict[str, str]]]


def _genre(s: AffinitySignals, p: AffinityProfile):
	return int(s.genre in p.genres), {'genre': s.genre}


def _secondary_genre(s: AffinitySignals, p: AffinityProfile):
	return int(bool(s.secondary_genre) and s.secondary_genre in p.genres), {'genre': s.secondary_genre or ''}


def _format(s: AffinitySignals, p: AffinityProfile):
	return int(s.format in p.formats), {}


def _format_family(s: AffinitySignals, p: AffinityProfile):
	family = format_family(s.format)
	return int(bool(family) and any(format_family(f) == family for f in p.formats)), {}


def _family_only(family: str) -> Predicate:
	def predicate(s: AffinitySignals, p: AffinityProfile):
		hit = format_family(s.format) == family and any(format_family(f) == family for f in p.formats)
		return int(hit), {}
	return predicate


def _tone(s: AffinitySignals, p: AffinityProfile):
	for word in s.tone_words:
		for tone in p.tones:
			if word == tone or word in tone:
				return 1, {'tone': word}
	return 0, {}


def _budget(s: AffinitySignals, p: AffinityProfile):
	return int(bool(s.budget_tier) and s.budget_tier in p.budget_tiers), {}


def _themes(s: AffinitySignals, p: AffinityProfile):
	shared = [t for t in s.themes if t.lower() in p.themes]
	return len(shared), {'theme': shared[0] if shared else ''}


def _credits(s: AffinitySignals, p: AffinityProfile):
	for title in s.comparable_titles:
		t = title.lower()
		for credit in p.credits:
			if t and (t in credit.lower() or credit.lower() in t):
				return 1, {'title': credit}
	return 0, {}


def _priorities(s: AffinitySignals, p: AffinityProfile):
	genre = s.genre.lower()
	for need in p.priorities:
		n = need.lower()
		if n in genre or any(t.lower() in n for t in s.themes):
			return 1, {'need': n}
	return 0, {}


def _specialties(s: AffinitySignals, p: AffinityProfile):
	if not s.protagonist_type:
		return 0, {}
	hit = any(s.protagonist_type in specialty for specialty in p.specialties)
	return int(hit), {'protagonist': s.protagonist_type}


def _settings(s: AffinitySignals, p: AffinityProfile):
	return int(bool(s.setting) and s.setting in p.settings), {}


def _momentum(s: AffinitySignals, p: AffinityProfile):
	return int(p.momentum), {}


class AffinityMatcher:
	"""
	Scores profiles against concept signals.
	criteria maps a profile kind to its ordered criteria; the '*' key serves every
	kind without its own table. Score = profile base (or the matcher base) plus the
	points of every fired criterion, clamped to [0, 100].
	"""

	PREDICATES: Dict[str, Predicate] = {
		'genre': _genre,
		'secondary_genre': _secondary_genre,
		'format': _format,
		'format_family': _format_family,
		'series_format': _family_only('series'),
		'film_format': _family_only('film'),
		'tone': _tone,
		'budget': _budget,
		'themes': _themes,
		'credits': _credits,
		'priorities': _priorities,
		'specialties': _specialties,
		'settings': _settings,
		'momentum': _momentum,
	}

	def __init__(
		self,
		criteria: Dict[str, List[Criterion]],
		min_score: int = config.AFFINITY_MIN_SCORE,
		top_n: int = config.PARTNER_TOP_N,
		base: int = config.PARTNER_BASE,
		fallback: Optional[Dict[str, str]] = None,
		kind_top_n: Optional[Dict[str, int]] = None,
	):
		self.criteria = criteria
		self.min_score = min_score
		self.top_n = top_n
		self.base = base
		self.fallback = fallback or {}  # kind -> rationale when no clause fired
		self.kind_top_n = kind_top_n or {}  # kind -> own list size, for match_by_kind

	def score(self, signals: AffinitySignals, profile: AffinityProfile) -> AffinityResult:
		criteria = self.criteria.get(profile.kind, self.criteria.get('*', []))
		score = profile.base if profile.base is not None else self.base
		matched: List[str] = []
		clauses: List[str] = []
		for c in criteria:
			if c.unless and c.unless in matched:
				continue
			hits, context = self._evaluate(c.attribute, signals, profile)
			if hits <= 0:
				continue
			points = c.points * hits if c.per_match else c.points
			if c.cap is not None:
				points = min(points, c.cap)
			score += points
			matched.append(c.name)
			if c.clause:
				clauses.append(c.clause.format(name=profile.name, **{**self._blank_context(), **context}))
		if not clauses:
			fallback = self.fallback.get(profile.kind, self.fallback.get('*'))
			if fallback:
				clauses.append(fallback)
		return AffinityResult(
			profile=profile,
			score=int(config.clamp(score)),
			matched=matched,
			rationale='. '.join(clauses),
		)

	def score_all(self, signals: AffinitySignals, profiles: List[AffinityProfile]) -> List[AffinityResult]:
		"""Every profile, unfiltered, in profile order."""
		return [self.score(signals, p) for p in profiles]

	def match(self, signals: AffinitySignals, profiles: List[AffinityProfile]) -> List[AffinityResult]:
		ranked = self._rank(self.score_all(signals, profiles), self.top_n)
		logger.debug(f"[Affinity] {len(profiles)} profiles, returning {len(ranked)} at or above {self.min_score}")
		return ranked

	def match_by_kind(self, signals: AffinitySignals, profiles: List[AffinityProfile]) -> Dict[str, List[AffinityResult]]:
		"""One ranked list per kind in kind_top_n, each cut to its own size."""
		scored = self.score_all(signals, profiles)
		lists = {
			kind: self._rank([r for r in scored if r.profile.kind == kind], top_n)
			for kind, top_n in self.kind_top_n.items()
		}
		logger.debug("[Affinity] per kind: " + ", ".join(f"{kind}={len(v)}" for kind, v in lists.items()))
		return lists

	def _rank(self, results: List[AffinityResult], top_n: int) -> List[AffinityResult]:
		kept = [r for r in results if r.score >= self.min_score]
		return sorted(kept, key=lambda r: r.score, reverse=True)[:top_n]

	def _evaluate(self, attribute: str, signals: AffinitySignals, profile: AffinityProfile) -> Tuple[int, Dict[str, str]]:
		if attribute.startswith('cue:'):
			keywords = profile.cues.get(attribute[4:], [])
			return int(mentions_any(signals.text, keywords)), {}
		predicate = self.PREDICATES.get(attribute)
		if predicate is None:
			raise ValueError(f"Unknown affinity attribute: {attribute}")
		return predicate(signals, profile)

	@staticmethod
	def _blank_context() -> Dict[str, str]:
		return {'genre': '', 'tone': '', 'theme': '', 'need': '', 'protagonist': '', 'title': ''}


# ----------------------------------------------------------------------
# Call sites
# ----------------------------------------------------------------------

PARTNER_CRITERIA = [
	Criterion('genre', 'genre', 25, clause='{name} has been actively acquiring {genre} content'),
	Criterion('secondary genre', 'secondary_genre', 10),
	Criterion('format', 'format', 15),
	Criterion('format family', 'format_family', 8, unless='format'),
	Criterion('tone', 'tone', 10),
	Criterion('budget', 'budget', 10),
	Criterion('themes', 'themes', 5, per_match=True, cap=15, clause='Aligns with their focus on {theme} themes'),
	Criterion('acquisitions', 'credits', 20, clause='Recently acquired {title}'),
	Criterion('current needs', 'priorities', 10, clause='Currently seeking {need}'),
]

TALENT_CRITERIA = {
	'director': [
		Criterion('genre', 'genre', 25, clause='Proven {genre} filmmaker'),
		Criterion('series format', 'series_format', 15, clause='TV experience'),
		Criterion('film format', 'film_format', 15),
		Criterion('tone', 'tone', 15, clause='Matches {tone} tone'),
		Criterion('budget', 'budget', 10),
		Criterion('credits', 'credits', 20, clause='Directed similar project'),
	],
	'actor': [
		Criterion('genre', 'genre', 20, clause='Genre experience'),
		Criterion('specialty', 'specialties', 20, clause='Excels at {protagonist} roles'),
		Criterion('themes', 'themes', 10, clause='Strong in {theme} narratives'),
		Criterion('tone', 'tone', 10),
		Criterion('budget', 'budget', 10),
		Criterion('momentum', 'momentum', 10, clause='Currently hot'),
	],
	'writer': [
		Criterion('genre', 'genre', 25, clause='{genre} specialist'),
		Criterion('series format', 'series_format', 15, clause='TV writing experience'),
		Criterion('film format', 'film_format', 15),
		Criterion('themes', 'themes', 15, clause='Explores {theme} themes'),
	],
}

FRANCHISE_CRITERIA = {
	'Sequel': [
		Criterion('recurring protagonist', 'specialties', 20, clause='Protagonist can return for new adventures'),
		Criterion('genre', 'genre', 15, clause='Genre has strong sequel tradition'),
		Criterion('ongoing threat', 'cue:ongoing', 15, clause='Larger threat can continue'),
		Criterion('character growth', 'cue:growth', 10, clause='Character evolution arc'),
		Criterion('finality', 'cue:finality', -15),
	],
	'Spinoff': [
		Criterion('ensemble', 'cue:ensemble', 25, clause='Individual character origin stories'),
		Criterion('setting', 'settings', 20, clause="Explore other corners of the world"),
		Criterion('factions', 'cue:factions', 15, clause='Tell the story from antagonist perspective'),
		Criterion('lineage', 'cue:lineage', 15, clause='Prequel exploring origins'),
	],
	'Universe': [
		Criterion('world', 'cue:world', 30, clause="Expand the world's geography and factions"),
		Criterion('genre', 'genre', 20, clause='Genre supports extended universe storytelling'),
		Criterion('mythology', 'cue:mythology', 15, clause='Develop lore and mythology'),
		Criterion('setting', 'settings', 10, clause='Setting supports diverse narrative types'),
	],
}


def partner_matcher() -> AffinityMatcher:
	return AffinityMatcher(
		{'*': PARTNER_CRITERIA},
		top_n=config.PARTNER_TOP_N,
		base=config.PARTNER_BASE,
		fallback={'*': 'Format and genre align with their content strategy'},
	)


def talent_matcher() -> AffinityMatcher:
	return AffinityMatcher(
		TALENT_CRITERIA,
		top_n=max(config.TALENT_TOP_N.values()),
		base=config.TALENT_BASE,
		fallback={
			'director': 'Strong genre fit',
			'actor': 'Strong fit for role',
			'supporting': 'Versatile supporting cast available',
			'writer': 'Strong genre fit',
		},
		kind_top_n=config.TALENT_TOP_N,
	)


def franchise_matcher() -> AffinityMatcher:
	"""Franchise dimension profiles carry their own base scores."""
	return AffinityMatcher(FRANCHISE_CRITERIA, top_n=config.FRANCHISE_TOP_N, base=0)


def talent_package(budget_tier: Optional[str], fmt: str) -> TalentPackage:
	"""Packaging tier and cost estimate for the budget, series priced higher."""
	series = format_family(fmt) == 'series'
	tier = (budget_tier or '').lower()
	if tier in ('blockbuster', 'high'):
		return TalentPackage('A-List', '$30M-$80M' if series else '$15M-$40M')
	if tier in ('micro', 'low'):
		return TalentPackage('Rising Star', '$3M-$10M' if series else '$1M-$5M')
	return TalentPackage('Mixed', '$10M-$30M' if series else '$5M-$15M')


def _threshold_text(rows: List[List[Any]], score: int) -> str:
	for threshold, text in rows:
		if score >= threshold:
			return text
	return ''


def franchise_potential(
	dimensions: List[AffinityResult],
	profile: NarrativeFeatureProfile,
	concept: ConceptInput,
	tables: Dict[str, Any],
) -> FranchisePotential:
	"""
	Summarize the three franchise dimension scores (all of them, unfiltered)
	into an overall score, a tier and the supporting notes.
	"""
	by_kind = {r.profile.kind: r.score for r in dimensions}
	sequel = by_kind.get('Sequel', 0)
	spinoff = by_kind.get('Spinoff', 0)
	universe = by_kind.get('Universe', 0)
	weights = config.FRANCHISE_WEIGHTS
	overall = int(round(sequel * weights['Sequel'] + spinoff * weights['Spinoff'] + universe * weights['Universe']))
	viable_sequel = sequel >= config.SEQUEL_VIABLE_AT
	world_buildable = universe >= config.WORLD_BUILDABLE_AT

	if overall >= 75 and world_buildable:
		tier = 'High Franchise Potential'
	elif overall >= 55 and viable_sequel:
		tier = 'Sequel Viable'
	elif overall >= 40:
		tier = 'Standalone'
	else:
		tier = 'Limited'

	reasoning_rows = tables.get('reasoning', {})
	reasoning = []
	for kind, score in (('Sequel', sequel), ('Spinoff', spinoff), ('Universe', universe)):
		text = _threshold_text(reasoning_rows.get(kind, []), score)
		if text:
			reasoning.append(text)

	text = concept.text()
	genre = concept.genre
	setting = profile.setting if is_set(profile.setting) else None
	protagonist = profile.protagonist_type if is_set(profile.protagonist_type) else None

	strengths = []
	if protagonist and protagonist in tables.get('iconic_protagonists', []):
		strengths.append('Iconic protagonist type with franchise history')
	if mentions_any(text, tables.get('high_concept_cues', [])):
		strengths.append('High-concept hook drives audience interest')
	if genre in tables.get('merchandise_genres', []):
		strengths.append('Genre supports merchandise and licensing')
	if setting and setting in tables.get('rich_settings', []):
		strengths.append('Rich setting for world expansion')

	weaknesses = []
	if mentions_any(text, tables.get('finite_cues', [])):
		weaknesses.append('Story implies finite resolution')
	if mentions_any(text, tables.get('intimate_cues', [])):
		weaknesses.append('Intimate scope limits expansion')
	if genre in tables.get('non_franchise_genres', []):
		weaknesses.append('Genre typically not franchise-oriented')
	if setting and setting in tables.get('contained_settings', []):
		weaknesses.append('Contained setting limits world-building')

	successes = [
		{k: s.get(k) for k in ('title', 'outcome', 'sequel_count', 'total_revenue')}
		for s in tables.get('successes', [])
		if genre in s.get('genres', []) or tier in s.get('tiers', [])
	][:4]

	logger.debug(f"[Franchise] sequel={sequel} spinoff={spinoff} universe={universe} overall={overall} tier={tier}")
	return FranchisePotential(
		overall=overall,
		tier=tier,
		sequel=sequel,
		spinoff=spinoff,
		universe=universe,
		world_buildable=world_buildable,
		viable_sequel=viable_sequel,
		reasoning=reasoning,
		strengths=strengths,
		weaknesses=weaknesses,
		recommendation=tables.get('recommendations', {}).get(tier, ''),
		successes=successes,
	)
