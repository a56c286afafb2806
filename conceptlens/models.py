"""
Data models for the ConceptLens analysis engine.
Defines the core data structures used throughout the system.
"""

# Import dataclass to define simple "record-like" classes without boilerplate
from dataclasses import dataclass, field, asdict  # auto-generates __init__, __repr__, etc.
# Import typing helpers for precise and self-documenting types
from typing import Any, Dict, List, Optional  # lists, optional values, mappings

from .config import UNSET  # sentinel for undetected categorical tags


@dataclass(frozen=True)
class ConceptInput:
	"""
	A creative pitch as submitted by the caller.
	Created once per analysis request and never mutated afterwards.
	"""
	logline: str  # one or two sentence premise
	genre: str  # canonical primary genre (e.g., "Horror")
	format: str  # "Feature Film" | "Series" | "Limited Series"
	secondary_genre: Optional[str] = None  # optional second genre
	tone: Optional[str] = None  # free text, may hold several comma-separated tones
	target_audience: Optional[str] = None  # free text (e.g., "Adults 18-34")
	budget_tier: Optional[str] = None  # micro | low | medium | high | blockbuster
	synopsis: Optional[str] = None  # longer description, used for extraction only
	user_comparable: Optional[str] = None  # free text analogy (e.g., "X meets Y")

	def text(self) -> str:
		"""Lowercased logline plus synopsis, the text every extractor reads."""
		parts = [self.logline or '', self.synopsis or '']
		return ' '.join(p.strip() for p in parts if p and p.strip()).lower()


@dataclass
class NarrativeFeatureProfile:
	"""
	Structured tags extracted from free text (or pre-tagged on a corpus entry).
	Every categorical field is a recognized tag or UNSET, never an empty string.
	"""
	# First-pass (baseline) tags
	protagonist_type: str = UNSET  # detective, parent, outsider, ...
	protagonist_trait: str = UNSET  # disgraced, reluctant, ...
	central_conflict: str = UNSET  # survival, discovery, ...
	setting: str = UNSET  # small town, urban, space, ...
	stakes_level: str = UNSET  # global | life-or-death | personal
	themes: List[str] = field(default_factory=list)  # family, mortality, ...
	genre_elements: List[str] = field(default_factory=list)  # twist ending, slow burn, ...
	# Precision (deep-pass) tags
	narrative_archetype: str = UNSET  # Revenge Quest, Survival, ...
	protagonist_archetype: str = UNSET  # Reluctant Hero, Antihero, ...
	conflict_type: str = UNSET  # Person vs Person, ...
	stakes_scope: str = UNSET  # Personal | Community | Global | Cosmic
	structure_type: str = UNSET  # Linear, Non-linear, ...
	story_beats: List[str] = field(default_factory=list)  # Inciting Incident, ...
	emotional_tones: List[str] = field(default_factory=list)  # Dread, Hope, ...
	primary_emotion: str = UNSET  # Fear, Tension, ...
	emotional_intensity: float = 0.0  # 0..1
	audience_quadrant: str = UNSET  # Four Quadrant, Male 18-34, ...
	budget_implication: str = UNSET  # Micro | Low | Medium | High | Tentpole
	platform_affinity: str = UNSET  # Theatrical, Netflix, ...
	genre_markers: List[str] = field(default_factory=list)  # creature, twist, ...
	unique_hooks: List[str] = field(default_factory=list)  # True Story, Major Twist, ...
	key_imagery: List[str] = field(default_factory=list)  # Urban, Space, ...


@dataclass
class AnalogyParse:
	"""Result of parsing a user-supplied analogy such as "Parasite meets Knives Out"."""
	title1: Optional[str]  # first referenced title
	title2: Optional[str] = None  # second referenced title
	title3: Optional[str] = None  # third title (comma/slash form only)
	parse_format: str = 'single title'  # which grammar rule matched
	inferred_elements: List[str] = field(default_factory=list)  # tags seeded from known titles

	def titles(self) -> List[str]:
		return [t for t in (self.title1, self.title2, self.title3) if t]


@dataclass
class ComparableEntry:
	"""
	A static reference corpus record: identity, tags and known outcome data.
	Outcome numbers are in $M and any of them may be None (TV/streaming titles).
	"""
	title: str  # display title
	year: int  # release year
	genre: str  # canonical primary genre
	format: str  # Feature Film | Series | Limited Series
	platform: str  # Theatrical, Netflix, HBO, ...
	distributor: str = ''  # studio / distributor
	logline: str = ''  # short premise
	sub_genres: List[str] = field(default_factory=list)  # secondary genres
	tones: List[str] = field(default_factory=list)  # lowercase tone words
	budget: Optional[float] = None  # production budget ($M)
	domestic_gross: Optional[float] = None  # domestic box office ($M)
	worldwide_gross: Optional[float] = None  # worldwide box office ($M)
	opening_weekend: Optional[float] = None  # opening weekend ($M)
	rt_score: Optional[int] = None  # critics score 0-100
	audience_score: Optional[int] = None  # audience score 0-100
	roi: Optional[float] = None  # return multiple
	budget_tier: Optional[str] = None  # micro | low | medium | high | blockbuster
	release_window: Optional[str] = None  # Spring, Fall, ...
	oscar_nominated: bool = False
	oscar_winner: bool = False
	key_talent: List[str] = field(default_factory=list)  # notable cast / crew
	keywords: List[str] = field(default_factory=list)  # comparable keywords
	features: NarrativeFeatureProfile = field(default_factory=NarrativeFeatureProfile)  # tags


@dataclass
class DimensionScore:
	name: str  # genre, tone, narrative, ...
	score: int  # 0..100


@dataclass
class MatchResult:
	"""A scored comparison between a concept and one corpus entry."""
	entry: ComparableEntry  # matched corpus entry
	dimensions: List[DimensionScore]  # per-dimension scores, fixed order
	overall: int  # weighted, rounded, clamped to [0, 100]
	match_strength: str = 'Weak'  # Strong | Moderate | Weak
	primary_reason: str = ''  # strongest dimension
	matching_elements: List[str] = field(default_factory=list)  # dimensions above their bar
	differentiators: List[str] = field(default_factory=list)  # dimensions below their bar
	why_it_matches: str = ''
	how_it_differs: str = ''
	market_insight: str = ''
	strategic_takeaway: str = ''

	def dimension(self, name: str) -> int:
		"""Score of a named dimension (0 when absent)."""
		for d in self.dimensions:
			if d.name == name:
				return d.score
		return 0


@dataclass
class ForecastResult:
	"""Financial outcome range ($M) derived from comparables or the genre baseline."""
	domestic_low: float
	domestic_likely: float
	domestic_high: float
	worldwide_low: float
	worldwide_likely: float
	worldwide_high: float
	roi: float  # expected return multiple
	confidence: int  # 0..100
	confidence_label: str  # Very High | High | Medium | Low
	based_on: List[str] = field(default_factory=list)  # comparable titles used
	rationale: str = ''
	key_risk: str = ''
	upside: str = ''
	genre_baseline: str = ''
	format_note: str = ''
	market_timing: str = ''
	used_fallback: bool = False  # True when no comparable carried outcome data


@dataclass
class AffinityProfile:
	"""
	One entry of a profile database: a distribution partner, a talent, or a franchise dimension.
	Empty preference lists simply never fire their criteria.
	"""
	name: str  # display name
	kind: str  # Streamer, director, actor, Sequel, ...
	genres: List[str] = field(default_factory=list)  # preferred genres
	formats: List[str] = field(default_factory=list)  # formats they work in
	tones: List[str] = field(default_factory=list)  # preferred tone words
	themes: List[str] = field(default_factory=list)  # preferred themes
	budget_tiers: List[str] = field(default_factory=list)  # tiers they fund / fit
	priorities: List[str] = field(default_factory=list)  # current needs (free text)
	credits: List[str] = field(default_factory=list)  # acquisitions / filmography
	specialties: List[str] = field(default_factory=list)  # role specialties or recurring protagonist types
	settings: List[str] = field(default_factory=list)  # settings that fire the setting criterion
	cues: Dict[str, List[str]] = field(default_factory=dict)  # cue group -> keywords
	momentum: bool = False  # currently in demand
	base: Optional[int] = None  # overrides the matcher base score
	budget_range: Optional[str] = None  # display only
	quote: Optional[str] = None  # display only
	agency: Optional[str] = None  # display only
	availability: Optional[str] = None  # display only


@dataclass
class AffinityResult:
	profile: AffinityProfile  # scored profile
	score: int  # 0..100
	matched: List[str] = field(default_factory=list)  # fired criteria, table order
	rationale: str = ''  # joined clauses of fired criteria


@dataclass
class FranchisePotential:
	overall: int  # 0.4 sequel + 0.3 spinoff + 0.3 universe
	tier: str  # High Franchise Potential | Sequel Viable | Standalone | Limited
	sequel: int
	spinoff: int
	universe: int
	world_buildable: bool
	viable_sequel: bool
	reasoning: List[str] = field(default_factory=list)  # one line per dimension
	strengths: List[str] = field(default_factory=list)
	weaknesses: List[str] = field(default_factory=list)
	recommendation: str = ''
	successes: List[Dict[str, Any]] = field(default_factory=list)  # franchise precedents


@dataclass
class TalentPackage:
	tier: str  # A-List | Rising Star | Mixed
	estimated_cost: str  # dollar range


@dataclass
class LoglineQuality:
	hook_strength: int  # 0..100
	hook_type: str  # Mystery, Irony, Stakes, ...
	clarity: int  # 0..100
	emotional_hook: int  # 0..100
	marketability: int  # 0..100
	word_count: int
	optimal_length: bool  # 20-40 words
	strengths: List[str] = field(default_factory=list)
	improvements: List[str] = field(default_factory=list)
	pitch_recommendation: str = ''


@dataclass
class MarketPositioning:
	competitive_space: str
	target_quadrant: str
	release_window: str
	competing_projects: List[str]
	differentiation: str
	crowdedness: int  # 0..100


@dataclass
class ProtagonistProfile:
	wound: str
	desire: str
	need: str
	archetype: str
	agency: str
	arc: str
	empathy: int  # 30..95
	relatability: str
	moral_complexity: str
	traits: List[str] = field(default_factory=list)


@dataclass
class ThematicProfile:
	primary: str
	secondary: List[str]
	universal_truth: str
	cultural_relevance: str
	depth: int  # 45..95
	resonance: List[str] = field(default_factory=list)


@dataclass
class StructureProfile:
	hook: str
	hook_score: int
	escalation: str
	structure_type: str
	beats: List[str]
	setpieces: List[str]
	pacing: str
	integrity: int  # 30..95


@dataclass
class EmotionalProfile:
	primary_emotion: str
	journey: List[str]
	catharsis: str
	complexity: int
	memorable_moments: List[str] = field(default_factory=list)


@dataclass
class CommercialProfile:
	position: str
	quadrant: str
	hooks: List[str]
	word_of_mouth: int  # 40..95
	advantages: List[str] = field(default_factory=list)


@dataclass
class Zeitgeist:
	moment: str
	trends: List[str]
	conversation: str
	timeliness: str
	social_relevance: int  # 40..95
	polarization_risk: str
	hashtags: List[str]
	awards: str


@dataclass
class ExecutivePerspective:
	green_flags: List[str]
	red_flags: List[str]
	risk: str
	budget_sweet_spot: str
	studio_fit: str
	notes: List[str]
	elevator_pitch: str
	comp_formula: str


@dataclass
class DeepPassResult:
	archetype: str  # primary narrative archetype
	engine: str  # narrative engine
	hybrids: List[str]  # genre hybridization
	protagonist: ProtagonistProfile
	thematic: ThematicProfile
	structure: StructureProfile
	emotional: EmotionalProfile
	commercial: CommercialProfile
	zeitgeist: Zeitgeist
	executive: ExecutivePerspective
	matches: List[MatchResult]  # ranked precision matches
	forecast: ForecastResult  # forecast from the precision matches
	overall: int  # 35..98
	verdict: str  # verdict band label
	rationale: str


@dataclass
class Report:
	"""Aggregate returned to the caller, created fresh per analysis."""
	concept: ConceptInput
	profile: NarrativeFeatureProfile
	analogy: Optional[AnalogyParse]
	comparables: List[MatchResult]
	forecast: ForecastResult
	partners: List[AffinityResult]
	directors: List[AffinityResult]
	lead_actors: List[AffinityResult]
	supporting_actors: List[AffinityResult]
	writers: List[AffinityResult]
	franchise_dimensions: List[AffinityResult]
	franchise: FranchisePotential
	talent_package: TalentPackage
	logline: LoglineQuality
	positioning: MarketPositioning
	deep: Optional[DeepPassResult] = None
	verdict: Optional[str] = None
	verdict_rationale: Optional[str] = None

	def to_dict(self) -> Dict[str, Any]:
		"""JSON-ready dict; key order follows field declaration order."""
		return asdict(self)
