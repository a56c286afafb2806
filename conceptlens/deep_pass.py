"""
Deep pass module.
Re-reads the concept with a richer set of tables (protagonist psychology, themes,
structure, emotion, commercial and cultural signals), re-scores the corpus with the
precision weight profile and folds everything into a single verdict.
"""

from typing import Any, Callable, Dict, Iterable, List, Optional

from loguru import logger

from . import config
from .keywords import all_matches, best_match, first_match, last_match, mentions_all, mentions_any, score_table
from .models import (
	CommercialProfile,
	ComparableEntry,
	ConceptInput,
	DeepPassResult,
	EmotionalProfile,
	ExecutivePerspective,
	MatchResult,
	NarrativeFeatureProfile,
	ProtagonistProfile,
	StructureProfile,
	ThematicProfile,
	Zeitgeist,
)
from .forecaster import Forecaster
from .ranking import Ranker
from .similarity import PrecisionScorer, format_family

# Flag lists fall back to these placeholders; placeholders never count toward the score
NO_GREEN_FLAGS = 'Compelling concept'
NO_RED_FLAGS = 'None significant'

Mapper = Callable[[Callable, Iterable], Iterable]


class DeepPass:
	"""
	Second, more expensive analysis layer.

	Usage:
		deep = DeepPass(PrecisionScorer(tables), Ranker(config.PRECISION_THRESHOLD), Forecaster(tables), tables, deep_tables)
		result = deep.run(concept, profile, corpus)
	"""

	ARCHETYPE_POINTS = 3  # per keyword hit
	SECONDARY_RESONANCE = ('Family', 'Love')  # resonance also read from secondary themes
	GENRE_QUADRANTS = {'Horror': 'Male-skewing', 'Action': 'Male-skewing', 'Romance': 'Female-skewing', 'Drama': 'Female-skewing'}
	STUDIO_FIT = {'Horror': 'Blumhouse, A24, Neon', 'Drama': 'A24, Searchlight, Focus Features'}

	def __init__(
		self,
		scorer: PrecisionScorer,
		ranker: Ranker,
		forecaster: Forecaster,
		tables: Dict[str, Any],
		deep_tables: Dict[str, Any],
	):
		self.scorer = scorer
		self.ranker = ranker
		self.forecaster = forecaster
		self.tables = tables  # market tables
		self.deep = deep_tables  # deep-pass keyword tables

	def run(
		self,
		concept: ConceptInput,
		profile: NarrativeFeatureProfile,
		corpus: List[ComparableEntry],
		mapper: Optional[Mapper] = None,
	) -> DeepPassResult:
		mapper = mapper or map
		text = concept.text()
		genre = concept.genre

		archetype = best_match(text, self.deep.get('primary_archetypes', {}), self.ARCHETYPE_POINTS) or 'Character-Driven Drama'
		engine = first_match(text, self.deep.get('narrative_engines', {})) or 'Character Evolution'
		hybrids = self.genre_hybrids(text, genre, concept.secondary_genre)

		protagonist = self.protagonist(text)
		thematic = self.thematic(text)
		structure = self.structure(text, concept.format, profile)
		emotional = self.emotional(text, genre)
		commercial = self.commercial(text, genre)
		zeitgeist = self.zeitgeist(text, genre, thematic, commercial)
		executive = self.executive(concept, archetype, engine, hybrids, protagonist, thematic, structure, emotional, commercial)

		# Precision re-score of the whole corpus
		scored = list(mapper(lambda entry: self.scorer.score(concept, profile, entry), corpus))
		matches = self.ranker.rank(scored)
		forecast = self.forecaster.forecast(matches, concept.budget_tier, genre, concept.format)

		overall = self.overall_score(protagonist, thematic, structure, commercial, zeitgeist, executive, matches)
		verdict = config.band_label(overall, config.VERDICT_BANDS)
		rationale = self.verdict_rationale(protagonist, thematic, commercial, zeitgeist, executive, matches)
		logger.info(f"[DeepPass] {len(matches)} precision matches, overall={overall} verdict={verdict}")

		return DeepPassResult(
			archetype=archetype,
			engine=engine,
			hybrids=hybrids,
			protagonist=protagonist,
			thematic=thematic,
			structure=structure,
			emotional=emotional,
			commercial=commercial,
			zeitgeist=zeitgeist,
			executive=executive,
			matches=matches,
			forecast=forecast,
			overall=overall,
			verdict=verdict,
			rationale=rationale,
		)

	# ------------------------------------------------------------------
	# Re-extraction
	# ------------------------------------------------------------------

	def genre_hybrids(self, text: str, genre: str, secondary: Optional[str]) -> List[str]:
		hybrids = [genre]
		if secondary:
			hybrids.append(secondary)
		hybrids.extend(all_matches(text, self.deep.get('hybrid_cues', {})))
		return list(dict.fromkeys(h for h in hybrids if h))  # dedupe, keep order

	def protagonist(self, text: str) -> ProtagonistProfile:
		desire, need = 'External goal', 'internal need'
		for rule in self.deep.get('desires', []):
			if mentions_any(text, rule['keywords']):
				desire, need = rule['desire'], rule['need']
				break

		empathy = 60
		for rule in self.deep.get('empathy_rules', []):
			if mentions_any(text, rule['keywords']):
				empathy += rule['points']
		empathy = int(config.clamp(empathy, 30, 95))
		if empathy >= 70:
			relatability = 'Highly relatable'
		elif empathy >= 50:
			relatability = 'Moderately relatable'
		else:
			relatability = 'Challenging protagonist'

		traits = all_matches(text, self.deep.get('traits', {}))[:4]
		return ProtagonistProfile(
			wound=first_match(text, self.deep.get('wounds', {})) or 'Undefined trauma',
			desire=desire,
			need=need,
			archetype=first_match(text, self.deep.get('protagonist_archetypes', {})) or 'The Everyman',
			agency='Active protagonist' if mentions_any(text, self.deep.get('agency_cues', [])) else 'Reactive protagonist',
			arc=first_match(text, self.deep.get('arcs', {})) or 'Positive change arc',
			empathy=empathy,
			relatability=relatability,
			moral_complexity='Morally complex' if mentions_any(text, self.deep.get('moral_cues', [])) else 'Clear moral compass',
			traits=traits or ['Complex', 'Multi-dimensional'],
		)

	def thematic(self, text: str) -> ThematicProfile:
		themes = self.deep.get('themes', {})
		scores = score_table(text, themes)
		primary = best_match(text, themes) or 'Self-discovery'
		secondary = [t for t in scores if t != primary][:3]
		depth = int(config.clamp(max(scores.values(), default=0) * 15, 45, 95))

		truth = 'The search for meaning in a complex world'
		for key, statement in self.deep.get('universal_truths', {}).items():
			if key in primary:
				truth = statement  # later keys win

		resonance: List[str] = []
		for key, audiences in self.deep.get('resonance', {}).items():
			hit = key in primary or (key in self.SECONDARY_RESONANCE and any(key in s for s in secondary))
			if hit:
				resonance.extend(a for a in audiences if a not in resonance)

		return ThematicProfile(
			primary=primary,
			secondary=secondary,
			universal_truth=truth,
			cultural_relevance=last_match(text, self.deep.get('cultural_relevance', {})) or 'Timeless human concern',
			depth=depth,
			resonance=resonance or ['General audiences', 'Genre enthusiasts'],
		)

	def structure(self, text: str, fmt: str, profile: NarrativeFeatureProfile) -> StructureProfile:
		hook, hook_score = 'Standard hook', 60
		for rule in self.deep.get('hooks', []):
			if 'all' in rule:
				fired = mentions_all(text, rule['all'])
			else:
				fired = mentions_any(text, rule.get('any', []))
			if fired:
				hook, hook_score = rule['label'], rule['score']  # later rules win

		series = format_family(fmt) == 'series'
		if mentions_any(text, ['parallel', 'multiple']):
			structure_type = 'Multi-threaded narrative'
		elif series:
			structure_type = 'Episodic/Serial'
		else:
			structure_type = '3-Act Structure'

		beats = list(dict.fromkeys(profile.story_beats))
		return StructureProfile(
			hook=hook,
			hook_score=hook_score,
			escalation=last_match(text, self.deep.get('escalation', {})) or 'Linear escalation',
			structure_type=structure_type,
			beats=beats,
			setpieces=all_matches(text, self.deep.get('setpieces', {})) or ['Character-driven moments'],
			pacing='Episodic pacing' if series else 'Feature pacing',
			integrity=int(config.clamp(45 + 10 * len(beats), 30, 95)),
		)

	def emotional(self, text: str, genre: str) -> EmotionalProfile:
		journey = ['Opening intrigue'] + all_matches(text, self.deep.get('journey', {})) + ['Emotional payoff']
		catharsis = last_match(text, self.deep.get('catharsis', {}))
		return EmotionalProfile(
			primary_emotion=self.deep.get('genre_emotions', {}).get(genre, 'Emotional engagement'),
			journey=journey,
			catharsis=f"{catharsis} catharsis" if catharsis else 'Satisfying resolution',
			complexity=85 if len(journey) > 4 else 65,
			memorable_moments=all_matches(text, self.deep.get('memorable_moments', {})) or ['Character-defining moment'],
		)

	def commercial(self, text: str, genre: str) -> CommercialProfile:
		quadrant = self.GENRE_QUADRANTS.get(genre, 'General audiences')
		if mentions_any(text, ['family', 'adventure']):
			quadrant = 'Four quadrant'

		wom = 60
		for rule in self.deep.get('word_of_mouth_rules', []):
			if mentions_any(text, rule['keywords']):
				wom += rule['points']

		return CommercialProfile(
			position=last_match(text, self.deep.get('market_positions', {})) or 'Mid-market positioning',
			quadrant=quadrant,
			hooks=all_matches(text, self.deep.get('commercial_hooks', {})) + ['Genre-specific marketing'],
			word_of_mouth=int(config.clamp(wom, 40, 95)),
			advantages=all_matches(text, self.deep.get('advantages', {})) + ['Genre execution'],
		)

	def zeitgeist(self, text: str, genre: str, thematic: ThematicProfile, commercial: CommercialProfile) -> Zeitgeist:
		moment = last_match(text, self.deep.get('cultural_moments', {})) or 'Evergreen human story'

		trends = ['Genre revival interest']
		if 'digital' in thematic.cultural_relevance:
			trends.append('Tech skepticism')
		if 'Female' in commercial.quadrant:
			trends.append('Female-led storytelling demand')
		trends.append('Elevated genre appreciation')

		conversation = 'Character-driven discussions'
		for key, topic in self.deep.get('conversations', {}).items():
			if key in thematic.primary:
				conversation = topic

		relevance = 60
		if moment != 'Evergreen human story':
			relevance += 20
		if len(trends) > 2:
			relevance += 10
		relevance = int(config.clamp(relevance, 40, 95))

		if thematic.depth > 80:
			awards = 'Awards contender'
		elif genre == 'Drama':
			awards = 'Strong Oscar potential'
		else:
			awards = 'Genre recognition potential'

		return Zeitgeist(
			moment=moment,
			trends=trends,
			conversation=conversation,
			timeliness='Highly timely' if relevance > 70 else 'Moderately timely',
			social_relevance=relevance,
			polarization_risk='Some polarization risk' if mentions_any(text, self.deep.get('polarizing_cues', [])) else 'Low polarization risk',
			hashtags=self.hashtags(genre, commercial.word_of_mouth),
			awards=awards,
		)

	@staticmethod
	def hashtags(genre: str, word_of_mouth: int) -> List[str]:
		tag = ''.join(ch for ch in genre if ch.isalnum())
		tags = [f"#MustSee{tag}"]
		if word_of_mouth > 70:
			tags.append('#MovieOfTheYear')
		tags.append(f"#{tag}Film")
		return tags

	# ------------------------------------------------------------------
	# Executive perspective
	# ------------------------------------------------------------------

	def executive(
		self,
		concept: ConceptInput,
		archetype: str,
		engine: str,
		hybrids: List[str],
		protagonist: ProtagonistProfile,
		thematic: ThematicProfile,
		structure: StructureProfile,
		emotional: EmotionalProfile,
		commercial: CommercialProfile,
	) -> ExecutivePerspective:
		green = []
		if protagonist.empathy > 70:
			green.append('Strong protagonist empathy')
		if thematic.depth > 70:
			green.append('Thematic resonance')
		if structure.integrity > 75:
			green.append('Solid narrative structure')
		if commercial.word_of_mouth > 70:
			green.append('Word-of-mouth potential')
		if len(hybrids) > 2:
			green.append('Genre-blending appeal')

		red = []
		if protagonist.empathy < 50:
			red.append('Protagonist likability concerns')
		if structure.integrity < 60:
			red.append('Narrative clarity issues')
		if thematic.depth < 50:
			red.append('Thematic depth questions')

		if len(red) > 2:
			risk = 'Higher risk'
		elif not red:
			risk = 'Lower risk'
		else:
			risk = 'Moderate risk'

		position = commercial.position
		if 'Tentpole' in position:
			sweet_spot = '$100M - $200M'
			studio_fit = 'Major studios (Universal, Warner Bros, Disney)'
		else:
			sweet_spot = '$5M - $20M' if 'indie' in position else '$30M - $60M'
			studio_fit = self.STUDIO_FIT.get(concept.genre, 'Wide appeal')

		notes = ["Clarify protagonist's internal journey", 'Strengthen act two complications']
		if red:
			notes.append(f"Address {red[0].lower()}")
		notes.append('Ensure climax delivers on thematic promise')

		pitch = (
			f"A {concept.genre.lower()} that explores {thematic.primary.lower()} "
			f"through the lens of {archetype.lower()}. "
			f"{engine} drives a {emotional.primary_emotion.lower()} experience "
			f"with {commercial.quadrant.lower()} appeal."
		)
		titles = self.tables.get('comp_formulas', {}).get(concept.genre, ['Original concept'])
		formula = f"{titles[0]} meets {titles[1] if len(titles) > 1 else 'fresh perspective'}"

		return ExecutivePerspective(
			green_flags=green or [NO_GREEN_FLAGS],
			red_flags=red or [NO_RED_FLAGS],
			risk=risk,
			budget_sweet_spot=sweet_spot,
			studio_fit=studio_fit,
			notes=notes,
			elevator_pitch=pitch,
			comp_formula=formula,
		)

	# ------------------------------------------------------------------
	# Verdict
	# ------------------------------------------------------------------

	def overall_score(
		self,
		protagonist: ProtagonistProfile,
		thematic: ThematicProfile,
		structure: StructureProfile,
		commercial: CommercialProfile,
		zeitgeist: Zeitgeist,
		executive: ExecutivePerspective,
		matches: List[MatchResult],
	) -> int:
		"""
		DEEP_SCORE_BASE plus each blend component times its weight (rounded per
		component), plus flag adjustments, clamped to [DEEP_SCORE_MIN, DEEP_SCORE_MAX].
		"""
		components = {
			'empathy': protagonist.empathy,
			'thematic_depth': thematic.depth,
			'structural_integrity': structure.integrity,
			'word_of_mouth': commercial.word_of_mouth,
			'social_relevance': zeitgeist.social_relevance,
			'precision_match': Ranker.average_overall(matches),
		}
		weights = config.DEEP_BLEND_WEIGHTS
		blended = config.DEEP_SCORE_BASE + sum(round(weights[k] * v) for k, v in components.items())
		green = len([f for f in executive.green_flags if f != NO_GREEN_FLAGS])
		red = len([f for f in executive.red_flags if f != NO_RED_FLAGS])
		score = blended + green * config.GREEN_FLAG_POINTS - red * config.RED_FLAG_POINTS
		return int(config.clamp(score, config.DEEP_SCORE_MIN, config.DEEP_SCORE_MAX))

	def verdict_rationale(
		self,
		protagonist: ProtagonistProfile,
		thematic: ThematicProfile,
		commercial: CommercialProfile,
		zeitgeist: Zeitgeist,
		executive: ExecutivePerspective,
		matches: List[MatchResult],
	) -> str:
		strengths = []
		if protagonist.empathy > 70:
			strengths.append('compelling protagonist')
		if thematic.depth > 70:
			strengths.append('thematic resonance')
		if commercial.word_of_mouth > 70:
			strengths.append('word-of-mouth potential')
		if zeitgeist.social_relevance > 70:
			strengths.append('cultural timeliness')

		rationale = f"Strong {', '.join(strengths)}" if strengths else ''
		concern = executive.red_flags[0] if executive.red_flags[0] != NO_RED_FLAGS else None
		if concern:
			rationale += f". Address: {concern.lower()}" if rationale else f"Note: {concern.lower()}"
		rationale = rationale or 'Solid commercial and creative potential'
		if matches:
			top = matches[0]
			rationale += f". Closest precision comparable: {top.entry.title} ({top.overall}% match)"
		return rationale
