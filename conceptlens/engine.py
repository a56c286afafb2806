"""
Concept analysis engine.
Wires the loader, extractor, scorers, ranker, forecaster and affinity matchers
into one pipeline that turns a ConceptInput into a Report.
"""

from concurrent.futures import ThreadPoolExecutor  # optional parallel per-entry scoring
from dataclasses import replace  # normalized copy of the frozen input
from pathlib import Path  # data directory override
from typing import Any, Callable, Dict, Iterable, List, Optional, Union  # type annotations

from loguru import logger  # console logging

from . import config  # thresholds and list sizes
from .affinity import AffinitySignals, franchise_matcher, franchise_potential, partner_matcher, talent_matcher, talent_package
from .analogy import AnalogyParser
from .data_loader import DataLoader
from .deep_pass import DeepPass
from .feature_extractor import FeatureExtractor
from .forecaster import Forecaster
from .logline import LoglineAnalyzer
from .models import ConceptInput, MatchResult, Report
from .positioning import market_positioning
from .ranking import Ranker
from .similarity import PrecisionScorer, SimilarityScorer


class ConceptEngine:
	"""
	High-level analysis API. Loads every table once at construction; analyze()
	keeps no state between calls, so one engine can serve concurrent requests.
	"""

	# Request payload keys (camelCase accepted alongside snake_case)
	PAYLOAD_KEYS = {
		'logline': 'logline',
		'genre': 'genre',
		'format': 'format',
		'secondaryGenre': 'secondary_genre',
		'secondary_genre': 'secondary_genre',
		'tone': 'tone',
		'targetAudience': 'target_audience',
		'target_audience': 'target_audience',
		'budgetTier': 'budget_tier',
		'budget_tier': 'budget_tier',
		'synopsis': 'synopsis',
		'userSuppliedComparable': 'user_comparable',
		'user_comparable': 'user_comparable',
	}

	def __init__(
		self,
		data_dir: Optional[Union[str, Path]] = None,  # defaults to the bundled data
		workers: int = 1,  # >1 scores corpus entries on a thread pool
		deep_pass: bool = True,  # run the layered re-scorer
	):
		self.workers = max(1, int(workers))

		self.loader = DataLoader(data_dir)
		self.corpus = self.loader.load_corpus()
		vocabulary = self.loader.load_vocabulary()
		self.tables: Dict[str, Any] = self.loader.load_tables()
		self.franchise_tables = self.loader.load_franchise_tables()
		self.partners = self.loader.load_profiles('partners')
		self.talent = self.loader.load_profiles('talent')
		self.franchise_profiles = self.loader.load_profiles('franchise')

		self.extractor = FeatureExtractor(vocabulary)
		self.analogy_parser = AnalogyParser(self.loader.load_analogies())
		self.scorer = SimilarityScorer(self.tables)
		self.ranker = Ranker(threshold=config.BASELINE_THRESHOLD, k=config.DEFAULT_TOP_K)
		self.forecaster = Forecaster(self.tables)
		self.logline_analyzer = LoglineAnalyzer()
		self.partner_matcher = partner_matcher()
		self.talent_matcher = talent_matcher()
		self.franchise_matcher = franchise_matcher()
		self.deep = None
		if deep_pass:
			self.deep = DeepPass(
				PrecisionScorer(self.tables),
				Ranker(threshold=config.PRECISION_THRESHOLD, k=config.DEFAULT_TOP_K),
				self.forecaster,
				self.tables,
				self.loader.load_deep_tables(),
			)
		logger.info(
			f"[Engine] Ready with {len(self.corpus)} comparables, {len(self.partners)} partners, "
			f"{len(self.talent)} talent profiles (workers={self.workers}, deep_pass={deep_pass})"
		)

	def analyze(self, concept: ConceptInput) -> Report:
		"""Run the full pipeline for one concept."""
		concept = self.normalize(concept)
		logger.debug(f"[Engine] Analyzing '{concept.logline[:60]}' ({concept.genre}, {concept.format})")

		# 1) Extract and parse the analogy
		profile = self.extractor.extract(concept.text(), {'genre': concept.genre, 'tone': concept.tone or ''})
		analogy = self.analogy_parser.parse(concept.user_comparable)

		# 2) Baseline scoring (map) then sequential rank
		scored = self._map(lambda entry: self.scorer.score(concept, profile, entry, analogy), self.corpus)
		comparables = self.ranker.rank(scored)
		logger.info(f"[Engine] {len(comparables)} baseline comparables above {self.ranker.threshold}")

		# 3) Logline and deep pass
		logline = self.logline_analyzer.analyze(concept.logline, concept.genre)
		deep = self.deep.run(concept, profile, self.corpus, mapper=self._map) if self.deep else None

		# 4) Forecast: precision matches, else baseline matches, else genre fallback
		if deep is not None and deep.matches:
			forecast = deep.forecast
		else:
			forecast = self.forecaster.forecast(comparables, concept.budget_tier, concept.genre, concept.format)

		# 5) Affinity lists
		titles = (analogy.titles() if analogy else []) + [m.entry.title for m in comparables]
		signals = AffinitySignals.from_concept(concept, profile, titles)
		partners = self.partner_matcher.match(signals, self.partners)
		talent = self.talent_matcher.match_by_kind(signals, self.talent)
		dimensions = self.franchise_matcher.score_all(signals, self.franchise_profiles)
		franchise = franchise_potential(dimensions, profile, concept, self.franchise_tables)
		franchise_dimensions = self.franchise_matcher.match(signals, self.franchise_profiles)

		# 6) Positioning
		positioning = market_positioning(concept, comparables, self.tables)

		return Report(
			concept=concept,
			profile=profile,
			analogy=analogy,
			comparables=comparables,
			forecast=forecast,
			partners=partners,
			directors=talent['director'],
			lead_actors=talent['actor'],
			supporting_actors=talent['supporting'],
			writers=talent['writer'],
			franchise_dimensions=franchise_dimensions,
			franchise=franchise,
			talent_package=talent_package(concept.budget_tier, concept.format),
			logline=logline,
			positioning=positioning,
			deep=deep,
			verdict=deep.verdict if deep else None,
			verdict_rationale=deep.rationale if deep else None,
		)

	def analyze_payload(self, payload: Dict[str, Any]) -> Report:
		"""Analyze a flat request payload (camelCase or snake_case keys)."""
		fields: Dict[str, Any] = {}
		for key, value in (payload or {}).items():
			name = self.PAYLOAD_KEYS.get(key)
			if name is None:
				logger.debug(f"[Engine] Ignoring unknown payload key '{key}'")
				continue
			if isinstance(value, str):
				value = value.strip() or None
			if value is not None:
				fields[name] = value
		concept = ConceptInput(
			logline=fields.pop('logline', '') or '',
			genre=fields.pop('genre', '') or '',
			format=fields.pop('format', '') or '',
			**fields,
		)
		return self.analyze(concept)

	def normalize(self, concept: ConceptInput) -> ConceptInput:
		"""Canonical genre, format and budget tier; unknown values pass through or drop to None."""
		loader = self.loader
		return replace(
			concept,
			logline=concept.logline or '',
			genre=loader.normalize_genre(concept.genre),
			format=loader.normalize_format(concept.format) or (concept.format or ''),
			secondary_genre=loader.normalize_genre(concept.secondary_genre) or None,
			budget_tier=loader.normalize_budget_tier(concept.budget_tier),
		)

	def _map(self, fn: Callable, items: Iterable) -> List[MatchResult]:
		"""Order-preserving map, on a thread pool when workers > 1."""
		if self.workers > 1:
			with ThreadPoolExecutor(max_workers=self.workers) as pool:
				return list(pool.map(fn, items))
		return [fn(item) for item in items]
