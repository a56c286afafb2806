"""
Data loading and normalization module.
Loads the reference corpus from JSONL and the keyword/profile tables from JSON,
normalizing genres, formats and budget tiers on the way in.
"""

# Standard libs for JSON parsing, typing, and paths
import json  # read JSON and JSON lines
from typing import Any, Dict, List, Optional, Union  # type hints
from pathlib import Path  # filesystem-safe paths

from rapidfuzz import process, fuzz  # fuzzy genre normalization

# Console logging
from loguru import logger  # console logger

from . import config  # data file names and tier bands
from .models import AffinityProfile, ComparableEntry, NarrativeFeatureProfile  # structured records


class DataLoader:
	"""
	Handles loading and normalization of the bundled data files.
	Everything it returns is treated as read-only by the rest of the engine.
	"""

	# Genre synonym mapping: common user phrasings -> single standard name
	GENRE_SYNONYMS = {
		'sci-fi': 'Sci-Fi',  # canonical form
		'sci fi': 'Sci-Fi',  # spaced form
		'scifi': 'Sci-Fi',  # common variant
		'sci-fy': 'Sci-Fi',  # typo variant
		'science fiction': 'Sci-Fi',
		'science-fiction': 'Sci-Fi',
		'horror': 'Horror',
		'thriller': 'Thriller',
		'psychological thriller': 'Thriller',
		'comedy': 'Comedy',
		'funny': 'Comedy',
		'dark comedy': 'Comedy',
		'drama': 'Drama',
		'action': 'Action',
		'adventure': 'Adventure',
		'romance': 'Romance',
		'romantic': 'Romance',
		'romcom': 'Romance',
		'rom-com': 'Romance',
		'fantasy': 'Fantasy',
		'mystery': 'Mystery',
		'crime': 'Crime',
		'war': 'War',
		'western': 'Western',
		'animation': 'Animation',
		'animated': 'Animation',
		'documentary': 'Documentary',
		'family': 'Family',
		'musical': 'Musical',
		'biography': 'Biography',
		'biographical': 'Biography',
		'biopic': 'Biography',
		'superhero': 'Superhero',
		'sport': 'Sport',
		'sports': 'Sport',
	}

	# Format variants -> canonical format
	FORMAT_SYNONYMS = {
		'feature film': 'Feature Film',
		'feature': 'Feature Film',
		'film': 'Feature Film',
		'movie': 'Feature Film',
		'series': 'Series',
		'tv series': 'Series',
		'tv': 'Series',
		'limited series': 'Limited Series',
		'limited': 'Limited Series',
		'miniseries': 'Limited Series',
		'mini-series': 'Limited Series',
	}

	# Budget tier variants -> canonical tier
	BUDGET_SYNONYMS = {
		'micro': 'micro',
		'low': 'low',
		'medium': 'medium',
		'mid': 'medium',
		'high': 'high',
		'blockbuster': 'blockbuster',
		'tentpole': 'blockbuster',
	}

	def __init__(self, data_dir: Optional[Union[str, Path]] = None):
		"""Initialize the loader against a data directory (defaults to the bundled data)."""
		self.data_dir = Path(data_dir) if data_dir else config.DATA_DIR  # where the tables live
		self.genre_synonyms = self.GENRE_SYNONYMS  # store mapping for reuse
		self._genre_list = sorted(set(self.GENRE_SYNONYMS.values()))  # canonical names for fuzzy lookup

	# ------------------------------------------------------------------
	# Corpus
	# ------------------------------------------------------------------

	def load_corpus(self, path: Optional[Union[str, Path]] = None) -> List[ComparableEntry]:
		"""
		Load the reference corpus from a JSON Lines file where each line is one entry.
		Malformed lines are skipped with a warning; file order is preserved.
		"""
		entries: List[ComparableEntry] = []  # accumulator for parsed entries
		filepath = Path(path) if path else self.data_dir / config.CORPUS_FILE  # normalize path

		# Validate the file presence early to give clear error messages
		if not filepath.exists():
			raise FileNotFoundError(f"Corpus file not found: {filepath}")

		logger.info(f"[DataLoader] Loading corpus from {filepath}...")  # log action

		# Read line-by-line so one bad record never aborts the load
		with open(filepath, 'r', encoding='utf-8') as f:
			for line_num, line in enumerate(f, 1):  # keep track of line number for diagnostics
				if not line.strip():  # blank line
					continue
				try:
					data = json.loads(line.strip())  # parse JSON object per line
					entries.append(self._parse_entry(data))  # convert dict -> ComparableEntry
				except json.JSONDecodeError as e:
					logger.warning(f"[DataLoader] Skipping invalid JSON at line {line_num}: {e}")  # malformed line
					continue
				except (KeyError, TypeError, ValueError) as e:
					logger.warning(f"[DataLoader] Error parsing entry at line {line_num}: {e}")  # bad field
					continue

		logger.info(f"[DataLoader] Successfully loaded {len(entries)} comparable entries.")  # summary
		return entries

	def _parse_entry(self, data: Dict[str, Any]) -> ComparableEntry:
		"""
		Convert a raw dictionary (from file) into a ComparableEntry.
		Title is required; every other field gets a safe default.
		"""
		title = str(data['title']).strip()  # KeyError for a missing title is reported by the caller
		if not title:
			raise ValueError("empty title")

		budget = self._parse_number(data.get('budget'))  # optional $M
		tier = self.normalize_budget_tier(data.get('budget_tier')) or self.tier_for_budget(budget)  # derive when absent

		return ComparableEntry(
			title=title,
			year=int(data.get('year') or 0),
			genre=self.normalize_genre(data.get('genre', '')),
			format=self.normalize_format(data.get('format', '')) or 'Feature Film',
			platform=str(data.get('platform') or ''),
			distributor=str(data.get('distributor') or ''),
			logline=str(data.get('logline') or ''),
			sub_genres=[self.normalize_genre(g) for g in self._parse_comma_separated(data.get('sub_genres'))],
			tones=[t.lower() for t in self._parse_comma_separated(data.get('tones'))],
			budget=budget,
			domestic_gross=self._parse_number(data.get('domestic_gross')),
			worldwide_gross=self._parse_number(data.get('worldwide_gross')),
			opening_weekend=self._parse_number(data.get('opening_weekend')),
			rt_score=self._parse_int(data.get('rt_score')),
			audience_score=self._parse_int(data.get('audience_score')),
			roi=self._parse_number(data.get('roi')),
			budget_tier=tier,
			release_window=data.get('release_window'),
			oscar_nominated=bool(data.get('oscar_nominated', False)),
			oscar_winner=bool(data.get('oscar_winner', False)),
			key_talent=self._parse_comma_separated(data.get('key_talent')),
			keywords=[k.lower() for k in self._parse_comma_separated(data.get('keywords'))],
			features=self._parse_features(data.get('features') or {}),
		)

	def _parse_features(self, data: Dict[str, Any]) -> NarrativeFeatureProfile:
		"""Build a feature profile from a tag dict; absent tags stay UNSET."""
		profile = NarrativeFeatureProfile()  # all unset
		for name, value in data.items():
			if not hasattr(profile, name):
				logger.debug(f"[DataLoader] Ignoring unknown feature tag '{name}'")
				continue
			current = getattr(profile, name)
			if isinstance(current, list):
				setattr(profile, name, self._parse_comma_separated(value))
			elif name == 'emotional_intensity':
				setattr(profile, name, float(value))
			elif value:
				setattr(profile, name, str(value))
		return profile

	# ------------------------------------------------------------------
	# JSON tables
	# ------------------------------------------------------------------

	def _read_json(self, filename: str) -> Any:
		filepath = self.data_dir / filename
		if not filepath.exists():
			raise FileNotFoundError(f"Data file not found: {filepath}")
		try:
			with open(filepath, 'r', encoding='utf-8') as f:
				data = json.load(f)  # dicts keep file order, which is the category priority
		except json.JSONDecodeError as e:
			raise ValueError(f"Invalid JSON in {filepath}: {e}") from e
		logger.debug(f"[DataLoader] Read {filepath.name}")
		return data

	def load_vocabulary(self) -> Dict[str, Any]:
		"""Ordered category -> keywords tables used by the feature extractor."""
		vocabulary = self._read_json(config.VOCABULARY_FILE)
		logger.info(f"[DataLoader] Vocabulary loaded with {len(vocabulary)} tables")
		return vocabulary

	def load_analogies(self) -> Dict[str, List[str]]:
		"""Known title -> inferred elements table for analogy parsing."""
		analogies = self._read_json(config.ANALOGY_FILE)
		logger.info(f"[DataLoader] Analogy table loaded with {len(analogies)} titles")
		return {k.lower(): list(v) for k, v in analogies.items()}

	def load_tables(self) -> Dict[str, Any]:
		"""Market tables: related genres/tones, baselines, positioning."""
		return self._read_json(config.MARKET_FILE)

	def load_deep_tables(self) -> Dict[str, Any]:
		"""Keyword tables for the deep pass."""
		return self._read_json(config.DEEP_FILE)

	def load_franchise_tables(self) -> Dict[str, Any]:
		"""Franchise reasoning, cue lists and success precedents (dimension profiles excluded)."""
		data = self._read_json(config.FRANCHISE_FILE)
		return {k: v for k, v in data.items() if k != 'dimensions'}

	def load_profiles(self, name: str) -> List[AffinityProfile]:
		"""
		Load an affinity profile database: 'partners', 'talent' or 'franchise'.
		Entries without a name are skipped with a warning.
		"""
		filename = {
			'partners': config.PARTNERS_FILE,
			'talent': config.TALENT_FILE,
			'franchise': config.FRANCHISE_FILE,
		}.get(name, f"{name}.json")
		data = self._read_json(filename)
		if isinstance(data, dict):  # franchise file wraps its profiles
			data = data.get('dimensions', [])

		profiles: List[AffinityProfile] = []
		for i, raw in enumerate(data):
			if not isinstance(raw, dict) or not raw.get('name'):
				logger.warning(f"[DataLoader] Skipping unnamed profile #{i} in {filename}")
				continue
			profiles.append(self._parse_profile(raw))
		logger.info(f"[DataLoader] Loaded {len(profiles)} {name} profiles")
		return profiles

	def _parse_profile(self, raw: Dict[str, Any]) -> AffinityProfile:
		return AffinityProfile(
			name=str(raw['name']),
			kind=str(raw.get('kind') or ''),
			genres=[self.normalize_genre(g) for g in self._parse_comma_separated(raw.get('genres'))],
			formats=[self.normalize_format(f) or f for f in self._parse_comma_separated(raw.get('formats'))],
			tones=[t.lower() for t in self._parse_comma_separated(raw.get('tones'))],
			themes=[t.lower() for t in self._parse_comma_separated(raw.get('themes'))],
			budget_tiers=[t for t in (self.normalize_budget_tier(b) for b in self._parse_comma_separated(raw.get('budget_tiers'))) if t],
			priorities=self._parse_comma_separated(raw.get('priorities')),
			credits=self._parse_comma_separated(raw.get('credits')),
			specialties=[s.lower() for s in self._parse_comma_separated(raw.get('specialties'))],
			settings=[s.lower() for s in self._parse_comma_separated(raw.get('settings'))],
			cues={k: list(v) for k, v in (raw.get('cues') or {}).items()},
			momentum=bool(raw.get('momentum', False)),
			base=self._parse_int(raw.get('base')),
			budget_range=raw.get('budget_range'),
			quote=raw.get('quote'),
			agency=raw.get('agency'),
			availability=raw.get('availability'),
		)

	# ------------------------------------------------------------------
	# Normalizers (shared with the API and the extractor)
	# ------------------------------------------------------------------

	def normalize_genre(self, genre: Optional[str]) -> str:
		"""
		Map a raw genre to its canonical form using synonyms, then a fuzzy match
		against the canonical names; fall back to Title Case.
		"""
		if not genre or not str(genre).strip():  # missing genre
			return ''

		genre_lower = str(genre).strip().lower()  # prepare for lookup

		# If present in synonyms, return canonical value
		if genre_lower in self.genre_synonyms:
			return self.genre_synonyms[genre_lower]

		# Fuzzy match to absorb small typos ("thriler", "horor")
		match = process.extractOne(genre_lower, [g.lower() for g in self._genre_list], scorer=fuzz.ratio)
		if match and match[1] >= 88:
			canonical = self._genre_list[match[2]]
			logger.debug("[DataLoader] Genre fuzzy match: '{}' -> '{}' (score={})", genre, canonical, match[1])
			return canonical

		# Otherwise title-case the input to standardize
		return str(genre).strip().title()

	def normalize_format(self, fmt: Optional[str]) -> str:
		"""Map a raw format to Feature Film / Series / Limited Series ('' when unknown)."""
		if not fmt:
			return ''
		key = str(fmt).strip().lower()
		if key in self.FORMAT_SYNONYMS:
			return self.FORMAT_SYNONYMS[key]
		if 'limited' in key:
			return 'Limited Series'
		if 'series' in key or 'tv' in key:
			return 'Series'
		if 'film' in key or 'feature' in key or 'movie' in key:
			return 'Feature Film'
		return ''

	def normalize_budget_tier(self, tier: Optional[str]) -> Optional[str]:
		"""Map a raw tier to micro|low|medium|high|blockbuster (None when unknown)."""
		if not tier:
			return None
		key = str(tier).strip().lower()
		if key in self.BUDGET_SYNONYMS:
			return self.BUDGET_SYNONYMS[key]
		for word, canonical in self.BUDGET_SYNONYMS.items():  # "Low ($5-15M)" style labels
			if key.startswith(word):
				return canonical
		return None

	@staticmethod
	def tier_for_budget(budget: Optional[float]) -> Optional[str]:
		"""Budget tier whose band holds the budget ($M)."""
		if budget is None:
			return None
		for tier in config.BUDGET_TIERS:
			low, high = config.BUDGET_BANDS[tier]
			if low <= budget < high:
				return tier
		return config.BUDGET_TIERS[-1]  # above every band

	# ------------------------------------------------------------------
	# Field helpers
	# ------------------------------------------------------------------

	def _parse_comma_separated(self, value) -> List[str]:
		"""
		Normalize a value that may be None, a list, or a comma-separated string
		into a list of clean strings.
		"""
		if value is None:  # missing field
			return []
		if isinstance(value, list):  # already a list
			return [str(item).strip() for item in value if item]
		if isinstance(value, str):  # comma-separated string
			return [item.strip() for item in value.split(',') if item.strip()]
		return []  # any other type becomes empty

	@staticmethod
	def _parse_number(value) -> Optional[float]:
		if value is None or value == '':
			return None
		return float(value)

	@staticmethod
	def _parse_int(value) -> Optional[int]:
		if value is None or value == '':
			return None
		return int(value)
