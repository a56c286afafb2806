"""
Analogy parsing module.
Splits a user-supplied comparable ("Parasite meets Knives Out") into titles and
seeds inferred elements from a small table of known titles.
"""

import re  # split patterns
from typing import Dict, List, Optional  # type annotations

from rapidfuzz import process, fuzz  # fuzzy title lookup

from loguru import logger  # console logging

from .keywords import mentions  # whole-word title containment
from .models import AnalogyParse  # structured result


class AnalogyParser:
	"""
	Parses analogy text with a fixed rule order (first match wins):
	" meets ", then " + " / " and ", then " with ", then "," or "/", else a single title.
	" and " only splits when the text holds no comma or slash, so lists keep their third title.
	"""

	RE_MEETS = re.compile(r"\s+meets\s+", re.I)  # X meets Y
	RE_AND = re.compile(r"\s+(?:\+|and)\s+", re.I)  # X + Y, X and Y
	RE_WITH = re.compile(r"\s+with\s+", re.I)  # X with elements of Y
	RE_ELEMENTS_OF = re.compile(r"^\s*elements\s+of\s*", re.I)  # leading "elements of"
	RE_LIST = re.compile(r"[,/]")  # X, Y, and Z / X / Y / Z
	RE_LEADING_AND = re.compile(r"^\s*and\s+", re.I)  # "and The Witch"

	FUZZY_THRESHOLD = 85  # WRatio cut-off for title lookup

	def __init__(self, analogies: Dict[str, List[str]]):
		self.analogies = {k.lower(): v for k, v in analogies.items()}  # title -> elements
		self._titles = list(self.analogies.keys())  # pre-built list for fuzzy search
		logger.debug(f"[Analogy] Initialized with {len(self._titles)} known titles")

	def parse(self, text: Optional[str]) -> Optional[AnalogyParse]:
		"""Main entry: None for empty input, otherwise an AnalogyParse."""
		if not text or not text.strip():
			return None

		raw = text.strip()
		lower = raw.lower()
		titles: List[str]

		if ' meets ' in lower:
			fmt = 'X meets Y'
			titles = self.RE_MEETS.split(raw, maxsplit=1)
		elif ' + ' in lower or (' and ' in lower and not self.RE_LIST.search(raw)):
			fmt = 'X and Y'
			titles = self.RE_AND.split(raw, maxsplit=1)
		elif ' with ' in lower:
			fmt = 'X with Y elements'
			titles = self.RE_WITH.split(raw, maxsplit=1)
			if len(titles) > 1:
				titles[1] = self.RE_ELEMENTS_OF.sub('', titles[1])
		elif self.RE_LIST.search(raw):
			fmt = 'multiple titles'
			titles = [self.RE_LEADING_AND.sub('', p) for p in self.RE_LIST.split(raw)][:3]
		else:
			fmt = 'single title'
			titles = [raw]

		titles = [t.strip() for t in titles if t and t.strip()]
		titles += [None] * (3 - len(titles))  # pad to title1..title3

		inferred: List[str] = []
		for title in titles:
			for element in self.lookup(title):
				if element not in inferred:
					inferred.append(element)

		parsed = AnalogyParse(
			title1=titles[0],
			title2=titles[1],
			title3=titles[2],
			parse_format=fmt,
			inferred_elements=inferred,
		)
		logger.debug("[Analogy] '{}' -> {} | titles={} | inferred={}", raw, fmt, parsed.titles(), inferred)
		return parsed

	def lookup(self, title: Optional[str]) -> List[str]:
		"""
		Elements for a referenced title: containment of a known title first,
		then a fuzzy match. Unknown titles contribute nothing.
		"""
		if not title:
			return []
		t = title.lower().strip()
		found: List[str] = []
		for known, elements in self.analogies.items():
			if mentions(t, known):
				found.extend(e for e in elements if e not in found)
		if found:
			return found
		if not self._titles:
			return []
		match = process.extractOne(t, self._titles, scorer=fuzz.WRatio)
		if match and match[1] >= self.FUZZY_THRESHOLD:
			logger.debug("[Analogy] Title fuzzy match: '{}' -> '{}' (score={})", title, match[0], match[1])
			return list(self.analogies[match[0]])
		return []
