"""
Keyword matching helpers shared by every extractor.

A keyword matches lowercased text when it occurs as a whole word, optionally
followed by a plural "s"/"es" ("murder" matches "murders", "ai" does not match "again").
A trailing "*" turns the keyword into a stem that matches at a word start
("investigat*" matches "investigates"), and an "re:" prefix passes a raw regex through.
"""

import re  # word-boundary patterns
from functools import lru_cache  # compile each keyword once
from typing import Dict, Iterable, List, Optional, Pattern  # type hints


@lru_cache(maxsize=None)
def compile_keyword(keyword: str) -> Pattern:
	"""Compile a vocabulary keyword into its matching pattern."""
	kw = keyword.strip().lower()
	if kw.startswith('re:'):  # raw regex
		return re.compile(kw[3:])
	if kw.endswith('*'):  # stem
		return re.compile(r'\b' + re.escape(kw[:-1]))
	return re.compile(r'\b' + re.escape(kw) + r'(?:s|es)?\b')


def mentions(text: str, keyword: str) -> bool:
	return bool(text) and compile_keyword(keyword).search(text) is not None


def mentions_any(text: str, keywords: Iterable[str]) -> bool:
	return any(mentions(text, kw) for kw in keywords)


def mentions_all(text: str, keywords: Iterable[str]) -> bool:
	return all(mentions(text, kw) for kw in keywords)


def count_mentions(text: str, keywords: Iterable[str]) -> int:
	"""Number of distinct keywords present in the text."""
	return sum(1 for kw in keywords if mentions(text, kw))


def first_match(text: str, table: Dict[str, List[str]]) -> Optional[str]:
	"""First category (table order) whose keywords intersect the text."""
	for category, keywords in table.items():
		if mentions_any(text, keywords):
			return category
	return None


def last_match(text: str, table: Dict[str, List[str]]) -> Optional[str]:
	"""Last category (table order) whose keywords intersect the text."""
	found = None
	for category, keywords in table.items():
		if mentions_any(text, keywords):
			found = category
	return found


def all_matches(text: str, table: Dict[str, List[str]]) -> List[str]:
	"""Every category whose keywords intersect the text, table order, no duplicates."""
	found: List[str] = []
	for category, keywords in table.items():
		if category not in found and mentions_any(text, keywords):
			found.append(category)
	return found


def best_match(text: str, table: Dict[str, List[str]], points: int = 1) -> Optional[str]:
	"""
	Category with the highest keyword score (points per distinct hit).
	The earlier category wins a tie; None when nothing hits.
	"""
	best, best_score = None, 0
	for category, keywords in table.items():
		score = count_mentions(text, keywords) * points
		if score > best_score:  # strict, so ties keep the earlier category
			best, best_score = category, score
	return best


def score_table(text: str, table: Dict[str, List[str]]) -> Dict[str, int]:
	"""Distinct keyword hits per category, only for categories that hit."""
	scores: Dict[str, int] = {}
	for category, keywords in table.items():
		hits = count_mentions(text, keywords)
		if hits:
			scores[category] = hits
	return scores
