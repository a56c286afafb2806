"""
Audit the bundled vocabulary and reference corpus.

This script:
1) Loads the vocabulary tables and the corpus
2) Reports keywords shared by two categories of the same dimension
3) Reports corpus entries with unset precision tags
4) Reports corpus entries without outcome data

Usage:
    python -m scripts.audit_vocabulary

Findings are informational; the script always exits 0.
"""

from collections import defaultdict  # keyword -> categories index
from pathlib import Path  # filesystem-safe paths
from typing import Any, Dict, List, Tuple

from loguru import logger  # console logging

from conceptlens.config import UNSET  # unset tag sentinel
from conceptlens.data_loader import DataLoader  # data ingestion
from conceptlens.models import ComparableEntry

# Precision tags every corpus entry is expected to carry
PRECISION_TAGS = ('narrative_archetype', 'protagonist_archetype', 'conflict_type', 'stakes_scope')


def find_overlaps(vocabulary: Dict[str, Any]) -> List[Tuple[str, str, List[str]]]:
	"""(dimension, keyword, categories) for every keyword listed under more than one category."""
	overlaps = []
	for dimension, table in vocabulary.items():
		if not isinstance(table, dict):  # flat lists and scalar maps have no categories
			continue
		seen = defaultdict(list)
		for category, keywords in table.items():
			if not isinstance(keywords, list):
				continue
			for keyword in keywords:
				seen[keyword.lower()].append(category)
		for keyword, categories in seen.items():
			if len(categories) > 1:
				overlaps.append((dimension, keyword, categories))
	return overlaps


def unset_precision_tags(corpus: List[ComparableEntry]) -> List[Tuple[str, List[str]]]:
	"""(title, missing tags) for entries with any unset precision tag."""
	report = []
	for entry in corpus:
		missing = [tag for tag in PRECISION_TAGS if getattr(entry.features, tag) == UNSET]
		if missing:
			report.append((entry.title, missing))
	return report


def missing_outcomes(corpus: List[ComparableEntry]) -> List[str]:
	"""Titles with neither a domestic nor a worldwide gross."""
	return [e.title for e in corpus if e.domestic_gross is None and e.worldwide_gross is None]


def main():
	# Headline banner for visibility in console
	logger.info("=" * 60)
	logger.info("Audit Vocabulary and Corpus")
	logger.info("=" * 60)

	# Resolve the bundled data directory
	root = Path(__file__).resolve().parents[1]  # project root
	data_dir = root / 'conceptlens' / 'data'

	# 1) Load data
	logger.info("[1/4] Loading vocabulary and corpus...")
	loader = DataLoader(data_dir)
	vocabulary = loader.load_vocabulary()
	corpus = loader.load_corpus()
	logger.info(f"[OK] {len(vocabulary)} vocabulary tables, {len(corpus)} corpus entries")

	# 2) Keyword overlaps
	logger.info("\n[2/4] Checking keyword overlaps within each dimension...")
	overlaps = find_overlaps(vocabulary)
	for dimension, keyword, categories in overlaps:
		logger.warning(f"  {dimension}: '{keyword}' listed under {', '.join(categories)} (first wins)")
	logger.info(f"[OK] {len(overlaps)} shared keywords")

	# 3) Precision tags
	logger.info("\n[3/4] Checking precision tags...")
	untagged = unset_precision_tags(corpus)
	for title, missing in untagged:
		logger.warning(f"  {title}: unset {', '.join(missing)}")
	logger.info(f"[OK] {len(untagged)} entries with unset precision tags")

	# 4) Outcome data
	logger.info("\n[4/4] Checking outcome data...")
	no_outcome = missing_outcomes(corpus)
	for title in no_outcome:
		logger.info(f"  {title}: no box office data")
	logger.info(f"[OK] {len(no_outcome)} entries without outcome data")

	# Footer
	logger.info("\nAudit complete.")
	logger.info("=" * 60)


if __name__ == '__main__':
	main()  # invoke audit
