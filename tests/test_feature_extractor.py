"""
Unit tests for FeatureExtractor: table order, whole-word matching and defaults.
Run: python tests/test_feature_extractor.py
"""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
	sys.path.insert(0, str(ROOT))

from conceptlens.config import UNSET
from conceptlens.data_loader import DataLoader
from conceptlens.feature_extractor import FeatureExtractor
from conceptlens.keywords import best_match, mentions

PINNED = "A disgraced detective investigates a string of occult murders in a small town before the killer strikes again"


def load_extractor():
	return FeatureExtractor(DataLoader().load_vocabulary())


def assert_equal(actual, expected, msg):
	if actual != expected:
		raise AssertionError(f"{msg} | expected={expected}, actual={actual}")


def assert_true(cond, msg):
	if not cond:
		raise AssertionError(msg)


def test_pinned_example():
	p = load_extractor().extract(PINNED, {'genre': 'Thriller'})
	assert_equal(p.protagonist_type, 'detective', "protagonist type")
	assert_equal(p.protagonist_trait, 'disgraced', "protagonist trait")
	assert_equal(p.central_conflict, 'discovery', "discovery precedes later conflicts")
	assert_equal(p.setting, 'small town', "setting")
	assert_equal(p.stakes_level, 'life-or-death', "stakes level")
	assert_true('mortality' in p.themes, "murders reads as mortality")
	assert_true('justice' not in p.themes, "no justice keywords present")
	assert_equal(p.narrative_archetype, 'Mystery/Investigation', "two investigation hits beat one revenge hit")


def test_whole_word_matching():
	assert_true(not mentions("they meet again", "ai"), "ai inside again")
	assert_true(not mentions("a kidnap plot", "kid"), "kid inside kidnap")
	assert_true(mentions("three murders", "murder"), "plural s")
	assert_true(mentions("she investigates", "investigat*"), "stem")
	assert_true(not mentions("reinvestigates", "investigat*"), "stem anchored at word start")

	p = load_extractor().extract("they meet again years later", {})
	assert_true('technology' not in p.themes, "again does not fire technology")
	p = load_extractor().extract("a father hunts the men who plan to kidnap his son", {})
	assert_true(p.protagonist_type != 'child', "kidnap does not fire child")


def test_best_match_tie_keeps_first():
	table = {'A': ['one', 'two'], 'B': ['three', 'four']}
	assert_equal(best_match("one three", table, 2), 'A', "tie goes to the earlier category")
	assert_equal(best_match("one three four", table, 2), 'B', "higher score wins")
	assert_equal(best_match("nothing here", table, 2), None, "no hit")


def test_empty_text_is_unset():
	p = load_extractor().extract("   ", {'genre': 'Horror', 'tone': 'Dark'})
	assert_equal(p.protagonist_type, UNSET, "unset protagonist")
	assert_equal(p.narrative_archetype, UNSET, "no default archetype for empty text")
	assert_equal(p.conflict_type, UNSET, "no default conflict for empty text")
	assert_equal(p.themes, [], "no themes")
	assert_equal(p.emotional_tones, [], "no tones")
	assert_equal(p.emotional_intensity, 0.3, "intensity floor")


def test_defaults_for_plain_text():
	p = load_extractor().extract("a quiet afternoon", {})
	assert_equal(p.narrative_archetype, 'Character Study', "archetype default")
	assert_equal(p.structure_type, 'Linear', "structure default")
	assert_equal(p.conflict_type, 'Person vs Person', "conflict default")
	assert_equal(p.emotional_tones, ['Dramatic'], "tone default")


def test_tone_hints_union():
	p = load_extractor().extract("a story of grief and suspense", {'tone': 'tension, Cozy, cozy'})
	assert_equal(p.emotional_tones, ['Melancholy', 'Tension', 'Cozy'], "hints appended once, case-insensitive")


def test_intensity_bounds():
	extractor = load_extractor()
	low = extractor.extract("a calm walk", {}).emotional_intensity
	high = extractor.extract("she must never lose everything, the only and final and last chance, always desperate", {}).emotional_intensity
	assert_equal(low, 0.3, "floor")
	assert_equal(high, 1.0, "all intensifiers")


def main():
	print("Running FeatureExtractor tests...")
	test_pinned_example()
	print(" - pinned example ok")
	test_whole_word_matching()
	print(" - whole word matching ok")
	test_best_match_tie_keeps_first()
	print(" - best match ties ok")
	test_empty_text_is_unset()
	print(" - empty text ok")
	test_defaults_for_plain_text()
	print(" - defaults ok")
	test_tone_hints_union()
	print(" - tone hints ok")
	test_intensity_bounds()
	print(" - intensity bounds ok")
	print("All FeatureExtractor tests passed!")


if __name__ == '__main__':
	main()
