"""
Unit tests for AnalogyParser: rule order, title lists and element lookup.
Run: python tests/test_analogy.py
"""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
	sys.path.insert(0, str(ROOT))

from conceptlens.analogy import AnalogyParser
from conceptlens.data_loader import DataLoader


def load_parser():
	return AnalogyParser(DataLoader().load_analogies())


def assert_equal(actual, expected, msg):
	if actual != expected:
		raise AssertionError(f"{msg} | expected={expected}, actual={actual}")


def assert_true(cond, msg):
	if not cond:
		raise AssertionError(msg)


def test_meets():
	a = load_parser().parse("Parasite meets Knives Out")
	assert_equal(a.parse_format, 'X meets Y', "meets rule")
	assert_equal(a.titles(), ['Parasite', 'Knives Out'], "two titles")
	assert_equal(a.title3, None, "padded")
	assert_true('class themes' in a.inferred_elements, "parasite elements")
	assert_true('whodunit' in a.inferred_elements, "knives out elements")


def test_plus_and_and():
	a = load_parser().parse("Hereditary + Midsommar")
	assert_equal(a.parse_format, 'X and Y', "plus rule")
	assert_equal(a.titles(), ['Hereditary', 'Midsommar'], "plus titles")
	a = load_parser().parse("Whiplash and La La Land")
	assert_equal(a.parse_format, 'X and Y', "and rule")
	assert_equal(a.titles(), ['Whiplash', 'La La Land'], "and titles")


def test_with_elements_of():
	a = load_parser().parse("Get Out with elements of Us")
	assert_equal(a.parse_format, 'X with Y elements', "with rule")
	assert_equal(a.titles(), ['Get Out', 'Us'], "elements of stripped")


def test_comma_list_keeps_third_title():
	a = load_parser().parse("Get Out, Hereditary, and The Witch")
	assert_equal(a.parse_format, 'multiple titles', "comma list is not the and rule")
	assert_equal(a.titles(), ['Get Out', 'Hereditary', 'The Witch'], "three titles, leading and stripped")
	assert_equal(a.inferred_elements.count('slow burn'), 1, "elements deduplicated")
	assert_true('folk horror' in a.inferred_elements, "third title looked up")

	a = load_parser().parse("Arrival / Ex Machina")
	assert_equal(a.titles(), ['Arrival', 'Ex Machina'], "slash list")


def test_single_and_empty():
	parser = load_parser()
	a = parser.parse("Arrival")
	assert_equal(a.parse_format, 'single title', "single title")
	assert_equal(a.title1, 'Arrival', "title1")
	assert_equal(parser.parse(""), None, "empty input")
	assert_equal(parser.parse("   "), None, "blank input")
	assert_equal(parser.parse(None), None, "missing input")


def test_lookup():
	parser = load_parser()
	assert_true('supernatural' in parser.lookup("Heredetary"), "fuzzy typo match")
	assert_true('slow burn' in parser.lookup("the witch (2015)"), "containment match")
	assert_equal(parser.lookup("Xqzv"), [], "unknown title")
	assert_equal(parser.parse("Xqzv").inferred_elements, [], "unknown title adds nothing")


def main():
	print("Running AnalogyParser tests...")
	test_meets()
	print(" - meets ok")
	test_plus_and_and()
	print(" - plus / and ok")
	test_with_elements_of()
	print(" - with elements of ok")
	test_comma_list_keeps_third_title()
	print(" - comma lists ok")
	test_single_and_empty()
	print(" - single and empty ok")
	test_lookup()
	print(" - lookup ok")
	print("All AnalogyParser tests passed!")


if __name__ == '__main__':
	main()
