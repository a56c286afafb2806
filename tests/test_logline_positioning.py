"""
Unit tests for LoglineAnalyzer and market positioning.
Run: python tests/test_logline_positioning.py
"""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
	sys.path.insert(0, str(ROOT))

from conceptlens.logline import LoglineAnalyzer
from conceptlens.models import ComparableEntry, ConceptInput, DimensionScore, MatchResult
from conceptlens.positioning import differentiation, market_positioning, target_quadrant

LOGLINE = "When a desperate mother discovers her son's secret, she must uncover the truth before it destroys their family"


def match(overall):
	entry = ComparableEntry(title='Comp', year=2020, genre='Drama', format='Feature Film', platform='Theatrical')
	return MatchResult(entry=entry, dimensions=[DimensionScore('genre', overall)], overall=overall)


def assert_equal(actual, expected, msg):
	if actual != expected:
		raise AssertionError(f"{msg} | expected={expected}, actual={actual}")


def assert_true(cond, msg):
	if not cond:
		raise AssertionError(msg)


def test_logline_scores():
	q = LoglineAnalyzer().analyze(LOGLINE, 'Drama')
	assert_equal(q.word_count, 18, "word count")
	assert_equal(q.hook_strength, 75, "mystery and stakes hooks")
	assert_equal(q.hook_type, 'Stakes', "last fired hook names the type")
	assert_equal(q.clarity, 95, "clarity")
	assert_equal(q.emotional_hook, 65, "emotional word and intense state")
	assert_equal(q.marketability, 75, "hook bonus and genre keyword")
	assert_equal(q.optimal_length, False, "under 20 words")
	assert_equal(q.improvements, ['Expand to include more specific details'], "only length to fix")
	assert_equal(len(q.strengths), 3, "three strengths")
	assert_true(q.pitch_recommendation.startswith('Excellent'), "excellent band")


def test_empty_logline():
	q = LoglineAnalyzer().analyze('', 'Horror')
	assert_equal(q.word_count, 0, "no words")
	assert_equal(q.hook_type, 'Standard', "default hook type")
	assert_equal((q.hook_strength, q.clarity, q.emotional_hook, q.marketability), (40, 60, 40, 50), "base scores")
	assert_true(q.pitch_recommendation.startswith('Needs refinement'), "refinement band")
	for value in (q.hook_strength, q.clarity, q.emotional_hook, q.marketability):
		assert_true(0 <= value <= 100, "bounds")


def test_long_logline_is_penalized():
	text = ' '.join(['word'] * 60) + ', a, b, c, d'
	q = LoglineAnalyzer().analyze(text, 'Drama')
	assert_true('Tighten to 25-35 words for pitch meetings' in q.improvements, "too long")
	assert_equal(q.clarity, 45, "structure bonus, long and complex penalties")


def test_target_quadrant():
	assert_equal(target_quadrant('Women 25-54', 'Action'), 'Female-Skewing', "female before male")
	assert_equal(target_quadrant('Males 18-34', 'Drama'), 'Male-Skewing 18-34', "male")
	assert_equal(target_quadrant('Families', 'Horror'), 'Four Quadrant', "family")
	assert_equal(target_quadrant('Family audiences', 'Horror'), 'Four Quadrant', "family singular")
	assert_equal(target_quadrant('Small-town adults', 'Horror'), 'General Adult', "no match inside small")
	assert_equal(target_quadrant('Football fans', 'Horror'), 'General Adult', "no match inside football")
	assert_equal(target_quadrant('Young men', 'Drama'), 'Male-Skewing 18-34', "men")
	assert_equal(target_quadrant('Seniors', 'Horror'), 'General Adult', "unknown audience")
	assert_equal(target_quadrant(None, 'Horror'), 'Young Adult 16-30', "genre default")
	assert_equal(target_quadrant(None, 'Western'), 'General Adult', "no genre default")


def test_differentiation():
	assert_true(differentiation([]).startswith('Unique concept'), "no comparables")
	assert_true(differentiation([match(71)]).startswith('HIGH SIMILARITY WARNING'), "close comparable")
	assert_true(differentiation([match(70)]).startswith('Position as fresh take'), "moderate comparable")


def test_market_positioning():
	tables = {
		'competitive_space': {'Drama': 'Awards-season prestige space'},
		'release_windows': {'Drama': 'Fall festival circuit'},
		'competing_projects': {'Drama': ['Project A']},
		'crowdedness': {'Drama': 70},
		'default_crowdedness': 55,
	}
	concept = ConceptInput(logline=LOGLINE, genre='Drama', format='Feature Film')
	p = market_positioning(concept, [match(60)], tables)
	assert_equal(p.competitive_space, 'Awards-season prestige space', "space")
	assert_equal(p.target_quadrant, 'Female-Skewing', "genre quadrant")
	assert_equal(p.release_window, 'Fall festival circuit', "window")
	assert_equal(p.competing_projects, ['Project A'], "competing")
	assert_equal(p.crowdedness, 70, "crowdedness")

	p = market_positioning(ConceptInput(logline='x', genre='Western', format='Series'), [], tables)
	assert_equal(p.crowdedness, 55, "default crowdedness")
	assert_equal(p.competitive_space, 'General entertainment space', "default space")


def main():
	print("Running Logline and Positioning tests...")
	test_logline_scores()
	print(" - logline scores ok")
	test_empty_logline()
	print(" - empty logline ok")
	test_long_logline_is_penalized()
	print(" - long logline ok")
	test_target_quadrant()
	print(" - target quadrant ok")
	test_differentiation()
	print(" - differentiation ok")
	test_market_positioning()
	print(" - market positioning ok")
	print("All Logline and Positioning tests passed!")


if __name__ == '__main__':
	main()
