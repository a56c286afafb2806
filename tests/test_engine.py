"""
End-to-end tests for ConceptEngine: purity, bounds, payload keys and thread-pool scoring.
Run: python tests/test_engine.py
"""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
	sys.path.insert(0, str(ROOT))

from conceptlens import config
from conceptlens.config import UNSET
from conceptlens.engine import ConceptEngine
from conceptlens.models import ConceptInput

CONCEPT = ConceptInput(
	logline="A disgraced detective investigates a string of occult murders in a small town before the killer strikes again",
	genre='horror',
	format='feature',
	tone='Dark, Atmospheric',
	target_audience='Adults 18-34',
	budget_tier='Low',
	user_comparable='Hereditary meets Zodiac',
)

_ENGINE = None


def load_engine():
	global _ENGINE
	if _ENGINE is None:
		_ENGINE = ConceptEngine()
	return _ENGINE


def assert_equal(actual, expected, msg):
	if actual != expected:
		raise AssertionError(f"{msg} | expected={expected}, actual={actual}")


def assert_true(cond, msg):
	if not cond:
		raise AssertionError(msg)


def test_normalized_input():
	report = load_engine().analyze(CONCEPT)
	c = report.concept
	assert_equal((c.genre, c.format, c.budget_tier), ('Horror', 'Feature Film', 'low'), "normalized fields")
	assert_equal(report.profile.protagonist_type, 'detective', "extracted profile")
	assert_equal(report.analogy.titles(), ['Hereditary', 'Zodiac'], "parsed analogy")


def test_report_bounds():
	report = load_engine().analyze(CONCEPT)
	assert_true(1 <= len(report.comparables) <= config.DEFAULT_TOP_K, "one to five comparables")
	overalls = [m.overall for m in report.comparables]
	assert_true(all(o > config.BASELINE_THRESHOLD for o in overalls), "above threshold")
	assert_true(all(a >= b for a, b in zip(overalls, overalls[1:])), "non-increasing")
	for m in report.comparables:
		assert_true(all(0 <= d.score <= 100 for d in m.dimensions), "dimension bounds")

	f = report.forecast
	assert_true(f.domestic_low <= f.domestic_likely <= f.domestic_high, "domestic order")
	assert_true(f.worldwide_low <= f.worldwide_likely <= f.worldwide_high, "worldwide order")
	assert_true(0 <= f.confidence <= 100, "confidence bounds")

	assert_true(len(report.partners) <= config.PARTNER_TOP_N, "partner list size")
	for role, results in (('director', report.directors), ('actor', report.lead_actors), ('supporting', report.supporting_actors), ('writer', report.writers)):
		assert_true(len(results) <= config.TALENT_TOP_N[role], f"{role} list size")
		assert_true(all(r.profile.kind == role for r in results), f"{role} list kind")
	assert_true(len(report.franchise_dimensions) <= config.FRANCHISE_TOP_N, "franchise list size")
	for r in report.partners + report.directors + report.lead_actors + report.supporting_actors + report.writers + report.franchise_dimensions:
		assert_true(config.AFFINITY_MIN_SCORE <= r.score <= 100, "affinity bar and bounds")

	assert_true(report.deep is not None, "deep pass ran")
	assert_equal(report.verdict, report.deep.verdict, "verdict from deep pass")
	assert_true(config.DEEP_SCORE_MIN <= report.deep.overall <= config.DEEP_SCORE_MAX, "deep score bounds")
	assert_true(report.verdict_rationale, "rationale present")


def test_purity():
	engine = load_engine()
	assert_equal(engine.analyze(CONCEPT).to_dict(), engine.analyze(CONCEPT).to_dict(), "identical reports")


def test_workers_keep_order():
	parallel = ConceptEngine(workers=4)
	assert_equal(parallel.analyze(CONCEPT).to_dict(), load_engine().analyze(CONCEPT).to_dict(), "thread pool gives the same report")


def test_without_deep_pass():
	engine = ConceptEngine(deep_pass=False)
	report = engine.analyze(CONCEPT)
	assert_equal(report.deep, None, "no deep result")
	assert_equal(report.verdict, None, "no verdict")
	expected = engine.forecaster.forecast(report.comparables, 'low', 'Horror', 'Feature Film')
	assert_equal(report.forecast, expected, "forecast from baseline comparables")


def test_payload_keys():
	report = load_engine().analyze_payload({
		'logline': "A rogue AI hunts the last crew of a dying space station",
		'genre': 'sci fi',
		'format': 'tv series',
		'secondaryGenre': 'thriller',
		'targetAudience': 'Young adults',
		'budgetTier': 'Low ($5-15M)',
		'userSuppliedComparable': '  ',
		'notAField': 'ignored',
	})
	c = report.concept
	assert_equal((c.genre, c.format, c.secondary_genre, c.budget_tier), ('Sci-Fi', 'Series', 'Thriller', 'low'), "camelCase keys")
	assert_equal(c.target_audience, 'Young adults', "audience passed through")
	assert_equal(report.analogy, None, "blank comparable")
	assert_true('Series format' in report.forecast.format_note, "series format note")


def test_empty_logline():
	report = load_engine().analyze(ConceptInput(logline='', genre='Drama', format='Feature Film'))
	assert_equal(report.profile.protagonist_type, UNSET, "unset profile")
	assert_equal(report.logline.word_count, 0, "no words")
	assert_true(report.forecast.domestic_low <= report.forecast.domestic_high, "forecast still ordered")


def test_report_dict_keys():
	d = load_engine().analyze(CONCEPT).to_dict()
	expected = [
		'concept', 'profile', 'analogy', 'comparables', 'forecast', 'partners',
		'directors', 'lead_actors', 'supporting_actors', 'writers',
		'franchise_dimensions', 'franchise', 'talent_package', 'logline', 'positioning',
		'deep', 'verdict', 'verdict_rationale',
	]
	assert_equal(list(d.keys()), expected, "report key order")


def main():
	print("Running ConceptEngine tests...")
	test_normalized_input()
	print(" - normalized input ok")
	test_report_bounds()
	print(" - report bounds ok")
	test_purity()
	print(" - purity ok")
	test_workers_keep_order()
	print(" - workers ok")
	test_without_deep_pass()
	print(" - without deep pass ok")
	test_payload_keys()
	print(" - payload keys ok")
	test_empty_logline()
	print(" - empty logline ok")
	test_report_dict_keys()
	print(" - report dict keys ok")
	print("All ConceptEngine tests passed!")


if __name__ == '__main__':
	main()
