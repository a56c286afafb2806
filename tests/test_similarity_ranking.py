"""
Unit tests for SimilarityScorer, PrecisionScorer and Ranker on a synthetic mini-corpus.
Run: python tests/test_similarity_ranking.py
"""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
	sys.path.insert(0, str(ROOT))

from conceptlens.models import (
	AnalogyParse,
	ComparableEntry,
	ConceptInput,
	DimensionScore,
	MatchResult,
	NarrativeFeatureProfile,
)
from conceptlens.ranking import Ranker
from conceptlens.similarity import PrecisionScorer, SimilarityScorer

TABLES = {
	'related_genres': {'Horror': ['Thriller', 'Mystery', 'Sci-Fi']},
	'related_tones': {'dark': ['gritty', 'intense']},
	'related_archetypes': [['Revenge Quest', 'Survival']],
	'related_conflicts': [],
	'budget_implications': ['Micro', 'Low', 'Medium', 'High', 'Tentpole'],
}

DETECTIVE = NarrativeFeatureProfile(
	protagonist_type='detective',
	central_conflict='discovery',
	setting='small town',
	stakes_level='life-or-death',
	themes=['mortality', 'family'],
)


def concept(**overrides):
	fields = dict(logline='A detective hunts a killer', genre='Horror', format='Feature Film', tone='Dark', budget_tier='medium')
	fields.update(overrides)
	return ConceptInput(**fields)


def entry(title='Comp', **overrides):
	fields = dict(title=title, year=2020, genre='Horror', format='Feature Film', platform='Theatrical', tones=['dark'], budget=20.0)
	fields.update(overrides)
	return ComparableEntry(**fields)


def match(title, overall):
	return MatchResult(entry=entry(title), dimensions=[DimensionScore('genre', overall)], overall=overall)


def assert_equal(actual, expected, msg):
	if actual != expected:
		raise AssertionError(f"{msg} | expected={expected}, actual={actual}")


def assert_true(cond, msg):
	if not cond:
		raise AssertionError(msg)


def test_genre_dimension():
	s = SimilarityScorer(TABLES)
	assert_equal(s.genre_score(concept(), entry(genre='Horror')), 100, "exact genre")
	assert_equal(s.genre_score(concept(), entry(genre='Thriller', sub_genres=['Horror'])), 70, "sub-genre")
	assert_equal(s.genre_score(concept(), entry(genre='Mystery')), 40, "related genre")
	assert_equal(s.genre_score(concept(), entry(genre='Romance')), 0, "unrelated genre")
	assert_equal(s.genre_score(concept(secondary_genre='Romance'), entry(genre='Romance')), 20, "secondary bonus from zero")
	assert_equal(s.genre_score(concept(secondary_genre='Drama'), entry(genre='Horror', sub_genres=['Drama'])), 100, "bonus capped")


def test_narrative_dimension():
	s = SimilarityScorer(TABLES)
	same = entry(features=DETECTIVE)
	assert_equal(s.narrative_score(DETECTIVE, same.features), 100, "all four tags")
	partial = NarrativeFeatureProfile(protagonist_type='detective', setting='urban')
	assert_equal(s.narrative_score(DETECTIVE, partial), 30, "protagonist only")
	assert_equal(s.narrative_score(NarrativeFeatureProfile(), NarrativeFeatureProfile()), 0, "unset never matches unset")


def test_tone_theme_format_market():
	s = SimilarityScorer(TABLES)
	assert_equal(s.tone_score(concept(), entry(tones=['dark'])), 100, "same tone")
	assert_equal(s.tone_score(concept(), entry(tones=['gritty'])), 60, "related tone")
	assert_equal(s.tone_score(concept(), entry(tones=['light'])), 20, "unrelated tone")
	assert_equal(s.tone_score(concept(tone=None), entry()), 50, "no tone")

	assert_equal(s.theme_score(DETECTIVE, NarrativeFeatureProfile(themes=['mortality'])), 50, "half overlap")
	assert_equal(s.theme_score(DETECTIVE, NarrativeFeatureProfile()), 40, "empty side")

	assert_equal(s.format_score('Feature Film', 'Feature Film'), 100, "film family")
	assert_equal(s.format_score('Series', 'Limited Series'), 100, "limited counts as series")
	assert_equal(s.format_score('Limited Series', 'Feature Film'), 50, "limited vs feature")
	assert_equal(s.format_score('Feature Film', 'Series'), 0, "film vs series")

	assert_equal(s.market_score('medium', 20), 100, "in band")
	assert_equal(s.market_score('medium', 55), 70, "near band")
	assert_equal(s.market_score('medium', 200), 30, "far from band")
	assert_equal(s.market_score(None, 20), 50, "no tier")
	assert_equal(s.market_score('medium', None), 50, "no budget")


def test_keyword_dimension():
	s = SimilarityScorer(TABLES)
	assert_equal(s.keyword_score(None, entry()), 50, "no analogy")
	analogy = AnalogyParse(title1='Get Out', inferred_elements=['slow burn', 'supernatural'])
	assert_equal(s.keyword_score(analogy, entry('Get Out')), 100, "title containment")
	assert_equal(s.keyword_score(analogy, entry('Other', keywords=['slow burn', 'gore'])), 25, "one inferred hit")
	assert_equal(s.keyword_score(analogy, entry('Other')), 0, "no hits")
	us = AnalogyParse(title1='The Usual Suspects')
	assert_equal(s.keyword_score(us, entry('Us')), 0, "short title must match a whole word")
	assert_equal(s.keyword_score(AnalogyParse(title1='Us'), entry('Us')), 100, "exact short title")
	assert_equal(s.keyword_score(AnalogyParse(title1='Alien'), entry('Alien Romulus')), 100, "title inside a longer title")


def test_overall_and_rationale():
	s = SimilarityScorer(TABLES)
	r = s.score(concept(), DETECTIVE, entry('Twin', features=DETECTIVE, rt_score=90))
	# .25*100 + .25*100 + .15*100 + .15*100 + .10*100 + .05*100 + .05*50
	assert_equal(r.overall, 98, "weighted overall")
	assert_equal(r.match_strength, 'Strong', "strength band")
	assert_equal(r.primary_reason, 'genre', "first max dimension wins")
	assert_equal([d.name for d in r.dimensions], ['genre', 'narrative', 'tone', 'theme', 'format', 'market', 'keyword'], "dimension order")
	assert_true('Same genre space' in r.matching_elements, "genre element")
	assert_equal(r.differentiators, [], "no differentiators")
	assert_true(r.why_it_matches.startswith('Twin (2020)'), "why it matches")
	assert_true('blueprint' in r.strategic_takeaway, "close blueprint takeaway")

	far = s.score(concept(format='Series'), NarrativeFeatureProfile(), entry('Far', genre='Romance', tones=['light']))
	assert_true('Different genre approach' in far.differentiators, "genre differentiator")
	assert_true('Different format/length' in far.differentiators, "format differentiator")
	for m in (r, far):
		assert_true(0 <= m.overall <= 100, "overall bounds")
		assert_true(all(0 <= d.score <= 100 for d in m.dimensions), "dimension bounds")


def test_precision_bases():
	s = PrecisionScorer(TABLES)
	r = s.score(concept(), NarrativeFeatureProfile(), entry())
	assert_equal(r.dimension('narrative'), 30, "narrative base")
	assert_equal(r.dimension('audience'), 40, "audience base")
	assert_equal(r.dimension('tone'), 45, "tone base plus close intensity")
	assert_equal(r.dimension('market'), 45, "market base plus format family")
	assert_equal(r.overall, 39, "weighted overall")
	assert_equal(r.differentiators, ['Different narrative DNA', 'Different target audience'], "dimensions left at their base")

	shared = NarrativeFeatureProfile(audience_quadrant='Four Quadrant', narrative_archetype='Survival', conflict_type='Person vs Nature')
	r = s.score(concept(), shared, entry(features=shared))
	assert_equal(r.differentiators, [], "matched dimensions are not differentiators")


def test_precision_related_archetype():
	s = PrecisionScorer(TABLES)
	mine = NarrativeFeatureProfile(narrative_archetype='Revenge Quest', stakes_scope='Personal')
	theirs = NarrativeFeatureProfile(narrative_archetype='Survival', stakes_scope='Global')
	assert_equal(s.narrative_score(mine, theirs), 42, "related archetype +12")
	assert_equal(s.key_difference(mine, theirs), 'Your concept has personal stakes vs global', "stakes difference first")


def test_ranker_threshold_and_order():
	matches = [match('a', 25), match('b', 26), match('c', 80), match('d', 80), match('e', 50)]
	ranked = Ranker(threshold=25).rank(matches)
	assert_equal([m.entry.title for m in ranked], ['c', 'd', 'e', 'b'], "strictly above threshold, stable order")
	overalls = [m.overall for m in ranked]
	assert_true(all(x >= y for x, y in zip(overalls, overalls[1:])), "non-increasing")
	assert_equal(len(Ranker(threshold=25).rank(matches, k=2)), 2, "truncated to k")
	assert_equal(Ranker(threshold=30).rank([match('x', 30)]), [], "precision threshold is strict")
	assert_equal(Ranker.average_overall([]), 0.0, "empty average")


def main():
	print("Running Similarity and Ranking tests...")
	test_genre_dimension()
	print(" - genre ok")
	test_narrative_dimension()
	print(" - narrative ok")
	test_tone_theme_format_market()
	print(" - tone / theme / format / market ok")
	test_keyword_dimension()
	print(" - keyword ok")
	test_overall_and_rationale()
	print(" - overall and rationale ok")
	test_precision_bases()
	print(" - precision bases ok")
	test_precision_related_archetype()
	print(" - precision related archetype ok")
	test_ranker_threshold_and_order()
	print(" - ranker ok")
	print("All Similarity and Ranking tests passed!")


if __name__ == '__main__':
	main()
