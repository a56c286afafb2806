"""
Market positioning module.
Competitive space, audience quadrant, release window and crowdedness for a concept.
"""

from typing import Any, Dict, List, Optional

from .keywords import mentions_any
from .models import ConceptInput, MarketPositioning, MatchResult

# audience text cue -> quadrant, checked in order
AUDIENCE_QUADRANTS = [
	(('famil*', 'all ages', 'all audiences', 'four quadrant', 'everyone'), 'Four Quadrant'),
	(('female', 'women', 'woman'), 'Female-Skewing'),
	(('male', 'men', '18-34'), 'Male-Skewing 18-34'),
]
GENRE_QUADRANTS = {
	'Action': 'Male-Skewing 18-34',
	'Sci-Fi': 'Male-Skewing 18-34',
	'Romance': 'Female-Skewing',
	'Drama': 'Female-Skewing',
	'Horror': 'Young Adult 16-30',
}
HIGH_SIMILARITY = 70  # top comparable above this risks comparison fatigue


def target_quadrant(target_audience: Optional[str], genre: str) -> str:
	if target_audience:
		audience = target_audience.lower()
		for cues, quadrant in AUDIENCE_QUADRANTS:
			if mentions_any(audience, cues):
				return quadrant
		return 'General Adult'
	return GENRE_QUADRANTS.get(genre, 'General Adult')


def differentiation(comparables: List[MatchResult]) -> str:
	if not comparables:
		return 'Unique concept - lean into originality as selling point'
	if comparables[0].overall > HIGH_SIMILARITY:
		return 'HIGH SIMILARITY WARNING: Emphasize unique elements to avoid comparison fatigue'
	return 'Position as fresh take on genre with distinct voice'


def market_positioning(concept: ConceptInput, comparables: List[MatchResult], tables: Dict[str, Any]) -> MarketPositioning:
	"""Position the concept against its genre market and its ranked comparables."""
	genre = concept.genre
	return MarketPositioning(
		competitive_space=tables.get('competitive_space', {}).get(genre, 'General entertainment space'),
		target_quadrant=target_quadrant(concept.target_audience, genre),
		release_window=tables.get('release_windows', {}).get(genre, 'Flexible - quality-dependent release'),
		competing_projects=list(tables.get('competing_projects', {}).get(genre, ['Various genre projects in development'])),
		differentiation=differentiation(comparables),
		crowdedness=int(tables.get('crowdedness', {}).get(genre, tables.get('default_crowdedness', 55))),
	)
