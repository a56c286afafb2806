"""
Logline quality module.
Scores a logline's hook, clarity, emotional pull and marketability.
"""

from typing import Dict, List

from loguru import logger

from . import config
from .keywords import mentions, mentions_any
from .models import LoglineQuality


class LoglineAnalyzer:
	"""
	Keyword heuristics over a single logline.
	Hook types are checked in table order; each one that fires adds its points
	and the last one fired names the hook.
	"""

	# hook type -> (points, cues)
	HOOKS: Dict[str, tuple] = {
		'Mystery': (15, ['discover*', 'uncover*', 'secret', 'truth']),
		'Irony': (20, ['but', 'however', 'only to', 'instead']),
		'Contrast': (15, ['between', 'versus', 'against', 'unlikely']),
		'Stakes': (20, ['must', 'before', 'or else', 'only chance']),
		'Unique World': (15, ['world where', 'future', 'society', 'dimension']),
	}
	EMOTIONAL_WORDS = [
		'love', 'death', 'family', 'revenge', 'betrayal', 'survival',
		'hope', 'fear', 'loss', 'redemption', 'sacrifice', 'dream',
	]
	INTENSE_STATES = ['desperate', 'haunted', 'struggling', 'torn']
	STAR_VEHICLE_WORDS = ['young', 'legendary', 'brilliant', 'former']
	GENRE_KEYWORDS: Dict[str, List[str]] = {
		'Horror': ['terror', 'haunted', 'evil', 'nightmare', 'creature', 'demon', 'ghost'],
		'Thriller': ['dangerous', 'conspiracy', 'deadly', 'race against', 'hunted'],
		'Action': ['fight', 'battle', 'mission', 'hero', 'save', 'warrior'],
		'Comedy': ['hilarious', 'chaos', 'mishap', 'unlikely', 'wacky'],
		'Drama': ['struggle', 'relationship', 'journey', 'life', 'family'],
		'Sci-Fi': ['future', 'technology', 'space', 'alien', 'experiment'],
		'Romance': ['love', 'heart', 'relationship', 'falls for', 'chemistry'],
	}
	OPTIMAL_WORDS = (20, 40)

	def analyze(self, logline: str, genre: str) -> LoglineQuality:
		text = (logline or '').strip()
		lower = text.lower()
		word_count = len(text.split())
		optimal = self.OPTIMAL_WORDS[0] <= word_count <= self.OPTIMAL_WORDS[1]

		# Hook
		hook, hook_type = 40, 'Standard'
		for name, (points, cues) in self.HOOKS.items():
			if mentions_any(lower, cues):
				hook += points
				hook_type = name

		# Clarity
		clarity = 50
		if ',' in text:
			clarity += 10  # structure
		if 15 <= word_count <= 35:
			clarity += 15
		if mentions_any(lower, ['when', 'after']):
			clarity += 10  # clear inciting incident
		if '...' not in text:
			clarity += 10  # complete thought
		if word_count > 50:
			clarity -= 15
		if len(text.split(',')) > 4:
			clarity -= 10  # too complex

		# Emotional pull
		emotional = 40
		if any(mentions(lower, w) for w in self.EMOTIONAL_WORDS):
			emotional += 10
		if mentions_any(lower, self.INTENSE_STATES):
			emotional += 15

		# Marketability
		marketability = 50
		if hook >= 70:
			marketability += 15
		if mentions_any(lower, self.GENRE_KEYWORDS.get(genre, [])):
			marketability += 10
		if mentions_any(lower, self.STAR_VEHICLE_WORDS):
			marketability += 10

		hook = int(config.clamp(hook))
		clarity = int(config.clamp(clarity))
		emotional = int(config.clamp(emotional))
		marketability = int(config.clamp(marketability))

		strengths = []
		if hook >= 70:
			strengths.append('Strong hook that grabs attention')
		if clarity >= 70:
			strengths.append('Clear, well-structured premise')
		if emotional >= 60:
			strengths.append('Emotionally resonant stakes')
		if optimal:
			strengths.append('Optimal length for pitch effectiveness')

		improvements = []
		if hook < 60:
			improvements.append('Add stronger hook - what makes this unique?')
		if clarity < 60:
			improvements.append('Simplify structure for clearer understanding')
		if emotional < 50:
			improvements.append('Emphasize emotional stakes')
		if not optimal:
			if word_count < self.OPTIMAL_WORDS[0]:
				improvements.append('Expand to include more specific details')
			else:
				improvements.append('Tighten to 25-35 words for pitch meetings')

		average = (hook + clarity + emotional + marketability) / 4
		if average >= 75:
			recommendation = 'Excellent pitch-ready logline. Lead with this in all meetings.'
		elif average >= 60:
			recommendation = 'Solid logline. Consider polishing weak areas before major pitches.'
		elif average >= 45:
			recommendation = 'Needs refinement. Focus on hook and emotional stakes.'
		else:
			recommendation = 'Significant revision recommended before pitching.'

		logger.debug(f"[Logline] hook={hook} ({hook_type}) clarity={clarity} emotional={emotional} market={marketability} words={word_count}")
		return LoglineQuality(
			hook_strength=hook,
			hook_type=hook_type,
			clarity=clarity,
			emotional_hook=emotional,
			marketability=marketability,
			word_count=word_count,
			optimal_length=optimal,
			strengths=strengths,
			improvements=improvements,
			pitch_recommendation=recommendation,
		)
