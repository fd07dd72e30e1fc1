import math

import midimport.constants


class TickConverter:

	"""
	Converts beat-relative times into integer project ticks.

	The number of beats per bar is fixed for the whole import, so the
	conversion is a single multiplication followed by rounding.
	"""

	def __init__ (self, ticks_per_bar: int = midimport.constants.DEFAULT_TICKS_PER_BAR, beats_per_bar: float = midimport.constants.BEATS_PER_BAR) -> None:

		"""
		Store the tick resolution and the (fixed) number of beats per bar.
		"""

		if ticks_per_bar <= 0:
			raise ValueError("Ticks per bar must be positive")

		if beats_per_bar <= 0:
			raise ValueError("Beats per bar must be positive")

		self.ticks_per_bar = ticks_per_bar
		self.beats_per_bar = beats_per_bar


	@property
	def ticks_per_beat (self) -> float:

		"""Return the number of ticks in one beat."""

		return self.ticks_per_bar / self.beats_per_bar


	def ticks (self, beat_time: float) -> int:

		"""
		Return the tick position of a beat time, rounded half up.
		"""

		return int(math.floor(beat_time * self.ticks_per_beat + 0.5))


	def duration_ticks (self, duration_beats: float) -> int:

		"""
		Return a note length in ticks, never shorter than one tick.
		"""

		return max(1, self.ticks(duration_beats))


	def bar_start (self, tick: int) -> int:

		"""Return the tick of the bar boundary at or before ``tick``."""

		return (tick // self.ticks_per_bar) * self.ticks_per_bar


	def bar_end (self, tick: int) -> int:

		"""Return the tick where the bar containing ``tick`` ends."""

		return self.bar_start(tick) + self.ticks_per_bar
