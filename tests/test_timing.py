import pytest

import midimport.timing


def test_ticks_per_beat_is_bar_over_beats () -> None:

	"""192 ticks per bar with 4 beats per bar gives 48 ticks per beat."""

	converter = midimport.timing.TickConverter(ticks_per_bar=192, beats_per_bar=4.0)

	assert converter.ticks_per_beat == 48


def test_ticks_rounds_to_nearest () -> None:

	"""Beat times are rounded to the nearest tick."""

	converter = midimport.timing.TickConverter()

	assert converter.ticks(0) == 0
	assert converter.ticks(1) == 48
	assert converter.ticks(0.26) == 12
	assert converter.ticks(2.5) == 120
	assert converter.ticks(0.01) == 0


def test_ticks_is_monotonic () -> None:

	"""Later beat times never map to earlier ticks."""

	converter = midimport.timing.TickConverter()
	beats = [i * 0.0037 for i in range(5000)]
	ticks = [converter.ticks(beat) for beat in beats]

	assert ticks == sorted(ticks)


def test_duration_is_at_least_one_tick () -> None:

	"""Very short durations become a single tick."""

	converter = midimport.timing.TickConverter()

	assert converter.duration_ticks(0.001) == 1
	assert converter.duration_ticks(0) == 1
	assert converter.duration_ticks(0.5) == 24


def test_bar_boundaries () -> None:

	"""bar_start and bar_end enclose the bar containing a tick."""

	converter = midimport.timing.TickConverter(ticks_per_bar=192)

	assert converter.bar_start(0) == 0
	assert converter.bar_start(191) == 0
	assert converter.bar_start(192) == 192
	assert converter.bar_start(500) == 384
	assert converter.bar_end(500) == 576


def test_invalid_resolution_rejected () -> None:

	"""Zero or negative resolutions raise ValueError."""

	with pytest.raises(ValueError):
		midimport.timing.TickConverter(ticks_per_bar=0)

	with pytest.raises(ValueError):
		midimport.timing.TickConverter(beats_per_bar=-1)
