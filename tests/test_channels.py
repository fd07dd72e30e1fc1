import pytest

import midimport.channels
import midimport.constants
import midimport.project
import midimport.timing


def test_route_creates_track_once (project: midimport.project.Project) -> None:

	"""Routing the same channel twice returns the same slot without a second track."""

	router = midimport.channels.ChannelRouter(project)

	first = router.route(3, "Piano")
	second = router.route(3, "Other name")

	assert first is second
	assert len(project.instrument_tracks) == 1
	assert project.instrument_tracks[0].name == "Piano"


def test_route_prefers_rich_instrument (project: midimport.project.Project) -> None:

	"""A soundfont instrument is loaded when available, with bank 0 patch 0 and the soundfont resource."""

	router = midimport.channels.ChannelRouter(project, soundfont="gm.sf2")

	slot = router.route(0, "Track 0")

	assert slot.is_rich
	assert slot.instrument.profile == midimport.constants.RICH_INSTRUMENT
	assert slot.instrument.resource == "gm.sf2"
	assert slot.instrument.bank.value == 0
	assert slot.instrument.patch.value == 0


def test_route_falls_back_without_rich_instrument (fallback_project: midimport.project.Project) -> None:

	"""Without soundfont support the single-patch instrument is used."""

	router = midimport.channels.ChannelRouter(fallback_project, soundfont="gm.sf2")

	slot = router.route(0, "Track 0")

	assert not slot.is_rich
	assert slot.profile == midimport.constants.FALLBACK_INSTRUMENT
	assert slot.instrument.resource is None


def test_route_sets_general_midi_pitch_range (project: midimport.project.Project) -> None:

	"""New tracks get a pitch bend range of 2 semitones."""

	router = midimport.channels.ChannelRouter(project)

	slot = router.route(1, "Bass")

	assert slot.track.pitch_range.initial_value == 2


def test_route_rejects_channel_out_of_range (project: midimport.project.Project) -> None:

	"""Channels outside 0-255 raise ValueError."""

	router = midimport.channels.ChannelRouter(project)

	with pytest.raises(ValueError):
		router.route(256, "Track 0")

	with pytest.raises(ValueError):
		router.route(-1, "Track 0")


def test_make_note_converts_units () -> None:

	"""Position, key, length and volume are converted to project units."""

	converter = midimport.timing.TickConverter()

	note = midimport.channels.make_note(converter, pitch=60, start=1, duration=0.1, loudness=127)

	assert note.position == 48
	assert note.key == 48
	assert note.length >= 1
	assert note.volume == pytest.approx(200)


def test_make_note_clamps_out_of_range_values () -> None:

	"""Pitch and loudness beyond the MIDI range are clamped."""

	converter = midimport.timing.TickConverter()

	note = midimport.channels.make_note(converter, pitch=300, start=0, duration=1, loudness=-5)

	assert note.key == 127 - 12
	assert note.volume == 0


def test_import_note_creates_working_pattern (project: midimport.project.Project) -> None:

	"""The first note opens a working pattern at tick 0; later notes join it."""

	converter = midimport.timing.TickConverter()
	router = midimport.channels.ChannelRouter(project)
	slot = router.route(0, "Track 0")

	assert slot.pattern is None
	assert not slot.has_notes

	midimport.channels.import_note(project, converter, slot, pitch=60, start=4, duration=1, loudness=100)
	midimport.channels.import_note(project, converter, slot, pitch=64, start=0, duration=1, loudness=100)

	assert slot.has_notes
	assert slot.pattern.start == 0
	assert [note.position for note in slot.pattern.notes] == [192, 0]
	assert len(slot.track.patterns) == 1
