import dataclasses
import logging
import typing

import midimport.constants
import midimport.project
import midimport.timing


logger = logging.getLogger(__name__)


@dataclasses.dataclass
class ChannelSlot:

	"""
	The instrument track that receives one MIDI channel's notes.

	``pattern`` is the working pattern that collects every note of the
	channel until the segmenter splits it up; ``notes`` keeps the same notes
	in the order they were added.
	"""

	index: int
	track: typing.Any
	name: str
	instrument: typing.Any = None
	profile: str = midimport.constants.FALLBACK_INSTRUMENT
	pattern: typing.Any = None
	has_notes: bool = False
	notes: typing.List[midimport.project.Note] = dataclasses.field(default_factory=list)

	@property
	def is_rich (self) -> bool:

		"""Return True when the channel plays through a bank/patch capable instrument."""

		return self.profile == midimport.constants.RICH_INSTRUMENT and self.instrument is not None


class ChannelRouter:

	"""
	Creates one instrument track per MIDI channel, on the first event seen for it.
	"""

	def __init__ (
		self,
		sink: midimport.project.ProjectSink,
		soundfont: typing.Optional[str] = None,
		pitch_range: int = midimport.constants.GM_PITCH_RANGE
	) -> None:

		"""
		Start with no channel slots. ``soundfont`` is loaded into every rich instrument created.
		"""

		self.sink = sink
		self.soundfont = soundfont
		self.pitch_range = pitch_range

		self.slots: typing.Dict[int, ChannelSlot] = {}


	def get (self, index: int) -> typing.Optional[ChannelSlot]:

		"""Return the slot for a channel, or None if nothing was routed to it yet."""

		return self.slots.get(index)


	def route (self, index: int, track_name: str) -> ChannelSlot:

		"""
		Return the slot for ``index``, creating its instrument track on first use.
		"""

		if not 0 <= index < midimport.constants.CHANNEL_COUNT:
			raise ValueError(f"Channel {index} outside 0-{midimport.constants.CHANNEL_COUNT - 1}")

		slot = self.slots.get(index)

		if slot is None:
			slot = self._create(index, track_name)
			self.slots[index] = slot

		return slot


	def _create (self, index: int, track_name: str) -> ChannelSlot:

		"""
		Create an instrument track, preferring the rich instrument profile.
		"""

		track = self.sink.create_instrument_track(track_name)
		slot = ChannelSlot(index=index, track=track, name=track_name)

		instrument = self.sink.load_instrument(track, midimport.constants.RICH_INSTRUMENT)

		if instrument is not None:
			slot.instrument = instrument
			slot.profile = midimport.constants.RICH_INSTRUMENT

			if self.soundfont:
				self.sink.load_instrument_resource(instrument, self.soundfont)

			self.set_program(slot, midimport.constants.DEFAULT_BANK, midimport.constants.DEFAULT_PATCH)

		else:
			slot.instrument = self.sink.load_instrument(track, midimport.constants.FALLBACK_INSTRUMENT)
			slot.profile = midimport.constants.FALLBACK_INSTRUMENT

		pitch_range = self.sink.resolve_parameter(track, "pitch_range")

		if pitch_range is not None:
			self.sink.set_parameter_initial_value(pitch_range, self.pitch_range)

		logger.info(f"Channel {index}: created track '{track_name}' ({slot.profile})")

		return slot


	def set_program (self, slot: ChannelSlot, bank: int, patch: int, initial: bool = False) -> None:

		"""
		Select a bank and patch on a rich instrument. Does nothing for other instruments.

		With ``initial`` the selection also becomes the value held at song start.
		"""

		if not slot.is_rich:
			return

		apply = self.sink.set_parameter_initial_value if initial else self.sink.set_parameter_value

		bank_parameter = self.sink.resolve_parameter(slot.instrument, "bank")
		patch_parameter = self.sink.resolve_parameter(slot.instrument, "patch")

		if bank_parameter is not None:
			apply(bank_parameter, bank)

		if patch_parameter is not None:
			apply(patch_parameter, patch)


def clamp_midi (value: float) -> float:

	"""Clamp a value to the 7-bit MIDI range."""

	if value < midimport.constants.MIDI_VALUE_MIN or value > midimport.constants.MIDI_VALUE_MAX:
		logger.debug(f"Clamping out of range MIDI value {value}")

	return min(max(value, midimport.constants.MIDI_VALUE_MIN), midimport.constants.MIDI_VALUE_MAX)


def make_note (
	converter: midimport.timing.TickConverter,
	pitch: int,
	start: float,
	duration: float,
	loudness: float
) -> midimport.project.Note:

	"""Convert a beat-timed MIDI note into a project note.

	The key is shifted down an octave to the project's key numbering, and
	loudness (0-127) is scaled to the project's 0-200 volume.  Durations
	shorter than one tick become one tick.
	"""

	return midimport.project.Note(
		position = converter.ticks(start),
		length = converter.duration_ticks(duration),
		key = int(clamp_midi(pitch)) - midimport.constants.OCTAVE_OFFSET,
		volume = clamp_midi(loudness) * (midimport.constants.VOLUME_MAX / midimport.constants.MIDI_VALUE_MAX)
	)


def import_note (
	sink: midimport.project.ProjectSink,
	converter: midimport.timing.TickConverter,
	slot: ChannelSlot,
	pitch: int,
	start: float,
	duration: float,
	loudness: float
) -> midimport.project.Note:

	"""
	Add a note to the channel's working pattern, creating the pattern at tick 0 if needed.
	"""

	note = make_note(converter, pitch, start, duration, loudness)

	if slot.pattern is None:
		slot.pattern = sink.create_pattern(slot.track, 0)

	sink.add_note(slot.pattern, note)

	slot.notes.append(note)
	slot.has_notes = True

	return note
