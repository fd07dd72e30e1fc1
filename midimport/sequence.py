"""Generic sequence model consumed by the translator.

A parsed MIDI file is represented as a list of :class:`SequenceTrack`
objects, each holding time-ordered :class:`NoteEvent` and
:class:`UpdateEvent` records measured in beats, together with a
:class:`TimeMap` (beat/seconds samples) and a list of
:class:`TimeSignature` changes.

Update events follow the attribute naming of the parser that produced them:
the attribute name may end in a letter describing the value type
(``"programi"`` for an integer, ``"control7r"`` for a real, ``"tracknames"``
for a string, ``"...a"`` for an atom).  The translator accepts names with or
without that suffix.

Any object implementing :class:`SequenceSource` can be translated; the
:class:`Sequence` class is the plain in-memory implementation.
"""

import dataclasses
import typing


@dataclasses.dataclass (frozen=True)
class Atom:

	"""
	A symbolic update value (an interned name rather than free text).
	"""

	name: str


UpdateValue = typing.Union[int, float, str, Atom]


@dataclasses.dataclass
class NoteEvent:

	"""
	A note with a start time and duration in beats.
	"""

	channel: int
	start: float
	duration: float
	pitch: int
	loudness: float

	@property
	def time (self) -> float:

		"""Return the start time, so notes and updates can be ordered together."""

		return self.start


@dataclasses.dataclass
class UpdateEvent:

	"""
	A named parameter update at a time in beats.

	``channel`` is ``-1`` for track-level updates such as track names.
	"""

	channel: int
	attribute: str
	value: UpdateValue
	time: float = 0.0


SequenceEvent = typing.Union[NoteEvent, UpdateEvent]


@dataclasses.dataclass
class SequenceTrack:

	"""
	An ordered list of note and update events.
	"""

	events: typing.List[SequenceEvent] = dataclasses.field(default_factory=list)

	def __len__ (self) -> int:

		return len(self.events)

	def __iter__ (self) -> typing.Iterator[SequenceEvent]:

		return iter(self.events)


@dataclasses.dataclass
class TimeMapPoint:

	"""
	A sample of the tempo map: ``beat`` occurs ``time`` seconds into the song.
	"""

	beat: float
	time: float


@dataclasses.dataclass
class TimeMap:

	"""
	Beat/seconds samples plus an optional tempo that holds after the last sample.

	``last_tempo`` is measured in beats per second.
	"""

	points: typing.List[TimeMapPoint] = dataclasses.field(default_factory=lambda: [TimeMapPoint(0.0, 0.0)])
	last_tempo: typing.Optional[float] = None


@dataclasses.dataclass
class TimeSignature:

	"""
	A time signature change at a beat position.
	"""

	beat: float
	numerator: int
	denominator: int


class SequenceSource (typing.Protocol):

	"""
	Protocol for anything the translator can read a sequence from.
	"""

	def track_count (self) -> int:

		...

	def track (self, index: int) -> SequenceTrack:

		...

	def time_map (self) -> TimeMap:

		...

	def time_signatures (self) -> typing.List[TimeSignature]:

		...

	def song_updates (self) -> typing.List[UpdateEvent]:

		...


class Sequence:

	"""
	In-memory sequence made of tracks, a time map and time signature changes.
	"""

	def __init__ (
		self,
		tracks: typing.Optional[typing.List[SequenceTrack]] = None,
		time_map: typing.Optional[TimeMap] = None,
		time_signatures: typing.Optional[typing.List[TimeSignature]] = None,
		song_updates: typing.Optional[typing.List[UpdateEvent]] = None
	) -> None:

		"""
		Create a sequence. Every argument defaults to empty (with a time map holding a single point at zero).
		"""

		self.tracks: typing.List[SequenceTrack] = tracks if tracks is not None else []
		self._time_map = time_map if time_map is not None else TimeMap()
		self._time_signatures = time_signatures if time_signatures is not None else []
		self._song_updates = song_updates if song_updates is not None else []


	def track_count (self) -> int:

		"""Return the number of tracks."""

		return len(self.tracks)


	def track (self, index: int) -> SequenceTrack:

		"""Return the track at ``index``."""

		return self.tracks[index]


	def time_map (self) -> TimeMap:

		"""Return the beat/seconds time map."""

		return self._time_map


	def time_signatures (self) -> typing.List[TimeSignature]:

		"""Return the time signature changes in beat order."""

		return self._time_signatures


	def song_updates (self) -> typing.List[UpdateEvent]:

		"""Return updates that belong to the song rather than to a track."""

		return self._song_updates
