"""Project model written to by the translator.

:class:`ProjectSink` is the set of operations the translator needs from a
host application: creating instrument and automation tracks, creating and
filling patterns, and reaching the parameters that notes and controller
updates are routed to.

:class:`Project` is a complete in-memory implementation.  It is what the
command-line tool imports into, and what the tests inspect::

	project = midimport.project.Project()
	config = midimport.config.TranslatorConfig(soundfont="gm.sf2")
	report = midimport.translator.translate(sequence, project, config=config)

	for track in project.instrument_tracks:
		print(track.name, sum(len(p.notes) for p in track.patterns))

Handles passed through :class:`ProjectSink` are the model objects themselves.
"""

import dataclasses
import logging
import pathlib
import typing

import midimport.constants


logger = logging.getLogger(__name__)


@dataclasses.dataclass
class Parameter:

	"""
	An automatable value with a separate initial (song start) value.
	"""

	name: str
	display_name: str
	value: float = 0.0
	initial_value: float = 0.0

	def set_initial_value (self, value: float) -> None:

		"""Set the value the parameter holds at song start."""

		self.initial_value = value
		self.value = value


@dataclasses.dataclass
class Note:

	"""
	A project note. ``position`` is relative to the owning pattern's start.
	"""

	position: int
	length: int
	key: int
	volume: float


@dataclasses.dataclass
class NotePattern:

	"""
	A block of notes on an instrument track.
	"""

	start: int = 0
	notes: typing.List[Note] = dataclasses.field(default_factory=list)

	@property
	def length (self) -> int:

		"""Return the number of ticks covered by the notes."""

		return max((note.position + note.length for note in self.notes), default=0)


@dataclasses.dataclass
class AutomationPattern:

	"""
	A curve of (tick, value) points driving one or more parameters.

	Point positions are relative to the pattern's start.
	"""

	start: int = 0
	name: str = ""
	length: int = midimport.constants.DEFAULT_TICKS_PER_BAR
	points: typing.Dict[int, float] = dataclasses.field(default_factory=dict)
	targets: typing.List[Parameter] = dataclasses.field(default_factory=list)

	def sorted_points (self) -> typing.List[typing.Tuple[int, float]]:

		"""Return the points in tick order."""

		return sorted(self.points.items())


@dataclasses.dataclass
class Instrument:

	"""
	An instrument loaded on a track, with its profile and bank/patch parameters.
	"""

	profile: str
	resource: typing.Optional[str] = None
	bank: Parameter = dataclasses.field(default_factory=lambda: Parameter("bank", "Bank"))
	patch: Parameter = dataclasses.field(default_factory=lambda: Parameter("patch", "Patch"))


@dataclasses.dataclass
class InstrumentTrack:

	"""
	A track that plays note patterns through an instrument.
	"""

	name: str
	instrument: typing.Optional[Instrument] = None
	volume: Parameter = dataclasses.field(default_factory=lambda: Parameter("volume", "Volume", 100.0, 100.0))
	panning: Parameter = dataclasses.field(default_factory=lambda: Parameter("panning", "Panning"))
	pitch: Parameter = dataclasses.field(default_factory=lambda: Parameter("pitch", "Pitch"))
	pitch_range: Parameter = dataclasses.field(default_factory=lambda: Parameter("pitch_range", "Pitch range", 1.0, 1.0))
	patterns: typing.List[NotePattern] = dataclasses.field(default_factory=list)
	removal_candidate: bool = False


@dataclasses.dataclass
class AutomationTrack:

	"""
	A track holding automation patterns.
	"""

	name: str
	patterns: typing.List[AutomationPattern] = dataclasses.field(default_factory=list)


TrackHandle = typing.Union[InstrumentTrack, AutomationTrack]
PatternHandle = typing.Union[NotePattern, AutomationPattern]


class ProjectSink (typing.Protocol):

	"""
	Protocol for the host project the translator writes into.
	"""

	def create_instrument_track (self, name: str) -> InstrumentTrack:
		...

	def create_automation_track (self, name: str) -> AutomationTrack:
		...

	def create_pattern (self, track: typing.Any, start: int) -> typing.Any:
		...

	def remove_pattern (self, track: typing.Any, pattern: typing.Any) -> None:
		...

	def add_note (self, pattern: typing.Any, note: Note) -> None:
		...

	def add_automation_point (self, pattern: typing.Any, offset: int, value: float) -> None:
		...

	def bind_parameter (self, pattern: typing.Any, parameter: typing.Any) -> None:
		...

	def set_pattern_length (self, pattern: typing.Any, length: int) -> None:
		...

	def clear_pattern (self, pattern: typing.Any) -> None:
		...

	def set_parameter_initial_value (self, parameter: typing.Any, value: float) -> None:
		...

	def set_parameter_value (self, parameter: typing.Any, value: float) -> None:
		...

	def load_instrument (self, track: typing.Any, profile: str) -> typing.Optional[typing.Any]:
		...

	def load_instrument_resource (self, instrument: typing.Any, path: str) -> bool:
		...

	def load_patch (self, instrument: typing.Any, program: int) -> bool:
		...

	def resolve_parameter (self, owner: typing.Any, name: str) -> typing.Optional[typing.Any]:
		...

	def parameter_display_name (self, parameter: typing.Any) -> str:
		...

	def tempo_pattern (self) -> typing.Optional[typing.Any]:
		...

	def time_signature_parameters (self) -> typing.Tuple[typing.Any, typing.Any]:
		...

	def mark_removal_candidate (self, track: typing.Any) -> None:
		...

	def tempo_changed (self) -> None:
		...


class Project:

	"""
	In-memory project: instrument tracks, automation tracks, tempo and time signature.
	"""

	def __init__ (
		self,
		ticks_per_bar: int = midimport.constants.DEFAULT_TICKS_PER_BAR,
		profiles: typing.Iterable[str] = (midimport.constants.RICH_INSTRUMENT, midimport.constants.FALLBACK_INSTRUMENT),
		patch_directory: typing.Optional[str] = midimport.constants.DEFAULT_PATCH_DIRECTORY,
		bpm: float = 140.0
	) -> None:

		"""Create an empty project.

		Parameters:
			ticks_per_bar: Tick resolution of one bar.
			profiles: Instrument profiles that can be loaded. Leave out
				``RICH_INSTRUMENT`` to model a host without soundfont support.
			patch_directory: Directory searched for ``NNN*.pat`` files when a
				fallback instrument receives a program change.
			bpm: Tempo before any tempo automation is applied.
		"""

		self.ticks_per_bar = ticks_per_bar
		self.profiles = frozenset(profiles)
		self.patch_directory = patch_directory

		self.instrument_tracks: typing.List[InstrumentTrack] = []
		self.automation_tracks: typing.List[AutomationTrack] = []

		self.tempo = Parameter("tempo", "Tempo", bpm, bpm)
		self.tempo_automation = AutomationPattern(name="Tempo", length=ticks_per_bar, targets=[self.tempo])
		self.numerator = Parameter("numerator", "Numerator", 4, 4)
		self.denominator = Parameter("denominator", "Denominator", 4, 4)

		self.tempo_change_count = 0


	@property
	def tracks (self) -> typing.List[TrackHandle]:

		"""Return every track, instrument tracks first."""

		return [*self.instrument_tracks, *self.automation_tracks]


	def create_instrument_track (self, name: str) -> InstrumentTrack:

		track = InstrumentTrack(name=name)
		self.instrument_tracks.append(track)
		logger.debug(f"Created instrument track '{name}'")
		return track


	def create_automation_track (self, name: str) -> AutomationTrack:

		track = AutomationTrack(name=name)
		self.automation_tracks.append(track)
		logger.debug(f"Created automation track '{name}'")
		return track


	def create_pattern (self, track: TrackHandle, start: int) -> PatternHandle:

		"""
		Create an empty pattern of the right kind for ``track``.
		"""

		pattern: PatternHandle

		if isinstance(track, InstrumentTrack):
			pattern = NotePattern(start=start)
			track.patterns.append(pattern)

		else:
			pattern = AutomationPattern(start=start, name=track.name, length=self.ticks_per_bar)
			track.patterns.append(pattern)

		return pattern


	def remove_pattern (self, track: TrackHandle, pattern: PatternHandle) -> None:

		track.patterns.remove(pattern)  # type: ignore[arg-type]


	def add_note (self, pattern: NotePattern, note: Note) -> None:

		pattern.notes.append(note)


	def add_automation_point (self, pattern: AutomationPattern, offset: int, value: float) -> None:

		pattern.points[offset] = value


	def bind_parameter (self, pattern: AutomationPattern, parameter: Parameter) -> None:

		if parameter not in pattern.targets:
			pattern.targets.append(parameter)


	def set_pattern_length (self, pattern: AutomationPattern, length: int) -> None:

		pattern.length = length


	def clear_pattern (self, pattern: AutomationPattern) -> None:

		pattern.points.clear()


	def set_parameter_initial_value (self, parameter: Parameter, value: float) -> None:

		parameter.set_initial_value(value)


	def set_parameter_value (self, parameter: Parameter, value: float) -> None:

		parameter.value = value


	def load_instrument (self, track: InstrumentTrack, profile: str) -> typing.Optional[Instrument]:

		"""
		Load an instrument with ``profile`` onto ``track``, or return None if the profile is unavailable.
		"""

		if profile not in self.profiles:
			return None

		track.instrument = Instrument(profile=profile)
		return track.instrument


	def load_instrument_resource (self, instrument: Instrument, path: str) -> bool:

		instrument.resource = path
		return True


	def load_patch (self, instrument: Instrument, program: int) -> bool:

		"""
		Load the first ``NNN*.pat`` file matching ``program`` from the patch directory.

		Returns False when the directory or a matching file is missing.
		"""

		if self.patch_directory is None:
			return False

		directory = pathlib.Path(self.patch_directory)

		if not directory.is_dir():
			return False

		matches = sorted(directory.glob(f"{program:03d}*.pat"))

		if not matches:
			return False

		instrument.resource = str(matches[0])
		return True


	def resolve_parameter (self, owner: typing.Union[InstrumentTrack, Instrument, None], name: str) -> typing.Optional[Parameter]:

		"""
		Return the parameter called ``name`` on a track or instrument, if it has one.
		"""

		if owner is None:
			return None

		parameter = getattr(owner, name, None)

		if isinstance(parameter, Parameter):
			return parameter

		return None


	def parameter_display_name (self, parameter: Parameter) -> str:

		return parameter.display_name


	def tempo_pattern (self) -> AutomationPattern:

		return self.tempo_automation


	def time_signature_parameters (self) -> typing.Tuple[Parameter, Parameter]:

		return self.numerator, self.denominator


	def mark_removal_candidate (self, track: InstrumentTrack) -> None:

		track.removal_candidate = True


	def tempo_changed (self) -> None:

		"""
		Apply the first tempo point as the current tempo.
		"""

		self.tempo_change_count += 1

		points = self.tempo_automation.sorted_points()

		if points:
			self.tempo.set_initial_value(points[0][1])


	def remove_empty_tracks (self) -> typing.List[InstrumentTrack]:

		"""
		Remove instrument tracks flagged as removal candidates and return them.
		"""

		removed = [track for track in self.instrument_tracks if track.removal_candidate]
		self.instrument_tracks = [track for track in self.instrument_tracks if not track.removal_candidate]

		return removed
