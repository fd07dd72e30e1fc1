"""Import diagnostics and results.

Nothing that goes wrong inside an import stops it, except cancellation.
Problems are collected as :class:`Diagnostic` records on the
:class:`ImportReport` returned by ``midimport.translator.translate()``:

- ``MALFORMED_SEQUENCE`` - an element could not be used (channel out of
  range, zero-length tempo interval, wrong value type) and was skipped.
- ``UNRECOGNIZED_EVENT`` - an update or global event the importer has no
  mapping for.
- ``MISSING_INSTRUMENT_RESOURCE`` - no patch file was found for a program
  change on a fallback instrument.
- ``SETUP_INCOMPLETE`` - no default soundfont is configured, so rich
  instruments will stay silent.

Cancellation raises :class:`ImportCancelled`, which carries the partial report.
"""

import dataclasses
import logging
import typing


logger = logging.getLogger(__name__)


MALFORMED_SEQUENCE = "malformed_sequence"
UNRECOGNIZED_EVENT = "unrecognized_event"
MISSING_INSTRUMENT_RESOURCE = "missing_instrument_resource"
SETUP_INCOMPLETE = "setup_incomplete"


@dataclasses.dataclass
class Diagnostic:

	"""
	A non-fatal problem found during an import.
	"""

	kind: str
	message: str
	track: typing.Optional[int] = None
	channel: typing.Optional[int] = None
	time: typing.Optional[float] = None

	def __str__ (self) -> str:

		location = []

		if self.track is not None:
			location.append(f"track {self.track}")

		if self.channel is not None:
			location.append(f"channel {self.channel}")

		if self.time is not None:
			location.append(f"beat {self.time:g}")

		if location:
			return f"{self.kind}: {self.message} ({', '.join(location)})"

		return f"{self.kind}: {self.message}"


@dataclasses.dataclass
class ImportReport:

	"""
	The outcome of an import: diagnostics plus what was created.
	"""

	diagnostics: typing.List[Diagnostic] = dataclasses.field(default_factory=list)
	instrument_tracks: typing.List[typing.Any] = dataclasses.field(default_factory=list)
	automation_tracks: typing.List[typing.Any] = dataclasses.field(default_factory=list)
	removal_candidates: typing.List[typing.Any] = dataclasses.field(default_factory=list)
	note_count: int = 0

	def add (self, kind: str, message: str, track: typing.Optional[int] = None, channel: typing.Optional[int] = None, time: typing.Optional[float] = None) -> Diagnostic:

		"""
		Record a diagnostic and log it as a warning.
		"""

		diagnostic = Diagnostic(kind=kind, message=message, track=track, channel=channel, time=time)
		self.diagnostics.append(diagnostic)
		logger.warning(str(diagnostic))

		return diagnostic

	def of_kind (self, kind: str) -> typing.List[Diagnostic]:

		"""Return the diagnostics of one kind, in the order they were found."""

		return [diagnostic for diagnostic in self.diagnostics if diagnostic.kind == kind]

	@property
	def unrecognized (self) -> typing.List[Diagnostic]:

		return self.of_kind(UNRECOGNIZED_EVENT)

	@property
	def malformed (self) -> typing.List[Diagnostic]:

		return self.of_kind(MALFORMED_SEQUENCE)


class ImportCancelled (Exception):

	"""
	Raised when the progress sink cancels an import at a track boundary.

	Whatever was already written to the project stays there; ``report``
	describes it.
	"""

	def __init__ (self, report: ImportReport, tracks_done: int) -> None:

		super().__init__(f"MIDI import cancelled after {tracks_done} track(s)")

		self.report = report
		self.tracks_done = tracks_done
