import pathlib
import typing

import pytest

import midimport.config
import midimport.constants
import midimport.project
import midimport.sequence


class RecordingProgress:

	"""Progress sink that records checkpoints and can cancel after a number of steps."""

	def __init__ (self, cancel_at: typing.Optional[int] = None) -> None:

		"""Start with no steps recorded."""

		self.step_count: typing.Optional[int] = None
		self.steps = 0
		self.cancel_checks = 0
		self.cancel_at = cancel_at

	def set_step_count (self, count: int) -> None:

		"""Remember the announced number of steps."""

		self.step_count = count

	def advance (self) -> None:

		"""Count one step."""

		self.steps += 1

	def is_cancelled (self) -> bool:

		"""Cancel once ``cancel_at`` steps are done."""

		self.cancel_checks += 1
		return self.cancel_at is not None and self.steps >= self.cancel_at


def note (channel: int, start: float, duration: float = 1.0, pitch: int = 60, loudness: float = 100) -> midimport.sequence.NoteEvent:

	"""Build a note event."""

	return midimport.sequence.NoteEvent(channel=channel, start=start, duration=duration, pitch=pitch, loudness=loudness)


def update (channel: int, attribute: str, value: typing.Any, time: float = 0.0) -> midimport.sequence.UpdateEvent:

	"""Build an update event."""

	return midimport.sequence.UpdateEvent(channel=channel, attribute=attribute, value=value, time=time)


def make_sequence (*tracks: typing.List[typing.Any], **kwargs: typing.Any) -> midimport.sequence.Sequence:

	"""Build a sequence with one track per list of events."""

	return midimport.sequence.Sequence(
		tracks = [midimport.sequence.SequenceTrack(events=list(events)) for events in tracks],
		**kwargs
	)


@pytest.fixture
def project () -> midimport.project.Project:

	"""A fresh in-memory project with both instrument profiles available."""

	return midimport.project.Project(patch_directory=None)


@pytest.fixture
def fallback_project (tmp_path: pathlib.Path) -> midimport.project.Project:

	"""A project without soundfont support, with a patch directory holding program 0."""

	(tmp_path / "000_Acoustic_Grand_Piano.pat").write_bytes(b"")

	return midimport.project.Project(
		profiles = (midimport.constants.FALLBACK_INSTRUMENT,),
		patch_directory = str(tmp_path)
	)


@pytest.fixture
def config () -> midimport.config.TranslatorConfig:

	"""Default settings with a soundfont configured."""

	return midimport.config.TranslatorConfig(soundfont="gm.sf2")
