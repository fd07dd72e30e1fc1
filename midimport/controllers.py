"""Routing of controller updates to track and instrument parameters.

Only a handful of updates have a parameter to go to:

===============  ============================  ==========================
attribute        parameter                     value
===============  ============================  ==========================
``programi``     instrument bank / patch       program number
``control0r``    instrument bank (rich only)   ``value * 127``
``control7r``    track volume                  ``value * 100``
``control10r``   track panning                 ``value * 200 - 100``
``bendr``        track pitch                   ``value * 100``
===============  ============================  ==========================

Controller values arrive normalised to 0-1 (pitch bend to -1..1).  An
update at tick 0 sets the parameter's initial value.  Later updates are
written as automation points onto one automation track per controller,
created on first use and reset at the start of every sequence track.
"""

import dataclasses
import logging
import re
import typing

import midimport.channels
import midimport.constants
import midimport.diagnostics
import midimport.project
import midimport.timing


logger = logging.getLogger(__name__)

_CONTROL_ATTRIBUTE = re.compile(r"^control(\d+)r?$")


def match_attribute (attribute: str, base: str, suffix: str) -> bool:

	"""
	Return True if ``attribute`` is ``base`` with or without its value-type ``suffix``.
	"""

	return attribute == base or attribute == base + suffix


def controller_number (attribute: str) -> typing.Optional[int]:

	"""
	Return the controller slot an attribute addresses, or None.

	``controlN`` gives N for N below 128; ``bend`` gives the pitch bend slot.
	"""

	if match_attribute(attribute, "bend", "r"):
		return midimport.constants.PITCH_BEND_SLOT

	match = _CONTROL_ATTRIBUTE.match(attribute)

	if match is None:
		return None

	number = int(match.group(1))

	if number >= midimport.constants.CONTROLLER_COUNT:
		return None

	return number


@dataclasses.dataclass (frozen=True)
class ControllerTarget:

	"""
	Where a controller goes and how its normalised value is scaled.
	"""

	owner: str						# 'track' or 'instrument'
	parameter: str
	scale: float
	offset: float = 0.0
	rich_only: bool = False

	def transform (self, value: float) -> float:

		"""Scale a normalised controller value to the parameter's range."""

		return value * self.scale + self.offset


CONTROLLER_TARGETS: typing.Dict[int, ControllerTarget] = {
	0: ControllerTarget("instrument", "bank", float(midimport.constants.MIDI_VALUE_MAX), rich_only=True),
	7: ControllerTarget("track", "volume", midimport.constants.VOLUME_SCALE),
	10: ControllerTarget("track", "panning", midimport.constants.PANNING_SCALE, -midimport.constants.PANNING_OFFSET),
	midimport.constants.PITCH_BEND_SLOT: ControllerTarget("track", "pitch", midimport.constants.PITCH_SCALE),
}


@dataclasses.dataclass
class ControllerSlot:

	"""
	The automation track for one controller, and its currently open pattern.
	"""

	track: typing.Any = None
	pattern: typing.Any = None
	last_position: int = 0
	pattern_start: int = 0
	pattern_length: int = 0

	def clear (self) -> None:

		"""Forget the track and pattern so the next value starts afresh."""

		self.track = None
		self.pattern = None
		self.last_position = 0
		self.pattern_start = 0
		self.pattern_length = 0


	def put_value (
		self,
		sink: midimport.project.ProjectSink,
		converter: midimport.timing.TickConverter,
		parameter: typing.Any,
		tick: int,
		value: float
	) -> None:

		"""
		Write an automation point, opening a new bar-aligned pattern after a gap of more than one bar.
		"""

		if self.pattern is None or tick > self.last_position + converter.ticks_per_bar:
			self.pattern_start = converter.bar_start(tick)
			self.pattern_length = 0
			self.pattern = sink.create_pattern(self.track, self.pattern_start)

		sink.bind_parameter(self.pattern, parameter)

		self.last_position = tick

		offset = tick - self.pattern_start
		sink.add_automation_point(self.pattern, offset, value)

		self.pattern_length = max(self.pattern_length, converter.bar_end(offset))
		sink.set_pattern_length(self.pattern, self.pattern_length)


class ControllerRouter:

	"""
	Applies program changes and controller updates to a channel's track.
	"""

	def __init__ (
		self,
		sink: midimport.project.ProjectSink,
		converter: midimport.timing.TickConverter,
		channels: midimport.channels.ChannelRouter,
		report: midimport.diagnostics.ImportReport
	) -> None:

		"""
		Start with all controller slots empty.
		"""

		self.sink = sink
		self.converter = converter
		self.channels = channels
		self.report = report

		self.slots: typing.Dict[int, ControllerSlot] = {}


	def reset (self) -> None:

		"""Clear every controller slot. Called at the start of each sequence track."""

		for slot in self.slots.values():
			slot.clear()


	def route (
		self,
		channel: midimport.channels.ChannelSlot,
		attribute: str,
		value: typing.Any,
		tick: int,
		track_name: typing.Optional[str] = None
	) -> bool:

		"""Apply an update to ``channel``.

		Returns False when the attribute has no parameter to go to, so the
		caller can report it.
		"""

		if match_attribute(attribute, "program", "i"):
			return self._program_change(channel, value)

		number = controller_number(attribute)

		if number is None:
			return False

		return self._controller(channel, number, value, tick, track_name if track_name is not None else channel.name)


	def _program_change (self, channel: midimport.channels.ChannelSlot, value: typing.Any) -> bool:

		if isinstance(value, bool) or not isinstance(value, (int, float)):
			self.report.add(
				midimport.diagnostics.MALFORMED_SEQUENCE,
				f"Program change with non-numeric value {value!r}",
				channel = channel.index
			)
			return True

		program = int(value)

		if channel.is_rich:
			# Program number selects the patch in bank 0
			self.channels.set_program(channel, midimport.constants.DEFAULT_BANK, program)
			logger.debug(f"Channel {channel.index}: program {program}")
			return True

		if channel.instrument is None or not self.sink.load_patch(channel.instrument, program):
			self.report.add(
				midimport.diagnostics.MISSING_INSTRUMENT_RESOURCE,
				f"No patch found for program {program}",
				channel = channel.index
			)

		return True


	def _controller (self, channel: midimport.channels.ChannelSlot, number: int, value: typing.Any, tick: int, track_name: str) -> bool:

		target = CONTROLLER_TARGETS.get(number)

		if target is None:
			return False

		if target.rich_only and not channel.is_rich:
			return False

		owner = channel.instrument if target.owner == "instrument" else channel.track
		parameter = self.sink.resolve_parameter(owner, target.parameter)

		if parameter is None:
			return False

		if isinstance(value, bool) or not isinstance(value, (int, float)):
			self.report.add(
				midimport.diagnostics.MALFORMED_SEQUENCE,
				f"Controller {number} with non-numeric value {value!r}",
				channel = channel.index
			)
			return True

		scaled = target.transform(float(value))
		logger.debug(f"Channel {channel.index}: {target.parameter} {value:g} -> {scaled:g} at tick {tick}")

		if tick == 0:
			self.sink.set_parameter_initial_value(parameter, scaled)
			return True

		slot = self.slots.get(number)

		if slot is None:
			slot = ControllerSlot()
			self.slots[number] = slot

		if slot.track is None:
			name = f"{track_name} > {self.sink.parameter_display_name(parameter)}"
			slot.track = self.sink.create_automation_track(name)

		slot.put_value(self.sink, self.converter, parameter, tick, scaled)

		return True


	@property
	def automation_tracks (self) -> typing.List[typing.Any]:

		"""Return the automation tracks created for the current sequence track."""

		return [slot.track for slot in self.slots.values() if slot.track is not None]
