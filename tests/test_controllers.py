import pytest

import midimport.channels
import midimport.controllers
import midimport.diagnostics
import midimport.project
import midimport.timing


class Routers:

	"""Channel and controller routers sharing a project and report."""

	def __init__ (self, project: midimport.project.Project) -> None:

		"""Create both routers."""

		self.project = project
		self.converter = midimport.timing.TickConverter()
		self.report = midimport.diagnostics.ImportReport()
		self.channels = midimport.channels.ChannelRouter(project)
		self.controllers = midimport.controllers.ControllerRouter(project, self.converter, self.channels, self.report)


@pytest.fixture
def routers (project: midimport.project.Project) -> Routers:

	"""Routers over a project with soundfont support."""

	return Routers(project)


def test_controller_number_parsing () -> None:

	"""Controller attributes are recognised with or without their type suffix."""

	assert midimport.controllers.controller_number("control7") == 7
	assert midimport.controllers.controller_number("control10r") == 10
	assert midimport.controllers.controller_number("bendr") == 128
	assert midimport.controllers.controller_number("bend") == 128
	assert midimport.controllers.controller_number("control128r") is None
	assert midimport.controllers.controller_number("controlr") is None
	assert midimport.controllers.controller_number("sysex") is None


def test_volume_at_time_zero_sets_initial_value (routers: Routers) -> None:

	"""A volume update at tick 0 sets the initial volume without automation."""

	slot = routers.channels.route(0, "Track 0")

	handled = routers.controllers.route(slot, "control7", 0.5, 0)

	assert handled
	assert slot.track.volume.initial_value == pytest.approx(50)
	assert routers.project.automation_tracks == []


def test_volume_later_writes_automation (routers: Routers) -> None:

	"""A volume update after the start writes a point on a new automation track."""

	slot = routers.channels.route(0, "Strings")
	tick = routers.converter.ticks(10)

	handled = routers.controllers.route(slot, "control7r", 0.5, tick)

	assert handled
	assert len(routers.project.automation_tracks) == 1

	track = routers.project.automation_tracks[0]
	pattern = track.patterns[0]

	assert track.name == "Strings > Volume"
	assert pattern.start == 384
	assert pattern.points == {tick - 384: pytest.approx(50)}
	assert pattern.targets == [slot.track.volume]
	assert pattern.length == 192


def test_panning_and_pitch_transforms (routers: Routers) -> None:

	"""Panning maps 0-1 to -100..100 and pitch bend scales by 100."""

	slot = routers.channels.route(0, "Track 0")

	routers.controllers.route(slot, "control10", 0.0, 0)
	routers.controllers.route(slot, "bendr", -0.5, 0)

	assert slot.track.panning.initial_value == pytest.approx(-100)
	assert slot.track.pitch.initial_value == pytest.approx(-50)


def test_bank_select_on_rich_instrument (routers: Routers) -> None:

	"""Bank select scales the normalised value to 0-127."""

	slot = routers.channels.route(0, "Track 0")

	assert routers.controllers.route(slot, "control0r", 1.0, 0)
	assert slot.instrument.bank.initial_value == pytest.approx(127)


def test_bank_select_ignored_on_fallback_instrument (fallback_project: midimport.project.Project) -> None:

	"""Bank select has nowhere to go on a single-patch instrument."""

	routers = Routers(fallback_project)
	slot = routers.channels.route(0, "Track 0")

	assert not routers.controllers.route(slot, "control0r", 1.0, 0)


def test_unmapped_controllers_not_handled (routers: Routers) -> None:

	"""Controllers without a target, and unknown attributes, are left to the caller."""

	slot = routers.channels.route(0, "Track 0")

	assert not routers.controllers.route(slot, "control64r", 1.0, 96)
	assert not routers.controllers.route(slot, "sysex", "f07e", 0)
	assert not routers.controllers.route(slot, "pressurer", 0.3, 0)
	assert routers.project.automation_tracks == []


def test_program_change_on_rich_instrument (routers: Routers) -> None:

	"""Program changes select the patch in bank 0."""

	slot = routers.channels.route(0, "Track 0")

	assert routers.controllers.route(slot, "programi", 33, 0)
	assert slot.instrument.bank.value == 0
	assert slot.instrument.patch.value == 33


def test_program_change_loads_patch_file (fallback_project: midimport.project.Project) -> None:

	"""Fallback instruments load the patch file named after the program number."""

	routers = Routers(fallback_project)
	slot = routers.channels.route(0, "Track 0")

	assert routers.controllers.route(slot, "program", 0, 0)
	assert slot.instrument.resource.endswith("000_Acoustic_Grand_Piano.pat")
	assert routers.report.diagnostics == []


def test_program_change_missing_patch_is_reported (fallback_project: midimport.project.Project) -> None:

	"""A missing patch file is reported and the instrument is left as it was."""

	routers = Routers(fallback_project)
	slot = routers.channels.route(0, "Track 0")

	assert routers.controllers.route(slot, "programi", 42, 0)
	assert slot.instrument.resource is None
	assert len(routers.report.of_kind(midimport.diagnostics.MISSING_INSTRUMENT_RESOURCE)) == 1


def test_non_numeric_value_is_malformed (routers: Routers) -> None:

	"""A controller update carrying text is reported and skipped."""

	slot = routers.channels.route(0, "Track 0")

	assert routers.controllers.route(slot, "control7r", "loud", 96)
	assert len(routers.report.malformed) == 1
	assert routers.project.automation_tracks == []


def test_points_within_a_bar_share_a_pattern (routers: Routers) -> None:

	"""Updates closer than a bar apart continue the open pattern, which grows to cover them."""

	slot = routers.channels.route(0, "Track 0")

	routers.controllers.route(slot, "control7r", 0.1, 100)
	routers.controllers.route(slot, "control7r", 0.2, 250)
	routers.controllers.route(slot, "control7r", 0.3, 400)

	track = routers.project.automation_tracks[0]

	assert len(track.patterns) == 1
	assert track.patterns[0].start == 0
	assert sorted(track.patterns[0].points) == [100, 250, 400]
	assert track.patterns[0].length == 576


def test_gap_of_more_than_a_bar_opens_new_pattern (routers: Routers) -> None:

	"""An update more than a bar after the previous one starts a new bar-aligned pattern."""

	slot = routers.channels.route(0, "Track 0")

	routers.controllers.route(slot, "control7r", 0.1, 100)
	routers.controllers.route(slot, "control7r", 0.2, 1000)

	track = routers.project.automation_tracks[0]

	assert [pattern.start for pattern in track.patterns] == [0, 960]
	assert track.patterns[1].points == {40: pytest.approx(20)}


def test_reset_starts_new_automation_tracks (routers: Routers) -> None:

	"""After a reset, the next automated value gets a fresh automation track."""

	slot = routers.channels.route(0, "Track 0")

	routers.controllers.route(slot, "control7r", 0.1, 100)
	routers.controllers.reset()
	routers.controllers.route(slot, "control7r", 0.2, 120, track_name="Track 1")

	assert [track.name for track in routers.project.automation_tracks] == ["Track 0 > Volume", "Track 1 > Volume"]
	assert routers.controllers.automation_tracks == [routers.project.automation_tracks[1]]
