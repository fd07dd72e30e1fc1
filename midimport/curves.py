"""Global tempo and time signature curves.

Both curves are written once per import, before any track is processed.
The tempo curve goes into the project's own tempo automation pattern; the
time signature gets two new automation tracks, one for the numerator and one
for the denominator.
"""

import logging
import typing

import midimport.diagnostics
import midimport.project
import midimport.sequence
import midimport.timing


logger = logging.getLogger(__name__)

NUMERATOR_TRACK_NAME = "MIDI Time Signature Numerator"
DENOMINATOR_TRACK_NAME = "MIDI Time Signature Denominator"


def build_tempo_curve (
	time_map: midimport.sequence.TimeMap,
	converter: midimport.timing.TickConverter,
	sink: midimport.project.ProjectSink,
	report: midimport.diagnostics.ImportReport
) -> int:

	"""Write the tempo implied by the time map into the project's tempo pattern.

	Each pair of consecutive samples gives the tempo from the first sample's
	beat onwards: ``(beat delta / seconds delta) * 60`` BPM.  A trailing
	``last_tempo`` (beats per second) is written at the final sample.

	Pairs with no time between them cannot define a tempo; they are skipped
	and reported as malformed.

	Returns the number of points written (zero when the project has no tempo pattern).
	"""

	pattern = sink.tempo_pattern()

	if pattern is None:
		logger.info("Project has no tempo automation - tempo map ignored")
		return 0

	sink.clear_pattern(pattern)

	points = time_map.points
	written = 0

	for current, following in zip(points, points[1:]):

		seconds = following.time - current.time

		if seconds <= 0:
			report.add(
				midimport.diagnostics.MALFORMED_SEQUENCE,
				f"Time map interval without duration between beats {current.beat:g} and {following.beat:g}",
				time = current.beat
			)
			continue

		bpm = (following.beat - current.beat) / seconds * 60.0
		sink.add_automation_point(pattern, converter.ticks(current.beat), bpm)
		written += 1

	if time_map.last_tempo is not None and points:
		last = points[-1]
		sink.add_automation_point(pattern, converter.ticks(last.beat), time_map.last_tempo * 60.0)
		written += 1

	logger.info(f"Tempo curve: {written} point(s)")

	return written


def build_time_signature_curves (
	time_signatures: typing.List[midimport.sequence.TimeSignature],
	converter: midimport.timing.TickConverter,
	sink: midimport.project.ProjectSink
) -> typing.Tuple[typing.Any, typing.Any]:

	"""
	Create the numerator and denominator automation tracks and fill them from the time signature changes.

	Returns the two automation patterns (numerator, denominator).
	"""

	numerator, denominator = sink.time_signature_parameters()

	numerator_track = sink.create_automation_track(NUMERATOR_TRACK_NAME)
	denominator_track = sink.create_automation_track(DENOMINATOR_TRACK_NAME)

	numerator_pattern = sink.create_pattern(numerator_track, 0)
	denominator_pattern = sink.create_pattern(denominator_track, 0)

	sink.bind_parameter(numerator_pattern, numerator)
	sink.bind_parameter(denominator_pattern, denominator)

	last_tick = 0

	for change in time_signatures:
		tick = converter.ticks(change.beat)
		sink.add_automation_point(numerator_pattern, tick, change.numerator)
		sink.add_automation_point(denominator_pattern, tick, change.denominator)
		last_tick = max(last_tick, tick)

	# Adding points does not grow the patterns
	length = converter.bar_end(last_tick)
	sink.set_pattern_length(numerator_pattern, length)
	sink.set_pattern_length(denominator_pattern, length)

	logger.info(f"Time signature curve: {len(time_signatures)} change(s)")

	return numerator_pattern, denominator_pattern
