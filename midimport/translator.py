"""Translation of a generic MIDI sequence into a project.

:func:`translate` is the entry point::

	import midimport.project
	import midimport.smf
	import midimport.translator

	sequence = midimport.smf.read_sequence("song.mid")
	project = midimport.project.Project()
	report = midimport.translator.translate(sequence, project)

	for diagnostic in report.diagnostics:
		print(diagnostic)

The import runs in a fixed order:

1. Time signature and tempo curves, once for the whole song.
2. Every sequence track, event by event: notes are added to their
   channel's instrument track, controller updates to parameters or
   automation tracks, and the track name is taken from track-level updates.
3. Every channel's notes are split into bar-aligned patterns; channels that
   never received a note are flagged for removal.
4. The General MIDI percussion channel is switched to the percussion bank.

Imports are best-effort.  Problems are reported as diagnostics on the
returned :class:`~midimport.diagnostics.ImportReport`; only cancellation
through the progress sink stops an import, by raising
:class:`~midimport.diagnostics.ImportCancelled`.
"""

import logging
import typing

import midimport.channels
import midimport.config
import midimport.constants
import midimport.controllers
import midimport.curves
import midimport.diagnostics
import midimport.progress
import midimport.project
import midimport.segmenter
import midimport.sequence
import midimport.timing


logger = logging.getLogger(__name__)


class SequenceTranslator:

	"""
	Holds the state of one import: channel slots, controller slots and the report.

	A translator is used for a single sequence; create a new one for each import.
	"""

	def __init__ (
		self,
		sink: midimport.project.ProjectSink,
		config: typing.Optional[midimport.config.TranslatorConfig] = None,
		progress: typing.Optional[midimport.progress.ProgressSink] = None
	) -> None:

		"""
		Prepare empty channel and controller slots for an import into ``sink``.
		"""

		self.sink = sink
		self.config = config if config is not None else midimport.config.TranslatorConfig()
		self.progress: midimport.progress.ProgressSink = progress if progress is not None else midimport.progress.NullProgress()

		self.converter = midimport.timing.TickConverter(self.config.ticks_per_bar, self.config.beats_per_bar)
		self.report = midimport.diagnostics.ImportReport()

		self.channels = midimport.channels.ChannelRouter(
			sink = sink,
			soundfont = self.config.soundfont,
			pitch_range = self.config.pitch_range
		)

		self.controllers = midimport.controllers.ControllerRouter(
			sink = sink,
			converter = self.converter,
			channels = self.channels,
			report = self.report
		)

		self._used = False


	def translate (self, sequence: midimport.sequence.SequenceSource) -> midimport.diagnostics.ImportReport:

		"""
		Import ``sequence`` into the sink and return the report.
		"""

		if self._used:
			raise ValueError("A SequenceTranslator can only be used for one import")

		self._used = True

		track_count = sequence.track_count()
		logger.info(f"Importing MIDI sequence with {track_count} track(s)")

		if not self.config.soundfont:
			self.report.add(
				midimport.diagnostics.SETUP_INCOMPLETE,
				"No default soundfont configured - imported tracks will have no sound"
			)

		self.progress.set_step_count(midimport.constants.PRE_TRACK_STEPS + track_count + midimport.constants.POST_TRACK_STEPS)

		midimport.curves.build_time_signature_curves(sequence.time_signatures(), self.converter, self.sink)
		self.progress.advance()

		midimport.curves.build_tempo_curve(sequence.time_map(), self.converter, self.sink, self.report)
		self.progress.advance()

		for update in sequence.song_updates():
			self.report.add(
				midimport.diagnostics.UNRECOGNIZED_EVENT,
				f"Unhandled song update '{update.attribute}'",
				time = update.time
			)

		for index in range(track_count):
			self._check_cancelled(index)
			self.progress.advance()
			self._translate_track(index, sequence.track(index))

		self._check_cancelled(track_count)

		self._finish()
		self.progress.advance()

		self.sink.tempo_changed()

		self._collect()

		logger.info(
			f"Imported {self.report.note_count} note(s) into {len(self.report.instrument_tracks)} instrument track(s) "
			f"and {len(self.report.automation_tracks)} automation track(s), "
			f"{len(self.report.diagnostics)} diagnostic(s)"
		)

		return self.report


	def _check_cancelled (self, tracks_done: int) -> None:

		if self.progress.is_cancelled():
			self._collect()
			logger.info(f"Import cancelled after {tracks_done} track(s)")
			raise midimport.diagnostics.ImportCancelled(self.report, tracks_done)


	def _translate_track (self, index: int, track: midimport.sequence.SequenceTrack) -> None:

		"""
		Route every event of one sequence track. Controller slots start empty for each track.
		"""

		self.controllers.reset()
		track_name = f"Track {index}"

		for event in track:

			if event.channel == midimport.constants.GLOBAL_CHANNEL:
				track_name = self._global_event(index, event, track_name)
				continue

			if not 0 <= event.channel < midimport.constants.CHANNEL_COUNT:
				self.report.add(
					midimport.diagnostics.MALFORMED_SEQUENCE,
					f"Channel {event.channel} out of range",
					track = index,
					channel = event.channel,
					time = event.time
				)
				continue

			if isinstance(event, midimport.sequence.NoteEvent):
				slot = self.channels.route(event.channel, track_name)
				midimport.channels.import_note(
					sink = self.sink,
					converter = self.converter,
					slot = slot,
					pitch = event.pitch,
					start = event.start,
					duration = event.duration,
					loudness = event.loudness
				)

			elif isinstance(event, midimport.sequence.UpdateEvent):
				slot = self.channels.route(event.channel, track_name)
				handled = self.controllers.route(slot, event.attribute, event.value, self.converter.ticks(event.time), track_name)

				if not handled:
					self.report.add(
						midimport.diagnostics.UNRECOGNIZED_EVENT,
						f"Unhandled update '{event.attribute}'",
						track = index,
						channel = event.channel,
						time = event.time
					)

			else:
				self.report.add(
					midimport.diagnostics.UNRECOGNIZED_EVENT,
					f"Unhandled event {type(event).__name__}",
					track = index,
					channel = event.channel,
					time = event.time
				)

		self.report.automation_tracks.extend(self.controllers.automation_tracks)


	def _global_event (self, index: int, event: typing.Any, track_name: str) -> str:

		"""
		Handle a track-level event. Returns the (possibly renamed) track name.
		"""

		if isinstance(event, midimport.sequence.UpdateEvent):

			if midimport.controllers.match_attribute(event.attribute, "trackname", "s") and isinstance(event.value, str):
				return event.value

			description = f"'{event.attribute}'"

			if isinstance(event.value, midimport.sequence.Atom):
				description += f" = {event.value.name}"

		else:
			description = type(event).__name__

		self.report.add(
			midimport.diagnostics.UNRECOGNIZED_EVENT,
			f"Unhandled global event {description}",
			track = index,
			time = event.time
		)

		return track_name


	def _finish (self) -> None:

		"""
		Split every channel's notes into patterns, flag empty tracks and apply the percussion bank.
		"""

		for index in sorted(self.channels.slots):

			slot = self.channels.slots[index]

			if slot.has_notes:
				midimport.segmenter.segment(self.sink, self.converter, slot)

			else:
				logger.info(f"Channel {index}: track '{slot.name}' has no notes")
				self.sink.mark_removal_candidate(slot.track)
				self.report.removal_candidates.append(slot.track)

		# General MIDI reserves this channel for drums
		percussion = self.channels.get(self.config.percussion_channel)

		if percussion is not None and percussion.has_notes and percussion.is_rich:
			self.channels.set_program(percussion, self.config.percussion_bank, self.config.percussion_patch, initial=True)
			logger.info(f"Channel {percussion.index}: percussion bank {self.config.percussion_bank}")


	def _collect (self) -> None:

		slots = [self.channels.slots[index] for index in sorted(self.channels.slots)]

		self.report.instrument_tracks = [slot.track for slot in slots]
		self.report.note_count = sum(len(slot.notes) for slot in slots)


def translate (
	sequence: midimport.sequence.SequenceSource,
	sink: midimport.project.ProjectSink,
	progress: typing.Optional[midimport.progress.ProgressSink] = None,
	config: typing.Optional[midimport.config.TranslatorConfig] = None
) -> midimport.diagnostics.ImportReport:

	"""
	Import ``sequence`` into ``sink`` with a fresh translator.

	Raises :class:`~midimport.diagnostics.ImportCancelled` if ``progress`` cancels the import.
	"""

	translator = SequenceTranslator(sink=sink, config=config, progress=progress)

	return translator.translate(sequence)
