"""Reading Standard MIDI Files into the generic sequence model.

mido does the parsing; this module only turns its messages into
:class:`~midimport.sequence.NoteEvent` and
:class:`~midimport.sequence.UpdateEvent` records measured in beats, and
collects the tempo and time signature maps.

RIFF MIDI (``.rmi``) files are unwrapped to the SMF data they contain
before parsing.

Message mapping:

- note on/off pairs become notes (a note on with velocity 0 is a note off;
  notes still sounding at the end of a track end there).
- ``control_change`` becomes ``control<N>r`` with the value scaled to 0-1.
- ``program_change`` becomes ``programi``.
- ``pitchwheel`` becomes ``bendr`` scaled to -1..1.
- ``aftertouch`` becomes ``pressurer``; ``polytouch`` becomes ``keypressurer``.
- ``track_name`` and other text meta messages become track-level updates.
- ``midi_port`` moves the following channels up by 16 per port.
"""

import collections
import io
import logging
import os
import struct
import typing

import mido

import midimport.constants
import midimport.sequence


logger = logging.getLogger(__name__)

DEFAULT_TEMPO = 500000		# microseconds per beat (120 BPM)

SMF_ID = b"MThd"
RIFF_ID = b"RIFF"
RMID_ID = b"RMID"
DATA_ID = b"data"

_TEXT_ATTRIBUTES = {
	'track_name': 'tracknames',
	'text': 'texts',
	'copyright': 'copyrights',
	'lyrics': 'lyrics',
	'marker': 'markers',
	'cue_marker': 'cues',
	'instrument_name': 'instrumentnames',
}

# Meta messages that are consumed elsewhere or carry no musical content
_IGNORED_TYPES = {'set_tempo', 'time_signature', 'end_of_track', 'midi_port', 'channel_prefix'}


def unwrap_riff (data: bytes) -> bytes:

	"""
	Return the SMF data inside a RIFF MIDI file.

	Chunks are walked until the ``data`` chunk is found; it must start with
	an SMF header.  Raises ``ValueError`` for anything else.
	"""

	if data[:4] != RIFF_ID:
		raise ValueError("Not a RIFF file")

	if data[8:12] != RMID_ID:
		raise ValueError("Invalid RIFF file format (expected RMID)")

	offset = 12

	while True:

		if offset + 8 > len(data):
			raise ValueError("RIFF data chunk not found")

		chunk_id = data[offset:offset + 4]
		length = struct.unpack("<I", data[offset + 4:offset + 8])[0]
		offset += 8

		if chunk_id == DATA_ID:
			break

		# Chunks are padded to an even length
		offset += (length + 1) & ~1

	payload = data[offset:offset + length]

	if payload[:4] != SMF_ID:
		raise ValueError("RIFF data chunk does not contain a Standard MIDI File")

	return payload


def read_sequence (path: typing.Union[str, os.PathLike]) -> midimport.sequence.Sequence:

	"""
	Read a Standard MIDI File or RIFF MIDI file into a sequence.

	Raises ``ValueError`` if the file is neither, and ``OSError`` if it cannot be read.
	"""

	with open(path, 'rb') as f:
		data = f.read()

	header = data[:4]

	if header == SMF_ID:
		logger.info(f"Found MThd in {path}")

	elif header == RIFF_ID:
		logger.info(f"Found RIFF in {path}")
		data = unwrap_riff(data)

	else:
		raise ValueError(f"{path} is not a Standard MIDI file")

	try:
		midi_file = mido.MidiFile(file=io.BytesIO(data))
	except (EOFError, KeyError, OSError, ValueError) as e:
		raise ValueError(f"Failed to parse {path}: {e}") from e

	return sequence_from_midi(midi_file)


def _absolute (track: mido.MidiTrack) -> typing.Iterator[typing.Tuple[int, mido.Message]]:

	"""Yield (absolute tick, message) pairs for a track."""

	tick = 0

	for message in track:
		tick += message.time
		yield tick, message


def build_time_map (midi_file: mido.MidiFile) -> midimport.sequence.TimeMap:

	"""
	Build the beat/seconds time map from every ``set_tempo`` message in the file.

	The map starts at beat 0 and has one point per tempo change; the final
	tempo (in beats per second) is kept as ``last_tempo``.  Files without
	tempo messages get a single point and no ``last_tempo``.
	"""

	ticks_per_beat = midi_file.ticks_per_beat

	changes = sorted(
		(tick, message.tempo)
		for track in midi_file.tracks
		for tick, message in _absolute(track)
		if message.type == 'set_tempo'
	)

	points = [midimport.sequence.TimeMapPoint(0.0, 0.0)]
	tempo = DEFAULT_TEMPO

	for tick, new_tempo in changes:

		beat = tick / ticks_per_beat
		last = points[-1]

		if beat > last.beat:
			seconds = last.time + (beat - last.beat) * tempo / 1e6
			points.append(midimport.sequence.TimeMapPoint(beat, seconds))

		tempo = new_tempo

	if not changes:
		return midimport.sequence.TimeMap(points=points)

	return midimport.sequence.TimeMap(points=points, last_tempo=1e6 / tempo)


def build_time_signatures (midi_file: mido.MidiFile) -> typing.List[midimport.sequence.TimeSignature]:

	"""Collect time signature changes from every track, in beat order."""

	ticks_per_beat = midi_file.ticks_per_beat

	changes = sorted(
		(tick, message.numerator, message.denominator)
		for track in midi_file.tracks
		for tick, message in _absolute(track)
		if message.type == 'time_signature'
	)

	return [
		midimport.sequence.TimeSignature(beat=tick / ticks_per_beat, numerator=numerator, denominator=denominator)
		for tick, numerator, denominator in changes
	]


def convert_track (track: mido.MidiTrack, ticks_per_beat: int) -> midimport.sequence.SequenceTrack:

	"""
	Convert one mido track into time-ordered note and update events.
	"""

	events: typing.List[midimport.sequence.SequenceEvent] = []
	sounding: typing.Dict[typing.Tuple[int, int], typing.Deque[typing.Tuple[float, int]]] = collections.defaultdict(collections.deque)

	port_offset = 0
	beat = 0.0

	for tick, message in _absolute(track):

		beat = tick / ticks_per_beat

		if message.type in _IGNORED_TYPES:

			if message.type == 'midi_port':
				port_offset = message.port * midimport.constants.CHANNELS_PER_PORT

			continue

		if message.is_meta:
			events.extend(_meta_event(message, beat))
			continue

		if message.type == 'sysex':
			events.append(midimport.sequence.UpdateEvent(midimport.constants.GLOBAL_CHANNEL, 'sysexs', bytes(message.data).hex(), beat))
			continue

		if not hasattr(message, 'channel'):
			logger.debug(f"Skipping {message.type} message")
			continue

		channel = message.channel + port_offset

		if message.type == 'note_on' and message.velocity > 0:
			sounding[(channel, message.note)].append((beat, message.velocity))

		elif message.type in ('note_on', 'note_off'):

			started = sounding.get((channel, message.note))

			if not started:
				logger.debug(f"Note off without note on: channel {channel}, note {message.note}")
				continue

			start, velocity = started.popleft()
			events.append(midimport.sequence.NoteEvent(channel, start, beat - start, message.note, velocity))

		elif message.type == 'control_change':
			events.append(midimport.sequence.UpdateEvent(channel, f"control{message.control}r", message.value / midimport.constants.MIDI_VALUE_MAX, beat))

		elif message.type == 'program_change':
			events.append(midimport.sequence.UpdateEvent(channel, 'programi', message.program, beat))

		elif message.type == 'pitchwheel':
			events.append(midimport.sequence.UpdateEvent(channel, 'bendr', message.pitch / midimport.constants.PITCH_WHEEL_RANGE, beat))

		elif message.type == 'aftertouch':
			events.append(midimport.sequence.UpdateEvent(channel, 'pressurer', message.value / midimport.constants.MIDI_VALUE_MAX, beat))

		elif message.type == 'polytouch':
			events.append(midimport.sequence.UpdateEvent(channel, 'keypressurer', message.value / midimport.constants.MIDI_VALUE_MAX, beat))

	# Notes still sounding end with the track
	for (channel, note), started in sounding.items():
		for start, velocity in started:
			events.append(midimport.sequence.NoteEvent(channel, start, beat - start, note, velocity))

	events.sort(key=lambda event: event.time)

	return midimport.sequence.SequenceTrack(events=events)


def _meta_event (message: mido.MetaMessage, beat: float) -> typing.List[midimport.sequence.UpdateEvent]:

	attribute = _TEXT_ATTRIBUTES.get(message.type)

	if attribute is not None:
		text = message.name if message.type in ('track_name', 'instrument_name') else message.text
		return [midimport.sequence.UpdateEvent(midimport.constants.GLOBAL_CHANNEL, attribute, text, beat)]

	if message.type == 'key_signature':
		return [midimport.sequence.UpdateEvent(midimport.constants.GLOBAL_CHANNEL, 'keysigs', message.key, beat)]

	return [midimport.sequence.UpdateEvent(midimport.constants.GLOBAL_CHANNEL, message.type, midimport.sequence.Atom(message.type), beat)]


def sequence_from_midi (midi_file: mido.MidiFile) -> midimport.sequence.Sequence:

	"""
	Convert a parsed mido ``MidiFile`` into a sequence.
	"""

	ticks_per_beat = midi_file.ticks_per_beat

	tracks = [convert_track(track, ticks_per_beat) for track in midi_file.tracks]

	return midimport.sequence.Sequence(
		tracks = tracks,
		time_map = build_time_map(midi_file),
		time_signatures = build_time_signatures(midi_file)
	)
