import logging
import typing

import midimport.channels
import midimport.project
import midimport.timing


logger = logging.getLogger(__name__)


def split_notes (
	notes: typing.Iterable[midimport.project.Note],
	ticks_per_bar: int
) -> typing.List[typing.Tuple[int, typing.List[midimport.project.Note]]]:

	"""Group notes into bar-aligned blocks separated by gaps of more than one bar.

	Notes are taken in start order (ties keep their original order).  A new
	block begins at the bar containing a note whenever that note starts more
	than ``ticks_per_bar`` after the end of the previous note.

	Returns ``(start, notes)`` pairs, with every note position relative to its block's start.
	"""

	blocks: typing.List[typing.Tuple[int, typing.List[midimport.project.Note]]] = []
	last_end = 0

	for note in sorted(notes, key=lambda note: note.position):

		if not blocks or note.position > last_end + ticks_per_bar:
			start = (note.position // ticks_per_bar) * ticks_per_bar
			blocks.append((start, []))

		start, block = blocks[-1]

		last_end = note.position + note.length

		block.append(midimport.project.Note(
			position = note.position - start,
			length = note.length,
			key = note.key,
			volume = note.volume
		))

	return blocks


def segment (
	sink: midimport.project.ProjectSink,
	converter: midimport.timing.TickConverter,
	slot: midimport.channels.ChannelSlot
) -> typing.List[typing.Any]:

	"""
	Replace a channel's working pattern with one pattern per block of notes.

	Returns the new patterns.
	"""

	patterns = []

	for start, block in split_notes(slot.notes, converter.ticks_per_bar):

		pattern = sink.create_pattern(slot.track, start)

		for note in block:
			sink.add_note(pattern, note)

		patterns.append(pattern)

	if slot.pattern is not None:
		sink.remove_pattern(slot.track, slot.pattern)
		slot.pattern = None

	logger.info(f"Channel {slot.index}: split into {len(patterns)} pattern(s)")

	return patterns
