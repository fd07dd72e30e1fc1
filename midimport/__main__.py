import argparse
import logging
import sys
import typing

import midimport.config
import midimport.progress
import midimport.project
import midimport.smf
import midimport.translator


logger = logging.getLogger(__name__)


def parse_args (argv: typing.Optional[typing.List[str]] = None) -> argparse.Namespace:

	"""
	Parse command line arguments.
	"""

	parser = argparse.ArgumentParser(prog="midimport", description="Import a MIDI file into a project and summarise the result")
	parser.add_argument("path", help="Standard MIDI file (.mid) or RIFF MIDI file (.rmi)")
	parser.add_argument("--config", default="config.yaml", help="YAML settings file (default: config.yaml)")
	parser.add_argument("--soundfont", default=None, help="Default soundfont, overriding the config file")
	parser.add_argument("--keep-empty", action="store_true", help="Keep instrument tracks that received no notes")
	parser.add_argument("--verbose", "-v", action="store_true", help="Log every routed event")

	return parser.parse_args(argv)


def summarise (project: midimport.project.Project) -> None:

	"""
	Log one line per track of an imported project.
	"""

	for track in project.instrument_tracks:
		notes = sum(len(pattern.notes) for pattern in track.patterns)
		instrument = track.instrument.profile if track.instrument is not None else "none"
		logger.info(f"  {track.name}: {notes} note(s) in {len(track.patterns)} pattern(s), instrument {instrument}")

	for track in project.automation_tracks:
		points = sum(len(pattern.points) for pattern in track.patterns)
		logger.info(f"  {track.name}: {points} point(s) in {len(track.patterns)} pattern(s)")


def main (argv: typing.Optional[typing.List[str]] = None) -> int:

	"""
	Main entry point for the midimport command.
	"""

	args = parse_args(argv)

	logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

	try:
		config = midimport.config.load_config(args.config)
	except (ValueError, TypeError) as e:
		logger.error(f"Invalid config: {e}")
		return 1

	if args.soundfont is not None:
		config.soundfont = args.soundfont

	try:
		sequence = midimport.smf.read_sequence(args.path)
	except (OSError, ValueError) as e:
		logger.error(f"Failed to read {args.path}: {e}")
		return 1

	project = midimport.project.Project(ticks_per_bar=config.ticks_per_bar, patch_directory=config.patch_directory)

	report = midimport.translator.translate(sequence, project, progress=midimport.progress.LoggingProgress(), config=config)

	if not args.keep_empty:
		for track in project.remove_empty_tracks():
			logger.info(f"Removed empty track '{track.name}'")

	summarise(project)
	logger.info(f"{report.note_count} note(s), {len(report.diagnostics)} diagnostic(s)")

	return 0


if __name__ == "__main__":
	sys.exit(main())
