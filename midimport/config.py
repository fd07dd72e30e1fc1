import dataclasses
import logging
import os
import typing

import yaml

import midimport.constants


logger = logging.getLogger(__name__)


@dataclasses.dataclass
class TranslatorConfig:

	"""
	Settings for one import.

	Parameters:
		ticks_per_bar: Tick resolution of one bar in the target project.
		beats_per_bar: Beats per bar used to convert beats to ticks. Fixed for
			the whole import, whatever the file's time signature.
		soundfont: Resource loaded into every soundfont instrument. When
			unset, imported tracks have no sound and a ``setup_incomplete``
			diagnostic is reported.
		patch_directory: Where the reference project looks for ``NNN*.pat``
			files for fallback instruments.
		pitch_range: Pitch bend range, in semitones, given to every track.
		percussion_channel: Channel forced to the percussion bank.
		percussion_bank: Bank selected for the percussion channel.
		percussion_patch: Patch selected for the percussion channel.
	"""

	ticks_per_bar: int = midimport.constants.DEFAULT_TICKS_PER_BAR
	beats_per_bar: float = midimport.constants.BEATS_PER_BAR
	soundfont: typing.Optional[str] = None
	patch_directory: typing.Optional[str] = midimport.constants.DEFAULT_PATCH_DIRECTORY
	pitch_range: int = midimport.constants.GM_PITCH_RANGE
	percussion_channel: int = midimport.constants.GM_PERCUSSION_CHANNEL
	percussion_bank: int = midimport.constants.GM_PERCUSSION_BANK
	percussion_patch: int = midimport.constants.GM_PERCUSSION_PATCH

	def __post_init__ (self) -> None:

		if self.ticks_per_bar <= 0:
			raise ValueError("ticks_per_bar must be positive")

		if self.beats_per_bar <= 0:
			raise ValueError("beats_per_bar must be positive")

		if not 0 <= self.percussion_channel < midimport.constants.CHANNEL_COUNT:
			raise ValueError(f"percussion_channel must be between 0 and {midimport.constants.CHANNEL_COUNT - 1}")


def config_from_dict (values: typing.Dict[str, typing.Any]) -> TranslatorConfig:

	"""
	Build a config from a mapping, ignoring (and logging) keys it does not know.
	"""

	known = {field.name for field in dataclasses.fields(TranslatorConfig)}
	unknown = sorted(set(values) - known)

	if unknown:
		logger.warning(f"Ignoring unknown config keys: {', '.join(unknown)}")

	return TranslatorConfig(**{key: value for key, value in values.items() if key in known})


def load_config (config_path: str = 'config.yaml') -> TranslatorConfig:

	"""
	Load import settings from the ``midimport`` section of a YAML file (or its top level).
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return TranslatorConfig()

	with open(config_path, 'r') as f:
		data = yaml.safe_load(f) or {}

	if not isinstance(data, dict):
		raise ValueError(f"Config file {config_path} must contain a mapping")

	section = data.get('midimport', data)

	if not isinstance(section, dict):
		raise ValueError(f"'midimport' section of {config_path} must be a mapping")

	return config_from_dict(section)
