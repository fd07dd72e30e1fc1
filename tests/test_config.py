import pathlib

import pytest

import midimport.config


def test_missing_file_gives_defaults (tmp_path: pathlib.Path) -> None:

	"""A missing config file falls back to the defaults."""

	config = midimport.config.load_config(str(tmp_path / "missing.yaml"))

	assert config == midimport.config.TranslatorConfig()
	assert config.ticks_per_bar == 192
	assert config.percussion_channel == 9


def test_load_section (tmp_path: pathlib.Path) -> None:

	"""Settings are read from the midimport section."""

	path = tmp_path / "config.yaml"
	path.write_text("midimport:\n  soundfont: /sf/gm.sf2\n  pitch_range: 12\n")

	config = midimport.config.load_config(str(path))

	assert config.soundfont == "/sf/gm.sf2"
	assert config.pitch_range == 12


def test_unknown_keys_ignored (tmp_path: pathlib.Path, caplog: pytest.LogCaptureFixture) -> None:

	"""Unknown keys are logged and otherwise ignored."""

	path = tmp_path / "config.yaml"
	path.write_text("ticks_per_bar: 96\ncolour: blue\n")

	config = midimport.config.load_config(str(path))

	assert config.ticks_per_bar == 96
	assert "colour" in caplog.text


def test_invalid_values_rejected () -> None:

	"""Non-positive resolutions and out-of-range percussion channels raise ValueError."""

	with pytest.raises(ValueError):
		midimport.config.TranslatorConfig(ticks_per_bar=0)

	with pytest.raises(ValueError):
		midimport.config.TranslatorConfig(percussion_channel=256)


def test_non_mapping_file_rejected (tmp_path: pathlib.Path) -> None:

	"""A config file that is not a mapping raises ValueError."""

	path = tmp_path / "config.yaml"
	path.write_text("- one\n- two\n")

	with pytest.raises(ValueError):
		midimport.config.load_config(str(path))
