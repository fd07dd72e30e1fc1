"""Timing and General MIDI constants for the importer.

The project's time base is a fixed number of **ticks per bar**
(``DEFAULT_TICKS_PER_BAR = 192``).  Positions in the generic sequence are
measured in beats, and the importer converts them with a fixed
``BEATS_PER_BAR = 4.0``, giving 48 ticks per beat.

Time signature changes are written to the project as automation, but they do
not alter the beat-to-tick conversion.
"""

# Timing

DEFAULT_TICKS_PER_BAR = 192
BEATS_PER_BAR = 4.0

# Slots

CHANNEL_COUNT = 256
CONTROLLER_COUNT = 128
PITCH_BEND_SLOT = 128				# controller slot used for pitch bend

GLOBAL_CHANNEL = -1					# track-level events carry no channel
CHANNELS_PER_PORT = 16

# MIDI value ranges

MIDI_VALUE_MIN = 0
MIDI_VALUE_MAX = 127
PITCH_WHEEL_RANGE = 8192

# Project value ranges

OCTAVE_OFFSET = 12					# MIDI key 12 is the project's key 0
VOLUME_MAX = 200.0
VOLUME_SCALE = 100.0
PANNING_SCALE = 200.0
PANNING_OFFSET = 100.0
PITCH_SCALE = 100.0

# General MIDI

GM_PITCH_RANGE = 2
GM_PERCUSSION_CHANNEL = 9
GM_PERCUSSION_BANK = 128
GM_PERCUSSION_PATCH = 0
DEFAULT_BANK = 0
DEFAULT_PATCH = 0

# Instrument profiles

RICH_INSTRUMENT = "soundfont"		# multi-bank/patch capable
FALLBACK_INSTRUMENT = "patch"		# single patch file per program

DEFAULT_PATCH_DIRECTORY = "/usr/share/midi/freepats/Tone_000/"

# Progress

PRE_TRACK_STEPS = 2
POST_TRACK_STEPS = 1
