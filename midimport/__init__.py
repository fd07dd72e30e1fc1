"""
midimport - translate MIDI sequences into instrument and automation tracks.

A MIDI file is a flat stream of per-channel events.  midimport turns it into
the structure of a music project:

- **Instrument tracks** - one per MIDI channel, created on the channel's
  first event, with a soundfont instrument when the host offers one and a
  single-patch instrument otherwise.
- **Note patterns** - every channel's notes split into bar-aligned patterns
  wherever the music pauses for more than a bar.
- **Automation tracks** - volume, panning, pitch bend and bank select
  written as automation curves, or as initial values when they happen at
  the very start.
- **Tempo and time signature curves** - taken from the file's tempo map and
  time signature changes.
- **General MIDI percussion** - channel 10 is switched to the drum bank.

Imports are best-effort: anything that cannot be used is skipped and
reported as a diagnostic, never raised.

Minimal example:

    ```python
    import midimport

    sequence = midimport.read_sequence("song.mid")
    config = midimport.TranslatorConfig(soundfont="FluidR3_GM.sf2")
    project = midimport.Project()
    report = midimport.translate(sequence, project, config=config)

    for diagnostic in report.diagnostics:
        print(diagnostic)
    ```

Package-level exports: ``translate``, ``read_sequence``, ``Project``,
``TranslatorConfig``, ``ImportReport``, ``ImportCancelled``.
"""

import midimport.config
import midimport.diagnostics
import midimport.project
import midimport.smf
import midimport.translator


translate = midimport.translator.translate
read_sequence = midimport.smf.read_sequence
Project = midimport.project.Project
TranslatorConfig = midimport.config.TranslatorConfig
ImportReport = midimport.diagnostics.ImportReport
ImportCancelled = midimport.diagnostics.ImportCancelled
