"""Progress reporting for long imports.

The translator reports one step before reading the time signatures, one
after the tempo curve, one per sequence track and one for the final
segmentation pass.  It asks :meth:`ProgressSink.is_cancelled` only at track
boundaries, so a caller can abort an import between tracks but never in the
middle of one.
"""

import logging
import typing


logger = logging.getLogger(__name__)


class ProgressSink (typing.Protocol):

	"""
	Protocol for receiving progress checkpoints.
	"""

	def set_step_count (self, count: int) -> None:

		"""Set the total number of steps the import will report."""

		...

	def advance (self) -> None:

		"""Mark one step as done."""

		...

	def is_cancelled (self) -> bool:

		"""Return True to abort the import at the next track boundary."""

		...


class NullProgress:

	"""
	Progress sink that ignores every checkpoint and never cancels.
	"""

	def set_step_count (self, count: int) -> None:

		return None

	def advance (self) -> None:

		return None

	def is_cancelled (self) -> bool:

		return False


class LoggingProgress:

	"""
	Progress sink that logs each step, with optional cancellation after a number of steps.
	"""

	def __init__ (self, cancel_after: typing.Optional[int] = None) -> None:

		"""
		Start at step zero. When ``cancel_after`` is set, report cancellation once that many steps are done.
		"""

		self.step = 0
		self.step_count = 0
		self.cancel_after = cancel_after


	def set_step_count (self, count: int) -> None:

		self.step_count = count


	def advance (self) -> None:

		self.step += 1
		logger.info(f"Importing MIDI file... {self.step}/{self.step_count}")


	def is_cancelled (self) -> bool:

		return self.cancel_after is not None and self.step >= self.cancel_after
