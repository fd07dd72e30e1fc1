import midimport.progress


def test_null_progress_never_cancels () -> None:

	"""The null sink accepts checkpoints and never cancels."""

	progress = midimport.progress.NullProgress()
	progress.set_step_count(3)
	progress.advance()

	assert not progress.is_cancelled()


def test_logging_progress_counts_and_cancels () -> None:

	"""The logging sink counts steps and cancels once the limit is reached."""

	progress = midimport.progress.LoggingProgress(cancel_after=2)
	progress.set_step_count(5)

	progress.advance()
	assert not progress.is_cancelled()

	progress.advance()
	assert progress.is_cancelled()
	assert progress.step == 2
	assert progress.step_count == 5
