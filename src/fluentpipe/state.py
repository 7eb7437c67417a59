"""Immutable pipeline state shared by the sync and async builders."""

import dataclasses
import logging
from dataclasses import dataclass, field
from types import TracebackType
from typing import Any

from fluentpipe.config import PipeOptions
from fluentpipe.exceptions import PipeError, describe_exception
from fluentpipe.logger import default_label, log_value
from fluentpipe.steps import Step

logger = logging.getLogger(__name__)


def wrap_error(
    exc: Exception,
    step_name: str,
    history: tuple[str, ...],
    options: PipeOptions,
) -> Exception:
    """Apply the error wrapping policy to a step failure.

    Returns the original exception unless ``use_pipe_error`` is set, in
    which case a PipeError carrying the step history is returned.
    """
    if not options.use_pipe_error:
        return exc
    return PipeError(step_name=step_name, original=exc, history=history)


@dataclass(frozen=True)
class PipeState:
    """Snapshot of a pipeline between steps.

    Attributes:
        value: Current pipeline value
        options: Options fixed at creation
        last_step_name: Display name of the most recently invoked step
        history: Names of steps that completed, in invocation order
        error: Captured step failure, already wrapped per ``options``
        error_traceback: Traceback of ``error`` when it was captured
    """

    value: Any
    options: PipeOptions
    last_step_name: str | None = None
    history: tuple[str, ...] = ()
    error: Exception | None = None
    error_traceback: TracebackType | None = field(default=None, repr=False, compare=False)

    @property
    def failed(self) -> bool:
        """Whether a step has failed. Failed states are terminal."""
        return self.error is not None

    def advanced(self, step: Step, value: Any) -> "PipeState":  # noqa: ANN401
        """Return the state after ``step`` produced ``value``."""
        return dataclasses.replace(
            self,
            value=value,
            last_step_name=step.name,
            history=(*self.history, step.name),
        )

    def failed_at(self, step: Step, exc: Exception) -> "PipeState":
        """Return the terminal state after ``step`` raised ``exc``."""
        logger.debug(
            "Step '%s' failed with %s; skipping remaining steps",
            step.name,
            describe_exception(exc),
        )
        error = wrap_error(exc, step.name, self.history, self.options)
        return dataclasses.replace(
            self,
            last_step_name=step.name,
            error=error,
            error_traceback=error.__traceback__,
        )

    def skip(self, step: Step) -> "PipeState":
        """Return self unchanged for a step chained after a failure."""
        logger.debug("Skipping step '%s' after earlier failure", step.name)
        return self

    def log(self, prefix: str, label: str | None = None) -> None:
        """Log the current value unless the pipeline has failed."""
        if self.failed:
            return
        if label is None:
            label = default_label(prefix, self.last_step_name)
        log_value(label, self.value)

    def finalize(self) -> Any:  # noqa: ANN401
        """Return the final value or raise the captured error.

        Every raise starts from the traceback captured at failure time, so
        repeated calls do not stack frames onto the stored exception.
        """
        if self.error is None:
            return self.value
        error = self.error.with_traceback(self.error_traceback)
        if isinstance(error, PipeError):
            raise error from error.original
        raise error


__all__ = ["PipeState", "wrap_error"]
