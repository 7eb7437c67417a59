"""Diagnostic exceptions for failed pipelines."""

from dataclasses import dataclass, field


@dataclass(eq=False)
class PipeError(Exception):
    """Structured step failure with pipeline history.

    Raised by a pipeline's finalizer in place of the original exception
    when ``use_pipe_error`` is enabled. The original exception stays
    available as ``original`` and as ``__cause__`` once raised.

    Attributes:
        step_name: Display name of the step that raised
        original: The exception raised by the step
        history: Names of the steps that ran successfully, in order
    """

    step_name: str
    original: Exception
    history: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        super().__init__(self.step_name, self.original)
        self.__cause__ = self.original

    def __str__(self) -> str:
        """Format the diagnostic trace."""
        position = len(self.history) + 1
        lines = [f'Pipeline failed at step {position} ("{self.step_name}")']
        if self.history:
            lines.append("Steps completed:")
            lines.extend(f"  {i}. {name}" for i, name in enumerate(self.history, start=1))
        else:
            lines.append("Steps completed: (none)")
        lines.append(f'❌ ERROR in "{self.step_name}": {describe_exception(self.original)}')
        return "\n".join(lines)


def describe_exception(exc: BaseException) -> str:
    """Render ``Type: message`` for an exception without ever raising."""
    name = type(exc).__name__
    try:
        message = str(exc)
    except Exception:  # noqa: BLE001
        return f"{name}: <unprintable {name}>"
    return f"{name}: {message}" if message else name


__all__ = ["PipeError", "describe_exception"]
