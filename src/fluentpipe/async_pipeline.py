"""Asynchronous fluent pipeline."""

import asyncio
from collections.abc import Awaitable, Callable, Generator, Mapping
from typing import Any

from fluentpipe.config import PipeOptions, resolve_options
from fluentpipe.state import PipeState
from fluentpipe.steps import Step

LOG_PREFIX = "PipeAsync"

Operation = Callable[[PipeState], Awaitable[PipeState]]


class PipeAsync:
    """Chain sync or async steps over a value.

    ``next`` and ``log`` return a new PipeAsync straight away, so a whole
    chain can be written before anything runs. Awaiting a PipeAsync runs the
    chain up to that point and gives back the settled PipeAsync; awaiting
    ``result()`` gives the final value. Steps run one at a time, in order.

    Each link holds its parent and the operation to apply to the parent's
    state. Links settle at most once, even when branches sharing a link are
    awaited together.

    A failing step stops the chain. Later steps are not run and the error
    is raised from the await.

    Example:
        >>> await pipe(5).next(add_async, 3).next(multiply_async, 2).result()
        16
    """

    def __init__(
        self,
        parent: "PipeAsync | None" = None,
        operation: Operation | None = None,
        *,
        state: PipeState | None = None,
    ) -> None:
        if state is None and (parent is None or operation is None):
            msg = "PipeAsync needs either a state or a parent link and an operation."
            raise ValueError(msg)
        self._parent = parent
        self._operation = operation
        self._state = state
        self._future: asyncio.Future[PipeState] | None = None

    @classmethod
    def start(
        cls,
        initial_value: Any,  # noqa: ANN401
        options: PipeOptions | None = None,
    ) -> "PipeAsync":
        """Create a pipeline that is already settled on ``initial_value``."""
        return cls(state=PipeState(value=initial_value, options=options or PipeOptions()))

    async def _resolve(self) -> PipeState:
        if self._state is not None:
            return self._state
        if self._future is not None:
            return await asyncio.shield(self._future)

        # Claim every unsettled link up to the nearest settled or in-flight
        # ancestor before the first await, so no other caller re-runs them
        loop = asyncio.get_running_loop()
        pending: list[PipeAsync] = []
        link: PipeAsync | None = self
        while link is not None and link._state is None and link._future is None:
            pending.append(link)
            link = link._parent
        if link is None:
            msg = "Pipeline chain has no settled root."
            raise RuntimeError(msg)

        for unsettled in pending:
            unsettled._future = loop.create_future()
        pending.reverse()

        try:
            if link._state is not None:
                state = link._state
            else:
                state = await asyncio.shield(link._future)  # type: ignore[arg-type]
            for unsettled in pending:
                state = await unsettled._operation(state)  # type: ignore[misc]
                unsettled._settle(state)
        except BaseException as exc:
            for unsettled in pending:
                if unsettled._state is None:
                    unsettled._abandon(exc)
            raise
        return state

    def _settle(self, state: PipeState) -> None:
        future = self._future
        self._state = state
        self._future = None
        self._parent = None
        self._operation = None
        if future is not None and not future.done():
            future.set_result(state)

    def _abandon(self, exc: BaseException) -> None:
        # Wake waiters and let a later await retry this link
        future, self._future = self._future, None
        if future is None or future.done():
            return
        if isinstance(exc, asyncio.CancelledError):
            future.cancel()
        else:
            future.set_exception(exc)
            future.exception()

    def next(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> "PipeAsync":
        """Chain ``func(value, *args, **kwargs)``, awaiting it if needed.

        Args:
            func: Step function, sync or async. Receives the current value
                first unless it takes no positional parameters.
            *args: Trailing positional arguments for ``func``.
            **kwargs: Keyword arguments for ``func``.

        Returns:
            A new pipeline that runs this step when awaited.
        """
        step = Step(func, args, kwargs)

        async def run_step(state: PipeState) -> PipeState:
            if state.failed:
                return state.skip(step)
            try:
                value = await step.ainvoke(state.value)
            except Exception as exc:  # noqa: BLE001
                return state.failed_at(step, exc)
            return state.advanced(step, value)

        return PipeAsync(self, run_step)

    def log(self, label: str | None = None) -> "PipeAsync":
        """Chain a DEBUG log of the current value. The value is unchanged."""

        async def run_log(state: PipeState) -> PipeState:
            state.log(LOG_PREFIX, label)
            return state

        return PipeAsync(self, run_log)

    async def result(self) -> Any:  # noqa: ANN401
        """Run the chain and return the final value.

        Raises:
            Exception: The failing step's exception, or a PipeError wrapping
                it when ``use_pipe_error`` is enabled.
        """
        state = await self._resolve()
        return state.finalize()

    async def history(self) -> tuple[str, ...]:
        """Run the chain and return the names of the steps that completed."""
        state = await self._resolve()
        return state.history

    async def _settled(self) -> "PipeAsync":
        state = await self._resolve()
        if state.failed:
            state.finalize()
        return self

    def __await__(self) -> Generator[Any, None, "PipeAsync"]:
        return self._settled().__await__()

    def __repr__(self) -> str:
        if self._state is None:
            return "PipeAsync(<pending>)"
        status = "failed" if self._state.failed else "ok"
        return (
            f"PipeAsync(value={self._state.value!r}, "
            f"steps={len(self._state.history)}, {status})"
        )


def pipe(
    initial_value: Any,  # noqa: ANN401
    options: PipeOptions | Mapping[str, Any] | None = None,
    **overrides: Any,
) -> PipeAsync:
    """Start an asynchronous pipeline.

    Args:
        initial_value: Value passed to the first step.
        options: PipeOptions or a mapping such as ``{"use_pipe_error": True}``.
        **overrides: Option values, e.g. ``use_pipe_error=True``.
    """
    return PipeAsync.start(initial_value, resolve_options(options, **overrides))


__all__ = ["PipeAsync", "pipe"]
