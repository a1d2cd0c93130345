"""Error types for the stateflow engine."""
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class StepError:
    """Structured failure of a step during flow evaluation.

    Carries the raised exception and the state that was current
    when it was raised, so runners can surface both.
    """

    step_name: str
    error_type: str
    message: str
    description: str = ""
    exception: BaseException | None = None
    state: object = None
    context: dict[str, object] = field(default_factory=dict)

    @classmethod
    def from_exception(
        cls,
        exc: BaseException,
        *,
        step_name: str,
        description: str,
        state: object,
    ) -> StepError:
        """Build a StepError from a raised exception."""
        return cls(
            step_name=step_name,
            error_type=type(exc).__name__,
            message=str(exc),
            description=description,
            exception=exc,
            state=state,
        )

    def __str__(self) -> str:
        """Human-readable error representation for logging."""
        max_len = 500
        base = f"StepError[{self.step_name}] {self.error_type}: {self.message}"
        if self.description:
            base += f" | in {self.description}"
        if self.context:
            ctx_str = str(self.context)
            if len(ctx_str) > max_len:
                ctx_str = ctx_str[: max_len - 3] + "..."
            base += f" | context={ctx_str}"
        return base

    def as_exception(self) -> BaseException:
        """Return the raised exception, or a RuntimeError describing self."""
        if self.exception is not None:
            return self.exception
        return RuntimeError(str(self))


class FlowDefinitionError(ValueError):
    """Raised when a flow is built from invalid elements.

    Construction errors surface before any state is threaded.
    """


class MatchFailedError(AssertionError):
    """Raised by a failed match when the run is fail-fast."""

    def __init__(self, description: str, detail: str) -> None:
        super().__init__(f"{description}: {detail}")
        self.description = description
        self.detail = detail
