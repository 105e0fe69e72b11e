"""Dispatch outcome types.

A ProcessingOutcome is what the pipeline hands back to the broker adapter,
which decides from it whether to acknowledge the message.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Sequence, Tuple

from eventbus.exceptions import (
    DeserializationError,
    EventBusError,
    PartialFailureError,
)


class DispatchStatus(Enum):
    """Status codes for dispatch outcomes.

    Attributes:
        SUCCESS: Every resolved handler completed without error
        NO_SUBSCRIBERS: Nothing is registered for the event name
        DESERIALIZATION_ERROR: The body could not be decoded, no handler ran
        PARTIAL_FAILURE: At least one handler raised
        INTERNAL_ERROR: Registry invariant violated during dispatch
    """

    SUCCESS = "success"
    NO_SUBSCRIBERS = "no_subscribers"
    DESERIALIZATION_ERROR = "deserialization_error"
    PARTIAL_FAILURE = "partial_failure"
    INTERNAL_ERROR = "internal_error"


@dataclass(frozen=True)
class ProcessingOutcome:
    """Result of dispatching one message.

    Attributes:
        status: DispatchStatus -- high-level outcome
        event_name: str -- canonical event name the message was routed by
        message: str -- human-friendly message for logs
        failed_handlers: tuple -- handler ids that raised, in registration order
        handled_count: int -- handlers that completed successfully
        error: Optional[Exception] -- underlying error for non-handler failures
    """

    status: DispatchStatus
    event_name: str
    message: str = "ok"
    failed_handlers: Tuple[Any, ...] = ()
    handled_count: int = 0
    error: Optional[Exception] = None

    @property
    def is_success(self) -> bool:
        return self.status == DispatchStatus.SUCCESS

    @classmethod
    def success(cls, event_name: str, handled_count: int) -> "ProcessingOutcome":
        return cls(
            status=DispatchStatus.SUCCESS,
            event_name=event_name,
            message=f"{handled_count} handler(s) completed",
            handled_count=handled_count,
        )

    @classmethod
    def no_subscribers(cls, event_name: str) -> "ProcessingOutcome":
        return cls(
            status=DispatchStatus.NO_SUBSCRIBERS,
            event_name=event_name,
            message="no subscriptions for event",
        )

    @classmethod
    def deserialization_error(
        cls, event_name: str, error: DeserializationError
    ) -> "ProcessingOutcome":
        return cls(
            status=DispatchStatus.DESERIALIZATION_ERROR,
            event_name=event_name,
            message=str(error),
            error=error,
        )

    @classmethod
    def partial_failure(
        cls,
        event_name: str,
        failed_handlers: Sequence[Any],
        handled_count: int,
    ) -> "ProcessingOutcome":
        return cls(
            status=DispatchStatus.PARTIAL_FAILURE,
            event_name=event_name,
            message=f"{len(failed_handlers)} handler(s) failed",
            failed_handlers=tuple(failed_handlers),
            handled_count=handled_count,
        )

    @classmethod
    def internal_error(cls, event_name: str, error: Exception) -> "ProcessingOutcome":
        return cls(
            status=DispatchStatus.INTERNAL_ERROR,
            event_name=event_name,
            message=str(error),
            error=error,
        )

    def raise_for_status(self) -> None:
        """Raise the matching exception for a failed outcome.

        SUCCESS and NO_SUBSCRIBERS do not raise.

        Raises:
            PartialFailureError: For PARTIAL_FAILURE
            DeserializationError: For DESERIALIZATION_ERROR
            EventBusError: The recorded error for INTERNAL_ERROR
        """
        if self.status == DispatchStatus.PARTIAL_FAILURE:
            raise PartialFailureError(self.event_name, self.failed_handlers)
        if self.status in (
            DispatchStatus.DESERIALIZATION_ERROR,
            DispatchStatus.INTERNAL_ERROR,
        ):
            if isinstance(self.error, EventBusError):
                raise self.error
            raise EventBusError(self.message) from self.error
