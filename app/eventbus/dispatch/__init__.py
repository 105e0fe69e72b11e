"""Message dispatch: pipeline and outcomes."""

from eventbus.dispatch.outcomes import DispatchStatus, ProcessingOutcome
from eventbus.dispatch.pipeline import DispatchPipeline

__all__ = ["DispatchPipeline", "DispatchStatus", "ProcessingOutcome"]
