# src/domain/models/capture_session.py
"""
Pipeline state and the single pending capture request.
"""
import time
import uuid
from concurrent.futures import Future
from enum import Enum

from src.domain.common.errors import CaptureCancelledError, DomainError, DomainException
from src.domain.models.region_model import Region


class PipelineState(Enum):
    IDLE = "idle"
    AWAITING_SELECTION = "awaiting_selection"
    PROCESSING = "processing"


class CaptureSession:
    """
    A capture request waiting for the user to draw a region.

    The session's future resolves with the selected Region, or fails with a
    DomainException when the request is cancelled or cannot proceed. A session
    completes exactly once.
    """

    def __init__(self):
        self.id = uuid.uuid4().hex
        self.created_at = time.time()
        self.future: Future = Future()

    @property
    def is_done(self) -> bool:
        return self.future.done()

    def resolve(self, region: Region) -> None:
        if not self.future.done():
            self.future.set_result(region)

    def reject(self, error: DomainError) -> None:
        if not self.future.done():
            self.future.set_exception(DomainException(error))

    def cancel(self) -> None:
        self.reject(CaptureCancelledError())
