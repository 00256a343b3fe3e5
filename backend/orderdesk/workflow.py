"""
Order submission workflow.

    Received -> Validated -> Persisted -> Notified | NotificationFailed -> Responded

Validation failures end in RejectedInvalid and storage failures in
RejectedStorageError; both propagate to the caller as exceptions. Once an
order is persisted the submission succeeds, whatever the fan-out reports.
"""

import asyncio
import enum
import logging
from dataclasses import dataclass, field
from typing import Any, List, Mapping

from orderdesk.domain import Order
from orderdesk.errors import PersistenceError, ValidationError
from orderdesk.notifications import FanoutOutcome, NotificationFanout
from orderdesk.storage import Storage
from orderdesk.validation import validate_submission

logger = logging.getLogger(__name__)


class SubmissionState(str, enum.Enum):
    RECEIVED = "received"
    VALIDATED = "validated"
    PERSISTED = "persisted"
    NOTIFIED = "notified"
    NOTIFICATION_FAILED = "notification_failed"
    RESPONDED = "responded"
    REJECTED_INVALID = "rejected_invalid"
    REJECTED_STORAGE_ERROR = "rejected_storage_error"


@dataclass
class SubmissionResult:
    order: Order
    fanout: FanoutOutcome
    history: List[SubmissionState] = field(default_factory=list)

    @property
    def state(self) -> SubmissionState:
        return self.history[-1]

    @property
    def notifications_ok(self) -> bool:
        return SubmissionState.NOTIFIED in self.history


class SubmissionWorkflow:
    """Validate, persist, then notify. Dependencies are injected."""

    def __init__(self, storage: Storage, fanout: NotificationFanout):
        self.storage = storage
        self.fanout = fanout

    async def submit(self, raw: Mapping[str, Any]) -> SubmissionResult:
        """
        Process one raw submission.

        Raises:
            ValidationError: bad client input; nothing persisted, no fan-out.
            PersistenceError: the write failed; no fan-out.
        """
        history = [SubmissionState.RECEIVED]

        try:
            submission = validate_submission(raw)
        except ValidationError as e:
            history.append(SubmissionState.REJECTED_INVALID)
            logger.info("Submission rejected: %s", e)
            raise
        history.append(SubmissionState.VALIDATED)

        try:
            order = await asyncio.to_thread(self.storage.save_order, submission)
        except PersistenceError:
            history.append(SubmissionState.REJECTED_STORAGE_ERROR)
            logger.exception("Submit error: order could not be saved")
            raise
        except Exception as e:
            history.append(SubmissionState.REJECTED_STORAGE_ERROR)
            logger.exception("Submit error: order could not be saved")
            raise PersistenceError(str(e)) from e
        history.append(SubmissionState.PERSISTED)
        logger.info("Order saved", extra={"order_id": order.id, "items": len(order.products)})

        outcome = await self.fanout.dispatch(order)
        history.append(
            SubmissionState.NOTIFIED if outcome.all_succeeded else SubmissionState.NOTIFICATION_FAILED
        )
        history.append(SubmissionState.RESPONDED)
        return SubmissionResult(order=order, fanout=outcome, history=history)
