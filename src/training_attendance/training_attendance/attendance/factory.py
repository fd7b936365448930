from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from ..common.datetime_utils import parse_slot_time
from ..timeslots.model import TimeSlot
from .strategies.base import SubmissionTimingStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.on_time_strategy import OnTimeStrategy

logger = logging.getLogger(__name__)


@dataclass
class SubmissionStatusFactory:
    """Factory Pattern: choose the timing strategy from the slot end time.

    Only the time of day is compared. An unreadable end time fails open to ON_TIME.
    """

    def for_submission(self, *, now: datetime, time_slot: TimeSlot) -> SubmissionTimingStrategy:
        try:
            end = parse_slot_time(time_slot.end_time)
        except ValueError:
            logger.error(
                "Cannot parse end time %r of time slot %s; treating submission as on time",
                time_slot.end_time,
                time_slot.time_slot_id,
            )
            return OnTimeStrategy()

        if now.time() > end:
            return LateStrategy()
        return OnTimeStrategy()
