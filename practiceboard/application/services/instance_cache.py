"""
Session-scoped cache of a therapist's assessment instances.

The cache is fully replaced on every commit; there is no partial merge.
Fetches are bracketed by a ``FetchToken``. Starting a fetch for another
therapist cancels every outstanding token so a slow response for the
previous therapist can never overwrite the current list.
"""

import itertools
import logging
from dataclasses import dataclass, field
from datetime import datetime

from practiceboard.domain.entities import AssessmentInstance
from practiceboard.domain.exceptions import AssessmentError
from practiceboard.domain.utils.datetime_utils import Clock, now_utc

logger = logging.getLogger(__name__)


@dataclass
class FetchToken:
    """Handle for one in-flight fetch."""

    therapist_id: str
    sequence: int
    started_at: datetime
    cancelled: bool = field(default=False)

    def cancel(self) -> None:
        self.cancelled = True


class InstanceCache:
    """Materialized instance list for the current session."""

    def __init__(self, clock: Clock = now_utc) -> None:
        self._clock = clock
        self._sequence = itertools.count(1)
        self._pending: set[int] = set()
        self._tokens: dict[int, FetchToken] = {}

        self.therapist_id: str | None = None
        self.instances: list[AssessmentInstance] = []
        self.error: AssessmentError | None = None
        self.refreshed_at: datetime | None = None
        self.version = 0

    @property
    def loading(self) -> bool:
        return bool(self._pending)

    def begin_fetch(self, therapist_id: str) -> FetchToken:
        """Register a fetch; switching therapist invalidates all older fetches."""
        if therapist_id != self.therapist_id:
            if self.therapist_id is not None:
                logger.debug("Instance cache switching therapist, discarding cached list")
            self._cancel_all()
            self.therapist_id = therapist_id
            self.instances = []
            self.error = None

        token = FetchToken(
            therapist_id=therapist_id,
            sequence=next(self._sequence),
            started_at=self._clock(),
        )
        self._tokens[token.sequence] = token
        self._pending.add(token.sequence)
        return token

    def commit(
        self,
        token: FetchToken,
        instances: list[AssessmentInstance],
        error: AssessmentError | None = None,
    ) -> bool:
        """
        Replace the cached list with the result of ``token``'s fetch.

        Returns False (and changes nothing) when the token was cancelled.
        """
        self._release(token)
        if token.cancelled or token.therapist_id != self.therapist_id:
            logger.debug(f"Discarding stale fetch #{token.sequence}")
            return False

        self.instances = list(instances)
        self.error = error
        self.refreshed_at = self._clock()
        self.version += 1
        return True

    def abandon(self, token: FetchToken) -> None:
        """Release a token whose fetch ended without a result to commit."""
        self._release(token)

    def reset(self) -> None:
        """Cancel every fetch and forget the therapist."""
        self._cancel_all()
        self.therapist_id = None
        self.instances = []
        self.error = None
        self.refreshed_at = None

    def _release(self, token: FetchToken) -> None:
        self._pending.discard(token.sequence)
        self._tokens.pop(token.sequence, None)

    def _cancel_all(self) -> None:
        for token in self._tokens.values():
            token.cancel()
        self._tokens.clear()
        self._pending.clear()
