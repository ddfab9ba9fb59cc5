"""
Manager sign-off for completion records.

Sign-off is an attestation, not a toggle: once a record carries
signed_off_by / signed_off_at those fields never change again, and there
is no un-sign operation. Batches are best-effort because a reviewer's
selection may include ids that vanished from a refreshed list.
"""

import logging
from datetime import date, datetime
from typing import Optional, Iterable

from ..database.repositories.completions import CompletionRepository, get_completion_repository
from ..exceptions import NotFoundError, ValidationError
from ..models.checklist import SignOffResult
from ..utils.datetime_utils import get_local_now

logger = logging.getLogger(__name__)


class SignOffAuditor:
    """Applies reviewer sign-off to completion records."""

    def __init__(self, completions: Optional[CompletionRepository] = None):
        self.completions = completions or get_completion_repository()

    async def sign_off(
        self,
        completion_ids: Iterable[int],
        reviewer: str,
        now: Optional[datetime] = None,
    ) -> SignOffResult:
        """
        Sign off every listed record that is not signed off yet.

        Raises:
            ValidationError: blank reviewer, empty id list or a non-integer id
            NotFoundError: none of the ids exist
        """
        if not reviewer or not reviewer.strip():
            raise ValidationError("reviewer required")

        # Keep first occurrence order, drop duplicates
        try:
            ids = list(dict.fromkeys(int(i) for i in completion_ids))
        except (TypeError, ValueError):
            raise ValidationError(f"completion ids must be integers: {completion_ids!r}") from None
        if not ids:
            raise ValidationError("no completion ids supplied")

        signed_at = now or get_local_now()
        signed, already_signed, missing = await self.completions.sign_off(
            ids, reviewer.strip(), signed_at
        )

        if not signed and not already_signed:
            raise NotFoundError(f"None of the completion records exist: {ids}")

        if missing:
            logger.warning(f"Sign-off by {reviewer}: skipped unknown completion ids {missing}")

        return SignOffResult(
            reviewer=reviewer.strip(),
            signed_off_at=signed_at if signed else None,
            signed=signed,
            already_signed=already_signed,
            missing=missing,
        )

    async def sign_off_day(
        self,
        venue_id: str,
        day: date,
        reviewer: str,
        now: Optional[datetime] = None,
    ) -> SignOffResult:
        """Sign off everything recorded for a venue-day that is still unsigned."""
        if not reviewer or not reviewer.strip():
            raise ValidationError("reviewer required")

        pending = await self.completions.list_unsigned_for_day(venue_id, day)
        if not pending:
            logger.info(f"Nothing to sign off for venue {venue_id} on {day}")
            return SignOffResult(reviewer=reviewer.strip())
        return await self.sign_off([r.id for r in pending], reviewer, now=now)
