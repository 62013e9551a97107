from __future__ import annotations

import logging
from typing import Optional

from ..core.exceptions import DuplicateFingerprint
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class FingerprintGuard:
    """At most one student per (session, device fingerprint).

    `check` is the early, read-only test. The unique key on
    (session_id, fingerprint) stays authoritative: when two submissions race,
    the second write fails and `owns_claim` tells the ledger whether the
    conflicting row belongs to someone else.
    """

    def __init__(self, records: AttendanceRepository):
        self._records = records

    def owner_of(self, *, session_id: int, fingerprint: str) -> Optional[int]:
        record = self._records.find_by_fingerprint(session_id=session_id, fingerprint=fingerprint)
        return None if record is None else record.student_id

    def owns_claim(self, *, session_id: int, student_id: int, fingerprint: str) -> bool:
        return self.owner_of(session_id=session_id, fingerprint=fingerprint) == int(student_id)

    def check(self, *, session_id: int, student_id: int, fingerprint: str) -> None:
        owner = self.owner_of(session_id=session_id, fingerprint=fingerprint)
        if owner is not None and owner != int(student_id):
            logger.warning(
                "Fingerprint reuse in session %s: student %s tried a device already used by student %s",
                session_id,
                student_id,
                owner,
            )
            raise DuplicateFingerprint(session_id, fingerprint)
