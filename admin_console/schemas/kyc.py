from datetime import datetime
from typing import Any

from admin_console.schemas.common import EntityBase

KYC_STATUSES: tuple[str, ...] = ("pending", "approved", "rejected", "expired")


class KycDocument(EntityBase):
    document_type: str | None = None
    document_number: str | None = None
    rejection_reason: str | None = None
    verification_notes: str | None = None
    expires_at: datetime | None = None
    user: dict[str, Any] | None = None

    @property
    def subtype(self) -> str | None:
        return self.document_type
