from datetime import datetime
from typing import Any

from admin_console.schemas.common import EntityBase

SUBSCRIPTION_STATUSES: tuple[str, ...] = ("active", "pending", "cancelled", "expired", "inactive")
BILLING_CYCLES: tuple[str, ...] = ("monthly", "yearly", "custom")


class Subscription(EntityBase):
    user_id: str | None = None
    plan_name: str | None = None
    plan_type: str | None = None
    billing_cycle: str | None = None
    auto_renew: bool = False
    monthly_price: float | None = None
    yearly_price: float | None = None
    currency: str = "NGN"
    start_date: datetime | None = None
    end_date: datetime | None = None
    next_billing_date: datetime | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None
    user: dict[str, Any] | None = None

    @property
    def subtype(self) -> str | None:
        return self.billing_cycle
