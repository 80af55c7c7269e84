from datetime import datetime

from admin_console.schemas.common import EntityBase

USER_STATUSES: tuple[str, ...] = ("pending", "active", "inactive", "suspended", "banned", "deleted")


class User(EntityBase):
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    role: str | None = None
    last_login_at: datetime | None = None

    @property
    def subtype(self) -> str | None:
        return self.role

    @property
    def display_name(self) -> str:
        name = " ".join(part for part in (self.first_name, self.last_name) if part)
        return name or self.email or self.id
