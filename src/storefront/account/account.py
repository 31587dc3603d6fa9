"""Account aggregate: a customer or administrator known to the storefront.

Credentials live with the fronting auth layer; this record only carries what
the workflow needs (contact email, role, active flag).
"""

import re
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, String

from storefront.domain import storefront

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class Role(Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


@storefront.aggregate
class Account:
    name: String(required=True, max_length=50)
    email: String(required=True, max_length=320, unique=True)
    role: String(choices=Role, default=Role.CUSTOMER.value)
    phone: String(max_length=20)
    is_active: Boolean(default=True)
    created_at: DateTime()
    deactivated_at: DateTime()

    @invariant.post
    def active_accounts_need_a_valid_email(self):
        if self.is_active and not _EMAIL_PATTERN.match(self.email or ""):
            raise ValidationError({"email": ["Please enter a valid email"]})

    @classmethod
    def register(cls, name, email, role=Role.CUSTOMER.value, phone=None):
        return cls(
            name=name.strip(),
            email=email.strip().lower(),
            role=role,
            phone=phone,
            created_at=datetime.now(UTC),
        )

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    def deactivate(self):
        """Retire the account and release its email address for re-use."""
        if not self.is_active:
            raise ValidationError({"is_active": ["Account is already deactivated"]})

        now = datetime.now(UTC)
        self.is_active = False
        self.email = f"deleted_{int(now.timestamp() * 1000)}_{self.email}"
        self.deactivated_at = now
