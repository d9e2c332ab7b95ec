# vidvault/models/user.py
"""
Database model for users.
An account is identified by its (lowercased) email; there are no passwords,
login happens through one-time codes (see models/token.py).
"""
import uuid
from tortoise import fields, models


class User(models.Model):
    """
    User database model.

    Relationships:
    - Has many Tokens (related_name="tokens")
    - Has many UserVideo entitlements (related_name="entitlements")

    Users are never hard-deleted: deactivation sets is_active=False.
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)  # Primary key: unique user identifier
    email = fields.CharField(max_length=255, unique=True, index=True)  # Lowercased, unique
    first_name = fields.CharField(max_length=100, null=True)
    last_name = fields.CharField(max_length=100, null=True)
    is_active = fields.BooleanField(default=True)
    last_login_at = fields.DatetimeField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "users"

    @property
    def full_name(self) -> str:
        if self.first_name and self.last_name:
            return f"{self.first_name} {self.last_name}"
        return self.first_name or self.last_name or self.email
