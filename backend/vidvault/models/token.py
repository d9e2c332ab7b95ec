# vidvault/models/token.py
import uuid
from enum import Enum
from tortoise import fields, models


class TokenPurpose(str, Enum):
    LOGIN = "email_login"
    PASSWORD_RESET = "password_reset"
    EMAIL_VERIFICATION = "email_verification"


class Token(models.Model):
    """
    One-time code sent by email.
    - code: 6 uppercase alphanumerics
    - purpose: what the code can be exchanged for
    - expires_at: hard deadline; past it the code is dead even if unused
    - is_used / used_at: set once, on successful validation or when superseded
    - ip_address / user_agent: requester metadata, kept for audit
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    code = fields.CharField(max_length=10, index=True)
    purpose = fields.CharEnumField(TokenPurpose, max_length=50, default=TokenPurpose.LOGIN)
    expires_at = fields.DatetimeField()
    is_used = fields.BooleanField(default=False)
    used_at = fields.DatetimeField(null=True)
    ip_address = fields.CharField(max_length=45, null=True)
    user_agent = fields.CharField(max_length=500, null=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    user = fields.ForeignKeyField(
        "models.User",
        related_name="tokens",
        on_delete=fields.CASCADE,
    )

    class Meta:
        table = "tokens"
