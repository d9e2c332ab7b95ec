# vidvault/core/__init__.py
"""
Core application modules.
Contains essential infrastructure components:
- bootstrap: Startup tasks (admin account)
- db: Database configuration and connection management
- errors: Typed service failures and their HTTP translation
- policies: Access rules and progress arithmetic
- rate_limit: Per-IP request limits
- security: Session credential signing and verification
"""
