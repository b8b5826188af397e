# accounts/__init__.py
"""
Accounts app - sovereign users and the rank guard boundary.

This app provides:
- User: the sovereign user record (public_id is the sovereign id)
- Invitation: pending rank grants by email
- Rank guards: fresh-lookup authorization for data handlers
- DRF permission classes built on the guards
"""
