"""
Identity app - the boundary between external provider identities and
sovereign users.

Ordinary application code only ever sees the sovereign id. The external
id is readable through identity.registry (forward lookups) and, in
reverse, only through identity.quarantine.
"""
