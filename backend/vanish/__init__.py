"""
Vanish app - account deletion and admin recovery.

The only consumer of identity.quarantine: both flows need the external id
of a sovereign user to reach the identity provider.
"""
