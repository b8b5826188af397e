# credentials/throttles.py
"""
Rate limiting for the identity handoff.

Protects the ceremony against assertion replay and account-creation bursts.
"""

from rest_framework.throttling import AnonRateThrottle


class SessionHandoffThrottle(AnonRateThrottle):
    """
    Rate limit handoff attempts per IP.

    Configured via settings.REST_FRAMEWORK['DEFAULT_THROTTLE_RATES']['session_handoff']
    """
    scope = "session_handoff"
