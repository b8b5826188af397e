# identity/exceptions.py


class IdentityConflict(Exception):
    """
    An external id and a sovereign id disagree about their mapping.

    Indicates a broken one-to-one invariant. Never caught and resolved.
    """

    def __init__(self, message, external_id=None, sovereign_id=None):
        super().__init__(message)
        self.external_id = external_id
        self.sovereign_id = sovereign_id


class QuarantineViolation(Exception):
    """A quarantined registry operation was called outside its quarantine."""


class IdentityVerificationError(Exception):
    """The external provider could not vouch for the presented identity."""
