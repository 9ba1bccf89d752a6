from rest_framework.throttling import UserRateThrottle


class VerificationThrottle(UserRateThrottle):
    """Limits verification sends and attempts to the ``verification`` rate per user."""
    scope = 'verification'
