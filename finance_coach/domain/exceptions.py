"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class SubscriptionStoreError(DomainException):
    """Subscription store rejected a write or is unavailable"""

    pass


class SubscriptionNotFoundError(DomainException):
    """No subscription with the given id exists for the owner"""

    pass
