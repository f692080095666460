class SalonBookError(Exception):
    """Base class for application errors surfaced to callers."""
    pass


# Validation errors: caller can correct the input and try again.

class InvalidPromoCodeError(SalonBookError):
    """Raised when a promo code is unknown (or expired, when expiry is enforced)."""
    pass


class WizardStageIncompleteError(SalonBookError):
    """Raised when advancing past a wizard stage whose selections are incomplete."""
    pass


class StaffIncompatibleError(SalonBookError):
    """Raised when a staff member cannot perform every selected service category."""
    pass


class InvalidTransitionError(SalonBookError):
    """Raised for a booking status change that the lifecycle does not allow."""
    pass


class NotAuthorizedError(SalonBookError):
    """Raised when the acting principal may not perform the operation."""
    pass


class NotFoundError(SalonBookError):
    pass


class InsufficientBalanceError(SalonBookError):
    pass


class ConcurrentModificationError(SalonBookError):
    """Raised when a document changed between read and write (version mismatch)."""
    pass


# Collaborator errors: surfaced to the user, retried manually.

class DocumentStoreError(SalonBookError):
    pass


class PaymentGatewayError(SalonBookError):
    """Raised when the payment provider fails (timeouts, network errors, rejections)."""
    pass


class PaymentVerificationError(SalonBookError):
    """Raised when a payment callback's signature does not verify."""
    pass


# Internal errors: unreachable through the normal flow.

class EmptySelectionError(RuntimeError):
    """Raised when checkout is reached without any selected services."""
    pass
