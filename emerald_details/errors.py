"""Exception hierarchy shared by the store, repositories and workflows."""


class EmeraldError(Exception):
    """Base class for all domain errors."""


class ValidationError(EmeraldError):
    """Input rejected before any remote call (empty field, short password...)."""


class NotFoundError(EmeraldError):
    """A document or record does not exist."""


class StoreError(EmeraldError):
    """The document store rejected or failed an operation."""


class SlotUnavailableError(EmeraldError):
    """A time slot could not be claimed because it is no longer available."""


class InvalidTransitionError(EmeraldError):
    """Raised when a transition is not valid from the current state."""


class AuthenticationError(EmeraldError):
    """The identity provider rejected a sign-up, sign-in or account action."""


class GeocodingError(EmeraldError):
    """The geocoding or place search provider failed."""


class PaymentError(EmeraldError):
    """The payment gateway rejected or failed an operation."""
