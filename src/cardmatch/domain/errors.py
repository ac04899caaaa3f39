class CardMatchError(Exception):
    pass


class ValidationError(CardMatchError, ValueError):
    """Request is missing required fields or carries invalid values."""


class CatalogConfigError(CardMatchError):
    """The static card catalog could not be loaded or is malformed."""


class UpstreamLookupError(CardMatchError):
    """A business store or places lookup failed. Callers degrade instead of surfacing it."""
