"""
Custom exceptions for composite form configuration.

Field validation problems are never raised; they end up in ``form.errors``.
These exceptions cover schema misconfiguration only.
"""
from django.core.exceptions import ImproperlyConfigured


class CompositeFormError(ImproperlyConfigured):
    """Base exception for composite form configuration errors."""
    pass


class DelegationDeclarationError(CompositeFormError):
    """Raised at class creation when a delegation declaration is malformed."""
    pass


class TargetLookupError(CompositeFormError):
    """Raised at construction when a delegation target cannot be resolved."""
    pass


class PrimaryModelMissingError(CompositeFormError):
    """Raised at save time when no Model slot matches the form's form_name."""
    pass
