"""Confirmation data model."""

from .models import Confirmation, ConfirmationType, confirmation_type_from_int

__all__ = ["Confirmation", "ConfirmationType", "confirmation_type_from_int"]
