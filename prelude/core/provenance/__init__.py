"""Paste provenance classification."""

from prelude.core.provenance.copy_validator import CopyValidator, PasteVerdict, similarity

__all__ = ["CopyValidator", "PasteVerdict", "similarity"]
