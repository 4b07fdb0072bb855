"""
REST client for the PetPulse backend.
"""

from .client import PetPulseClient

__all__ = ["PetPulseClient"]
