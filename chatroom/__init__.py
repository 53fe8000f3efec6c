"""Group chat backend: participants, messages and a presence sweep over MongoDB."""
from .app import create_app

__all__ = ['create_app']
