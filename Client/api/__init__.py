"""
PatraKosh Client - API Package

This package contains the REST client for the PatraKosh file store.
"""

from .patrakosh_api import PatraKoshAPI

__all__ = ['PatraKoshAPI']
