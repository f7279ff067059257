"""
Web API for Dicecast.
"""

from .server import create_app

__all__ = ['create_app']
