"""
HTTP API for templates, agents and chat.
"""

from .app import create_app

__all__ = ["create_app"]
