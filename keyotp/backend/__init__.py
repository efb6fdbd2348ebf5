"""
HTTP API for keyotp, built with Flask.

    from keyotp.backend import create_app
    app = create_app(store)
"""

from .app import create_app

__all__ = ['create_app']
