"""
HOTP API package - Flask backend cho hotp_core.
"""

from .app import create_app

__all__ = ['create_app']
