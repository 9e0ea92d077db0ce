"""
API routers, one per resource. Each is mounted under /api by main.create_app.
"""

from . import adr, ai, appointments, auth, encounters, medications, patients, pharmacy, safety, translate

__all__ = [
    'adr',
    'ai',
    'appointments',
    'auth',
    'encounters',
    'medications',
    'patients',
    'pharmacy',
    'safety',
    'translate'
]
