"""
API package for Cull.

Provides Flask routes and background scan orchestration for the JSON API.
"""

from __future__ import annotations

from .routes import api
from .orchestrator import ScanOrchestrator

__all__ = ['api', 'ScanOrchestrator']
