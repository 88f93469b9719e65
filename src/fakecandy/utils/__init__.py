"""Utility helpers."""

from .http_server import BackgroundHttpServer
from .observer import ObserverManager

__all__ = ["BackgroundHttpServer", "ObserverManager"]
