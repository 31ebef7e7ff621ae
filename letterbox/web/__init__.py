"""Letterbox Web Module - Flask front end and JSON API."""

from .app import create_app

__all__ = ["create_app"]
