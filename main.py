"""Service Entry Point - Root Module.

This is the root-level entry point for the web server
(``uvicorn main:app``). It builds the app from the enviro_alerts package.
"""

from enviro_alerts.main import create_app

app = create_app()

__all__ = [
    "app",
]
