"""ASGI entry point: ``uvicorn app.main:app``.

Deployments replace the sources through ``create_app``; this module only
serves the API without data stores attached.
"""

from app.app_factory import create_app

app = create_app()
