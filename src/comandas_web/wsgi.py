"""WSGI entry point for production servers."""

from comandas_web.app import create_app

app = create_app()
