"""Entry point for ``python -m ghcm``."""

from ghcm.cli import app

app()
