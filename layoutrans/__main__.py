"""
Entry point for running layoutrans as a module.

Usage:
    python -m layoutrans --help
    python -m layoutrans translate paper.pdf --target JA
"""
from .cli import app


if __name__ == "__main__":
    app()
