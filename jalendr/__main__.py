"""
Allow running the CLI with ``python -m jalendr``.
"""

from .cli.app import app

if __name__ == "__main__":
    app()
