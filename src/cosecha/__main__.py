"""Entry point for running Cosecha as a module.

Usage:
    python -m cosecha [command] [options]

Example:
    python -m cosecha session
    python -m cosecha receipt --name "Juan Pérez" --kg 50
"""

from cosecha.cli import app

if __name__ == "__main__":
    app()
