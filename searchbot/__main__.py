"""
Entry point for running searchbot as a module: python -m searchbot
"""

from searchbot.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
