"""
Package entry point.

Allows running the application via:

    python -m gsomtimetable

This simply forwards execution to gsomtimetable.cli.main().
"""

from gsomtimetable.cli import main

if __name__ == "__main__":
    main()
