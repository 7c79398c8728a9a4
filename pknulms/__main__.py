"""
Package entry point.

Allows running the CLI via:

    python -m pknulms

This simply forwards execution to pknulms.cli.main().
"""

from pknulms.cli import main

if __name__ == "__main__":
    main()
