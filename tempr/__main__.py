"""
Tempr package __main__ entry point.

Allows running with: python -m tempr
"""

import sys

from tempr.app.run import main

if __name__ == "__main__":
    sys.exit(main())
