"""
Allow running the package directly: python -m adb_multiplexer
"""

import sys
from adb_multiplexer.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
