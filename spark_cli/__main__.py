"""
Module execution entry point.

Allows running with: python -m spark_cli
"""

import sys
from spark_cli.main import main

if __name__ == "__main__":
    sys.exit(main())
