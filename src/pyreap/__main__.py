"""Allow ``python -m pyreap``."""

import sys

from pyreap.cli import main

if __name__ == "__main__":
    sys.exit(main())
