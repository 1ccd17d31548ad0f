"""Allow ``python -m goldenreset``."""

import sys

from goldenreset.cli import main

if __name__ == "__main__":
    sys.exit(main())
