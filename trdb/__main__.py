"""Allow running the ledger as `python -m trdb`"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
