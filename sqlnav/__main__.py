"""Allow running sqlnav as ``python -m sqlnav``."""

import sys

from .cli import main

sys.exit(main())
