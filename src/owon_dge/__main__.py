"""Allow ``python -m owon_dge``."""

import sys

from .cli import main

sys.exit(main())
