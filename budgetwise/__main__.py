"""Allow `python -m budgetwise`."""

import sys

from budgetwise.cli import main

sys.exit(main())
