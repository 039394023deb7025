"""Entry point for ``python -m osrs_prices``."""

import sys

from osrs_prices.cli import main

sys.exit(main())
