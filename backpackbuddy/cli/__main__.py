"""Allow ``python -m backpackbuddy.cli`` execution."""

import sys

from backpackbuddy.cli.destinations import main

sys.exit(main())
