"""``python -m prayercompass``."""

import sys

from prayercompass.cli import main

sys.exit(main())
