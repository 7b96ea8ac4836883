"""Allow `python -m calendar_assistant`."""

import sys

from .cli import main

sys.exit(main())
