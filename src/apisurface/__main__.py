"""Allow ``python -m apisurface``."""

from __future__ import annotations

import sys

from apisurface.cli.main import main

sys.exit(main())
