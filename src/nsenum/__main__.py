from __future__ import annotations

import sys

from nsenum.cli import main

sys.exit(main())
