"""Allow ``python -m stalebot``."""

import sys

from stalebot.main import main

sys.exit(main())
