"""Allow ``python -m agent_defs``."""

import sys

from agent_defs.ui.cli import main

if __name__ == "__main__":
    sys.exit(main())
