"""Allow running the shell with: python -m crm_shell"""

import sys

from .app import main

if __name__ == "__main__":
    sys.exit(main())
