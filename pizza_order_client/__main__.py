"""
Run:
  python -m pizza_order_client
"""

import sys

from pizza_order_client.ui.cli.app import main

if __name__ == "__main__":
    sys.exit(main())
