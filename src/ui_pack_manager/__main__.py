"""Allow running as ``python -m ui_pack_manager``"""

import sys

from .app import main

sys.exit(main())
