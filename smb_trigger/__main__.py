"""Allow running as ``python -m smb_trigger``."""

import sys

from smb_trigger.cli.app import main

sys.exit(main())
