"""Allow ``python -m photoingest``."""

import sys

from photoingest.cli import main

sys.exit(main())
