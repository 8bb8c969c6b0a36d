"""``python -m crossgcc`` entrypoint."""

import sys

from crossgcc.cli import main

sys.exit(main())
