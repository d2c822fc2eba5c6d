"""Run the publisher with `python -m cypress_pr_videos`."""

import sys

from .main import main

sys.exit(main())
