import sys

from repo_activity.cli import main

sys.exit(main())
