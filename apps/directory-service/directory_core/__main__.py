import sys

from directory_core.cli import main

sys.exit(main())
