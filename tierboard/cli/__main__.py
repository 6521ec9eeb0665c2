import sys

from tierboard.cli import main

sys.exit(main())
