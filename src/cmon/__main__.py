import sys

from cmon.cli import main

sys.exit(main())
