import sys

from gwiki.cli import main

sys.exit(main())
