import sys

from scratchmongo.cli._dispatcher import main

sys.exit(main())
