import sys

from daysum.cli.main import main

sys.exit(main())
