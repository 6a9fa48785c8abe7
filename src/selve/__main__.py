import sys

from selve.cli import main

sys.exit(main())
