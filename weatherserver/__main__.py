import sys

from weatherserver.cli import main

sys.exit(main())
