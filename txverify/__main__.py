import sys

from txverify.cli import main

sys.exit(main())
