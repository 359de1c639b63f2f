import sys

from gobbler.gobbler import main

sys.exit(main())
