import sys

from pdvault.main import main

sys.exit(main())
