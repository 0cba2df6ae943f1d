import sys

from asset_ledger.cli import main

sys.exit(main())
