import sys

from puppetdb_inventory.cli import main

sys.exit(main())
