import sys

from rewardsweep.cli import main

sys.exit(main())
