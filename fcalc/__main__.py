import sys

from fcalc.calculator import main

sys.exit(main())
