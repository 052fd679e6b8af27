"""Allow running as: python -m refedit"""

import sys

from .cli.main import main

sys.exit(main())
