import sys

from spritegen.generate_monster import main

sys.exit(main())
