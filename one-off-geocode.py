# one-off-geocode.py (run this before the first launch to pre-fill the cache)
import sys

from company_map.cli import main

if __name__ == "__main__":
    sys.exit(main())
