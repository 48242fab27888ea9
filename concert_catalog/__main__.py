import sys

from concert_catalog.cli import main

if __name__ == "__main__":
    sys.exit(main())
