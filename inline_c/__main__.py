import sys

from inline_c.runner import main

if __name__ == "__main__":
    sys.exit(main())
