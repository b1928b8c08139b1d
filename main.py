import sys

# Import the actual command-line entry point
from audioedit.cli import main

if __name__ == "__main__":
    sys.exit(main())
