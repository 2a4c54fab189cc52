import sys

from src.tagger.cli import main

if __name__ == "__main__":
    sys.exit(main())
