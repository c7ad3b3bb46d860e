"""Package entry point for ``python -m beey_transcriber``."""

import sys

from beey_transcriber.cli import main

if __name__ == "__main__":
    sys.exit(main())
