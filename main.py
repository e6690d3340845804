import sys

from kite_agent.cli import main

if __name__ == "__main__":
    sys.exit(main())
