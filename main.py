#main.py

"""
watchrun - run a command when files change
"""
import sys
from pathlib import Path

# Allow running from a source checkout
sys.path.insert(0, str(Path(__file__).parent))

from watchrun.cli import main

if __name__ == "__main__":
    sys.exit(main())
