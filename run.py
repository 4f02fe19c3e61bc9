"""
Entry-point launcher for SnapShare.

Run from the project directory:
    python run.py [--multi] [--silent] [--sandbox] [--portable] [files...]

Or from any location:
    python /path/to/snapshare/run.py
"""
import sys
import os

# Ensure src/ is on the path regardless of where we are launched from
_HERE = os.path.dirname(os.path.abspath(__file__))
_SRC = os.path.join(_HERE, "src")
if _SRC not in sys.path:
    sys.path.insert(0, _SRC)

from main import main

if __name__ == "__main__":
    sys.exit(main())
