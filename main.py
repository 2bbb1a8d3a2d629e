#!/usr/bin/env python3
"""
ROM Collection Tracker

Usage:
    python main.py --dat snes.dat --owned snes.txt
    python main.py --dat snes.dat --owned snes.txt --state state.json
    python main.py --web [--host HOST] [--port PORT]

Same as ``python -m romtracker``; run from a source checkout.
"""

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from romtracker.__main__ import main  # noqa: E402

if __name__ == '__main__':
    main()
