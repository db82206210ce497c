#!/usr/bin/env python3
"""
Bridge Code Generator

Parses object definitions and generates, per object:
  1. include/<stem>.h  - Qt class declaration
  2. src/<stem>.cpp    - Qt class definition
  3. src/<stem>.rs     - Rust cxx bridge and implementation trait

Usage:
    python generate_bridge.py counter.bridge --output-dir generated/
    python generate_bridge.py objects.json --output-dir generated/ --guard-initialization
"""

import sys
from pathlib import Path

# Add parent directory to path so bridgegen package can be found
sys.path.insert(0, str(Path(__file__).parent.parent))

from bridgegen.cli import main


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
