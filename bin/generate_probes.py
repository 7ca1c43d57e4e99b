#!/usr/bin/env python3
"""
Probe Binding Generator

Parses provider definition files and generates:
  1. C wrapper source calling the tracing macros
  2. Python bindings using ctypes

Usage:
    python generate_probes.py hello.d --output-dir generated/
    python generate_probes.py hello.d --output-dir generated/ --build --keep-c-file
"""

import sys
from pathlib import Path

# Add parent directory to path so probegen package can be found
sys.path.insert(0, str(Path(__file__).parent.parent))

from probegen.cli import main


if __name__ == "__main__":
    sys.exit(main())
