#!/usr/bin/env python3
"""
Wrapper to run the guidance CLI straight from a checkout.
Adds src/ to the path so no install is needed.
"""
import os
import sys

# Add src to path FIRST
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

if __name__ == "__main__":
    from solarcompass.main import main

    sys.exit(main(sys.argv[1:]))
