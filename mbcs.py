#!/usr/bin/env python3
"""
MBCS - Mathematical Biology & Complex Systems

Convenience entry point. Equivalent to: python -m mbcs
"""

from mbcs.__main__ import main

if __name__ == "__main__":
    main()
