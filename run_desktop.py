#!/usr/bin/env python
"""Launch the SpendWatch desktop app from a source checkout."""

from spendwatch.desktop.app import run

if __name__ == "__main__":
    run()
