#!/usr/bin/env python3
"""
Entry point for running the chat client from a source checkout.
"""
from __future__ import annotations

from mcpchat.cli import main


if __name__ == "__main__":
    main()
