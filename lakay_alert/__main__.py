#!/usr/bin/env python3
"""
Run the LakayAlert CLI.

Usage:
    python -m lakay_alert <command> [options]

Commands:
    feed      - Show the ranked incident feed
    watch     - Poll and reprint the feed
    show      - Show one incident
    report    - Report a new incident
    vote      - Upvote or downvote an incident
    serve     - Run the HTTP API
"""

import sys

from .cli import main

if __name__ == '__main__':
    sys.exit(main())
