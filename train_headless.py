#!/usr/bin/env python3
"""
Headless training script for the grid world Q-learning agent.
Runs the whole training loop without Qt and prints per-episode rewards.
"""

import sys

from gridq.cli import main

if __name__ == "__main__":
    sys.exit(main())
