"""
CLI Module for rinkflow

Prints analytics reports for a file of game records.

Usage:
    python -m cli.main --games games.json --team 22 --report attack-dna
"""

from cli.main import main, run_report

__all__ = ["main", "run_report"]
