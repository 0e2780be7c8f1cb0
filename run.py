#!/usr/bin/env python3
"""
CLI entry point for the LOCADZ marketplace tools.
"""
from src.main import cli

if __name__ == "__main__":
    cli()
