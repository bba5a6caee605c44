#!/usr/bin/env python3
"""
Main execution module for the content hub migration tool
"""

from content_migrator.cli.commands import main

if __name__ == "__main__":
    main()
