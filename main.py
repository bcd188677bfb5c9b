#!/usr/bin/env python3
"""
Main entry point for the Vocabulary Card Creator.
This file serves as the entry point when running the application.
"""

from card_creator.app import main

if __name__ == "__main__":
    main()
