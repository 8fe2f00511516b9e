#!/usr/bin/env python3
"""Runner script for the articles demo."""

from articles_demo.runner import main

if __name__ == "__main__":
    main()
