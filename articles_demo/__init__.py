"""
Articles Demo

Connects to MongoDB, inserts one article into a collection, reads the
collection back and disconnects.

Steps:
1. Connect (authenticated session)
2. Select database and collection
3. Insert the configured document
4. Find all documents
5. Disconnect
"""

__version__ = "1.0.0"

from .runner import DemoRunner, DemoResult, run_demo

__all__ = [
    'DemoRunner',
    'DemoResult',
    'run_demo',
]
