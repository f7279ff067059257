"""
Command-line interface for Dicecast.
"""
