"""
CLI package: command handlers and terminal output.
"""
