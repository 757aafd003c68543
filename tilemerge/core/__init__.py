"""Core rules: grid, tiles, slide/merge resolution, spawning and turn events.

Kept free of FastAPI concerns so it can be reused by API routes, the CLI, and tests.
"""
