"""
Tournament lifecycle and skill rating engine.

Pure functions only: nothing here reads files, talks to a database or keeps
state between calls. See app.py for the HTTP surface and main.py for the
command-line planner.
"""
