"""Command modules, one per edit surface.

Each module defines the command variants for one kind of aggregate:
automation lanes (plus thinning), piano-roll notes, the mixer and the
arrangement. UI handlers build a command and hand it to the history.
"""
