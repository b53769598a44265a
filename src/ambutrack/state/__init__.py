"""State layer.

This package is the single source of truth for how beacon polls, observer
location fixes and user actions are folded into one render state.
"""
