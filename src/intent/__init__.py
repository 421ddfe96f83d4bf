"""Intent parsing and validation.

The intent layer converts a free-text chat message into a strict `Intent` object (title, season,
episode, subtitle request), which is then resolved against the catalog.
"""
