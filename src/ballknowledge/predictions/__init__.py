"""
Client-side mirror of the user's predictions.

- `cache` keeps the per-match prediction index in step with the session.
"""
