"""
API package containing the HTTP routes.

``router`` in :mod:`.router` includes every endpoint module under
``endpoints``.
"""
