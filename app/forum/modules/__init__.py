"""
Feature modules live under this package.

Each module owns its routes, models and actions, and reuses the platform
primitives (auth, audit, DB session) from `app.forum`.
"""
