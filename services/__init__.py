"""Business logic services.

Services are wired explicitly in `webapp.dependencies`; import them from
their own modules.
"""
