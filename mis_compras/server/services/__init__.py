"""
Application services.

Each service implements one resource's use cases on top of the repository
bundle, raises domain errors from :mod:`mis_compras.core.errors` and commits
once per use case.
"""
