"""
Core utilities for Mis Compras.

This package provides core functionality including logging configuration,
business rules, domain errors and the database layer.
"""

from mis_compras.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
