"""Stellar liquidity pool manager package initialisation."""

from .utils.error_handling import install_global_exception_handlers

# Uncaught exceptions are logged as soon as the package is imported.
install_global_exception_handlers()
