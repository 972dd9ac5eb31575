"""Runtime helpers: configuration, logging and the Stellar network boundary."""
