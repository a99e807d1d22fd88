"""HTTP API for the payee classification service."""
