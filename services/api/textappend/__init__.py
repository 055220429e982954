"""Public write/read API over one shared text resource, guarded by a write-rate circuit breaker."""

__version__ = "0.1.0"
