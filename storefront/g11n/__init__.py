from .multibyte import ConfigurationError, Multibyte

__all__ = ["ConfigurationError", "Multibyte"]
