"""Runtime values, operators, value access and HTML error rendering for an HTML template language."""

__version__ = "0.1.0"
__all__ = ["values", "errors", "ops", "access", "render"]