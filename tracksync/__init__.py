"""tracksync - remembered subtitle track selection and retrieval for streaming pages.

Hosts call ``tracksync.core.logging.setup_logging()`` once at startup; importing
the package configures nothing.
"""

__version__ = "0.1.0"
