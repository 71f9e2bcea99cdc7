"""certctl - private CA management and SSL certificate deployment."""

__version__ = "1.0.0"
