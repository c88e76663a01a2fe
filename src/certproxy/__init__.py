"""certproxy — acme.sh certificate issuance and NGINX proxy config generation."""

__version__ = "0.1.0"
