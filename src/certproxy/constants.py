"""Shared constants for certproxy."""

from pathlib import Path

# acme.sh
ACME_BIN = Path("/root/.acme.sh/acme.sh")
ACME_HOME = Path("/root/.acme.sh")
ACME_INSTALL_URL = "https://get.acme.sh"
ACME_DNS_HOOK = "dns_cf"
ACME_KEYLENGTH = "ec-256"

# Certificate storage
CERT_BASE_DIR = Path("/etc/ca-certificates")
CERT_DIR_NAME = "custom"

# NGINX
NGINX_BIN = Path("nginx")
NGINX_DEFAULT_OUTPUT = Path("/etc/nginx/conf.d/default/00-default.conf")
PROXY_OUTPUT_DIR = Path("/etc/nginx/conf.d/proxy")

# DNS resolvers used by the proxy `resolver` directive
RESOLVER_CLOUDFLARE = "1.1.1.1 1.0.0.1 [2606:4700:4700::1111] [2606:4700:4700::1064]"
RESOLVER_TENCENT = "119.29.29.29 182.254.116.116"
RESOLVER_ALIYUN = "223.5.5.5 223.6.6.6"
RESOLVER_GOOGLE = "8.8.8.8 8.8.4.4"
DEFAULT_RESOLVER = RESOLVER_CLOUDFLARE
RESOLVER_TIMEOUT_SECS = 10

# Audit / logging
LOG_DIR = Path("/var/log/certproxy")
AUDIT_LOG_PATH = LOG_DIR / "audit.jsonl"
CRON_LOG_PATH = LOG_DIR / "renew.log"

# Cron renewal
ENV_FILE = Path("/etc/certproxy/certproxy.env")
CRON_SCHEDULE = "0 3 1 * *"
CRON_MARKER = "# certproxy:renew"
