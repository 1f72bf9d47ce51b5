"""
HTTP session with connection pooling and an explicit CA bundle.

No automatic retries: a failed call surfaces immediately to the caller.
The only retry loop in the program is the CAPTCHA login loop in auth.py.
"""

import os

import certifi
import requests
from requests.adapters import HTTPAdapter

from .constants import ERP_VERSION


def _get_ca_bundle():
    """Get the CA bundle path.

    Priority: REQUESTS_CA_BUNDLE / SSL_CERT_FILE env var → certifi.
    """
    env_ca = os.environ.get("REQUESTS_CA_BUNDLE") or os.environ.get("SSL_CERT_FILE")
    if env_ca and os.path.isfile(env_ca):
        return env_ca
    return certifi.where()


def create_session():
    """Create a new requests.Session with connection pooling and SSL."""
    session = requests.Session()
    adapter = HTTPAdapter(
        pool_connections=1,
        pool_maxsize=2,             # Attendance view issues two calls at once
        max_retries=0,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.verify = _get_ca_bundle()
    session.headers.update({
        "User-Agent": f"aitm-erp-cli/{ERP_VERSION}",
        "Accept": "application/json",
    })
    return session
