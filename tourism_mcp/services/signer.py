"""
OAuth 1.0a request signing with RSA-SHA256, as the Mastercard APIs expect.

Order matters:

1. OAuth parameters (consumer key, fresh nonce, method, timestamp, version).
2. ``oauth_body_hash`` for POST/PUT/PATCH with a non-empty body.
3. Signature base string ``METHOD&enc(base_url)&enc(sorted params)``, where the
   params are the OAuth parameters plus every URL query pair, repeats included.
4. RSA PKCS#1 v1.5 / SHA-256 signature of the base string, base64-encoded.
5. ``Authorization: OAuth k="v", ...`` built from the OAuth parameters only.
"""

import base64
import hashlib
import json
import logging
import secrets
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union
from urllib.parse import parse_qsl, quote, urlencode, urlsplit

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from ..errors import SigningError

logger = logging.getLogger(__name__)

SIGNATURE_METHOD = "RSA-SHA256"
OAUTH_VERSION = "1.0"
BODY_METHODS = ("POST", "PUT", "PATCH")
DEFAULT_PORTS = {"http": 80, "https": 443}


def percent_encode(value: Any) -> str:
    """RFC 3986 encoding: only unreserved characters stay as they are."""
    return quote(str(value), safe="~")


def base_url(url: str) -> str:
    """scheme://host[:port]/path with the query and fragment dropped."""
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    host = (parts.hostname or "").lower()
    if parts.port is not None and parts.port != DEFAULT_PORTS.get(scheme):
        host = f"{host}:{parts.port}"
    return f"{scheme}://{host}{parts.path or '/'}"


def _pairs(params: Optional[Mapping[str, Any]]) -> List[Tuple[str, Any]]:
    """Flatten a mapping; list values become one pair per item."""
    pairs: List[Tuple[str, Any]] = []
    for key, value in (params or {}).items():
        if isinstance(value, (list, tuple)):
            pairs.extend((key, item) for item in value)
        else:
            pairs.append((key, value))
    return pairs


def normalize_parameters(params: List[Tuple[str, Any]]) -> str:
    """Encode every pair, then sort by encoded name and value. Repeated names all stay."""
    pairs = sorted((percent_encode(k), percent_encode(v)) for k, v in params)
    return "&".join(f"{k}={v}" for k, v in pairs)


def signature_base_string(
    method: str,
    url: str,
    oauth_params: Mapping[str, Any],
    query_params: Optional[Mapping[str, Any]] = None,
) -> str:
    params: List[Tuple[str, Any]] = parse_qsl(urlsplit(url).query, keep_blank_values=True)
    params += _pairs(query_params)
    params += _pairs(oauth_params)
    return "&".join([
        method.upper(),
        percent_encode(base_url(url)),
        percent_encode(normalize_parameters(params)),
    ])


def body_hash(body: bytes) -> str:
    return base64.b64encode(hashlib.sha256(body).digest()).decode("ascii")


def authorization_header(oauth_params: Mapping[str, Any]) -> str:
    return "OAuth " + ", ".join(
        f'{percent_encode(k)}="{percent_encode(v)}"' for k, v in oauth_params.items()
    )


def serialize_body(json_body: Union[None, str, bytes, Mapping, list]) -> bytes:
    """The exact bytes that get hashed, signed and sent."""
    if json_body is None:
        return b""
    if isinstance(json_body, bytes):
        return json_body
    if isinstance(json_body, str):
        return json_body.encode("utf-8")
    if not json_body:
        return b""
    return json.dumps(json_body, separators=(",", ":")).encode("utf-8")


@dataclass
class SignedRequest:
    method: str
    url: str
    query_params: Dict[str, Any]
    body: bytes
    oauth_params: Dict[str, str] = field(default_factory=dict)
    header: str = ""

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Authorization": self.header,
            "Accept": "application/json",
            "Content-Type": "application/json",
        }


class OAuthSigner:
    def __init__(
        self,
        consumer_key: str,
        private_key_pem: Union[str, bytes],
        clock: Callable[[], float] = time.time,
        nonce_factory: Callable[[], str] = lambda: secrets.token_hex(16),
    ):
        self.consumer_key = consumer_key
        self._private_key_pem = private_key_pem
        self._private_key: Optional[rsa.RSAPrivateKey] = None
        self.clock = clock
        self.nonce_factory = nonce_factory

    def _load_key(self) -> rsa.RSAPrivateKey:
        if self._private_key is not None:
            return self._private_key
        pem = self._private_key_pem
        if not pem:
            raise SigningError("No private key configured")
        if isinstance(pem, str):
            pem = pem.encode("utf-8")
        try:
            key = serialization.load_pem_private_key(pem, password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            logger.error(f"Could not load signing key: {e}")
            raise SigningError(f"Invalid private key: {e}") from e
        if not isinstance(key, rsa.RSAPrivateKey):
            logger.error(f"Signing key is {type(key).__name__}, not RSA")
            raise SigningError("Private key is not an RSA key")
        self._private_key = key
        return key

    def sign(self, base_string: str) -> str:
        key = self._load_key()
        signature = key.sign(base_string.encode("utf-8"), padding.PKCS1v15(), hashes.SHA256())
        return base64.b64encode(signature).decode("ascii")

    def oauth_parameters(self, method: str, body: bytes) -> Dict[str, str]:
        params = {
            "oauth_consumer_key": self.consumer_key,
            "oauth_nonce": self.nonce_factory(),
            "oauth_signature_method": SIGNATURE_METHOD,
            "oauth_timestamp": str(int(self.clock())),
            "oauth_version": OAUTH_VERSION,
        }
        if method.upper() in BODY_METHODS and body:
            params["oauth_body_hash"] = body_hash(body)
        return params

    def sign_request(
        self,
        method: str,
        url: str,
        query_params: Optional[Mapping[str, Any]] = None,
        json_body: Union[None, str, bytes, Mapping, list] = None,
    ) -> SignedRequest:
        """
        Sign one outbound call. Raises ``SigningError`` when the key is unusable;
        nothing unsigned ever leaves this method.
        """
        method = method.upper()
        query = dict(query_params or {})
        body = serialize_body(json_body)

        oauth_params = self.oauth_parameters(method, body)
        base = signature_base_string(method, url, oauth_params, query)
        oauth_params["oauth_signature"] = self.sign(base)

        full_url = url
        if query:
            full_url += ("&" if urlsplit(url).query else "?") + urlencode(query, doseq=True)

        return SignedRequest(
            method=method,
            url=full_url,
            query_params=query,
            body=body,
            oauth_params=oauth_params,
            header=authorization_header(oauth_params),
        )
