"""
Customer.io reporting-webhook signature validation.

Customer.io signs each delivery with HMAC-SHA256 over ``v0:<timestamp>:<body>``
and sends ``v0=<hex digest>`` in ``X-CIO-Signature`` alongside the
``X-CIO-Timestamp`` it used.
"""
from typing import Optional, Union
import hashlib
import hmac

SIGNATURE_HEADER = "x-cio-signature"
TIMESTAMP_HEADER = "x-cio-timestamp"
SIGNATURE_VERSION = "v0"


def _to_text(body: Union[str, bytes]) -> str:
    return body.decode("utf-8") if isinstance(body, bytes) else body


def sign_payload(body: Union[str, bytes], timestamp: str, signing_key: str) -> str:
    """
    Compute the signature header value for a webhook body.

    Args:
        body: Raw request body
        timestamp: X-CIO-Timestamp header value
        signing_key: Webhook signing key

    Returns:
        Signature in ``v0=<hex>`` form
    """
    payload = f"{SIGNATURE_VERSION}:{timestamp}:{_to_text(body)}"
    digest = hmac.new(
        signing_key.encode("utf-8"),
        payload.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return f"{SIGNATURE_VERSION}={digest}"


def validate_webhook_signature(
    body: Union[str, bytes],
    signature: Optional[str],
    timestamp: Optional[str],
    signing_key: str,
) -> bool:
    """
    Verify a reporting-webhook signature.

    Args:
        body: Raw request body bytes or text
        signature: X-CIO-Signature header value (format: v0=<hash>)
        timestamp: X-CIO-Timestamp header value
        signing_key: Webhook signing key (Track API key by default)

    Returns:
        True if signature is valid, False otherwise
    """
    if not signature or not timestamp or not signing_key:
        return False

    expected = sign_payload(body, timestamp, signing_key)
    # Constant-time comparison to prevent timing attacks
    return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))
