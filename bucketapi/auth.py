import hmac

from bucketapi.config import GatewayConfig


def token_auth(token: str, config: GatewayConfig) -> bool:
    """Check a token against the shared secret. An empty token never matches."""
    if not token or not config.token:
        return False
    return hmac.compare_digest(token.encode("utf-8"), config.token.encode("utf-8"))
