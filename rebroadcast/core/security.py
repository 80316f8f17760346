import base64
import hashlib
import hmac


def sign_payload(secret: str, payload: bytes) -> str:
    mac = hmac.new(
        key=secret.encode("utf-8"),
        msg=payload,
        digestmod=hashlib.sha256,
    ).digest()
    return "sha256=" + base64.b64encode(mac).decode("ascii")


def crc_response_token(crc_token: str, secret: str) -> str:
    """Respuesta al challenge CRC del webhook: sha256=<base64(hmac)>."""
    return sign_payload(secret, crc_token.encode("utf-8"))


def verify_webhook_signature(body: bytes, signature: str, secret: str) -> bool:
    # sin secret o sin header no hay nada que validar => rechazo
    if not secret or not signature:
        return False

    expected = sign_payload(secret, body)

    # comparación en tiempo constante
    return hmac.compare_digest(expected, signature)
