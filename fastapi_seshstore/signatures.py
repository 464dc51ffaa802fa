import hashlib
import hmac
import logging

from itsdangerous.encoding import base64_decode, base64_encode, want_bytes
from itsdangerous.exc import BadData
from itsdangerous.signer import HMACAlgorithm, SigningAlgorithm

from fastapi_seshstore.exceptions import MalformedToken, PayloadTooLarge, TamperDetected

logger = logging.getLogger(__name__)

MAX_COOKIE_SIZE = 4096
TOKEN_DELIMITER = b"--"


class UnkeyedDigestAlgorithm(SigningAlgorithm):
    """
    Plain SHA-256 of the value, the key is ignored. Only used when no secret is
    configured, anyone can forge these so it merely detects accidental damage.
    """

    def get_signature(self, key: bytes, value: bytes) -> bytes:
        return hashlib.sha256(value).digest()


class SessionSigner:
    """
    Signs store tokens with a keyed hash of the configured secret.

    Signatures are rendered as lowercase hex so they never contain the ``--``
    delimiter used by the cookie envelope.
    """

    def __init__(self, secret: str | bytes | None = None) -> None:
        self._key: bytes = want_bytes(secret) if secret else b""
        self._algorithm: SigningAlgorithm = (
            HMACAlgorithm(hashlib.sha256) if secret else UnkeyedDigestAlgorithm()
        )

    @property
    def is_keyed(self) -> bool:
        return bool(self._key)

    def sign(self, payload: str | bytes) -> str:
        return self._algorithm.get_signature(self._key, want_bytes(payload)).hex()

    def verify(self, payload: str | bytes, signature: str | bytes) -> bool:
        expected = self.sign(payload).encode("ascii")
        return hmac.compare_digest(expected, want_bytes(signature))


class SignedCookieCodec:
    """
    Wraps a store token into the cookie envelope and back.

    Envelope format:
      base64url( "<payload>--<hex signature>" )
    """

    def __init__(self, signer: SessionSigner, *, max_size: int = MAX_COOKIE_SIZE) -> None:
        self.signer = signer
        self.max_size = max_size

    def encode(self, payload: str) -> str:
        """
        Signs `payload` and returns the cookie value.

        Raises
        ------
        PayloadTooLarge
            The encoded value would not fit in a single cookie
        """
        raw = payload.encode("utf-8")
        signature = self.signer.sign(raw).encode("ascii")
        cookie = base64_encode(raw + TOKEN_DELIMITER + signature).decode("ascii")

        if len(cookie) > self.max_size:
            raise PayloadTooLarge(size=len(cookie), limit=self.max_size)

        return cookie

    def verify(self, cookie: str) -> str:
        """
        Recovers the store token from `cookie` after checking its signature.

        The split happens on the *last* delimiter since payloads may contain
        ``--`` themselves.

        Raises
        ------
        MalformedToken
            The cookie is not a signed envelope
        TamperDetected
            The signature does not match the payload
        """
        try:
            raw = base64_decode(cookie)
        except BadData as e:
            raise MalformedToken("Session cookie is not valid base64") from e

        # only the canonical encoding is accepted, unused trailing bits included
        if base64_encode(raw).decode("ascii") != cookie:
            raise MalformedToken("Session cookie is not canonically encoded")

        payload, delimiter, signature = raw.rpartition(TOKEN_DELIMITER)
        if not delimiter:
            raise MalformedToken("Session cookie has no signature")

        if not self.signer.verify(payload, signature):
            raise TamperDetected(payload=payload.decode("utf-8", errors="replace"))

        try:
            return payload.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedToken("Session payload is not valid UTF-8") from e

    def decode(self, cookie: str) -> str | None:
        try:
            return self.verify(cookie)
        except (MalformedToken, TamperDetected) as e:
            logger.debug("Rejected session cookie: %s", e)
            return None
