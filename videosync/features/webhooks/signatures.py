"""
➡️ But : Vérifier qu'un événement vient bien de la plateforme de streaming.

HMAC-SHA256 sur le corps brut, comparaison à temps constant avec l'en-tête
`x-signature: sha256=<hex>`.

Secret absent : vérification sautée (loggée), sauf si require_secret (fail closed).
"""

import hashlib
import hmac
import logging
from enum import Enum
from typing import Optional

from videosync.core.config import SignatureSettings

logger = logging.getLogger(__name__)

SIGNATURE_PREFIX = "sha256="


class SignatureCheck(str, Enum):
    VALID = "valid"
    INVALID = "invalid"
    SKIPPED = "skipped"


def compute_signature(body: bytes, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


class SignatureVerifier:
    def __init__(self, settings: SignatureSettings):
        self.settings = settings

    def verify(self, body: bytes, signature: Optional[str]) -> SignatureCheck:
        secret = self.settings.secret
        if not secret:
            if self.settings.require_secret:
                logger.error("Webhook secret not configured and required: rejecting event")
                return SignatureCheck.INVALID
            if signature:
                logger.warning("Webhook signature received but no secret configured: signature not checked")
            else:
                logger.info("Webhook secret not configured: signature verification skipped")
            return SignatureCheck.SKIPPED

        if not signature:
            logger.warning("Missing webhook signature")
            return SignatureCheck.INVALID

        provided = signature
        if provided.startswith(SIGNATURE_PREFIX):
            provided = provided[len(SIGNATURE_PREFIX):]

        expected = compute_signature(body, secret)
        # compare_digest exige deux str ASCII : une signature non ASCII est forcément fausse
        if not provided.isascii():
            return SignatureCheck.INVALID
        if hmac.compare_digest(provided, expected):
            return SignatureCheck.VALID
        return SignatureCheck.INVALID
