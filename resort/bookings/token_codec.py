from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt
from pydantic import BaseModel

from resort.config import Settings, settings
from resort.exceptions import ErrorKind, VerificationError

TOKEN_PURPOSE = "booking_verification"
REQUIRED_CLAIMS = ("iat", "bookingId", "email", "purpose")


class BookingClaims(BaseModel):
    """Claims carried by a booking verification token"""
    booking_id: int
    email: str


class BookingTokenCodec:
    """Signs and verifies booking verification tokens.

    Tokens are HS256 JWTs holding ``bookingId``, ``email``, ``purpose``,
    ``iat`` and ``exp``. Verification is a pure function of the secret, the
    token and the current time.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(days=30),
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.ttl = ttl
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @classmethod
    def from_settings(cls, config: Settings = settings) -> "BookingTokenCodec":
        return cls(
            secret=config.booking_token_secret,
            algorithm=config.ALGORITHM,
            ttl=timedelta(days=config.BOOKING_TOKEN_EXPIRE_DAYS),
        )

    def issue(self, claims: BookingClaims, ttl: Optional[timedelta] = None) -> str:
        """Mint a signed token for ``claims`` valid for ``ttl`` (defaults to the codec ttl)"""
        issued_at = self._clock()
        payload = {
            "bookingId": claims.booking_id,
            "email": claims.email,
            "purpose": TOKEN_PURPOSE,
            "iat": issued_at,
            "exp": issued_at + (ttl if ttl is not None else self.ttl),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> BookingClaims:
        """Return the claims of a valid token or raise ``VerificationError``"""
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                # Expiry takes precedence over missing claims
                options={"require": ["exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise VerificationError(ErrorKind.EXPIRED)
        except jwt.InvalidSignatureError:
            raise VerificationError(ErrorKind.BAD_SIGNATURE)
        except jwt.InvalidTokenError:
            raise VerificationError(ErrorKind.MALFORMED)

        if any(claim not in payload for claim in REQUIRED_CLAIMS):
            raise VerificationError(ErrorKind.MALFORMED)

        booking_id = payload["bookingId"]
        email = payload["email"]
        if payload["purpose"] != TOKEN_PURPOSE:
            raise VerificationError(ErrorKind.MALFORMED)
        if isinstance(booking_id, bool) or not isinstance(booking_id, int) or not isinstance(email, str):
            raise VerificationError(ErrorKind.MALFORMED)

        return BookingClaims(booking_id=booking_id, email=email)


def get_token_codec() -> BookingTokenCodec:
    return BookingTokenCodec.from_settings(settings)
