"""Email one-time-password authentication.

A challenge is stored per email address and moves through
``NoChallenge -> Live -> {Verified, Expired, Exhausted}``. Every write
that depends on a previously read challenge is a compare-and-set on its
``code`` and ``attempts``; a lost race re-reads the challenge and
re-evaluates it, so concurrent wrong guesses are never undercounted and
a correct code is consumed exactly once.
"""

import random
import secrets
from datetime import timedelta
from typing import Any, Dict, Optional

from loguru import logger
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_random

from hkapi.constants import OTP, Collections
from hkapi.core.exceptions import (
    ConcurrentUpdateError,
    DeliveryFailedError,
    InvalidCodeError,
    MailDeliveryError,
    NoChallengeError,
    OTPExpiredError,
    TooManyAttemptsError,
    UserNotFoundError,
    ValidationError,
)
from hkapi.repositories.otp_repository import OtpChallenge, OtpRepository
from hkapi.repositories.user_repository import UserRepository
from hkapi.services.mail.base import Mailer
from hkapi.services.mail.templates import otp_email
from hkapi.utils.clock import Clock, utc_now
from hkapi.utils.masking import mask_email


class OtpAuthenticator:
    """Issues and verifies six-digit login codes bound to a user's email."""

    def __init__(
        self,
        users: UserRepository,
        challenges: OtpRepository,
        mailer: Mailer,
        property_name: str = "Miami Beach Resort",
        ttl_minutes: int = OTP.TTL_MINUTES,
        max_attempts: int = OTP.MAX_ATTEMPTS,
        clock: Clock = utc_now,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize OTP authenticator.

        Args:
            users: User lookups by email and id
            challenges: Challenge storage keyed by email
            mailer: Delivers the code email
            property_name: Property name used in the email
            ttl_minutes: Minutes a challenge stays live
            max_attempts: Wrong guesses that exhaust a challenge
            clock: Source of the current UTC time
            rng: Random source for codes (defaults to the OS CSPRNG)
        """
        self.users = users
        self.challenges = challenges
        self.mailer = mailer
        self.property_name = property_name
        self.ttl_minutes = ttl_minutes
        self.max_attempts = max_attempts
        self._clock = clock
        self._rng = rng or secrets.SystemRandom()

    def generate_code(self) -> str:
        """Draw a six-digit code with no leading zero."""
        return str(self._rng.randint(OTP.CODE_MIN, OTP.CODE_MAX))

    async def request_challenge(self, email: str) -> None:
        """
        Issue a fresh code for a user and email it.

        Any earlier challenge for the email is replaced. If the email cannot
        be sent the stored challenge is kept.

        Args:
            email: Address of an existing user

        Raises:
            UserNotFoundError: No user owns the address
            DeliveryFailedError: The mailer failed
        """
        if not email:
            raise ValidationError("Email is required", field="email")

        user = await self.users.find_by_email(email)
        if user is None:
            logger.info(f"OTP requested for unknown email {mask_email(email)}")
            raise UserNotFoundError()

        code = self.generate_code()
        challenge = OtpChallenge(
            email=email,
            code=code,
            expires_at=self._clock() + timedelta(minutes=self.ttl_minutes),
            attempts=0,
            user_id=user["id"],
        )
        await self.challenges.put(challenge)

        subject, html_body, text_body = otp_email(code, self.property_name, self.ttl_minutes)
        try:
            await self.mailer.send(email, subject, html_body, text_body)
        except MailDeliveryError as e:
            logger.error(f"OTP email to {mask_email(email)} failed: {e}")
            raise DeliveryFailedError() from e

        logger.info(f"OTP issued for {mask_email(email)}")

    async def verify(self, email: str, submitted_code: str) -> Dict[str, Any]:
        """
        Check a submitted code against the live challenge.

        Args:
            email: Address the code was sent to
            submitted_code: Code entered by the user

        Returns:
            The authenticated user record

        Raises:
            NoChallengeError: No live challenge for the email
            OTPExpiredError: The challenge window has closed
            InvalidCodeError: Wrong code, attempts remain
            TooManyAttemptsError: Wrong code that exhausted the challenge
            ConcurrentUpdateError: Lost every compare-and-set retry
        """
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(OTP.CONFLICT_RETRIES),
            wait=wait_random(0, 0.05),
            retry=retry_if_exception_type(ConcurrentUpdateError),
            reraise=True,
        ):
            with attempt:
                return await self._verify_once(email, submitted_code)
        raise ConcurrentUpdateError(Collections.OTP, email)  # pragma: no cover

    async def _verify_once(self, email: str, submitted_code: str) -> Dict[str, Any]:
        challenge = await self.challenges.get(email)
        if challenge is None:
            raise NoChallengeError()

        if challenge.is_expired(self._clock()):
            await self._discard(challenge)
            logger.info(f"Expired OTP presented for {mask_email(email)}")
            raise OTPExpiredError()

        if submitted_code != challenge.code:
            attempts = challenge.attempts + 1
            if attempts >= self.max_attempts:
                await self._discard(challenge)
                logger.warning(f"OTP attempts exhausted for {mask_email(email)}")
                raise TooManyAttemptsError()
            if not await self.challenges.record_failed_attempt(challenge, attempts):
                raise ConcurrentUpdateError(Collections.OTP, email)
            raise InvalidCodeError(attempts, self.max_attempts)

        await self._discard(challenge)
        user = await self.users.get_by_id(challenge.user_id) if challenge.user_id else None
        if user is None:
            logger.warning(f"OTP verified for {mask_email(email)} but the user record is gone")
            raise UserNotFoundError()

        logger.info(f"OTP verified for {mask_email(email)}")
        return user

    async def _discard(self, challenge: OtpChallenge) -> None:
        if not await self.challenges.discard(challenge):
            raise ConcurrentUpdateError(Collections.OTP, challenge.email)
