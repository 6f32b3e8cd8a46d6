import logging

import settings
from codes import random_digits
from errors import RateLimitedError, ValidationError
from store import KeyNamespace, make_key
from validation import is_valid_email, normalize_email

logger = logging.getLogger(__name__)


class EmailCodeService:
    """
    Numeric one-time codes mailed to an address.

    The resend cooldown is read off the stored code's remaining TTL: a
    new code is refused while more than ``expire - resend_wait`` seconds
    are left, i.e. during the first ``resend_wait`` seconds after issue.
    """

    def __init__(self, store, sender,
                 length: int = settings.EMAIL_CODE_LENGTH,
                 expire: int = settings.EMAIL_CODE_EXPIRE,
                 resend_wait: int = settings.EMAIL_RESEND_WAIT):
        if resend_wait > expire:
            raise ValueError("resend_wait must not exceed expire")
        self.store = store
        self.sender = sender
        self.length = length
        self.expire = expire
        self.resend_wait = resend_wait

    def _key(self, recipient: str) -> str:
        return make_key(KeyNamespace.EMAIL_CODE, recipient)

    def issue(self, recipient: str, app_context=None) -> None:
        recipient = normalize_email(recipient)
        if not recipient:
            raise ValidationError("Email address is required")
        if not is_valid_email(recipient):
            raise ValidationError(f"Invalid email address: {recipient}")

        key = self._key(recipient)
        # Not atomic: two concurrent requests may both pass this check
        if self.store.get(key) is not None:
            remaining = self.store.ttl(key)
            threshold = self.expire - self.resend_wait
            if remaining is not None and remaining > threshold:
                logger.info("Code for %s requested during cooldown", recipient)
                raise RateLimitedError(remaining - threshold)

        code = random_digits(self.length)
        self.store.set(key, code, self.expire)
        self.sender.send(recipient, code, app_context, expire=self.expire)
        logger.info("Issued email code for %s", recipient)

    def validate(self, recipient: str, code: str) -> bool:
        """
        Compare ``code`` with the stored one. A wrong code leaves the
        record in place so the user can try again until it expires.
        """
        if not recipient or not code:
            return False

        key = self._key(normalize_email(recipient))
        expected = self.store.get(key)
        if expected is None:
            return False

        is_valid = expected == code
        if is_valid:
            self.store.delete(key)
        return is_valid
