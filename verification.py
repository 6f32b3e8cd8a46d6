import logging

from cache import get_connection
from captcha import CaptchaService, ImageChallenge, render_captcha
from email_code import EmailCodeService
from notify import SmtpSender
from store import RedisStore

logger = logging.getLogger(__name__)


class VerificationService:
    """
    Image captchas and email codes sharing one key-value store.

    ``captcha_options`` and ``email_options`` are passed through to
    CaptchaService and EmailCodeService to override their settings.
    """

    def __init__(self, store, sender, renderer=render_captcha,
                 captcha_options=None, email_options=None):
        self.store = store
        self.captcha = CaptchaService(store, renderer, **(captcha_options or {}))
        self.email = EmailCodeService(store, sender, **(email_options or {}))

    @classmethod
    def from_env(cls, **kwargs):
        """Redis-backed service with an SMTP sender, configured from the environment."""
        store = RedisStore(get_connection())
        logger.info("Verification service connected to Redis")
        return cls(store, SmtpSender(), **kwargs)

    def close(self):
        close = getattr(self.store, 'close', None)
        if close is not None:
            close()

    def issue_image_challenge(self) -> ImageChallenge:
        return self.captcha.issue()

    def validate_image_challenge(self, challenge_id: str, user_input: str) -> bool:
        return self.captcha.validate(challenge_id, user_input)

    def issue_email_code(self, recipient: str, app_context=None) -> None:
        self.email.issue(recipient, app_context)

    def validate_email_code(self, recipient: str, code: str) -> bool:
        return self.email.validate(recipient, code)
