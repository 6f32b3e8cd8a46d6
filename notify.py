import logging
import smtplib
from dataclasses import dataclass
from email.mime.text import MIMEText
from email.utils import formataddr, formatdate
from typing import Optional

import settings
from errors import DeliveryError

logger = logging.getLogger(__name__)

_BODY = (
    "Hello,\n\n"
    "You are verifying this email address for {app_name}.\n"
    "Your verification code is: {code}\n\n"
    "The code is valid for {minutes} minutes.\n"
    "If you did not request it, please ignore this email.\n\n"
    "This message was sent automatically, please do not reply.\n"
)


@dataclass
class AppContext:
    """
    The application a code is sent on behalf of. Any SMTP field left as
    None falls back to the process-wide setting.
    """
    name: str = settings.APP_NAME
    smtp_host: Optional[str] = None
    smtp_port: Optional[int] = None
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_secure: Optional[bool] = None


def build_message(sender: str, recipient: str, code: str,
                  app_context: AppContext, code_ttl: int) -> MIMEText:
    body = _BODY.format(
        app_name=app_context.name,
        code=code,
        minutes=max(1, code_ttl // 60),
    )
    msg = MIMEText(body, 'plain', 'utf-8')
    msg['Subject'] = f"{app_context.name} - Verification code"
    msg['From'] = sender
    msg['To'] = recipient
    msg['Date'] = formatdate(localtime=True)
    return msg


class SmtpSender:
    def __init__(self, host: str = settings.SMTP_HOST,
                 port: int = settings.SMTP_PORT,
                 user: str = settings.SMTP_USER,
                 password: str = settings.SMTP_PASSWORD,
                 secure: bool = settings.SMTP_SECURE,
                 from_name: str = settings.SMTP_FROM_NAME,
                 code_ttl: int = settings.EMAIL_CODE_EXPIRE,
                 timeout: float = 10.0):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.secure = secure
        self.from_name = from_name
        self.code_ttl = code_ttl
        self.timeout = timeout

    def _resolve(self, app_context: AppContext):
        def pick(override, default):
            return default if override is None else override

        return (
            pick(app_context.smtp_host, self.host),
            pick(app_context.smtp_port, self.port),
            pick(app_context.smtp_user, self.user),
            pick(app_context.smtp_password, self.password),
            pick(app_context.smtp_secure, self.secure),
        )

    def send(self, recipient: str, code: str,
             app_context: Optional[AppContext] = None,
             expire: Optional[int] = None) -> None:
        """
        Mail ``code`` to ``recipient``; raises DeliveryError on failure.
        ``expire`` is the lifetime the code was stored with, in seconds.
        """
        app_context = app_context or AppContext()
        host, port, user, password, secure = self._resolve(app_context)
        if not host:
            raise DeliveryError("Mail server is not configured")

        msg = build_message(formataddr((self.from_name, user or '')),
                            recipient, code, app_context,
                            self.code_ttl if expire is None else expire)
        try:
            if secure:
                smtp = smtplib.SMTP_SSL(host, port, timeout=self.timeout)
            else:
                smtp = smtplib.SMTP(host, port, timeout=self.timeout)
            with smtp:
                if not secure:
                    smtp.ehlo()
                    if smtp.has_extn('starttls'):
                        smtp.starttls()
                        smtp.ehlo()
                if user:
                    smtp.login(user, password or '')
                smtp.sendmail(user or '', [recipient], msg.as_string())
        except (smtplib.SMTPException, OSError) as err:
            logger.error("Sending verification code to %s failed: %s",
                         recipient, err)
            raise DeliveryError(
                f"Failed to send verification email to {recipient}"
            ) from err

        logger.info("Verification code sent to %s", recipient)
