import os

CAPTCHA_LENGTH    = int(os.getenv('CAPTCHA_LENGTH', 4))
CAPTCHA_WIDTH     = int(os.getenv('CAPTCHA_WIDTH', 150))
CAPTCHA_HEIGHT    = int(os.getenv('CAPTCHA_HEIGHT', 50))
CAPTCHA_FONT_SIZE = int(os.getenv('CAPTCHA_FONT_SIZE', 50))
CAPTCHA_NOISE     = int(os.getenv('CAPTCHA_NOISE', 2))
CAPTCHA_EXPIRE    = int(os.getenv('CAPTCHA_EXPIRE', 300))

EMAIL_CODE_LENGTH = int(os.getenv('EMAIL_CODE_LENGTH', 6))
EMAIL_CODE_EXPIRE = int(os.getenv('EMAIL_CODE_EXPIRE', 600))
EMAIL_RESEND_WAIT = int(os.getenv('EMAIL_RESEND_WAIT', 60))

REDIS_URL = os.getenv('REDIS_URL', 'redis://localhost:6379/0')

SMTP_HOST      = os.getenv('SMTP_HOST')
SMTP_PORT      = int(os.getenv('SMTP_PORT', 465))
SMTP_USER      = os.getenv('SMTP_USER')
SMTP_PASSWORD  = os.getenv('SMTP_PASSWORD')
SMTP_SECURE    = os.getenv('SMTP_SECURE', 'true').lower() == 'true'
SMTP_FROM_NAME = os.getenv('SMTP_FROM_NAME', 'System Administrator')

APP_NAME = os.getenv('APP_NAME', 'Admin Console')

if EMAIL_RESEND_WAIT > EMAIL_CODE_EXPIRE:
    raise RuntimeError("EMAIL_RESEND_WAIT must not exceed EMAIL_CODE_EXPIRE")
