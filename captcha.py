import io
import logging
import random
from typing import NamedTuple

from PIL import Image, ImageDraw, ImageFont

import settings
from codes import CAPTCHA_ALPHABET, random_string, random_uuid
from store import KeyNamespace, make_key

logger = logging.getLogger(__name__)

BACKGROUND = (240, 240, 240)


class ImageChallenge(NamedTuple):
    challenge_id: str
    image: bytes


def _ink():
    return tuple(random.randint(20, 140) for _ in range(3))


def glyph_box(height: int, font_size: int):
    """Font size and square glyph canvas, shrunk so the canvas fits ``height``."""
    size = min(font_size, int(height / 1.2))
    return size, int(size * 1.2)


def glyph_top(height: int, box: int) -> int:
    y = int((height - box) / 2 + random.uniform(-height / 10, height / 10))
    return min(max(0, y), height - box)


def render_captcha(text: str,
                   width: int = settings.CAPTCHA_WIDTH,
                   height: int = settings.CAPTCHA_HEIGHT,
                   font_size: int = settings.CAPTCHA_FONT_SIZE,
                   noise: int = settings.CAPTCHA_NOISE) -> bytes:
    """
    Draw ``text`` as a distorted PNG: every character gets its own
    colour, a small vertical offset and a rotation, and ``noise`` random
    lines are drawn across the result.
    """
    img = Image.new('RGB', (width, height), color=BACKGROUND)
    size, box = glyph_box(height, font_size)
    font = ImageFont.load_default(size=size)
    step = width / (len(text) + 1)

    for i, char in enumerate(text):
        glyph = Image.new('RGBA', (box, box), (0, 0, 0, 0))
        ImageDraw.Draw(glyph).text(
            (box / 2, box / 2), char,
            font=font, fill=_ink(), anchor='mm'
        )
        glyph = glyph.rotate(random.uniform(-25, 25),
                             resample=Image.Resampling.BICUBIC)
        x = int(step * (i + 1) - box / 2)
        img.paste(glyph, (x, glyph_top(height, box)), glyph)

    draw = ImageDraw.Draw(img)
    for _ in range(noise):
        start = (random.randint(0, width // 4), random.randint(0, height))
        end = (random.randint(width * 3 // 4, width), random.randint(0, height))
        draw.line([start, end], fill=_ink(), width=2)

    buf = io.BytesIO()
    img.save(buf, format='PNG')
    return buf.getvalue()


class CaptchaService:
    def __init__(self, store, renderer=render_captcha,
                 length: int = settings.CAPTCHA_LENGTH,
                 expire: int = settings.CAPTCHA_EXPIRE,
                 width: int = settings.CAPTCHA_WIDTH,
                 height: int = settings.CAPTCHA_HEIGHT,
                 font_size: int = settings.CAPTCHA_FONT_SIZE,
                 noise: int = settings.CAPTCHA_NOISE):
        self.store = store
        self.renderer = renderer
        self.length = length
        self.expire = expire
        self.render_options = {
            'width': width,
            'height': height,
            'font_size': font_size,
            'noise': noise,
        }

    def issue(self) -> ImageChallenge:
        """Create a challenge, store its solution and return the image."""
        text = random_string(self.length, CAPTCHA_ALPHABET)
        image = self.renderer(text, **self.render_options)
        challenge_id = random_uuid()

        self.store.set(make_key(KeyNamespace.CAPTCHA, challenge_id),
                       text.lower(), self.expire)
        logger.debug("Issued captcha %s", challenge_id)
        return ImageChallenge(challenge_id, image)

    def validate(self, challenge_id: str, user_input: str) -> bool:
        """
        Check ``user_input`` against the stored solution, ignoring case.
        The challenge is consumed whether or not the answer matches.
        """
        if not challenge_id or not user_input:
            return False

        key = make_key(KeyNamespace.CAPTCHA, challenge_id)
        expected = self.store.get(key)
        if expected is None:
            logger.debug("Captcha %s missing or expired", challenge_id)
            return False

        self.store.delete(key)
        is_valid = expected == user_input.lower()
        logger.debug("Captcha %s checked: %s", challenge_id, is_valid)
        return is_valid
