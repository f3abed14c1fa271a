"""Shortcode generation utility

This module provides helpers for generating short, random, non-sequential
shortcodes from a uniformly random unsigned 64-bit value.

Functions:
    base62_encode(number) -> str:
        Encode a non-negative integer in base62, most significant digit first.
    generate_shortcode(randbits=secrets.randbits) -> str:
        Generate a random shortcode suitable for use as a URL slug.

Example:
    >>> from urlshortener.utils import base62_encode, generate_shortcode
    >>> base62_encode(12345)
    '3d7'
    >>> generate_shortcode()
    'kT3x9QbZr2a'
"""

import secrets
import string
from collections.abc import Callable


ALPHABET = string.digits + string.ascii_lowercase + string.ascii_uppercase
BASE = len(ALPHABET)  # 10 digits + 26 lowercase + 26 uppercase = 62

# Bits of randomness behind each generated shortcode
RANDOM_BITS = 64


def base62_encode(number: int) -> str:
    """Encode a non-negative integer into a base62 string.

    The output has no leading-zero padding, so its length grows with the
    magnitude of the number: 0 encodes to '0', 2**64 - 1 to 11 characters.

    Args:
        number (int):
            Non-negative integer to encode.

    Returns:
        str: Base62 representation, most significant digit first.

    Example:
        >>> base62_encode(61)
        'Z'
        >>> base62_encode(62)
        '10'
    """
    if not isinstance(number, int) or isinstance(number, bool):
        raise TypeError(f'Number must be of type integer (given type: {type(number)}).')
    if number < 0:
        raise ValueError(f'Number must be a non-negative integer (given value: {number}).')
    if number == 0:
        return ALPHABET[0]

    digits = []
    while number:
        number, remainder = divmod(number, BASE)
        digits.append(ALPHABET[remainder])
    return ''.join(reversed(digits))


def generate_shortcode(randbits: Callable[[int], int] = secrets.randbits) -> str:
    """Generate a random base62 shortcode.

    Draws a uniformly random unsigned 64-bit integer and encodes it with
    base62_encode(). The result is 1 to 11 characters long.

    NOTE:
        - The generator doesn't consult the data store, so it can't guarantee
          uniqueness by itself. Callers check for collisions before storing.
        - With 2**64 possible values, collisions between live codes are rare
          but possible.

    Args:
        randbits (Callable[[int], int], optional):
            Source of random bits. Defaults to secrets.randbits.

    Returns:
        str: A short alphanumeric code.
    """
    return base62_encode(randbits(RANDOM_BITS))
