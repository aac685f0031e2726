"""Shortcode generation utility

Generated (non-custom) short codes come from a numeric store counter pushed
through a salted multiplicative permutation and encoded as fixed-length Base62.

Example:
    >>> from edgeshortener.utils import generate_shortcode
    >>> len(generate_shortcode(12345, salt='my_secret'))
    7
"""

import math
import string

import xxhash


ALPHABET = string.ascii_lowercase + string.ascii_uppercase + string.digits
BASE = len(ALPHABET)  # 26 lowercase + 26 uppercase + 10 digits


def generate_shortcode(counter: int, salt: str = 'default_salt', length: int = 7, mult: int = 1315423911) -> str:
    """Generate a short, deterministic, non-sequential code from a counter and salt.

    The counter is mapped by an affine permutation over BASE**length, so the
    mapping is 1:1 until the counter wraps around the modulo space. The output
    isn't trivially predictable without the salt (obfuscation, not encryption).

    Args:
        counter (int):
            Non-negative integer identifying the link.
        salt (str):
            Secret string used to shift the output space.
        length (int):
            Length of the resulting code. Defaults to 7.
        mult (int):
            Multiplicative factor, must be coprime with BASE**length.

    Raises:
        TypeError: If counter or salt have the wrong type.
        ValueError: If counter is negative, salt is empty, or mult isn't coprime.
    """
    if not isinstance(counter, int):
        raise TypeError(f'Counter must be of type integer (given type: {type(counter)}).')
    if counter < 0:
        raise ValueError(f'Counter must be a non-negative integer (given value: {counter}).')
    if not isinstance(salt, str):
        raise TypeError(f'Salt must be of type string (given type: {type(salt)}).')
    if not salt:
        raise ValueError(f'Salt must be a non-empty string (given value: {salt}).')
    if math.gcd(mult, BASE**length) != 1:
        raise ValueError(f'Multiplicative factor must be coprime with mod ({BASE**length}) (given value: mult={mult}).')

    modulo_space = BASE**length
    salt_hash = xxhash.xxh64_intdigest(salt.encode('utf-8')) % modulo_space
    permuted = (counter * mult + salt_hash) % modulo_space

    # Most significant base62 digit first, left-padded to a fixed length
    return ''.join(reversed([ALPHABET[(permuted // BASE**i) % BASE] for i in range(length)])).rjust(length, ALPHABET[0])
