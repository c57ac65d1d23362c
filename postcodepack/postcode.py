# -*- coding: utf-8 -*-
# Copyright (c) 2016 Civic Knowledge. This file is licensed under the terms of the
# MIT License, included in this distribution as LICENSE.txt

"""

Postcode canonicalization and the integer encoding used as the lookup key.

A UK postcode has two parts. The first is the "outward code", 2, 3 or 4 characters
long. The second is the "inward code", which is always 3 characters long.

The canonical form is 7 characters for a full postcode, with the inward code right
aligned and the outward code left aligned, so an outward code shorter than 4
characters is followed by spaces. An outward code on its own is canonicalized to 4
characters, padded on the right.

"""

import string

from .base import PREFIX_SECOND_SYMBOLS
from .exceptions import FormatError

VALID_CHARS = frozenset(' ' + string.ascii_letters + string.digits)

OUTWARD_WIDTH = 4
FULL_WIDTH = 7
INWARD_WIDTH = 3

LETTERS = string.ascii_uppercase
DIGITS = string.digits
ALNUM = LETTERS + DIGITS
ALNUM_SPACE = ALNUM + ' '


def format_postcode(pc):
    """Return the canonical, fixed width form of a postcode, or raise FormatError"""

    if not isinstance(pc, str) or any(c not in VALID_CHARS for c in pc):
        raise FormatError(pc)

    code = pc.replace(' ', '').upper()

    if not 2 <= len(code) <= FULL_WIDTH:
        raise FormatError(pc)

    if len(code) <= OUTWARD_WIDTH:
        return code.ljust(OUTWARD_WIDTH)

    outward, inward = code[:-INWARD_WIDTH], code[-INWARD_WIDTH:]

    return outward.ljust(OUTWARD_WIDTH) + inward


def is_outward_only(canonical):
    return len(canonical) == OUTWARD_WIDTH


def encode_letter(c):
    if 'A' <= c <= 'Z':
        return ord(c) - ord('A')
    raise FormatError(c)


def encode_digit(c):
    if '0' <= c <= '9':
        return ord(c) - ord('0')
    raise FormatError(c)


def encode_alnum(c):
    try:
        return encode_letter(c)
    except FormatError:
        return encode_digit(c) + 26


def encode_alnum_space(c):
    if c == ' ':
        return 36
    return encode_alnum(c)


def pack_code(canonical):
    """Encode the characters after the two character prefix as an integer. Outward codes
    use the range 0 to 1368, full postcodes 0 to 9254439"""

    if len(canonical) == OUTWARD_WIDTH:
        c, d = canonical[2:]
        return encode_alnum_space(c) * 37 + encode_alnum_space(d)

    if len(canonical) == FULL_WIDTH:
        c, d, e, f, g = canonical[2:]
        code = encode_alnum_space(c) * 37 + encode_alnum_space(d)
        code = code * 10 + encode_digit(e)
        return code * 26 * 26 + encode_letter(f) * 26 + encode_letter(g)

    raise FormatError(canonical)


def unpack_code(prefix, code, outward_only=False):
    """Inverse of pack_code: rebuild the canonical postcode from its prefix and code"""

    if outward_only:
        c, d = divmod(code, 37)
        if c >= 37:
            raise FormatError(code, "Outward code out of range: {}".format(code))
        return prefix + ALNUM_SPACE[c] + ALNUM_SPACE[d]

    rest, g = divmod(code, 26)
    rest, f = divmod(rest, 26)
    rest, e = divmod(rest, 10)
    c, d = divmod(rest, 37)

    if c >= 37:
        raise FormatError(code, "Postcode code out of range: {}".format(code))

    return prefix + ALNUM_SPACE[c] + ALNUM_SPACE[d] + DIGITS[e] + LETTERS[f] + LETTERS[g]


def prefix_index(canonical):
    """Return the number of the bucket, 0 to 935, that holds postcodes with the same
    first two characters"""

    if len(canonical) < 2:
        raise FormatError(canonical)

    first, second = canonical[0], canonical[1]

    if second in DIGITS:
        second = encode_digit(second)
    else:
        second = encode_letter(second) + 10

    return encode_letter(first) * PREFIX_SECOND_SYMBOLS + second


def index_prefix(index):
    """The two character prefix for a bucket number"""
    first, second = divmod(index, PREFIX_SECOND_SYMBOLS)
    return LETTERS[first] + (DIGITS + LETTERS)[second]
