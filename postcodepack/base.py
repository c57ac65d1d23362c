# -*- coding: utf-8 -*-
# Copyright (c) 2016 Civic Knowledge. This file is licensed under the terms of the
# MIT License, included in this distribution as LICENSE.txt

"""
File format constants for UK postcode pack files.
"""


import struct


EXTENSION = '.pack'

# "UKPP", read as a little endian u32
MAGIC = 0x50504B55

VERSION = 2  # Version written by default
MAX_VERSION = 2  # Highest version this build can read
OUTWARD_ONLY_VERSION = 2  # First version with outward-only records

DEFAULT_TIMEOUT = 30

# I: Magic number, I: Version, Q: Last updated, seconds since the epoch
FILE_HEADER_FORMAT = struct.Struct('<IIQ')

FILE_HEADER_FORMAT_SIZE = FILE_HEADER_FORMAT.size

# Offsets below are relative to the end of the file header

# d: min longitude, d: max longitude, d: min latitude, d: max latitude
BBOX_FORMAT = struct.Struct('<4d')

PREFIX_FIRST_SYMBOLS = 26  # A-Z
PREFIX_SECOND_SYMBOLS = 36  # 0-9, A-Z
N_BUCKETS = PREFIX_FIRST_SYMBOLS * PREFIX_SECOND_SYMBOLS

PREFIX_TABLE_START = BBOX_FORMAT.size
# One start offset per bucket, plus the end of the last bucket
PREFIX_TABLE_FORMAT = struct.Struct('<{}I'.format(N_BUCKETS + 1))
OFFSET_FORMAT = struct.Struct('<I')

RECORDS_START = PREFIX_TABLE_START + PREFIX_TABLE_FORMAT.size

# Record layout: format byte, then an optional 3 byte code, then coordinates
CODE_DELTA = 0x80
COORD_DELTA = 0x40
EXTRA_MASK = 0x3F
OUTWARD_ONLY_MODE = 0x20

FORMAT_BYTE = struct.Struct('<B')
ABS_COORD_FORMAT = struct.Struct('<HH')  # lat, long
DELTA_COORD_FORMAT = struct.Struct('<bb')  # dlat, dlong
CODE_SIZE = 3
MAX_CODE = (1 << (8 * CODE_SIZE)) - 1

QUANTIZE_STEPS = 65535
