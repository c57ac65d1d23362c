# -*- coding: utf-8 -*-
# Copyright (c) 2016 Civic Knowledge. This file is licensed under the terms of the
# MIT License, included in this distribution as LICENSE.txt

"""

Postcode records. Each record is 3 to 8 bytes:

    format:   1 byte (bitfield)
        code_is_delta:  1 bit
        coord_is_delta: 1 bit
        extra:          6 bits
            code_is_delta == 1 => amount to add to the previous code
            code_is_delta == 0 => special mode, version 2 and later:
                0x20 => the record is an outward code only
                0x00 => a full postcode
                (all other values reserved)
    code:     0 or 3 bytes (u24, present only if not code_is_delta)
    lat/long: 2 or 4 bytes (2 x i8 if coord_is_delta, or 2 x u16 otherwise)

Delta values are relative to the record before it in the same prefix bucket. The
first record of a bucket is relative to zero.

In version 1, a delta code is `previous + extra`. From version 2 it is
`previous + extra + 1`, since a delta of zero can never occur between distinct
postcodes.

"""

import struct
from collections import namedtuple

from .base import (ABS_COORD_FORMAT, CODE_DELTA, CODE_SIZE, COORD_DELTA, DELTA_COORD_FORMAT,
                   EXTRA_MASK, FORMAT_BYTE, MAX_CODE, OUTWARD_ONLY_MODE, OUTWARD_ONLY_VERSION)
from .exceptions import DataVersionError, PackFormatError

Record = namedtuple('Record', 'code lat lon outward_only')

ScanState = namedtuple('ScanState', 'code lat lon')

INITIAL_STATE = ScanState(0, 0, 0)


def code_delta_offset(version):
    """Amount added to a delta code on top of the stored value"""
    return 1 if version >= OUTWARD_ONLY_VERSION else 0


def decode_record(buf, pos, state, version):
    """Decode the record at pos. Returns the record and the position of the next one"""

    try:
        fmt, = FORMAT_BYTE.unpack_from(buf, pos)
        pos += FORMAT_BYTE.size

        extra = fmt & EXTRA_MASK
        outward_only = False

        if fmt & CODE_DELTA:
            code = state.code + extra + code_delta_offset(version)
        else:
            if pos + CODE_SIZE > len(buf):
                raise struct.error('code runs past end of buffer')
            code = int.from_bytes(bytes(buf[pos:pos + CODE_SIZE]), 'little')
            pos += CODE_SIZE
            if version >= OUTWARD_ONLY_VERSION:
                outward_only = extra == OUTWARD_ONLY_MODE

        if fmt & COORD_DELTA:
            dlat, dlon = DELTA_COORD_FORMAT.unpack_from(buf, pos)
            pos += DELTA_COORD_FORMAT.size
            lat, lon = state.lat + dlat, state.lon + dlon
        else:
            lat, lon = ABS_COORD_FORMAT.unpack_from(buf, pos)
            pos += ABS_COORD_FORMAT.size

    except struct.error as e:
        raise PackFormatError('Truncated postcode record at offset {}: {}'.format(pos, e))

    return Record(code, lat, lon, outward_only), pos


def encode_record(record, state, version):
    """Pack a record as compactly as the state allows. The inverse of decode_record"""

    if not 0 <= record.code <= MAX_CODE:
        raise ValueError('Postcode code out of range: {}'.format(record.code))

    if record.outward_only and version < OUTWARD_ONLY_VERSION:
        raise DataVersionError(record.code, version)

    delta = record.code - state.code - code_delta_offset(version)

    if not record.outward_only and 0 <= delta <= EXTRA_MASK:
        fmt = CODE_DELTA | delta
        code = b''
    else:
        fmt = OUTWARD_ONLY_MODE if record.outward_only else 0
        code = record.code.to_bytes(CODE_SIZE, 'little')

    dlat, dlon = record.lat - state.lat, record.lon - state.lon

    if -128 <= dlat <= 127 and -128 <= dlon <= 127:
        fmt |= COORD_DELTA
        coords = DELTA_COORD_FORMAT.pack(dlat, dlon)
    else:
        coords = ABS_COORD_FORMAT.pack(record.lat, record.lon)

    return FORMAT_BYTE.pack(fmt) + code + coords


def advance(state, record):
    return ScanState(record.code, record.lat, record.lon)


class RecordScanner(object):
    """Lazily decode the records in one prefix bucket, body[start:end] of the record
    section. Every iteration starts over with a fresh scan state"""

    def __init__(self, records, start, end, version):
        self.records = records
        self.start = start
        self.end = end
        self.version = version

    def __iter__(self):
        state = INITIAL_STATE
        pos = self.start

        while pos < self.end:
            record, pos = decode_record(self.records, pos, state, self.version)
            state = advance(state, record)
            yield record

        if pos != self.end:
            raise PackFormatError('Last record overruns its prefix bucket, ending at {} not {}'
                                  .format(pos, self.end))

    def find(self, code, outward_only=False):
        """Return the first record with this code and kind, or None"""

        for record in self:
            if record.outward_only == outward_only and record.code == code:
                return record

        return None
