# -*- coding: utf-8 -*-
# Copyright (c) 2016 Civic Knowledge. This file is licensed under the terms of the
# MIT License, included in this distribution as LICENSE.txt

"""
Read-only access to a postcode pack file.

File structure, all numbers little endian:

    Header, 16 bytes:
        magic:   4 bytes "UKPP", for "UK Postcode Pack"
        version: 4 bytes (u32), file format version
        date:    8 bytes (u64), seconds since the epoch of the most recent update

    Bounding box, 4*8 = 32 bytes:
        minlong, maxlong, minlat, maxlat: 8 bytes each (f64)

    Prefix table, 26*36*4 + 4 = 3748 bytes:
        start offset of each two character prefix bucket (u32, relative to the
        start of the record data), then the end of the last bucket

    Record data, variable length, see records.py
"""

import datetime
import logging
import struct

from . import base
from .exceptions import DataVersionError, FormatError, NotFoundError, PackFormatError, UnsupportedVersionError
from .geo import BoundingBox, distance_between, sort_by_distance
from .postcode import (format_postcode, index_prefix, is_outward_only, pack_code, prefix_index,
                       unpack_code)
from .records import RecordScanner
from .source import read_source

logger = logging.getLogger(__name__)


class PostcodePackReader(object):
    """Resolve UK postcodes to coordinates from a pack file. The pack is loaded once, in
    the constructor, and never changes, so one reader can be shared between threads."""

    MAGIC = base.MAGIC
    MAX_VERSION = base.MAX_VERSION
    FILE_HEADER_FORMAT = base.FILE_HEADER_FORMAT
    FILE_HEADER_FORMAT_SIZE = base.FILE_HEADER_FORMAT_SIZE

    def __init__(self, source, quiet=False, timeout=base.DEFAULT_TIMEOUT):
        self.source = source
        self.quiet = quiet
        self.timeout = timeout

        self.magic = None
        self.version = None
        self.last_updated = None
        self.bbox = None

        self._body = None
        self._records = None
        self._offsets = None

        self.open()

    def open(self):

        if self._body is None:
            data = read_source(self.source, self.timeout)

            if not isinstance(data, bytes):
                data = bytes(data)  # Snapshot mutable buffers

            data = memoryview(data)

            self.read_file_header(data)

            self._body = data[self.FILE_HEADER_FORMAT_SIZE:]

            self.read_index()

            if not self.quiet:
                logger.info("Loaded postcode pack. Max supported file format version is %s. "
                            "File format version is %s. Last updated %s",
                            self.MAX_VERSION, self.version,
                            self.last_updated.date().isoformat() if self.last_updated else 'unknown')

    def read_file_header(self, data):

        try:
            self.magic, self.version, timestamp = self.FILE_HEADER_FORMAT.unpack_from(data, 0)
        except struct.error as e:
            raise PackFormatError('Failed to read file header; {}'.format(e))

        if self.magic != self.MAGIC:
            raise PackFormatError("Postcode data file is not using a known format; magic = {:#010x}"
                                  .format(self.magic))

        if self.version > self.MAX_VERSION:
            raise UnsupportedVersionError(self.version, self.MAX_VERSION)

        # Informational only, a bad value never fails the load
        try:
            self.last_updated = datetime.datetime.fromtimestamp(timestamp, tz=datetime.timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            logger.warning("Bad last updated time in file header: %s; %s", timestamp, e)
            self.last_updated = None

    def read_index(self):
        """Read the bounding box and the prefix table"""

        if len(self._body) < base.RECORDS_START:
            raise PackFormatError('Postcode data file is truncated; {} bytes after the header, expected at least {}'
                                  .format(len(self._body), base.RECORDS_START))

        self.bbox = BoundingBox(*base.BBOX_FORMAT.unpack_from(self._body, 0))
        self._offsets = base.PREFIX_TABLE_FORMAT.unpack_from(self._body, base.PREFIX_TABLE_START)
        self._records = self._body[base.RECORDS_START:]

        if self._offsets[-1] > len(self._records):
            raise PackFormatError('Postcode data file is truncated; record data ends at {}, expected {}'
                                  .format(len(self._records), self._offsets[-1]))

        if any(a > b for a, b in zip(self._offsets, self._offsets[1:])):
            raise PackFormatError('Postcode data file is damaged; prefix table offsets are out of order')

    @property
    def data_size(self):
        """Size of the record data, in bytes"""
        return self._offsets[-1]

    def bucket_range(self, canonical):
        """Return the (start, end) byte range of the records with the same prefix as a
        canonical postcode"""
        i = prefix_index(canonical)
        return self._offsets[i], self._offsets[i + 1]

    def records(self, prefix):
        """Return a RecordScanner for the bucket of a two character prefix"""
        start, end = self.bucket_range(prefix)
        return RecordScanner(self._records, start, end, self.version)

    def format_postcode(self, postcode):
        return format_postcode(postcode)

    def lookup_postcode(self, postcode):
        """Return (canonical_postcode, (lon, lat)) for a full postcode or an outward code"""

        canonical = format_postcode(postcode)

        outward_only = is_outward_only(canonical)

        if outward_only and self.version < base.OUTWARD_ONLY_VERSION:
            raise DataVersionError(canonical, self.version)

        try:
            code = pack_code(canonical)
            scanner = self.records(canonical)
        except FormatError as e:
            raise FormatError(postcode) from e

        record = scanner.find(code, outward_only)

        if record is None:
            raise NotFoundError(canonical)

        return canonical, self.bbox.dequantize(record.lat, record.lon)

    def distance_between(self, point_a, point_b):
        return distance_between(point_a, point_b)

    def sort_by_distance(self, items, point, coords_of):
        return sort_by_distance(items, point, coords_of)

    def sort_by_postcode_distance(self, items, postcode, coords_of):
        """Rank items by their distance from a postcode"""
        _, point = self.lookup_postcode(postcode)
        return sort_by_distance(items, point, coords_of)

    def __iter__(self):
        """Yield (canonical_postcode, lon, lat) for every record, in file order"""

        for i in range(base.N_BUCKETS):
            if self._offsets[i] == self._offsets[i + 1]:
                continue

            prefix = index_prefix(i)

            for record in RecordScanner(self._records, self._offsets[i], self._offsets[i + 1], self.version):
                lon, lat = self.bbox.dequantize(record.lat, record.lon)
                yield unpack_code(prefix, record.code, record.outward_only), lon, lat


def load(source, quiet=False, timeout=base.DEFAULT_TIMEOUT):
    """Load a pack file from a URL, a local path or a bytes-like object"""
    return PostcodePackReader(source, quiet=quiet, timeout=timeout)
