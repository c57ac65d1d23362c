# -*- coding: utf-8 -*-
# Copyright (c) 2016 Civic Knowledge. This file is licensed under the terms of the
# MIT License, included in this distribution as LICENSE.txt

"""
Write postcode pack files.
"""

import datetime
import logging
from collections import defaultdict

from . import base
from .exceptions import DataVersionError, FormatError, PostcodePackError
from .geo import BoundingBox
from .postcode import OUTWARD_WIDTH, format_postcode, is_outward_only, pack_code, prefix_index
from .records import INITIAL_STATE, Record, advance, encode_record

logger = logging.getLogger(__name__)

MAX_TIMESTAMP = 2 ** 64 - 1


def to_timestamp(d):
    """Seconds since the epoch for a date, a datetime or a number. Naive values are UTC"""

    if d is None:
        d = datetime.datetime.now(datetime.timezone.utc)

    if isinstance(d, datetime.datetime):
        if d.tzinfo is None:
            d = d.replace(tzinfo=datetime.timezone.utc)
        ts = int(d.timestamp())
    elif isinstance(d, datetime.date):
        ts = int(datetime.datetime(d.year, d.month, d.day, tzinfo=datetime.timezone.utc).timestamp())
    else:
        ts = int(d)

    if not 0 <= ts <= MAX_TIMESTAMP:
        raise PostcodePackError("Last updated time can't be stored in the file header: {}".format(d))

    return ts


class PostcodePackWriter(object):
    MAGIC = base.MAGIC
    FILE_HEADER_FORMAT = base.FILE_HEADER_FORMAT
    FILE_HEADER_FORMAT_SIZE = base.FILE_HEADER_FORMAT_SIZE

    def __init__(self, path, version=base.VERSION, last_updated=None, bbox=None):

        if not 1 <= version <= base.MAX_VERSION:
            raise PostcodePackError("Can't write format version {}".format(version))

        self.path = path
        self.version = version
        self.last_updated = last_updated
        self.bbox = BoundingBox(*bbox) if bbox is not None else None

        self.n_records = 0
        self.data_size = 0

        self._fh = None
        self._own_fh = False

        self.cache = {}

        self.open()

    def open(self):

        if self._fh is None:
            if hasattr(self.path, 'write'):
                self._fh = self.path
            else:
                self._fh = open(self.path, 'wb')
                self._own_fh = True

    def write_postcode(self, postcode, lon, lat):
        """Store a single postcode or outward code in the cache, to be written on close"""

        canonical = format_postcode(postcode)

        if is_outward_only(canonical) and self.version < base.OUTWARD_ONLY_VERSION:
            raise DataVersionError(canonical, self.version)

        try:
            key = (prefix_index(canonical), pack_code(canonical), is_outward_only(canonical))
        except FormatError as e:
            raise FormatError(postcode) from e

        self.cache[canonical] = (key, float(lon), float(lat))

    def write_postcodes(self, postcodes):
        for postcode, lon, lat in postcodes:
            self.write_postcode(postcode, lon, lat)

    def add_outward_centroids(self):
        """Add an outward code entry, at the mean position of its postcodes, for each
        outward code that doesn't already have one"""

        if self.version < base.OUTWARD_ONLY_VERSION:
            raise DataVersionError(None, self.version)

        groups = defaultdict(list)
        for canonical, (key, lon, lat) in self.cache.items():
            if not is_outward_only(canonical):
                groups[canonical[:OUTWARD_WIDTH]].append((lon, lat))

        n = 0
        for outward, points in groups.items():
            if outward not in self.cache:
                self.write_postcode(outward,
                                    sum(p[0] for p in points) / len(points),
                                    sum(p[1] for p in points) / len(points))
                n += 1

        return n

    def pack_records(self, bbox):
        """Return the prefix table offsets and the packed record data"""

        buckets = defaultdict(list)
        for key, lon, lat in sorted(self.cache.values()):
            buckets[key[0]].append((key, lon, lat))

        offsets = []
        data = bytearray()

        for i in range(base.N_BUCKETS):
            offsets.append(len(data))

            state = INITIAL_STATE  # Readers start each bucket from the initial state
            for (_, code, outward_only), lon, lat in buckets.get(i, []):
                q_lat, q_lon = bbox.quantize(lon, lat)
                record = Record(code, q_lat, q_lon, outward_only)
                data += encode_record(record, state, self.version)
                state = advance(state, record)

        offsets.append(len(data))

        if len(data) > 0xFFFFFFFF:
            raise PostcodePackError('Record data too large for 32 bit offsets: {} bytes'.format(len(data)))

        return offsets, bytes(data)

    def close(self):

        if self._fh is None:
            return

        try:
            if self.bbox is None:
                points = [(lon, lat) for _, lon, lat in self.cache.values()]
                self.bbox = BoundingBox.from_points(points) if points else BoundingBox(0.0, 0.0, 0.0, 0.0)

            offsets, data = self.pack_records(self.bbox)

            self.write_file_header()
            self._fh.write(base.BBOX_FORMAT.pack(*self.bbox))
            self._fh.write(base.PREFIX_TABLE_FORMAT.pack(*offsets))
            self._fh.write(data)

            self.n_records = len(self.cache)
            self.data_size = len(data)

            logger.info("Wrote %d postcodes, %d bytes of record data, format version %d",
                        self.n_records, self.data_size, self.version)
        finally:
            if self._own_fh:
                self._fh.close()

            self._fh = None

    def write_file_header(self):
        """Write the magic number, version and last update time"""

        hdf = self.FILE_HEADER_FORMAT.pack(self.MAGIC, self.version, to_timestamp(self.last_updated))

        assert len(hdf) == self.FILE_HEADER_FORMAT_SIZE

        self._fh.write(hdf)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_val:
            # Write nothing if the block failed
            if self._own_fh:
                self._fh.close()
            self._fh = None
            return False

        self.close()
