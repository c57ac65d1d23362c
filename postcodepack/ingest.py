# -*- coding: utf-8 -*-
# Copyright (c) 2016 Civic Knowledge. This file is licensed under the terms of the
# MIT License, included in this distribution as LICENSE.txt

"""
Build a postcode pack from the ONS Postcode Directory CSV file.
"""

import csv
import datetime
import logging
from collections import Counter, namedtuple
from os.path import abspath, basename, splitext

from . import base
from .exceptions import FormatError, IngestionError
from .writer import PostcodePackWriter

logger = logging.getLogger(__name__)

IngestStats = namedtuple('IngestStats',
                         'total written outward terminated no_location excluded malformed last_updated')

POSTCODE_COLUMNS = ('pcd', 'pcd7')
LAT_COLUMN = 'lat'
LON_COLUMN = 'long'
INTRODUCED_COLUMN = 'dointr'
TERMINATED_COLUMN = 'doterm'

NO_LOCATION_LAT = 99.0  # The directory uses 99.999999 for postcodes with no known location


def parse_month(d):
    """Parse a YYYYMM date, as used in the directory, to the first day of the month"""

    if not d or len(d) < 6:
        return None

    try:
        return datetime.date(int(d[0:4]), int(d[4:6]), 1)
    except ValueError:
        return None


def column(headers, *names):
    for name in names:
        if name in headers:
            return name

    raise IngestionError("Input file is not well formed; no column named {}".format(' or '.join(names)))


def read_postcodes(f, exclude=()):
    """Yield (row, reason) for each row of a directory file. For current postcodes
    with a location, row is (postcode, lon, lat, introduced) and reason is None.
    Otherwise row is None and reason says why it was skipped"""

    reader = csv.DictReader(f)

    headers = reader.fieldnames or []
    pc_col = column(headers, *POSTCODE_COLUMNS)
    lat_col = column(headers, LAT_COLUMN)
    lon_col = column(headers, LON_COLUMN)
    intr_col = column(headers, INTRODUCED_COLUMN)
    term_col = column(headers, TERMINATED_COLUMN)

    for row in reader:
        postcode = row.get(pc_col)

        if not postcode:
            yield None, 'malformed'
            continue

        introduced = parse_month(row.get(intr_col))
        terminated = parse_month(row.get(term_col))

        if introduced is None or terminated is not None:
            yield None, 'terminated'
            continue

        try:
            lat = float(row[lat_col])
            lon = float(row[lon_col])
        except (TypeError, ValueError):
            raise IngestionError("Input file is not well formed; bad location for {}".format(postcode))

        if lat > NO_LOCATION_LAT:
            yield None, 'no_location'
            continue

        if any(postcode.startswith(prefix) for prefix in exclude):
            yield None, 'excluded'
            continue

        yield (postcode, lon, lat, introduced), None


def ingest(url, path=None, exclude=(), version=base.VERSION, outward=True, encoding=None, cb=None):
    """Ingest an ONS Postcode Directory CSV file and write a pack file

    :param url: Path to the CSV file
    :param path: Output path. Defaults to the input name with the pack extension
    :param exclude: Postcode prefixes to leave out
    :param version: Format version to write
    :param outward: If true, also write an entry for each outward code, at the center of its postcodes
    :param encoding: CSV file encoding. If None, try ascii, utf8 and latin1
    :param cb: Callable for progress messages
    :return: (path, IngestStats)
    """

    # The directory is plain ascii in every release seen so far, but be lenient.
    if encoding is None:
        encodings = ('ascii', 'utf8', 'latin1')
    else:
        encodings = (encoding,)

    if not path:
        path = abspath(splitext(basename(url))[0] + base.EXTENSION)

    outward = outward and version >= base.OUTWARD_ONLY_VERSION

    for encoding in encodings:

        counts = Counter()
        last_update = datetime.date(1970, 1, 1)
        n_outward = 0

        try:
            with open(url, newline='', encoding=encoding) as f, \
                    PostcodePackWriter(path, version=version) as w:

                for entry, reason in read_postcodes(f, exclude):
                    counts['total'] += 1

                    if entry is None:
                        counts[reason] += 1
                        continue

                    postcode, lon, lat, introduced = entry

                    try:
                        w.write_postcode(postcode, lon, lat)
                    except FormatError:
                        logger.debug("Skipping malformed postcode %r", postcode)
                        counts['malformed'] += 1
                        continue

                    last_update = max(last_update, introduced)

                if outward:
                    n_outward = w.add_outward_centroids()

                w.last_updated = last_update
            break

        except UnicodeDecodeError:
            msg = "WARNING: encoding {} failed, trying another".format(encoding)
            logger.warning(msg)
            if cb:
                cb(msg)
            continue

    else:
        raise IngestionError("ERROR: all encodings failed")

    stats = IngestStats(
        total=counts['total'],
        written=w.n_records,
        outward=n_outward,
        terminated=counts['terminated'],
        no_location=counts['no_location'],
        excluded=counts['excluded'],
        malformed=counts['malformed'],
        last_updated=last_update
    )

    logger.info("Ingested %s: %d rows, %d postcodes and %d outward codes written",
                url, stats.total, stats.written - stats.outward, stats.outward)

    if cb:
        cb("Wrote {} postcodes to {}".format(stats.written, path))

    return path, stats
