# -*- coding: utf-8 -*-
# Copyright (c) 2016 Civic Knowledge. This file is licensed under the terms of the
# MIT License, included in this distribution as LICENSE.txt

"""

CLI program

"""

import argparse
import logging
import os
import sys

import tabulate

from . import PostcodePackReader, PostcodePackError, ingest
from .base import VERSION
from .postcode import format_postcode

from .__meta__ import __version__

DATA_ENV_VAR = 'POSTCODEPACK_DATA'


def setup_logging(verbose=False, quiet=False):
    level = logging.DEBUG if verbose else (logging.WARNING if quiet else logging.INFO)
    logging.basicConfig(level=level, format='%(levelname)s %(name)s: %(message)s')


def ingest_cb(v):
    print(v)


def lookup_rows(r, postcodes):
    rows = []
    for pc in postcodes:
        try:
            canonical, (lon, lat) = r.lookup_postcode(pc)
            rows.append((pc, canonical, lon, lat, ''))
        except PostcodePackError as e:
            rows.append((pc, '', None, None, e.kind))
    return rows


def nearest_rows(r, postcode, targets):
    """Rank the target postcodes by distance from postcode. Targets that can't be
    resolved are listed at the end with their error"""

    located = []
    failed = []
    for pc in targets:
        try:
            located.append(r.lookup_postcode(pc))
        except PostcodePackError as e:
            failed.append((pc, None, None, None, e.kind))

    ranked = r.sort_by_postcode_distance(located, postcode, lambda e: e[1])

    rows = []
    for rk in ranked:
        canonical, (lon, lat) = rk.item
        rows.append((canonical, lon, lat, rk.distance, ''))

    return rows + failed


def dump_rows(r, prefix):
    from .postcode import unpack_code

    prefix = prefix.upper()[:2]
    rows = []
    for record in r.records(prefix):
        lon, lat = r.bbox.dequantize(record.lat, record.lon)
        rows.append((unpack_code(prefix, record.code, record.outward_only), record.code,
                     'O' if record.outward_only else '', record.lat, record.lon, lon, lat))
    return rows


def ppingest(args=None):
    parser = argparse.ArgumentParser(
        prog='ppingest',
        description='Ingest an ONS Postcode Directory CSV file into a postcode pack file. Version: {}'
        .format(__version__))

    parser.add_argument('url', help='Input CSV file')
    parser.add_argument('path', nargs='?', help='Output file path')
    parser.add_argument('-x', '--exclude', action='append', default=[],
                        help='Exclude postcodes starting with this prefix. May be given more than once')
    parser.add_argument('-V', '--format-version', type=int, default=VERSION,
                        help='Pack format version to write')

    args = parser.parse_args(args)

    setup_logging()

    path, stats = ingest(args.url, args.path, exclude=args.exclude, version=args.format_version, cb=ingest_cb)
    print("Ingested ", path)
    print(tabulate.tabulate(stats._asdict().items()))


def postcodepack(args=None):

    parser = argparse.ArgumentParser(
        prog='postcodepack',
        description='UK postcode pack file access. Version: {}'.format(__version__))

    group = parser.add_mutually_exclusive_group()

    group.add_argument('-f', '--info', action='store_true',
                       help='Show general information from the header')
    group.add_argument('-l', '--lookup', nargs='+', metavar='POSTCODE',
                       help='Look up the coordinates of one or more postcodes or outward codes')
    group.add_argument('-n', '--nearest', metavar='POSTCODE',
                       help='With -t, rank postcodes by distance from this one')
    group.add_argument('-d', '--dump', metavar='PREFIX',
                       help='Display the decoded records for a two character prefix')
    group.add_argument('-c', '--canonical', nargs='+', metavar='POSTCODE',
                       help='Print the canonical form of postcodes')
    group.add_argument('-i', '--ingest', metavar='CSV',
                       help='Ingest an ONS Postcode Directory CSV file. Write to the path, or to -o')

    parser.add_argument('-t', '--to', nargs='+', default=[], metavar='POSTCODE',
                        help='With -n, the postcodes to rank')
    parser.add_argument('-o', '--output', help='With -i, the name of the output file')
    parser.add_argument('-x', '--exclude', action='append', default=[],
                        help='With -i, exclude postcodes starting with this prefix')
    parser.add_argument('-V', '--format-version', type=int, default=VERSION,
                        help='With -i, pack format version to write')
    parser.add_argument('-q', '--quiet', action='store_true', help='Only log warnings and errors')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log debug messages')

    parser.add_argument('path', nargs='?', default=os.getenv(DATA_ENV_VAR),
                        help='Pack file path or URL. Defaults to ${}'.format(DATA_ENV_VAR))

    args = parser.parse_args(args)

    setup_logging(args.verbose, args.quiet)

    if args.canonical:
        rows = []
        for pc in args.canonical:
            try:
                rows.append((pc, repr(format_postcode(pc))))
            except PostcodePackError as e:
                rows.append((pc, e.kind))
        print(tabulate.tabulate(rows, ['input', 'canonical']))
        return 0

    if args.ingest:
        path, stats = ingest(args.ingest, args.output or args.path, exclude=args.exclude,
                             version=args.format_version, cb=ingest_cb)
        print("Ingested ", path)
        print(tabulate.tabulate(stats._asdict().items()))
        return 0

    # All of the remaining options require a pack file

    if not args.path:
        print("ERROR: must specify a path, or set {}".format(DATA_ENV_VAR))
        return 1

    try:
        r = PostcodePackReader(args.path, quiet=args.quiet)
    except PostcodePackError as e:
        print("ERROR: {}".format(e))
        return 1

    if args.lookup:
        print(tabulate.tabulate(lookup_rows(r, args.lookup), ['input', 'postcode', 'lon', 'lat', 'error'],
                                floatfmt='.6f'))
        return 0

    if args.nearest:
        if not args.to:
            print("ERROR: -n requires -t")
            return 1
        try:
            rows = nearest_rows(r, args.nearest, args.to)
        except PostcodePackError as e:
            print("ERROR: {}: {}".format(e.kind, e))
            return 1
        print(tabulate.tabulate(rows, ['postcode', 'lon', 'lat', 'km', 'error'], floatfmt='.6f'))
        return 0

    if args.dump:
        try:
            rows = dump_rows(r, args.dump)
        except PostcodePackError as e:
            print("ERROR: {}".format(e))
            return 1
        print(tabulate.tabulate(rows, ['postcode', 'code', 'T', 'q_lat', 'q_lon', 'lon', 'lat'],
                                floatfmt='.6f'))
        return 0

    # If there are no other options, show info
    try:
        n_records = sum(1 for _ in r)
    except PostcodePackError as e:
        print("ERROR: {}".format(e))
        return 1

    rows = [
        ('path', args.path),
        ('version', r.version),
        ('last updated', r.last_updated.isoformat() if r.last_updated else 'unknown'),
        ('longitude', '{} to {}'.format(r.bbox.min_lon, r.bbox.max_lon)),
        ('latitude', '{} to {}'.format(r.bbox.min_lat, r.bbox.max_lat)),
        ('records', n_records),
        ('record bytes', r.data_size),
    ]
    print("Postcode pack file")
    print(tabulate.tabulate(rows))
    return 0


if __name__ == '__main__':
    sys.exit(postcodepack())
