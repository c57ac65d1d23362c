# -*- coding: utf-8 -*-
# Copyright (c) 2016 Civic Knowledge. This file is licensed under the terms of the
# MIT License, included in this distribution as LICENSE.txt

"""

Load the raw bytes of a pack file from a buffer, a local path or a URL.

"""

import os

import requests

from .base import DEFAULT_TIMEOUT
from .exceptions import PackLoadError

URL_SCHEMES = ('http://', 'https://')


def is_url(source):
    return isinstance(source, str) and source.lower().startswith(URL_SCHEMES)


def fetch_bytes(url, timeout=DEFAULT_TIMEOUT):
    try:
        r = requests.get(url, timeout=timeout)
        r.raise_for_status()
    except requests.RequestException as e:
        raise PackLoadError('Failed to fetch postcode data file ({}): {}'.format(url, e)) from e

    return r.content


def read_file(path):
    try:
        with open(path, 'rb') as f:
            return f.read()
    except OSError as e:
        raise PackLoadError('Failed to read postcode data file ({}): {}'.format(path, e)) from e


def read_source(source, timeout=DEFAULT_TIMEOUT):
    """Return the bytes of a pack file. source may be bytes-like, a URL or a path"""

    if isinstance(source, (bytes, bytearray, memoryview)):
        return source

    if is_url(source):
        return fetch_bytes(source, timeout)

    if isinstance(source, (str, os.PathLike)):
        return read_file(source)

    raise TypeError('Expected a URL, a path or a bytes-like object, got {}'.format(type(source).__name__))
