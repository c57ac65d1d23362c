# -*- coding: utf-8 -*-
# Copyright (c) 2016 Civic Knowledge. This file is licensed under the terms of the
# MIT License, included in this distribution as LICENSE.txt

"""
Resolve UK postcodes to coordinates with a compact, read-only pack file.
"""

from .exceptions import (PostcodePackError, FormatError, PackFormatError, UnsupportedVersionError,
                         DataVersionError, NotFoundError, PackLoadError, IngestionError)
from .postcode import format_postcode, pack_code, unpack_code, prefix_index
from .geo import BoundingBox, Ranked, distance_between, sort_by_distance
from .reader import PostcodePackReader, load
from .writer import PostcodePackWriter
from .ingest import ingest

from .__meta__ import __version__
