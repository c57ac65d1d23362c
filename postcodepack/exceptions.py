# -*- coding: utf-8 -*-
# Copyright (c) 2016 Civic Knowledge. This file is licensed under the terms of the
# MIT License, included in this distribution as LICENSE.txt

"""

Exceptions

"""


class PostcodePackError(Exception):
    kind = 'error'


class FormatError(PostcodePackError):
    """Postcode format not recognised"""
    kind = 'format-error'

    def __init__(self, value, message=None):
        self.value = value
        super(FormatError, self).__init__(message or "Postcode format not recognised: {!r}".format(value))


class PackFormatError(FormatError):
    """The data file is not a postcode pack, or is damaged"""

    def __init__(self, message):
        super(PackFormatError, self).__init__(None, message)


class UnsupportedVersionError(PostcodePackError):
    kind = 'unsupported-version'

    def __init__(self, version, max_version):
        self.version = version
        self.max_version = max_version
        super(UnsupportedVersionError, self).__init__(
            "Postcode data file uses format version {}. This build only supports data formats up to {}"
            .format(version, max_version))


class DataVersionError(PostcodePackError):
    kind = 'data-version-error'

    def __init__(self, postcode, version):
        self.postcode = postcode
        self.version = version
        super(DataVersionError, self).__init__(
            "Data file format version {} does not support this type of postcode: {!r}".format(version, postcode))


class NotFoundError(PostcodePackError):
    kind = 'not-found'

    def __init__(self, postcode):
        self.postcode = postcode
        super(NotFoundError, self).__init__("Postcode not found: {!r}".format(postcode))


class PackLoadError(PostcodePackError):
    kind = 'load-error'


class IngestionError(PostcodePackError):
    pass
