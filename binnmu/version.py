# -*- coding: utf-8 -*-

# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.

import re
from enum import Enum, unique


@unique
class VersionErrorKind(Enum):
    INVALID_EPOCH = 'invalid epoch'
    INVALID_UPSTREAM_VERSION = 'invalid upstream version'
    INVALID_DEBIAN_REVISION = 'invalid Debian revision'

    def __str__(self):
        return self.value


class VersionError(ValueError):

    def __init__(self, kind, version_str=None):
        self.kind = kind
        self.version_str = version_str
        if version_str is not None:
            msg = "%s in %r" % (kind, version_str)
        else:
            msg = str(kind)
        super().__init__(msg)


class PackageVersion(object):
    """A version number of a Debian package

    A version consists of three components:
     * an optional epoch
     * the upstream version
     * an optional Debian revision (absent for native versions)

    Instances are immutable.  Two versions are equal if their epochs
    (with a missing epoch counting as 0), upstream versions and revisions
    are equal.  Versions are deliberately not ordered.
    """

    __slots__ = ['_epoch', '_upstream_version', '_debian_revision']

    _re_upstream = re.compile(r'^[A-Za-z0-9.+~-]+$')
    _re_revision = re.compile(r'^[A-Za-z0-9.+~]+$')

    def __init__(self, epoch, upstream_version, debian_revision=None):
        if epoch is not None and (not isinstance(epoch, int) or epoch < 0):
            raise VersionError(VersionErrorKind.INVALID_EPOCH)
        if not upstream_version or not self._re_upstream.match(upstream_version):
            raise VersionError(VersionErrorKind.INVALID_UPSTREAM_VERSION)
        if debian_revision is not None and not self._re_revision.match(debian_revision):
            raise VersionError(VersionErrorKind.INVALID_DEBIAN_REVISION)
        self._epoch = epoch
        self._upstream_version = upstream_version
        self._debian_revision = debian_revision

    @classmethod
    def from_string(cls, value):
        """Parse a version string

        The epoch is everything before the last ":" and the revision is
        everything after the last "-" of the remainder.  Thus "1.0-2-1" has
        the upstream version "1.0-2" and the revision "1".

        :param value: The version string (e.g. "1:2.0+dfsg-3")
        :return: A PackageVersion; raises VersionError if the string is invalid
        """
        epoch = None
        if ':' in value:
            epoch_str, value_rest = value.rsplit(':', 1)
            # int() would also accept "+1", " 1" or "1_0"
            if not epoch_str.isascii() or not epoch_str.isdigit():
                raise VersionError(VersionErrorKind.INVALID_EPOCH, value)
            epoch = int(epoch_str)
        else:
            value_rest = value

        debian_revision = None
        if '-' in value_rest:
            value_rest, debian_revision = value_rest.rsplit('-', 1)

        try:
            return cls(epoch, value_rest, debian_revision)
        except VersionError as e:
            raise VersionError(e.kind, value) from None

    @property
    def epoch(self):
        return self._epoch

    @property
    def upstream_version(self):
        return self._upstream_version

    @property
    def debian_revision(self):
        return self._debian_revision

    def is_native(self):
        """Whether the version is a native version, i.e. there is no revision"""
        return self._debian_revision is None

    def has_epoch(self):
        return self._epoch is not None

    def epoch_or_0(self):
        return self._epoch if self._epoch is not None else 0

    def _key(self):
        return (self.epoch_or_0(), self._upstream_version, self._debian_revision)

    def __eq__(self, other):
        if not isinstance(other, PackageVersion):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    def __str__(self):
        version = self._upstream_version
        if self._epoch is not None:
            version = "%d:%s" % (self._epoch, version)
        if self._debian_revision is not None:
            version = "%s-%s" % (version, self._debian_revision)
        return version

    def __repr__(self):
        return "%s(%r)" % (self.__class__.__name__, str(self))
