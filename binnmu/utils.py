# -*- coding: utf-8 -*-

# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.

import errno
import gzip
import lzma
import os

from binnmu.consts import ANY_ARCH


def possibly_compressed(path, *, permitted_compressions=None):
    """Find and select a (possibly compressed) variant of a path

    If the given path exists, it will be returned

    :param path The base path.
    :param permitted_compressions An optional list of alternative extensions to look for.
      Defaults to "gz" and "xz".
    :returns The path given possibly with one of the permitted extensions.  Will raise a
     FileNotFoundError
    """
    if os.path.exists(path):
        return path
    if permitted_compressions is None:
        permitted_compressions = ['gz', 'xz']
    for ext in permitted_compressions:
        cpath = "%s.%s" % (path, ext)
        if os.path.exists(cpath):
            return cpath
    raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), path)


def open_possibly_compressed(filename):
    """Open a (possibly compressed) text file for reading

    The compression is determined by the extension (".gz" or ".xz").
    """
    if filename.endswith('.gz'):
        return gzip.open(filename, 'rt', encoding='utf-8')
    if filename.endswith('.xz'):
        return lzma.open(filename, 'rt', encoding='utf-8')
    return open(filename, encoding='utf-8')


def config_str_as_list(value, default_value=None):
    if value is None:
        return default_value
    if isinstance(value, str):
        return value.split()
    return value


def read_config_file(filename, options):
    """Read a "KEY = VALUE" configuration file into an options object

    Keys are lower-cased and set as attributes on options, unless the
    attribute is already set to a true value (e.g. from the command line).
    Lines starting with "#" are ignored.
    """
    with open(filename, encoding='utf-8') as config:
        for line in config:
            if '=' in line and not line.strip().startswith('#'):
                k, v = line.split('=', 1)
                k = k.strip().lower()
                v = v.strip()
                if not getattr(options, k, None):
                    setattr(options, k, v)
    return options


def format_architectures(binnmu):
    if binnmu.any_arch:
        return ANY_ARCH
    return ' '.join(str(arch) for arch in binnmu.architectures)


def format_nmu_command(binnmu, suite, message):
    """Render a binNMU in wanna-build's "nmu" syntax

    e.g. 'nmu foo_1.2-1 . amd64 . unstable . -m "Rebuild on buildd"'
    """
    return 'nmu %s_%s . %s . %s . -m "%s"' % (binnmu.source, binnmu.version, format_architectures(binnmu),
                                             suite, message)


def write_nmu_commands(binnmus, dest_file, suite, message):
    """Write one "nmu" line per binNMU to dest_file"""
    with open(dest_file, 'w', encoding='utf-8') as f:
        for binnmu in binnmus:
            f.write(format_nmu_command(binnmu, suite, message) + "\n")
