import logging
import lzma
import os

from debian._deb822_repro import parse_deb822_file

from binnmu.consts import MULTI_ARCH_SAME
from binnmu.utils import possibly_compressed, open_possibly_compressed


class PackagesParseError(ValueError):
    pass


def source_name_of(paragraph):
    """Determine the source package name of a binary package paragraph

    The Source field may carry a version annotation ("foo (1.2-1)"), in
    which case only the name is returned.  Without a Source field, the
    source has the same name as the binary package.
    """
    source_raw = paragraph.get('Source')
    if source_raw and source_raw.split():
        return source_raw.split()[0]
    return paragraph['Package'].strip()


class MultiArchSameSources(object):
    """Source packages that build Multi-Arch: same binaries

    Binaries of such source packages have to be in sync across all
    architectures, so rebuilding on any single architecture is sufficient
    to fix all of them.
    """

    def __init__(self, sources=()):
        self._sources = frozenset(sources)

    @classmethod
    def from_files(cls, filenames):
        """Build the set from a number of Packages files

        :param filenames: Paths to Packages files (possibly gz or xz compressed)
        :return: A MultiArchSameSources; raises PackagesParseError if any of the
          files cannot be read
        """
        ma_same_sources = set()
        for filename in filenames:
            ma_same_sources |= read_packages_file(filename)
        return cls(ma_same_sources)

    @classmethod
    def from_directory(cls, basedir, architectures):
        """Build the set from the Packages_${arch} files in basedir"""
        filenames = []
        for arch in architectures:
            filename = os.path.join(basedir, "Packages_%s" % arch)
            try:
                filenames.append(possibly_compressed(filename))
            except FileNotFoundError as e:
                raise PackagesParseError("Missing Packages file for %s: %s" % (arch, e)) from e
        return cls.from_files(filenames)

    @property
    def sources(self):
        return self._sources

    def is_ma_same(self, source_name):
        return source_name in self._sources

    def __contains__(self, source_name):
        return source_name in self._sources

    def __len__(self):
        return len(self._sources)


def read_packages_file(filename):
    """Collect the sources of Multi-Arch: same binaries from one Packages file

    The file is parsed strictly: lines that are not part of a field and
    duplicated fields make the whole file invalid.

    :param filename: Path to the Packages file.  Can be compressed with gzip or xz.
    :return: A set of source package names
    """
    logger = logging.getLogger(__name__)
    logger.info("Loading binary packages from %s", filename)
    try:
        with open_possibly_compressed(filename) as fd:
            deb822_file = parse_deb822_file(fd,
                                            accept_files_with_error_tokens=False,
                                            accept_files_with_duplicated_fields=False,
                                            )
    except (OSError, ValueError, EOFError, lzma.LZMAError) as e:
        # SyntaxOrParseError and UnicodeDecodeError are both ValueErrors
        raise PackagesParseError("%s: %s" % (filename, e)) from e

    ma_same_sources = set()
    count = 0
    for paragraph in deb822_file:
        count += 1
        if 'Package' not in paragraph:
            raise PackagesParseError("%s: paragraph %d has no Package field" % (filename, count))
        if paragraph.get('Multi-Arch', '').strip() == MULTI_ARCH_SAME:
            ma_same_sources.add(source_name_of(paragraph))
    logger.info("> %d binary packages, %d sources with Multi-Arch: same binaries", count, len(ma_same_sources))
    return ma_same_sources
