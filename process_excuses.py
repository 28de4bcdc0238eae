#!/usr/bin/python3 -u
# -*- coding: utf-8 -*-

# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.

"""
= Introduction =

Find packages in unstable that only need a binNMU to migrate to testing.

Britney refuses to migrate packages whose binaries were not built on the
official buildds (e.g. binaries from maintainer uploads).  Such packages
are listed in excuses.yaml with a failing "builtonbuildd" policy.  If that
is the only policy keeping the package out of testing, a binNMU is enough
to get it moving again.

This script reads excuses.yaml and the Packages files of unstable and
prints one wanna-build "nmu" command per package that needs a binNMU.

= Inputs =

 * EXCUSES: the excuses.yaml written by britney.
 * PACKAGES_DIR: a directory with one Packages_${arch} file (optionally
   compressed with gzip or xz) per architecture in ARCHITECTURES.  These
   are used to find source packages with Multi-Arch: same binaries, which
   can be binNMUed on any architecture.

Fetching these files is left to the caller (e.g. a cron job).
"""
import logging
import optparse
import os
import sys

from binnmu import RELEASE_ARCHITECTURES, Architecture
from binnmu.binnmufinder import BinNMUFinder
from binnmu.consts import DEFAULT_NMU_SUITE, DEFAULT_NMU_MESSAGE
from binnmu.excuses import ExcusesParseError, from_file as read_excuses_file
from binnmu.inputs.packagesloader import MultiArchSameSources, PackagesParseError
from binnmu.utils import config_str_as_list, format_nmu_command, read_config_file, write_nmu_commands

__version__ = '0.1'

DEFAULT_CONFIG = '/etc/binnmu-excuses.conf'


class MissingRequiredConfigurationError(RuntimeError):
    pass


def setup_logging():
    # provide the "short level name" (i.e. INFO -> I) in log records
    old_factory = logging.getLogRecordFactory()
    short_level_mapping = {
        'CRITICAL': 'F',
        'INFO': 'I',
        'WARNING': 'W',
        'ERROR': 'E',
        'DEBUG': 'N',
    }

    def record_factory(*args, **kwargs):   # pragma: no cover
        record = old_factory(*args, **kwargs)
        try:
            record.shortlevelname = short_level_mapping[record.levelname]
        except KeyError:
            record.shortlevelname = record.levelname
        return record

    logging.setLogRecordFactory(record_factory)
    # stdout is reserved for the nmu commands
    logging.basicConfig(format='{shortlevelname}: [{asctime}] - {message}',
                        style='{',
                        datefmt="%Y-%m-%dT%H:%M:%S%z",
                        stream=sys.stderr,
                        )


class ProcessExcuses(object):
    """Print binNMUs needed for packages to migrate"""

    def __init__(self, args=None, stdout=None):
        self.logger = logging.getLogger()
        self.stdout = stdout if stdout is not None else sys.stdout
        self.options = None
        self.__parse_arguments(args)

    def __parse_arguments(self, args):
        """Parse the command line arguments and the configuration file"""
        parser = optparse.OptionParser(version="%prog " + __version__)
        parser.add_option("-v", "", action="count", dest="verbose", help="enable verbose output")
        parser.add_option("-c", "--config", action="store", dest="config", default=DEFAULT_CONFIG,
                          help="path for the configuration file")
        parser.add_option("", "--excuses", action="store", dest="excuses", default=None,
                          help="path to excuses.yaml")
        parser.add_option("", "--packages-dir", action="store", dest="packages_dir", default=None,
                          help="directory with the Packages_${arch} files")
        parser.add_option("", "--architectures", action="store", dest="architectures", default=None,
                          help="override architectures from configuration file")
        parser.add_option("", "--suite", action="store", dest="nmu_suite", default=None,
                          help="suite used in the nmu commands")
        parser.add_option("", "--message", action="store", dest="nmu_message", default=None,
                          help="reason used in the nmu commands")
        parser.add_option("", "--output", action="store", dest="output", default=None,
                          help="also write the nmu commands to this file")
        parser.add_option("", "--dry-run", action="store_true", dest="dry_run", default=False,
                          help="only log the number of binNMUs, do not print them")
        (self.options, _) = parser.parse_args(args)

        if self.options.verbose:
            self.logger.setLevel(logging.INFO)
        else:
            self.logger.setLevel(logging.WARNING)
        try:  # pragma: no cover
            if int(os.environ.get('BINNMU_DEBUG', '0')):
                self.logger.setLevel(logging.DEBUG)
        except ValueError:  # pragma: no cover
            pass

        if os.path.isfile(self.options.config):
            self.logger.info("Reading configuration from %s", self.options.config)
            read_config_file(self.options.config, self.options)
        elif self.options.config != DEFAULT_CONFIG:
            raise MissingRequiredConfigurationError("Unable to read the configuration file (%s)" %
                                                    self.options.config)

        for key in ('excuses', 'packages_dir'):
            if not getattr(self.options, key, None):
                raise MissingRequiredConfigurationError("Configuration %s is not set in the config "
                                                        "(and not given on the command line)" % key.upper())

        if not self.options.nmu_suite:
            self.options.nmu_suite = DEFAULT_NMU_SUITE
        if not self.options.nmu_message:
            self.options.nmu_message = DEFAULT_NMU_MESSAGE

        architectures = config_str_as_list(self.options.architectures)
        if architectures is None:
            self.options.architectures = list(RELEASE_ARCHITECTURES)
        else:
            try:
                self.options.architectures = [Architecture(arch) for arch in architectures]
            except ValueError as e:
                raise MissingRequiredConfigurationError("Invalid ARCHITECTURES: %s" % e) from e
            if Architecture.ALL in self.options.architectures:
                raise MissingRequiredConfigurationError("Invalid ARCHITECTURES: there is no Packages file for all")

    def find_binnmus(self):
        ma_same_sources = MultiArchSameSources.from_directory(self.options.packages_dir,
                                                              self.options.architectures)
        self.logger.info("Found %d sources with Multi-Arch: same binaries", len(ma_same_sources))
        excuses = read_excuses_file(self.options.excuses)
        return BinNMUFinder(ma_same_sources).find_binnmus(excuses)

    def main(self):
        binnmus = self.find_binnmus()

        if self.options.dry_run:
            self.logger.info("Dry-run: not printing %d nmu commands", len(binnmus))
            return binnmus

        for binnmu in binnmus:
            print(format_nmu_command(binnmu, self.options.nmu_suite, self.options.nmu_message),
                  file=self.stdout)
        if self.options.output:
            self.logger.info("Writing nmu commands to %s", self.options.output)
            write_nmu_commands(binnmus, self.options.output, self.options.nmu_suite, self.options.nmu_message)
        return binnmus


def main(args=None):
    setup_logging()
    logger = logging.getLogger()
    try:
        ProcessExcuses(args).main()
    except MissingRequiredConfigurationError as e:
        logger.error("%s", e)
        return 1
    except (ExcusesParseError, PackagesParseError) as e:
        logger.error("Could not load the input data: %s", e)
        return 1
    except OSError as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == '__main__':
    status = main()
    logging.shutdown()
    sys.exit(status)
