# -*- coding: utf-8 -*-

# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.

import logging
from collections import Counter

from binnmu import BinNMU, Component
from binnmu.consts import (REMOVAL_VERSION, NOT_IN_TARGET_VERSION, PU_ITEM_SUFFIX,
                           BUILDD_SIGNER_SUFFIX)
from binnmu.version import PackageVersion, VersionError


def check_if_binnmu_required(policy_info):
    """Check whether a binNMU would help the item to migrate

    :param policy_info: The PolicyInfo of an excuses item
    :return: True if the item is only blocked by binaries not built on a buildd
    """
    builtonbuildd = policy_info.builtonbuildd
    if builtonbuildd is None or builtonbuildd.verdict.is_pass:
        # nothing to do
        return False

    age = policy_info.age
    if age is not None:
        if age.current_age < min(age.age_requirement // 2, age.age_requirement - 1):
            # too young
            return False

    # if the others do not pass, it would not migrate even if binNMUed
    return all(info.verdict.is_pass for info in policy_info.extras.values())


def is_official_buildd_signer(signer):
    return signer is not None and signer.endswith(BUILDD_SIGNER_SUFFIX)


def architectures_to_binnmu(builtonbuildd):
    """Architectures whose binaries were not signed by a buildd

    The order of the signed-by mapping is kept.
    """
    return tuple(arch for arch, signer in builtonbuildd.signed_by.items()
                 if not is_official_buildd_signer(signer))


class BinNMUFinder(object):
    """Find excuses items that only need a binNMU to migrate

    An item qualifies if its binaries on some architectures were not
    built by the buildds (e.g. maintainer uploads of binaries) and every
    other policy already passed.  For source packages with Multi-Arch: same
    binaries, the binNMU may be scheduled on any architecture.
    """

    def __init__(self, ma_same_sources):
        """
        :param ma_same_sources: Anything supporting "in" for source names, usually
          a MultiArchSameSources instance
        """
        self._ma_same_sources = ma_same_sources
        self.skipped = Counter()
        logger_name = ".".join((self.__class__.__module__, self.__class__.__name__))
        self.logger = logging.getLogger(logger_name)

    def _skip(self, item, reason):
        self.logger.debug("Skipping %s: %s", item.item_name, reason)
        self.skipped[reason] += 1
        return None

    def _versions_equal(self, item):
        if item.old_version == NOT_IN_TARGET_VERSION:
            return False
        new_version = PackageVersion.from_string(item.new_version)
        old_version = PackageVersion.from_string(item.old_version)
        return new_version == old_version

    def check_item(self, item):
        """Check a single excuses item

        :param item: An ExcusesItem
        :return: A BinNMU or None if the item does not need (or cannot get) one
        """
        if item.new_version == REMOVAL_VERSION:
            return self._skip(item, 'removal')
        try:
            if self._versions_equal(item):
                # the item is a binNMU already
                return self._skip(item, 'binnmu')
        except VersionError as e:
            self.logger.warning("Skipping %s: %s", item.item_name, e)
            self.skipped['invalid version'] += 1
            return None
        if item.item_name.endswith(PU_ITEM_SUFFIX):
            return self._skip(item, 'proposed-updates request')
        if item.component not in (None, Component.MAIN):
            return self._skip(item, 'not in main')
        if item.invalidated_by_other_package:
            return self._skip(item, 'blocked by another package')
        if item.missing_builds is not None:
            return self._skip(item, 'missing builds')
        if item.policy_info is None:
            return self._skip(item, 'no policy info')
        if not check_if_binnmu_required(item.policy_info):
            return self._skip(item, 'binnmu not required')

        archs = architectures_to_binnmu(item.policy_info.builtonbuildd)
        if any(arch.is_arch_indep for arch in archs):
            # cannot binNMU arch:all
            return self._skip(item, 'arch:all not built on buildd')
        if not archs:
            return self._skip(item, 'all binaries built on buildd')

        any_arch = item.source in self._ma_same_sources
        return BinNMU(item.source, item.new_version, archs, any_arch)

    def find_binnmus(self, excuses):
        """Find all items needing a binNMU

        :param excuses: An Excuses object
        :return: A list of BinNMU in the order of the excuses
        """
        self.skipped.clear()
        binnmus = []
        for item in excuses.sources:
            binnmu = self.check_item(item)
            if binnmu is not None:
                binnmus.append(binnmu)

        self.logger.info("Found %d binNMUs in %d excuses", len(binnmus), len(excuses.sources))
        for reason, count in sorted(self.skipped.items()):
            self.logger.info("> skipped %d: %s", count, reason)
        return binnmus
