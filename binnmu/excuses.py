# -*- coding: utf-8 -*-

# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.

"""Typed view of the excuses.yaml file written by britney

Only the fields needed to decide about binNMUs are loaded.  Unknown keys
are ignored and policies without dedicated support are kept as
UnspecifiedPolicyInfo in PolicyInfo.extras.
"""

import logging
from collections import namedtuple
from datetime import datetime

import yaml

from binnmu import Architecture, Component
from binnmu.policies import PolicyVerdict

# The C loader is much faster on the ~30MB excuses.yaml from Debian
SafeLoader = getattr(yaml, 'CSafeLoader', yaml.SafeLoader)

DATE_FORMATS = ('%Y-%m-%d %H:%M:%S.%f', '%Y-%m-%d %H:%M:%S')

AGE_POLICY = 'age'
BUILTONBUILDD_POLICY = 'builtonbuildd'

logger = logging.getLogger(__name__)


class ExcusesParseError(ValueError):
    pass


Excuses = namedtuple('Excuses', [
    'generated_date',
    'sources',
])

ExcusesItem = namedtuple('ExcusesItem', [
    'source',
    'item_name',
    'new_version',
    'old_version',
    'is_candidate',
    'invalidated_by_other_package',
    'component',
    'missing_builds',
    'policy_info',
    'maintainer',
    'migration_policy_verdict',
    'excuses',
])

PolicyInfo = namedtuple('PolicyInfo', [
    'age',
    'builtonbuildd',
    'extras',
])

AgeInfo = namedtuple('AgeInfo', [
    'age_requirement',
    'current_age',
    'verdict',
])

BuiltOnBuildd = namedtuple('BuiltOnBuildd', [
    'signed_by',
    'verdict',
])

UnspecifiedPolicyInfo = namedtuple('UnspecifiedPolicyInfo', [
    'verdict',
])

MissingBuilds = namedtuple('MissingBuilds', [
    'on_architectures',
    'on_unimportant_architectures',
])


def _require(data, key, types, where):
    try:
        value = data[key]
    except KeyError:
        raise ExcusesParseError("%s: missing required field %r" % (where, key)) from None
    if not isinstance(value, types):
        raise ExcusesParseError("%s: field %r has unexpected type %s" % (where, key, type(value).__name__))
    return value


def _optional(data, key, types, where):
    value = data.get(key)
    if value is not None and not isinstance(value, types):
        raise ExcusesParseError("%s: field %r has unexpected type %s" % (where, key, type(value).__name__))
    return value


def _parse_enum(enum_class, value, where):
    if not isinstance(value, str):
        raise ExcusesParseError("%s: expected a string, got %s" % (where, type(value).__name__))
    try:
        if enum_class is PolicyVerdict:
            return PolicyVerdict.from_name(value)
        return enum_class(value)
    except ValueError as e:
        raise ExcusesParseError("%s: %s" % (where, e)) from e


def _parse_version(data, key, where):
    # YAML turns an unquoted version like "2" into an int, which str() restores.
    # A float cannot be restored ("1.10" is loaded as 1.1), so it is rejected.
    value = _require(data, key, (str, int), where)
    if isinstance(value, bool):
        raise ExcusesParseError("%s: field %r has unexpected type bool" % (where, key))
    return str(value)


def _parse_int(data, key, where):
    value = _require(data, key, int, where)
    if isinstance(value, bool) or value < 0:
        raise ExcusesParseError("%s: field %r must be a non-negative integer" % (where, key))
    return value


def _parse_generated_date(value):
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        for fmt in DATE_FORMATS:
            try:
                return datetime.strptime(value, fmt)
            except ValueError:
                continue
    raise ExcusesParseError("generated-date: cannot parse %r as a date" % (value,))


def parse_age_info(data, where):
    where = '%s/age' % where
    return AgeInfo(
        _parse_int(data, 'age-requirement', where),
        _parse_int(data, 'current-age', where),
        _parse_enum(PolicyVerdict, _require(data, 'verdict', str, where), where),
    )


def parse_builtonbuildd(data, where):
    where = '%s/builtonbuildd' % where
    signed_by = {}
    for arch, signer in _require(data, 'signed-by', dict, where).items():
        if signer is not None and not isinstance(signer, str):
            raise ExcusesParseError("%s: signer for %s is not a string" % (where, arch))
        signed_by[_parse_enum(Architecture, arch, where)] = signer
    return BuiltOnBuildd(
        signed_by,
        _parse_enum(PolicyVerdict, _require(data, 'verdict', str, where), where),
    )


def parse_policy_info(data, where):
    """Parse the policy_info mapping of an excuses item

    The age and builtonbuildd policies are parsed into dedicated records,
    every other policy is reduced to its verdict.
    """
    age = None
    builtonbuildd = None
    extras = {}
    for policy_name, pinfo in data.items():
        if not isinstance(pinfo, dict):
            raise ExcusesParseError("%s: policy %r is not a mapping" % (where, policy_name))
        if policy_name == AGE_POLICY:
            age = parse_age_info(pinfo, where)
        elif policy_name == BUILTONBUILDD_POLICY:
            builtonbuildd = parse_builtonbuildd(pinfo, where)
        else:
            pwhere = '%s/%s' % (where, policy_name)
            verdict = _parse_enum(PolicyVerdict, _require(pinfo, 'verdict', str, pwhere), pwhere)
            extras[str(policy_name)] = UnspecifiedPolicyInfo(verdict)
    return PolicyInfo(age, builtonbuildd, extras)


def parse_missing_builds(data, where):
    where = '%s/missing-builds' % where
    on_architectures = [_parse_enum(Architecture, arch, where)
                        for arch in _optional(data, 'on-architectures', list, where) or []]
    # britney lists out-of-sync architectures here, which need not be release architectures
    on_unimportant = [str(arch) for arch in _optional(data, 'on-unimportant-architectures', list, where) or []]
    return MissingBuilds(on_architectures, on_unimportant)


def parse_excuses_item(data, index=None):
    """Build an ExcusesItem from one entry of the "sources" list

    :param data: The mapping as loaded from YAML
    :param index: Position of the entry (only used in error messages)
    :return: An ExcusesItem; raises ExcusesParseError for malformed entries
    """
    if not isinstance(data, dict):
        raise ExcusesParseError("sources[%s]: entry is not a mapping" % index)
    where = 'sources[%s]' % index
    if isinstance(data.get('item-name'), str):
        where = '%s (%s)' % (where, data['item-name'])

    component = _optional(data, 'component', str, where)
    if component is not None:
        component = _parse_enum(Component, component, where)

    missing_builds = _optional(data, 'missing-builds', dict, where)
    if missing_builds is not None:
        missing_builds = parse_missing_builds(missing_builds, where)

    policy_info = _optional(data, 'policy_info', dict, where)
    if policy_info is not None:
        policy_info = parse_policy_info(policy_info, '%s/policy_info' % where)

    migration_policy_verdict = _optional(data, 'migration-policy-verdict', str, where)
    if migration_policy_verdict is not None:
        migration_policy_verdict = _parse_enum(PolicyVerdict, migration_policy_verdict, where)

    return ExcusesItem(
        source=_require(data, 'source', str, where),
        item_name=_require(data, 'item-name', str, where),
        new_version=_parse_version(data, 'new-version', where),
        old_version=_parse_version(data, 'old-version', where),
        is_candidate=_require(data, 'is-candidate', bool, where),
        invalidated_by_other_package=_optional(data, 'invalidated-by-other-package', bool, where),
        component=component,
        missing_builds=missing_builds,
        policy_info=policy_info,
        maintainer=_optional(data, 'maintainer', str, where),
        migration_policy_verdict=migration_policy_verdict,
        excuses=[str(x) for x in _optional(data, 'excuses', list, where) or []],
    )


def parse_excuses(data):
    """Build Excuses from the already loaded YAML document"""
    if not isinstance(data, dict):
        raise ExcusesParseError("excuses document is not a mapping")
    if 'generated-date' not in data:
        raise ExcusesParseError("missing required field 'generated-date'")
    generated_date = _parse_generated_date(data['generated-date'])
    sources = _require(data, 'sources', list, 'excuses')
    return Excuses(generated_date, [parse_excuses_item(item, idx) for idx, item in enumerate(sources)])


def from_str(text):
    """Read excuses from a string"""
    try:
        data = yaml.load(text, Loader=SafeLoader)
    except yaml.YAMLError as e:
        raise ExcusesParseError("excuses are not valid YAML: %s" % e) from e
    return parse_excuses(data)


def from_reader(stream):
    """Read excuses from a file object"""
    return from_str(stream.read())


def from_file(filename):
    """Read excuses from a file

    :param filename: Path to excuses.yaml
    :return: Excuses; raises ExcusesParseError naming the file if it is malformed
    """
    logger.info("Loading excuses from %s", filename)
    try:
        with open(filename, encoding='utf-8') as fd:
            excuses = from_reader(fd)
    except ExcusesParseError as e:
        raise ExcusesParseError("%s: %s" % (filename, e)) from e
    except UnicodeDecodeError as e:
        raise ExcusesParseError("%s: %s" % (filename, e)) from e
    logger.info("Loaded %d excuses items (generated %s)", len(excuses.sources), excuses.generated_date)
    return excuses
