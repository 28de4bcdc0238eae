import os

from binnmu import Architecture
from binnmu.excuses import parse_excuses, parse_excuses_item

PROJECT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
TEST_DATA_DIR = os.path.join(PROJECT_DIR, 'tests', 'data')

BUILDD_SIGNER = 'buildd_amd64-x86-ubc-01@buildd.debian.org'
MAINTAINER_SIGNER = 'Random Tester <tester@debian.org>'
GENERATED_DATE = '2022-01-12 14:02:20.515306'


def excuses_item_data(source='foo', new_version='1.2-1', old_version='1.1-1', *,
                      signed_by=None, builtonbuildd_verdict='REJECTED_CANNOT_DETERMINE_IF_PERMANENT',
                      age=None, extra_policies=None, **fields):
    """Build the raw (YAML) data of an excuses item

    By default the item only fails the builtonbuildd policy because of
    binaries on amd64 that were not built on a buildd.

    :param age: Tuple of (age-requirement, current-age) or None for no age policy
    :param extra_policies: Dict mapping a policy name to a verdict name
    :param fields: Additional (or overriding) top-level fields, e.g. component='main'
    """
    if signed_by is None:
        signed_by = {
            'amd64': MAINTAINER_SIGNER,
            'arm64': BUILDD_SIGNER,
        }
    policy_info = {}
    if age is not None:
        age_requirement, current_age = age
        policy_info['age'] = {
            'age-requirement': age_requirement,
            'current-age': current_age,
            'verdict': 'PASS' if current_age >= age_requirement else 'REJECTED_TEMPORARILY',
        }
    if builtonbuildd_verdict is not None:
        policy_info['builtonbuildd'] = {
            'signed-by': signed_by,
            'verdict': builtonbuildd_verdict,
        }
    for policy_name, verdict in (extra_policies or {}).items():
        policy_info[policy_name] = {'verdict': verdict}
    data = {
        'excuses': ['Migration status for %s (%s to %s): BLOCKED' % (source, old_version, new_version)],
        'is-candidate': False,
        'item-name': source,
        'source': source,
        'new-version': new_version,
        'old-version': old_version,
        'migration-policy-verdict': 'REJECTED_CANNOT_DETERMINE_IF_PERMANENT',
        'maintainer': 'Random Tester',
        'reason': [],
        'policy_info': policy_info,
    }
    data.update(fields)
    return data


def create_excuses_item(*args, **kwargs):
    return parse_excuses_item(excuses_item_data(*args, **kwargs))


def create_excuses(*items_data):
    return parse_excuses({
        'generated-date': GENERATED_DATE,
        'sources': list(items_data),
    })


def arch_list(*names):
    return tuple(Architecture(name) for name in names)
