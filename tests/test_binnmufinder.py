import os
import unittest

from binnmu import Architecture, BinNMU
from binnmu.binnmufinder import (BinNMUFinder, architectures_to_binnmu, check_if_binnmu_required,
                                 is_official_buildd_signer)
from binnmu.excuses import from_file
from binnmu.inputs.packagesloader import MultiArchSameSources
from binnmu.utils import format_nmu_command

from . import (BUILDD_SIGNER, MAINTAINER_SIGNER, TEST_DATA_DIR, arch_list, create_excuses,
               create_excuses_item, excuses_item_data)

SUITE = 'unstable'
MESSAGE = 'Rebuild on buildd'


def find_binnmus(*items_data, ma_same=()):
    finder = BinNMUFinder(MultiArchSameSources(ma_same))
    return finder.find_binnmus(create_excuses(*items_data))


class TestCheckIfBinNMURequired(unittest.TestCase):

    def test_required(self):
        item = create_excuses_item()
        assert check_if_binnmu_required(item.policy_info)

    def test_builtonbuildd_passed(self):
        item = create_excuses_item(builtonbuildd_verdict='PASS')
        assert not check_if_binnmu_required(item.policy_info)

    def test_builtonbuildd_missing(self):
        item = create_excuses_item(builtonbuildd_verdict=None, extra_policies={'rc-bugs': 'PASS'})
        assert item.policy_info.builtonbuildd is None
        assert not check_if_binnmu_required(item.policy_info)

    def test_age_boundary(self):
        # threshold is min(10 // 2, 10 - 1) == 5
        assert not check_if_binnmu_required(create_excuses_item(age=(10, 4)).policy_info)
        assert check_if_binnmu_required(create_excuses_item(age=(10, 5)).policy_info)

    def test_age_small_requirements(self):
        # min(1 // 2, 0) == 0
        assert check_if_binnmu_required(create_excuses_item(age=(1, 0)).policy_info)
        # min(3 // 2, 2) == 1
        assert not check_if_binnmu_required(create_excuses_item(age=(3, 0)).policy_info)
        assert check_if_binnmu_required(create_excuses_item(age=(3, 1)).policy_info)
        assert check_if_binnmu_required(create_excuses_item(age=(0, 0)).policy_info)

    def test_other_policies_pass(self):
        item = create_excuses_item(extra_policies={'rc-bugs': 'PASS', 'depends': 'PASS', 'autopkgtest': 'PASS'})
        assert check_if_binnmu_required(item.policy_info)

    def test_other_policy_rejected(self):
        item = create_excuses_item(extra_policies={'rc-bugs': 'PASS', 'autopkgtest': 'REJECTED_TEMPORARILY'})
        assert not check_if_binnmu_required(item.policy_info)

    def test_other_policy_hinted(self):
        # only a real PASS counts
        item = create_excuses_item(extra_policies={'block': 'PASS_HINTED'})
        assert not check_if_binnmu_required(item.policy_info)


class TestArchitectures(unittest.TestCase):

    def test_official_signer(self):
        assert is_official_buildd_signer(BUILDD_SIGNER)
        assert not is_official_buildd_signer(MAINTAINER_SIGNER)
        assert not is_official_buildd_signer(None)
        assert not is_official_buildd_signer('buildd@buildd.debian.org.evil.example')

    def test_architectures_to_binnmu(self):
        item = create_excuses_item(signed_by={
            'i386': MAINTAINER_SIGNER,
            'amd64': BUILDD_SIGNER,
            'armel': None,
            'arm64': MAINTAINER_SIGNER,
        })
        assert architectures_to_binnmu(item.policy_info.builtonbuildd) == arch_list('i386', 'armel', 'arm64')


class TestBinNMUFinder(unittest.TestCase):

    def test_end_to_end(self):
        item = excuses_item_data('foo', '1.2-1', '1.1-1', component='main', signed_by={
            'amd64': 'unofficial',
            'arm64': 'buildd@buildd.debian.org',
        })
        binnmus = find_binnmus(item)
        assert binnmus == [BinNMU('foo', '1.2-1', arch_list('amd64'), False)]
        assert format_nmu_command(binnmus[0], SUITE, MESSAGE) == \
            'nmu foo_1.2-1 . amd64 . unstable . -m "Rebuild on buildd"'

    def test_end_to_end_ma_same(self):
        item = excuses_item_data('foo', '1.2-1', '1.1-1', component='main', signed_by={
            'amd64': 'unofficial',
            'arm64': 'buildd@buildd.debian.org',
        })
        binnmus = find_binnmus(item, ma_same={'foo'})
        assert binnmus == [BinNMU('foo', '1.2-1', arch_list('amd64'), True)]
        assert format_nmu_command(binnmus[0], SUITE, MESSAGE) == \
            'nmu foo_1.2-1 . ANY . unstable . -m "Rebuild on buildd"'

    def test_removal(self):
        assert find_binnmus(excuses_item_data('foo', '-', '1.0-1', **{'item-name': '-foo'})) == []

    def test_same_version(self):
        assert find_binnmus(excuses_item_data('foo', '1.0-1', '1.0-1', **{'item-name': 'foo/amd64'})) == []
        assert find_binnmus(excuses_item_data('foo', '1.0-1', '0:1.0-1')) == []

    def test_new_package(self):
        binnmus = find_binnmus(excuses_item_data('foo', '1.0-1', '-'))
        assert [b.source for b in binnmus] == ['foo']

    def test_invalid_version(self):
        finder = BinNMUFinder(MultiArchSameSources())
        excuses = create_excuses(excuses_item_data('foo', '1.0_1', '1.0-1'), excuses_item_data('bar'))
        binnmus = finder.find_binnmus(excuses)
        assert [b.source for b in binnmus] == ['bar']
        assert finder.skipped['invalid version'] == 1

    def test_proposed_updates(self):
        assert find_binnmus(excuses_item_data(**{'item-name': 'foo_pu'})) == []

    def test_components(self):
        assert len(find_binnmus(excuses_item_data(component='main'))) == 1
        assert len(find_binnmus(excuses_item_data())) == 1
        assert find_binnmus(excuses_item_data(component='contrib')) == []
        assert find_binnmus(excuses_item_data(component='non-free')) == []

    def test_blocked_by_other_package(self):
        assert find_binnmus(excuses_item_data(**{'invalidated-by-other-package': True})) == []
        assert len(find_binnmus(excuses_item_data(**{'invalidated-by-other-package': False}))) == 1

    def test_missing_builds(self):
        item = excuses_item_data(**{'missing-builds': {'on-architectures': ['armel']}})
        assert find_binnmus(item) == []

    def test_no_policy_info(self):
        item = excuses_item_data()
        del item['policy_info']
        assert find_binnmus(item) == []

    def test_arch_all_not_built_on_buildd(self):
        item = excuses_item_data(signed_by={
            'all': MAINTAINER_SIGNER,
            'amd64': MAINTAINER_SIGNER,
            'arm64': BUILDD_SIGNER,
        })
        assert find_binnmus(item) == []
        # even if everything else was built on a buildd or the package is Multi-Arch: same
        item = excuses_item_data(signed_by={'all': MAINTAINER_SIGNER, 'amd64': BUILDD_SIGNER})
        assert find_binnmus(item, ma_same={'foo'}) == []

    def test_arch_all_built_on_buildd(self):
        item = excuses_item_data(signed_by={
            'all': BUILDD_SIGNER,
            'amd64': MAINTAINER_SIGNER,
        })
        assert find_binnmus(item) == [BinNMU('foo', '1.2-1', arch_list('amd64'), False)]

    def test_everything_built_on_buildd(self):
        item = excuses_item_data(signed_by={'amd64': BUILDD_SIGNER})
        assert find_binnmus(item) == []

    def test_signer_order(self):
        item = excuses_item_data(signed_by={
            's390x': MAINTAINER_SIGNER,
            'amd64': MAINTAINER_SIGNER,
            'armhf': None,
        })
        binnmus = find_binnmus(item)
        assert format_nmu_command(binnmus[0], SUITE, MESSAGE) == \
            'nmu foo_1.2-1 . s390x amd64 armhf . unstable . -m "Rebuild on buildd"'

    def test_order_is_kept(self):
        items = [excuses_item_data(source) for source in ('zzz', 'aaa', 'mmm')]
        assert [b.source for b in find_binnmus(*items)] == ['zzz', 'aaa', 'mmm']

    def test_epoch_version_in_command(self):
        binnmus = find_binnmus(excuses_item_data('foo', '1:2.0-1', '1:1.0-1'))
        assert format_nmu_command(binnmus[0], 'experimental', 'Test') == \
            'nmu foo_1:2.0-1 . amd64 . experimental . -m "Test"'

    def test_excuses_file(self):
        excuses = from_file(os.path.join(TEST_DATA_DIR, 'excuses.yaml'))
        finder = BinNMUFinder(MultiArchSameSources({'bar', 'qux', 'plugh'}))
        binnmus = finder.find_binnmus(excuses)
        assert binnmus == [
            BinNMU('foo', '1.2-1', arch_list('amd64'), False),
            BinNMU('bar', '3.0-2', arch_list('amd64', 'i386'), True),
            BinNMU('thud', '0.1-1', (Architecture.S390X, Architecture.ARMHF), False),
        ]
        assert finder.skipped['removal'] == 1
        assert finder.skipped['binnmu'] == 1
        assert finder.skipped['proposed-updates request'] == 1
        assert finder.skipped['not in main'] == 1
        assert finder.skipped['blocked by another package'] == 1
        assert finder.skipped['missing builds'] == 1
        assert finder.skipped['arch:all not built on buildd'] == 1
        # fred (too young), plugh (autopkgtest) and xyzzy (built on buildd)
        assert finder.skipped['binnmu not required'] == 3


if __name__ == '__main__':
    unittest.main()
