# Constants shared by the excuses processing

# new-version of an excuses item for a removal
REMOVAL_VERSION = '-'
# old-version of an excuses item for a package not in the target suite
NOT_IN_TARGET_VERSION = '-'

# item-name suffix of proposed-updates requests
PU_ITEM_SUFFIX = '_pu'

# builds signed by the official buildds
BUILDD_SIGNER_SUFFIX = '@buildd.debian.org'

# wanna-build "any architecture" marker
ANY_ARCH = 'ANY'

DEFAULT_NMU_SUITE = 'unstable'
DEFAULT_NMU_MESSAGE = 'Rebuild on buildd'

MULTI_ARCH_SAME = 'same'
