from collections import namedtuple
from enum import Enum, unique


@unique
class Architecture(Enum):

    ALL = 'all'
    AMD64 = 'amd64'
    ARM64 = 'arm64'
    ARMEL = 'armel'
    ARMHF = 'armhf'
    I386 = 'i386'
    MIPS64EL = 'mips64el'
    MIPSEL = 'mipsel'
    PPC64EL = 'ppc64el'
    S390X = 's390x'

    def __str__(self):
        return self.value

    @property
    def is_arch_indep(self):
        return self is Architecture.ALL


# Architectures with their own Packages file (i.e. everything but "all")
RELEASE_ARCHITECTURES = (
    Architecture.AMD64,
    Architecture.ARM64,
    Architecture.ARMEL,
    Architecture.ARMHF,
    Architecture.I386,
    Architecture.PPC64EL,
    Architecture.MIPSEL,
    Architecture.MIPS64EL,
    Architecture.S390X,
)


@unique
class Component(Enum):

    MAIN = 'main'
    CONTRIB = 'contrib'
    NON_FREE = 'non-free'

    def __str__(self):
        return self.value


BinNMU = namedtuple('BinNMU', [
    'source',
    'version',
    'architectures',
    'any_arch',
])
