from enum import Enum, unique


@unique
class PolicyVerdict(Enum):
    """"""
    """
    The migration item passed the policy.
    """
    PASS = 1
    """
    The policy was completely overruled by a hint.
    """
    PASS_HINTED = 2
    """
    The migration item did not pass the policy, but the failure is believed
    to be temporary
    """
    REJECTED_TEMPORARILY = 3
    """
    The migration item needs approval to migrate
    """
    REJECTED_NEEDS_APPROVAL = 6
    """
    The migration item is blocked, but there is not enough information to determine
    if this issue is permanent or temporary
    """
    REJECTED_CANNOT_DETERMINE_IF_PERMANENT = 7
    """
    The migration item did not pass the policy and the failure is believed
    to be uncorrectable (i.e. a hint or a new version is needed)
    """
    REJECTED_PERMANENTLY = 8

    @property
    def is_pass(self):
        """Whether the policy passed on its own (a hint does not count)"""
        return self is PolicyVerdict.PASS

    @classmethod
    def from_name(cls, name):
        """Look up a verdict by the name used in excuses.yaml

        :param name: e.g. "PASS" or "REJECTED_PERMANENTLY"
        :return: The matching PolicyVerdict; raises ValueError for unknown names
        """
        try:
            return cls[name]
        except KeyError:
            raise ValueError("Unknown policy verdict %r" % (name,)) from None
