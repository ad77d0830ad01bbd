class ConquestError(Exception):
    """Base class for rules-engine errors."""


class PolicyExhaustedError(ConquestError):
    """The automated policy found no eligible territory for an action it had already chosen."""
