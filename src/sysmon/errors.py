"""Error types raised by the sysmon sampling engine."""


class SysmonError(Exception):
    """Base class for hard failures reported to the caller."""


class UnavailableError(SysmonError):
    """The aggregate CPU statistics source could not be opened."""


class ParseError(SysmonError):
    """A statistics record did not have the expected shape."""


class EnumerationError(SysmonError):
    """The process registry itself could not be listed."""


class SamplingCancelled(SysmonError):
    """A sampling window was interrupted before the second capture."""
