class LaunchpadError(ValueError):
    """Base class for every rejection raised by the launchpad core."""


# Precondition violations: rejected before any mutation, caller may correct and retry.
class PreconditionError(LaunchpadError):
    pass


class PlatformPaused(PreconditionError):
    pass


class PoolPaused(PreconditionError):
    pass


class PoolGraduated(PreconditionError):
    pass


class ReentrancyDetected(PreconditionError):
    pass


class ZeroAmount(PreconditionError):
    pass


class FeeTooHigh(PreconditionError):
    pass


class InsufficientPayment(PreconditionError):
    pass


class InsufficientTokens(PreconditionError):
    pass


class InsufficientReserve(PreconditionError):
    pass


class AuthorityAlreadyMinted(PreconditionError):
    pass


class AuthorityRevoked(PreconditionError):
    pass


class NotPaused(PreconditionError):
    pass


class NotGraduated(PreconditionError):
    pass


class AlreadyGraduated(PreconditionError):
    pass


class GraduationNotReady(PreconditionError):
    pass


class InvalidConfig(PreconditionError):
    pass


# Math-domain failures: misconfigured curve or out-of-range trade. Never clamped.
class MathError(LaunchpadError):
    pass


class MathOverflow(MathError):
    pass


class DivisionByZero(MathError):
    pass


class InvalidInput(MathError):
    pass


class SlippageExceeded(LaunchpadError):
    """Expected and recoverable: adjust the bound and resubmit."""


class Unauthorized(LaunchpadError):
    """Caller does not hold the capability required by the operation."""
