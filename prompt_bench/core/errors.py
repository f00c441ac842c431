"""
Error taxonomy for submissions and cost estimation.

Submission errors are captured by the controller and turned into display
strings. Configuration errors propagate to the caller.
"""


class SubmissionError(Exception):
    """Base class for failures captured at the submission controller."""


class TransportError(SubmissionError):
    """The model boundary call itself failed (network, auth, rate limit)."""


class MalformedResponse(SubmissionError):
    """The boundary answered but returned no usable message."""


class ConfigurationError(ValueError):
    """A pricing table gap or an invalid configuration value."""
