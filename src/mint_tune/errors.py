"""
Exception and warning classes for mint-tune.

Validation errors subclass ValueError so callers catching the usual
built-in type keep working.
"""

from typing import Any


class MintTuneError(Exception):
    """Base class for all mint-tune errors."""

    pass


class InputValidationError(MintTuneError, ValueError):
    """Raised when inputs or configuration are malformed (before any fit)."""

    pass


class InvalidGroupingError(InputValidationError):
    """Raised when the group labels cannot define leave-one-group-out folds."""

    pass


class DegenerateGroupError(MintTuneError):
    """Raised when a group contains a single outcome class.

    Attributes:
        groups: Labels of the offending groups
    """

    def __init__(self, message: str, groups: list[str] | None = None):
        super().__init__(message)
        self.groups = list(groups or [])

    def __reduce__(self):
        return (self.__class__, (self.args[0], self.groups))


class FoldEvaluationError(MintTuneError):
    """Raised when the model collaborator fails on a fold.

    Attributes:
        group: Held-out group of the failing fold
        keepx: Candidate sparsity value being evaluated
        component: Component under search (1-based)
        partial: Partial TuneResult for the completed components, attached by
            the API when partial output was requested
    """

    def __init__(
        self,
        message: str,
        group: str | None = None,
        keepx: int | None = None,
        component: int | None = None,
        partial: Any = None,
    ):
        super().__init__(message)
        self.group = group
        self.keepx = keepx
        self.component = component
        self.partial = partial

    def __reduce__(self):
        return (
            self.__class__,
            (self.args[0], self.group, self.keepx, self.component, self.partial),
        )


class StoppingRuleUnavailable(MintTuneError):
    """Signals that the component significance test cannot be run."""

    pass


class MintTuneWarning(UserWarning):
    """Base warning for non-fatal mint-tune advisories."""

    pass


class SparseGroupWarning(MintTuneWarning):
    """Warning for small groups or groups missing outcome classes."""

    pass
