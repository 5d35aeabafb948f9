"""Labeling strategy hooks.

A labeler declares, hook by hook, whether it supports a processing stage.
Hooks return either ``Implemented(value)`` or ``NOT_SUPPORTED``; callers
branch on the variant, or call ``unwrap`` to fail immediately on an
unsupported hook. An unsupported hook never silently does nothing.

Examples
--------
>>> labeler = UnlabeledLabeler()
>>> unwrap(labeler.post_digest(["PEPTIDEK"]), "post_digest")
['PEPTIDEK']
>>> BaseLabeler().post_rt([])
NOT_SUPPORTED
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar, Union

from .exceptions import HookNotImplementedError

T = TypeVar("T")


@dataclass(frozen=True)
class Implemented(Generic[T]):
    """Hook ran; ``value`` is its result."""
    value: T


class NotSupported(Enum):
    """Hook is not available for this labeler."""
    NOT_SUPPORTED = "not_supported"

    def __repr__(self):
        return self.name


NOT_SUPPORTED = NotSupported.NOT_SUPPORTED

HookResult = Union[Implemented, NotSupported]


def unwrap(result: HookResult, hook_name: str) -> Any:
    """Value of an implemented hook.

    Raises
    ------
    HookNotImplementedError
        If the hook returned NOT_SUPPORTED
    """
    if isinstance(result, Implemented):
        return result.value
    raise HookNotImplementedError(f"Labeling hook not implemented: {hook_name}")


class BaseLabeler:
    """Base class for labeling strategies.

    Subclasses override the hooks they support. ``set_up`` defaults to a
    supported no-op; every other hook defaults to NOT_SUPPORTED.
    """

    name = "base"

    def pre_check(self, params) -> HookResult:
        """Check parameters for consistency with the labeling technique."""
        return NOT_SUPPORTED

    def set_up(self, features) -> HookResult:
        return Implemented(None)

    def post_digest(self, features) -> HookResult:
        return NOT_SUPPORTED

    def post_rt(self, features) -> HookResult:
        return NOT_SUPPORTED

    def post_detectability(self, features) -> HookResult:
        return NOT_SUPPORTED

    def post_ionization(self, features) -> HookResult:
        return NOT_SUPPORTED

    def post_raw_ms(self, features) -> HookResult:
        return NOT_SUPPORTED

    def post_raw_tandem_ms(self, features, experiment) -> HookResult:
        return NOT_SUPPORTED


class UnlabeledLabeler(BaseLabeler):
    """Label-free experiments: every hook passes its input through."""

    name = "labelfree"

    def pre_check(self, params) -> HookResult:
        return Implemented(params)

    def post_digest(self, features) -> HookResult:
        return Implemented(features)

    def post_rt(self, features) -> HookResult:
        return Implemented(features)

    def post_detectability(self, features) -> HookResult:
        return Implemented(features)

    def post_ionization(self, features) -> HookResult:
        return Implemented(features)

    def post_raw_ms(self, features) -> HookResult:
        return Implemented(features)

    def post_raw_tandem_ms(self, features, experiment) -> HookResult:
        return Implemented(features)
