"""
Runtime Errors.

Every failure the controller runtime raises derives from FoundationError, and
additionally from the builtin exception a caller would naturally catch
(LookupError for missing things, RuntimeError for invalid state).

Navigation and attachment errors are raised before any view is mutated, so a
caller catching them can rely on the content tree being unchanged.
"""
from typing import Optional


class FoundationError(Exception):
    """Base class for all runtime errors."""
    pass


class DuplicateIdError(FoundationError, ValueError):
    """A bean id was registered twice while the container rejects duplicates."""

    def __init__(self, bean_id: str):
        super().__init__(f"Bean with id '{bean_id}' is already defined")
        self.bean_id = bean_id


class UnresolvedViewError(FoundationError, LookupError):
    """Navigation targeted a view id that the view factory does not know."""

    def __init__(self, view_id: str, context: str = ""):
        message = f"View with id '{view_id}' does not exist"
        if context:
            message = f"{message}, {context}"
        super().__init__(message)
        self.view_id = view_id


class UnattachedWindowError(FoundationError, RuntimeError):
    """Same-window navigation was requested by a component without a window."""

    def __init__(self, view_id: str):
        super().__init__(
            f"Can not display view '{view_id}' in the current window: the invoking "
            f"component's view is not part of a window yet"
        )
        self.view_id = view_id


class MissingAnchorError(FoundationError, LookupError):
    """A named node is absent from the content tree of a view."""

    def __init__(self, anchor_id: str, view_id: Optional[str] = None, purpose: str = "attach a nested view into"):
        super().__init__(f"Node with id '{anchor_id}' does not exist, can not {purpose} view '{view_id}'")
        self.anchor_id = anchor_id
        self.view_id = view_id


class ConstructionFailure(FoundationError, RuntimeError):
    """
    A bean factory or one of its post-construction hooks raised.

    The original exception is available as ``__cause__``.
    """

    def __init__(self, bean_id: str, cause: BaseException):
        super().__init__(f"Failed to construct bean '{bean_id}': {cause}")
        self.bean_id = bean_id


class UnenhancedComponentError(FoundationError, RuntimeError):
    """A component is missing the view slot that enhancement installs."""

    def __init__(self, component_type: type):
        super().__init__(
            f"Class '{component_type.__qualname__}' does not have a view slot. "
            f"Has the class been enhanced?"
        )
        self.component_type = component_type
