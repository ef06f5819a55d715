"""
Controller Enhancement.

Augments controller types so that calls to methods marked with ``@show_view``
or ``@show_nested_views`` are routed through the ActionInterceptor, without
changing any call site.

Two interchangeable strategies implement the same Enhancer capability:

- SubclassingEnhancer: generates (once per type) a subclass overriding each
  action method. The container instantiates the subclass.
- RedefinitionEnhancer: rewrites the marked classes themselves, so every
  instance is intercepted however it was created. install() covers every
  marked class, including those defined later.

Both install the ``_view`` back-reference slot.

Usage:
    enhancer = create_enhancer(EnhancementStrategy.SUBCLASSING, interceptor)
    enhanced_cls = enhancer.enhance(MainController)
"""
import functools
import inspect
import weakref
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from loguru import logger

from .interceptor import ActionInterceptor
from .metadata import (
    VIEW_SLOT,
    NavigationDirective,
    action_specs,
    add_marked_listener,
    is_controller,
    marked_types,
    remove_marked_listener,
)

INTERCEPTED_ATTR = "_foundation_intercepted"
INTERCEPTOR_ATTR = "__foundation_interceptor__"
ENHANCED_FROM_ATTR = "__foundation_enhanced_from__"
REDEFINED_ATTR = "__foundation_redefined__"


class EnhancementStrategy(str, Enum):
    """How controller types are enhanced."""
    SUBCLASSING = "subclassing"
    REDEFINITION = "redefinition"


def _intercepting(func: Callable, directive: NavigationDirective) -> Callable:
    """Wrap an action method so that it runs through the instance's interceptor."""
    if inspect.iscoroutinefunction(func):
        @functools.wraps(func)
        async def async_wrapper(self, *args, **kwargs):
            interceptor = getattr(self, INTERCEPTOR_ATTR, None)
            if interceptor is None:
                return await func(self, *args, **kwargs)
            return await interceptor.intercept_async(self, directive, lambda: func(self, *args, **kwargs))

        setattr(async_wrapper, INTERCEPTED_ATTR, True)
        return async_wrapper

    @functools.wraps(func)
    def wrapper(self, *args, **kwargs):
        interceptor = getattr(self, INTERCEPTOR_ATTR, None)
        if interceptor is None:
            return func(self, *args, **kwargs)
        return interceptor.intercept(self, directive, lambda: func(self, *args, **kwargs))

    setattr(wrapper, INTERCEPTED_ATTR, True)
    return wrapper


def _interceptable_methods(cls: type) -> List[Tuple[str, Callable, NavigationDirective]]:
    """(name, raw function, directive) for every action of ``cls`` not yet intercepted."""
    methods = []
    for spec in action_specs(cls):
        func = inspect.getattr_static(cls, spec.method_name)
        if isinstance(func, (staticmethod, classmethod)):
            logger.warning(f"{cls.__name__}.{spec.method_name} is not an instance method and is not intercepted")
            continue
        if getattr(func, INTERCEPTED_ATTR, False):
            continue
        methods.append((spec.method_name, func, spec.directive))
    return methods


class Enhancer(ABC):
    """
    Produces intercepting variants of controller types.

    Args:
        interceptor: Receives every intercepted action call
    """

    strategy: EnhancementStrategy

    def __init__(self, interceptor: Optional[ActionInterceptor] = None):
        self._interceptor = interceptor

    @property
    def interceptor(self) -> Optional[ActionInterceptor]:
        return self._interceptor

    @interceptor.setter
    def interceptor(self, interceptor: Optional[ActionInterceptor]) -> None:
        self._interceptor = interceptor
        for enhanced in self._enhanced_types():
            setattr(enhanced, INTERCEPTOR_ATTR, interceptor)

    @abstractmethod
    def _enhanced_types(self) -> List[type]:
        pass

    @abstractmethod
    def enhance(self, cls: type) -> type:
        """
        Return the intercepting variant of ``cls``.

        Idempotent: enhancing ``cls`` or its enhanced variant again returns
        the same type.
        """

    @abstractmethod
    def is_enhanced(self, cls: type) -> bool:
        pass

    def install(self) -> None:
        """Prepare the strategy before the first controller is built."""

    def uninstall(self) -> None:
        """Undo install()."""


class SubclassingEnhancer(Enhancer):
    """Generates and caches one intercepting subclass per controller type."""

    strategy = EnhancementStrategy.SUBCLASSING

    def __init__(self, interceptor: Optional[ActionInterceptor] = None):
        super().__init__(interceptor)
        self._cache: "weakref.WeakKeyDictionary[type, type]" = weakref.WeakKeyDictionary()

    def is_enhanced(self, cls: type) -> bool:
        return ENHANCED_FROM_ATTR in vars(cls)

    def _enhanced_types(self) -> List[type]:
        return list(self._cache.values())

    def enhance(self, cls: type) -> type:
        if self.is_enhanced(cls):
            return cls
        cached = self._cache.get(cls)
        if cached is not None:
            return cached

        namespace: Dict[str, Any] = {
            "__module__": cls.__module__,
            "__qualname__": cls.__qualname__,
            "__doc__": cls.__doc__,
            ENHANCED_FROM_ATTR: cls,
            INTERCEPTOR_ATTR: self.interceptor,
        }
        if not hasattr(cls, VIEW_SLOT):
            namespace[VIEW_SLOT] = None

        methods = _interceptable_methods(cls)
        for name, func, directive in methods:
            namespace[name] = _intercepting(func, directive)

        # Use the controller's own metaclass (e.g. Shiboken's for QObject controllers)
        enhanced = type(cls)(cls.__name__, (cls,), namespace)
        self._cache[cls] = enhanced
        logger.debug(f"Enhanced {cls.__qualname__} by subclassing ({len(methods)} action(s))")
        return enhanced


class RedefinitionEnhancer(Enhancer):
    """Rewrites marked controller classes in place."""

    strategy = EnhancementStrategy.REDEFINITION

    def __init__(self, interceptor: Optional[ActionInterceptor] = None):
        super().__init__(interceptor)
        self._originals: "weakref.WeakKeyDictionary[type, Dict[str, Any]]" = weakref.WeakKeyDictionary()
        self._installed = False

    def is_enhanced(self, cls: type) -> bool:
        return bool(vars(cls).get(REDEFINED_ATTR, False))

    def _enhanced_types(self) -> List[type]:
        return list(self._originals.keys())

    def enhance(self, cls: type) -> type:
        # Another enhancer may have redefined the class; take ownership of its calls
        setattr(cls, INTERCEPTOR_ATTR, self.interceptor)
        if self.is_enhanced(cls):
            return cls

        originals: Dict[str, Any] = {}
        methods = _interceptable_methods(cls)
        for name, func, directive in methods:
            originals[name] = vars(cls).get(name)
            setattr(cls, name, _intercepting(func, directive))
        if not hasattr(cls, VIEW_SLOT):
            originals[VIEW_SLOT] = None
            setattr(cls, VIEW_SLOT, None)

        setattr(cls, REDEFINED_ATTR, True)
        self._originals[cls] = originals
        logger.debug(f"Redefined {cls.__qualname__} in place ({len(methods)} action(s))")
        return cls

    def install(self) -> None:
        """Redefine every marked controller class, now and whenever one is declared."""
        if self._installed:
            return
        for cls in marked_types():
            self.enhance(cls)
        add_marked_listener(self._on_marked)
        self._installed = True
        logger.info("Redefinition enhancer installed")

    def uninstall(self) -> None:
        """Stop redefining new classes and restore the ones this enhancer rewrote."""
        remove_marked_listener(self._on_marked)
        for cls, originals in list(self._originals.items()):
            for name, original in originals.items():
                if original is None:
                    if name in vars(cls):
                        delattr(cls, name)
                else:
                    setattr(cls, name, original)
            for attr in (REDEFINED_ATTR, INTERCEPTOR_ATTR):
                if attr in vars(cls):
                    delattr(cls, attr)
        self._originals = weakref.WeakKeyDictionary()
        self._installed = False

    @property
    def installed(self) -> bool:
        return self._installed

    def _on_marked(self, cls: type) -> None:
        if is_controller(cls):
            self.enhance(cls)


def create_enhancer(
    strategy: EnhancementStrategy,
    interceptor: Optional[ActionInterceptor] = None,
) -> Enhancer:
    """
    Build the Enhancer for a configured strategy.

    Args:
        strategy: EnhancementStrategy or its string value
        interceptor: Receives every intercepted action call
    """
    strategy = EnhancementStrategy(strategy)
    if strategy is EnhancementStrategy.REDEFINITION:
        return RedefinitionEnhancer(interceptor)
    return SubclassingEnhancer(interceptor)
