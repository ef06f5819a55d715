"""
Bean Container.

Central registry for controllers, their views and any other bean the
application registers. Manages construction, singleton caching and the
post-construction pipeline:

1. factory (controllers: enhanced class + view creation + declared nested views)
2. dependency injection of ``inject()`` attributes
3. controller extensions (``@subscribe`` wiring, custom extensions)
4. ``@post_construct`` methods

All construction runs on the UI thread. A lookup from another thread blocks
until the UI thread finished building the bean.

Usage:
    container = BeanContainer(dispatcher)
    container.add_controller_definition(MainController)
    main = container.get_by_id("mainController")
    view = container.get_by_id("mainView")
"""
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Type, TypeVar

from loguru import logger

from .dispatch import UiDispatcher
from .enhancer import Enhancer, SubclassingEnhancer
from .errors import ConstructionFailure, DuplicateIdError
from .events import ComponentConstructed, PriorityEventBus
from .metadata import (
    ComponentDescriptor,
    describe,
    find_marker,
    injection_points,
    is_controller,
    post_construct_methods,
    subscriber_methods,
)
from .view import View, ViewLoader
from .wrapper import ComponentWrapper

T = TypeVar("T")

# Extensions receive every freshly built controller instance
ControllerExtension = Callable[[Any], None]


@dataclass(frozen=True, eq=False)
class BeanDefinition:
    """
    How to build a bean.

    Definitions compare by identity: replacing the definition of an id also
    discards the singleton built from the old one.
    """
    id: str
    bean_type: type
    singleton: bool
    lazy: bool
    factory: Callable[[], Any]


class BeanContainer:
    """
    Registry of bean definitions and singleton instances.

    Args:
        dispatcher: UI thread dispatcher; every factory runs through it
        event_bus: Receives ComponentConstructed events and ``@subscribe`` wiring
        enhancer: Enhances controller types (defaults to subclassing without interceptor)
        view_loader: Builds a controller's view; without it controllers have no view
        extensions: Custom controller extensions
        duplicate_ids: "overwrite" replaces an existing id, "reject" raises DuplicateIdError
        type_resolution: "most_specific" or "registration_order" for get_by_type()
    """

    def __init__(
        self,
        dispatcher: UiDispatcher,
        event_bus: Optional[PriorityEventBus] = None,
        enhancer: Optional[Enhancer] = None,
        view_loader: Optional[ViewLoader] = None,
        extensions: Iterable[ControllerExtension] = (),
        duplicate_ids: str = "overwrite",
        type_resolution: str = "most_specific",
    ):
        if duplicate_ids not in ("overwrite", "reject"):
            raise ValueError(f"Unknown duplicate id policy: {duplicate_ids}")
        if type_resolution not in ("most_specific", "registration_order"):
            raise ValueError(f"Unknown type resolution rule: {type_resolution}")

        self.dispatcher = dispatcher
        self.event_bus = event_bus
        self.enhancer = enhancer or SubclassingEnhancer()
        self.view_loader = view_loader
        self.duplicate_ids = duplicate_ids
        self.type_resolution = type_resolution

        self._lock = threading.RLock()
        self._definitions: Dict[str, BeanDefinition] = {}
        self._singletons: Dict[BeanDefinition, Any] = {}
        self._descriptors: Dict[str, ComponentDescriptor] = {}
        self._extensions: List[ControllerExtension] = list(extensions)
        self._in_construction: Set[str] = set()

    # --- Registration ---

    def add_definition(
        self,
        bean_id: str,
        bean_type: type,
        singleton: bool = True,
        lazy: bool = True,
        factory: Optional[Callable[[], Any]] = None,
    ) -> BeanDefinition:
        """
        Register a bean.

        Args:
            bean_id: Unique id
            bean_type: Type used by get_by_type()
            singleton: Cache the first instance
            lazy: Construct on first lookup instead of in instantiate_non_lazy()
            factory: Zero-argument callable; defaults to ``bean_type``

        Raises:
            DuplicateIdError: If the id exists and duplicates are rejected
        """
        if not bean_id:
            raise ValueError("Bean id must not be empty")
        definition = BeanDefinition(
            id=bean_id,
            bean_type=bean_type,
            singleton=singleton,
            lazy=lazy,
            factory=factory or bean_type,
        )
        with self._lock:
            previous = self._definitions.get(bean_id)
            if previous is not None:
                if self.duplicate_ids == "reject":
                    raise DuplicateIdError(bean_id)
                logger.warning(f"Overwriting bean definition '{bean_id}'")
                self._singletons.pop(previous, None)
                self._descriptors.pop(bean_id, None)
            self._definitions[bean_id] = definition

        logger.debug(f"Registered bean '{bean_id}' ({bean_type.__name__}, singleton={singleton}, lazy={lazy})")
        return definition

    def add_controller_definition(self, controller_cls: type) -> ComponentDescriptor:
        """
        Register a controller and its paired view bean.

        The view bean (id = the marker's ``view_id``) resolves to the view of
        the controller bean.

        Raises:
            ValueError: If ``controller_cls`` is not marked with @controller
        """
        if find_marker(controller_cls) is None:
            raise ValueError(f"{controller_cls!r} is not marked with @controller")
        descriptor = describe(controller_cls)

        self.add_definition(
            descriptor.id,
            controller_cls,
            singleton=descriptor.singleton,
            lazy=descriptor.lazy,
            factory=lambda: self._instantiate_controller(descriptor),
        )
        self.add_definition(
            descriptor.view_id,
            View,
            singleton=descriptor.singleton,
            lazy=descriptor.lazy,
            factory=lambda: ComponentWrapper.get_view_from(self.get_by_id(descriptor.id)),
        )
        with self._lock:
            self._descriptors[descriptor.id] = descriptor
        return descriptor

    def add_extension(self, extension: ControllerExtension) -> None:
        if extension not in self._extensions:
            self._extensions.append(extension)

    # --- Lookup ---

    def has_definition(self, bean_id: str) -> bool:
        with self._lock:
            return bean_id in self._definitions

    def definitions(self) -> List[BeanDefinition]:
        """All definitions in registration order."""
        with self._lock:
            return list(self._definitions.values())

    def descriptor(self, bean_id: str) -> Optional[ComponentDescriptor]:
        with self._lock:
            return self._descriptors.get(bean_id)

    def controller_descriptors(self) -> List[ComponentDescriptor]:
        with self._lock:
            return list(self._descriptors.values())

    def get_by_id(self, bean_id: str) -> Optional[Any]:
        """
        Get a bean by id.

        Returns:
            The bean, or None if no bean is defined under ``bean_id``

        Raises:
            ConstructionFailure: If building the bean failed
        """
        with self._lock:
            definition = self._definitions.get(bean_id)
        if definition is None:
            return None
        return self._get_by_definition(definition)

    def get_by_type(self, bean_type: Type[T]) -> Optional[T]:
        """
        Get the bean whose type is assignable to ``bean_type``.

        With several candidates, "most_specific" prefers an exact type match,
        then the candidate whose type is closest to ``bean_type`` in its
        inheritance chain, then registration order. "registration_order"
        takes the first candidate registered.

        Returns:
            The bean, or None if no definition matches
        """
        definition = self._find_by_type(bean_type)
        if definition is None:
            return None
        return self._get_by_definition(definition)

    def resolve(self, bean_id: Optional[str], bean_type: Optional[type]) -> Optional[Any]:
        """
        Resolve a dependency: by id, then by type, then by registering
        ``bean_type`` as a lazy singleton built with its no-argument constructor.
        """
        if bean_id:
            value = self.get_by_id(bean_id)
            if value is not None:
                return value
        if bean_type is None:
            return None
        value = self.get_by_type(bean_type)
        if value is not None:
            return value
        # An existing definition whose factory produced None stays as it is
        if bean_id and not self.has_definition(bean_id) and self._is_auto_registrable(bean_type):
            self.add_definition(bean_id, bean_type, singleton=True, lazy=True)
            return self.get_by_id(bean_id)
        return None

    def instantiate_non_lazy(self) -> None:
        """Construct every singleton not marked lazy."""
        for definition in self.definitions():
            if definition.singleton and not definition.lazy:
                self._get_by_definition(definition)

    # --- Construction ---

    def _find_by_type(self, bean_type: type) -> Optional[BeanDefinition]:
        with self._lock:
            candidates = [
                d for d in self._definitions.values()
                if isinstance(d.bean_type, type) and issubclass(d.bean_type, bean_type)
            ]
        if not candidates:
            return None
        if self.type_resolution == "registration_order":
            return candidates[0]

        def distance(definition: BeanDefinition) -> int:
            mro = definition.bean_type.__mro__
            return mro.index(bean_type) if bean_type in mro else len(mro)

        # min() keeps the first of equal candidates, i.e. registration order
        return min(candidates, key=distance)

    def _get_by_definition(self, definition: BeanDefinition) -> Any:
        if definition.singleton:
            with self._lock:
                if definition in self._singletons:
                    return self._singletons[definition]
        return self.dispatcher.invoke_and_wait(lambda: self._construct(definition))

    def _construct(self, definition: BeanDefinition) -> Any:
        """Build a bean. Always runs on the UI thread."""
        if definition.singleton:
            # Another request may have built it while this one was queued
            with self._lock:
                if definition in self._singletons:
                    return self._singletons[definition]

        if definition.id in self._in_construction:
            raise ConstructionFailure(definition.id, RuntimeError("circular dependency"))

        self._in_construction.add(definition.id)
        try:
            instance = definition.factory()
            if instance is not None:
                self._post_process(definition, instance)
        except ConstructionFailure:
            raise
        except Exception as e:
            logger.error(f"Failed to construct bean '{definition.id}': {e}")
            raise ConstructionFailure(definition.id, e) from e
        finally:
            self._in_construction.discard(definition.id)

        if definition.singleton:
            with self._lock:
                # Only cache if the definition was not replaced meanwhile
                if self._definitions.get(definition.id) is definition:
                    self._singletons[definition] = instance

        logger.debug(f"Constructed bean '{definition.id}'")
        return instance

    def _instantiate_controller(self, descriptor: ComponentDescriptor) -> Any:
        enhanced_cls = self.enhancer.enhance(descriptor.component_type)
        instance = enhanced_cls()

        if self.view_loader is None:
            logger.warning(f"No view loader configured, controller '{descriptor.id}' has no view")
            return instance

        view = self.view_loader(instance, descriptor)
        ComponentWrapper.set_view_on(instance, view)
        if descriptor.nested_views:
            interceptor = self.enhancer.interceptor
            if interceptor is None:
                raise RuntimeError(f"Controller '{descriptor.id}' declares nested views but no interceptor is configured")
            interceptor.attach_nested_views(view, descriptor.nested_views)
        return instance

    def _post_process(self, definition: BeanDefinition, instance: Any) -> None:
        cls = type(instance)
        self._inject(instance)

        if is_controller(cls):
            self._wire_subscribers(instance)
            for extension in list(self._extensions):
                extension(instance)

        for name in post_construct_methods(cls):
            getattr(instance, name)()

        if self.event_bus is not None:
            self.event_bus.publish(ComponentConstructed(definition.id, instance))

    def _inject(self, instance: Any) -> None:
        cls = type(instance)
        points = injection_points(cls)
        if not points:
            return

        marker = find_marker(cls)
        for point in points:
            if marker is not None and point.attribute == marker.view_id:
                # Resolving the view bean here would re-enter this controller's construction
                value = ComponentWrapper.get_view_from(instance)
            else:
                value = self.resolve(point.bean_id, point.bean_type)
            logger.debug(f"Injecting {cls.__name__}.{point.attribute}: {value!r}")
            setattr(instance, point.attribute, value)

    def _wire_subscribers(self, instance: Any) -> None:
        methods = subscriber_methods(type(instance))
        if not methods:
            return
        if self.event_bus is None:
            logger.warning(f"{type(instance).__name__}: no event bus available for @subscribe methods")
            return
        for name, event_type, priority in methods:
            self.event_bus.subscribe(event_type, getattr(instance, name), priority)

    @staticmethod
    def _is_auto_registrable(bean_type: type) -> bool:
        if not isinstance(bean_type, type) or bean_type.__module__ == "builtins":
            return False
        return not getattr(bean_type, "__abstractmethods__", None)
