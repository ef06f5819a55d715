"""
Foundation Core - Controller Runtime.

Provides the runtime substrate for declarative UI controllers:
- BeanContainer: Construction, singleton caching and post-construction of beans
- Enhancer: Intercepts @show_view / @show_nested_views actions (two strategies)
- ActionInterceptor: Post-invocation navigation
- PriorityEventBus: Type-based, priority-ordered pub/sub
- DebouncedListener: Coalesces rapid change notifications
- @on_action / @on_value_changed: Bind controller methods to named controls
- UiDispatcher: Confines work to the UI thread
- RuntimeBuilder: Wires everything into a Runtime handle

Usage:
    from foundation.core import RuntimeBuilder, controller, show_view

    @controller(view_id="mainView")
    class MainController:
        @show_view("detailsView", new_window=True)
        def open_details(self):
            pass

    runtime = RuntimeBuilder("My App").add_controller(MainController).build()
"""
from .errors import (
    FoundationError,
    DuplicateIdError,
    UnresolvedViewError,
    UnattachedWindowError,
    MissingAnchorError,
    ConstructionFailure,
    UnenhancedComponentError,
)
from .metadata import (
    ComponentDescriptor,
    NestedViewSpec,
    Region,
    ShowView,
    AttachNestedViews,
    ActionSpec,
    ControlAction,
    ValueChangeBinding,
    describe,
)
from .decorators import controller, show_view, show_nested_views, subscribe, post_construct, inject, on_action, on_value_changed
from .config import ConfigManager, RuntimeConfig
from .dispatch import UiDispatcher, QtDispatcher, QueuedDispatcher
from .events import Signal, PriorityEventBus, Subscription, RuntimeEvent, ComponentConstructed, ViewShown, NestedViewAttached
from .view import View, ViewFactory
from .wrapper import ComponentWrapper
from .interceptor import ActionInterceptor
from .enhancer import Enhancer, EnhancementStrategy, SubclassingEnhancer, RedefinitionEnhancer, create_enhancer
from .container import BeanContainer, BeanDefinition
from .listener import DebouncedListener
from .bootstrap import Runtime, RuntimeBuilder, get_runtime, set_runtime, run_app

__all__ = [
    # Errors
    "FoundationError",
    "DuplicateIdError",
    "UnresolvedViewError",
    "UnattachedWindowError",
    "MissingAnchorError",
    "ConstructionFailure",
    "UnenhancedComponentError",

    # Metadata
    "ComponentDescriptor",
    "NestedViewSpec",
    "Region",
    "ShowView",
    "AttachNestedViews",
    "ActionSpec",
    "ControlAction",
    "ValueChangeBinding",
    "describe",

    # Decorators
    "controller",
    "show_view",
    "show_nested_views",
    "subscribe",
    "post_construct",
    "inject",
    "on_action",
    "on_value_changed",

    # Configuration
    "ConfigManager",
    "RuntimeConfig",

    # Threading
    "UiDispatcher",
    "QtDispatcher",
    "QueuedDispatcher",

    # Events
    "Signal",
    "PriorityEventBus",
    "Subscription",
    "RuntimeEvent",
    "ComponentConstructed",
    "ViewShown",
    "NestedViewAttached",

    # Views and interception
    "View",
    "ViewFactory",
    "ComponentWrapper",
    "ActionInterceptor",
    "Enhancer",
    "EnhancementStrategy",
    "SubclassingEnhancer",
    "RedefinitionEnhancer",
    "create_enhancer",

    # Container
    "BeanContainer",
    "BeanDefinition",
    "DebouncedListener",

    # Bootstrap
    "Runtime",
    "RuntimeBuilder",
    "get_runtime",
    "set_runtime",
    "run_app",
]
