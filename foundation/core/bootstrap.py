"""
Bootstrap helpers for Foundation applications.

Builds the Runtime: the explicit handle that holds the container, event bus,
enhancer, interceptor, view factory and UI dispatcher. Entry points receive
this handle; only this module keeps a process-wide default for convenience.
"""
import sys
import asyncio
from typing import Any, Callable, Iterable, List, Optional, Union

from loguru import logger

from .config import ConfigManager
from .container import BeanContainer, ControllerExtension
from .discovery import scan_package
from .dispatch import QtDispatcher, UiDispatcher
from .enhancer import EnhancementStrategy, Enhancer, create_enhancer
from .errors import UnresolvedViewError
from .events import PriorityEventBus, rethrow
from .interceptor import ActionInterceptor
from .listener import DebouncedListener
from .view import View, ViewFactory, ViewLoader


class Runtime:
    """
    Wired runtime of one application.

    Usage:
        runtime = RuntimeBuilder("Bookstore").add_controller(MainController).build()
        runtime.show_main_view()
    """

    def __init__(
        self,
        name: str,
        config: ConfigManager,
        dispatcher: UiDispatcher,
        event_bus: PriorityEventBus,
        container: BeanContainer,
        enhancer: Enhancer,
        interceptor: ActionInterceptor,
        view_factory: ViewFactory,
        main_view_id: Optional[str] = None,
    ):
        self.name = name
        self.config = config
        self.dispatcher = dispatcher
        self.event_bus = event_bus
        self.container = container
        self.enhancer = enhancer
        self.interceptor = interceptor
        self.view_factory = view_factory
        self.main_view_id = main_view_id

        self.config.on_changed.connect(self._on_config_change)

    def get_bean(self, key: Union[str, type]) -> Optional[Any]:
        """Get a bean by id (str) or by type."""
        if isinstance(key, str):
            return self.container.get_by_id(key)
        return self.container.get_by_type(key)

    def get_view(self, view_id: str) -> Optional[View]:
        return self.view_factory.resolve(view_id)

    def publish_event(self, event: Any, on_error: Callable[[Exception], None] = rethrow) -> None:
        self.event_bus.publish(event, on_error)

    def show_view(self, view_id: str, window: Any = None) -> Any:
        """
        Display a view in ``window``, or in a new window when none is given.

        Returns:
            The window hosting the view
        """
        view = self.get_view(view_id)
        if view is None:
            raise UnresolvedViewError(view_id)
        if window is None:
            return view.show_in_new_window()
        view.show(window)
        return window

    def show_main_view(self, window: Any = None) -> Any:
        if not self.main_view_id:
            raise RuntimeError("No main view configured, use RuntimeBuilder.with_main_view()")
        return self.show_view(self.main_view_id, window)

    def debounced(
        self,
        callback: Callable[..., Any],
        delay_ms: Optional[int] = None,
        enabled: Union[bool, Callable[[], bool]] = True,
    ) -> DebouncedListener:
        """Wrap ``callback`` in a DebouncedListener delivering on this runtime's UI thread."""
        if delay_ms is None:
            delay_ms = self.config.data.listener.default_delay_ms
        return DebouncedListener(callback, delay_ms=delay_ms, enabled=enabled, dispatcher=self.dispatcher)

    def shutdown(self) -> None:
        """Undo global enhancement and drop all subscriptions."""
        self.config.on_changed.disconnect(self._on_config_change)
        self.enhancer.uninstall()
        self.event_bus.clear()
        logger.info(f"{self.name} runtime shut down")

    def _on_config_change(self, section, key, value):
        if section == "container" and key == "duplicate_ids":
            self.container.duplicate_ids = value
        elif section == "container" and key == "type_resolution":
            self.container.type_resolution = value
        elif section == "event_bus" and key == "default_priority":
            self.event_bus.default_priority = value
        elif section == "enhancer":
            logger.warning("Enhancement strategy changes take effect on the next runtime build")


class RuntimeBuilder:
    """
    Fluent builder for the controller runtime.

    Example:
        runtime = (RuntimeBuilder("My App", "foundation.json")
                   .with_main_view("mainView")
                   .scan_package("my_app.controllers")
                   .build())
    """

    def __init__(self, name: str = "Foundation App", config_path: Optional[str] = None):
        """
        Initialize runtime builder.

        Args:
            name: Application name
            config_path: Path to a JSON/TOML config file, None for defaults in memory
        """
        self.name = name
        self.config_path = config_path
        self._config: Optional[ConfigManager] = None
        self._dispatcher: Optional[UiDispatcher] = None
        self._strategy: Optional[EnhancementStrategy] = None
        self._view_loader: Optional[ViewLoader] = None
        self._main_view_id: Optional[str] = None
        self._controllers: List[type] = []
        self._packages: List[str] = []
        self._extensions: List[ControllerExtension] = []
        self._logging_configured = False

    def with_config(self, config: ConfigManager):
        self._config = config
        return self

    def with_dispatcher(self, dispatcher: UiDispatcher):
        """Use ``dispatcher`` instead of a QtDispatcher on the QApplication thread."""
        self._dispatcher = dispatcher
        return self

    def with_enhancement_strategy(self, strategy: Union[EnhancementStrategy, str]):
        """Override the configured enhancement strategy."""
        self._strategy = EnhancementStrategy(strategy)
        return self

    def with_view_loader(self, loader: ViewLoader):
        self._view_loader = loader
        return self

    def with_main_view(self, view_id: str):
        self._main_view_id = view_id
        return self

    def add_controller(self, controller_cls: type):
        self._controllers.append(controller_cls)
        return self

    def add_controllers(self, controller_classes: Iterable[type]):
        self._controllers.extend(controller_classes)
        return self

    def scan_package(self, package_name: str):
        """Register every controller found below ``package_name`` at build time."""
        self._packages.append(package_name)
        return self

    def add_extension(self, extension: ControllerExtension):
        self._extensions.append(extension)
        return self

    def with_logging(self, enable: bool = True):
        self._logging_configured = enable
        return self

    def build(self, make_default: bool = True) -> Runtime:
        """
        Wire all parts, register controllers and construct non-lazy singletons.

        Must run on the UI thread.

        Args:
            make_default: Also install the runtime as the process-wide default

        Returns:
            The Runtime handle
        """
        # 1. Configuration and logging
        config = self._config or ConfigManager(self.config_path)
        if self._logging_configured:
            from .logging import setup_logging
            setup_logging(config.data.general.debug_mode, config.data.general.log_dir)
        logger.info(f"Building runtime for {self.name}")

        # 2. Infrastructure
        dispatcher = self._dispatcher or QtDispatcher()
        event_bus = PriorityEventBus(default_priority=config.data.event_bus.default_priority)
        strategy = self._strategy or EnhancementStrategy(config.data.enhancer.strategy)
        enhancer = create_enhancer(strategy)

        # Qt widget adapters are only needed once a runtime is built
        from ..ui.controls import ControlWiring
        from ..ui.factory import ContainerViewFactory, WidgetViewLoader
        view_loader = self._view_loader or WidgetViewLoader()

        container = BeanContainer(
            dispatcher,
            event_bus=event_bus,
            enhancer=enhancer,
            view_loader=view_loader,
            extensions=[ControlWiring(dispatcher), *self._extensions],
            duplicate_ids=config.data.container.duplicate_ids,
            type_resolution=config.data.container.type_resolution,
        )

        view_factory = ContainerViewFactory(container)
        interceptor = ActionInterceptor(view_factory, event_bus, dispatcher=dispatcher)
        enhancer.interceptor = interceptor
        enhancer.install()

        runtime = Runtime(
            self.name,
            config,
            dispatcher,
            event_bus,
            container,
            enhancer,
            interceptor,
            view_factory,
            main_view_id=self._main_view_id,
        )

        # 3. Infrastructure beans, injectable into controllers
        for bean_id, bean in (
            ("runtime", runtime),
            ("config", config),
            ("dispatcher", dispatcher),
            ("eventBus", event_bus),
            ("container", container),
        ):
            container.add_definition(bean_id, type(bean), singleton=True, lazy=True, factory=lambda bean=bean: bean)

        # 4. Controllers
        controllers = list(self._controllers)
        for package in self._packages:
            controllers.extend(scan_package(package))
        for controller_cls in controllers:
            container.add_controller_definition(controller_cls)

        # 5. Eager singletons
        container.instantiate_non_lazy()

        if make_default:
            set_runtime(runtime)
        logger.info(f"Runtime for {self.name} ready ({len(controllers)} controller(s))")
        return runtime


_default_runtime: Optional[Runtime] = None


def get_runtime() -> Runtime:
    """The process-wide default runtime installed by RuntimeBuilder.build()."""
    if _default_runtime is None:
        raise RuntimeError("No runtime has been built yet")
    return _default_runtime


def set_runtime(runtime: Optional[Runtime]) -> None:
    global _default_runtime
    _default_runtime = runtime


def run_app(builder: RuntimeBuilder, main_view_id: Optional[str] = None):
    """
    One-liner to run a complete Foundation application.

    Handles:
    - Qt application setup
    - Event loop configuration (async actions run on the Qt loop)
    - Runtime build
    - Main view display
    - Graceful shutdown

    Example:
        builder = (RuntimeBuilder("Bookstore")
                   .with_logging()
                   .scan_package("bookstore.controllers"))
        run_app(builder, main_view_id="mainView")
    """
    from PySide6.QtWidgets import QApplication
    from qasync import QEventLoop

    if main_view_id:
        builder.with_main_view(main_view_id)

    try:
        app = QApplication.instance() or QApplication(sys.argv)
        loop = QEventLoop(app)
        asyncio.set_event_loop(loop)

        with loop:
            runtime = builder.build()
            runtime.show_main_view()
            logger.info(f"{builder.name} started successfully")

            loop.run_forever()
            runtime.shutdown()

    except KeyboardInterrupt:
        logger.info("Application interrupted by user")
    except RuntimeError as e:
        if "Event loop stopped" not in str(e):
            raise
