"""
Control Wiring - connects controller methods to the controls of their view.

A controller extension run by the container on every new controller:

- ``@on_action`` methods run when the named control is activated.
- ``@on_value_changed`` methods run when the named control's value changes,
  through a DebouncedListener when a timeout is given.

Controls are looked up by objectName through ``View.lookup_anchor``.
"""
import asyncio
import inspect
from typing import Any, Callable, Tuple

from loguru import logger
from PySide6.QtCore import SignalInstance
from PySide6.QtWidgets import (
    QAbstractButton,
    QAbstractSlider,
    QComboBox,
    QDateTimeEdit,
    QDoubleSpinBox,
    QLineEdit,
    QPlainTextEdit,
    QSpinBox,
    QTextEdit,
    QWidget,
)

from ..core.dispatch import UiDispatcher
from ..core.errors import MissingAnchorError
from ..core.listener import DebouncedListener
from ..core.metadata import ValueChangeBinding, control_actions, value_change_bindings
from ..core.view import View
from ..core.wrapper import ComponentWrapper


def action_signal(control: QWidget) -> SignalInstance:
    """
    Signal emitted when ``control`` is activated.

    Raises:
        TypeError: If the control has no activation signal
    """
    if isinstance(control, QAbstractButton):
        return control.clicked
    if isinstance(control, QLineEdit):
        return control.returnPressed
    raise TypeError(f"Control '{control.objectName()}' of type {type(control).__name__} does not support actions")


def value_signal(control: QWidget) -> Tuple[SignalInstance, Callable[[], Any]]:
    """
    Change signal of ``control`` and a getter for its current value.

    Raises:
        TypeError: If the control does not take user input
    """
    if isinstance(control, QLineEdit):
        return control.textChanged, control.text
    if isinstance(control, (QTextEdit, QPlainTextEdit)):
        return control.textChanged, control.toPlainText
    if isinstance(control, QAbstractButton):
        return control.toggled, control.isChecked
    if isinstance(control, QComboBox):
        return control.currentTextChanged, control.currentText
    if isinstance(control, (QSpinBox, QDoubleSpinBox, QAbstractSlider)):
        return control.valueChanged, control.value
    if isinstance(control, QDateTimeEdit):
        return control.dateTimeChanged, control.dateTime
    raise TypeError(f"Control '{control.objectName()}' of type {type(control).__name__} does not support user input listening")


def _invoke(method: Callable[..., Any], *args) -> None:
    result = method(*args)
    if inspect.isawaitable(result):
        asyncio.get_event_loop().create_task(result)


def _accepts_value(method: Callable[..., Any]) -> bool:
    parameters = inspect.signature(method).parameters.values()
    return any(p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD, p.VAR_POSITIONAL) for p in parameters)


class ControlWiring:
    """
    Controller extension for ``@on_action`` and ``@on_value_changed``.

    Handlers are looked up on the instance, so enhanced actions still
    navigate after they return.

    Args:
        dispatcher: UI dispatcher for debounced deliveries
    """

    def __init__(self, dispatcher: UiDispatcher):
        self.dispatcher = dispatcher

    def __call__(self, instance: Any) -> None:
        cls = type(instance)
        actions = control_actions(cls)
        bindings = value_change_bindings(cls)
        if not actions and not bindings:
            return

        view = ComponentWrapper.get_view_from(instance)
        if view is None:
            logger.warning(f"{cls.__name__}: no view, control handlers are not wired")
            return

        for name, action in actions:
            control = self._lookup(view, action.control_id)
            method = getattr(instance, name)
            action_signal(control).connect(lambda *args, method=method: _invoke(method))
            logger.debug(f"Wired {cls.__name__}.{name} to actions of '{action.control_id}'")

        for name, binding in bindings:
            control = self._lookup(view, binding.control_id)
            signal, current_value = value_signal(control)
            handler = self._value_handler(instance, getattr(instance, name), binding)
            signal.connect(lambda *args, handler=handler, current_value=current_value: handler(current_value()))
            logger.debug(f"Wired {cls.__name__}.{name} to value changes of '{binding.control_id}' "
                         f"(timeout {binding.timeout_ms} ms)")

    def _value_handler(self, instance: Any, method: Callable[..., Any], binding: ValueChangeBinding) -> Callable[[Any], None]:
        pass_value = _accepts_value(method)
        if binding.listener_active and not hasattr(instance, binding.listener_active):
            raise AttributeError(f"{type(instance).__name__} has no attribute '{binding.listener_active}' "
                                 f"to switch value changes of '{binding.control_id}'")

        def is_active() -> bool:
            return bool(getattr(instance, binding.listener_active)) if binding.listener_active else True

        def deliver(value: Any) -> None:
            if pass_value:
                _invoke(method, value)
            else:
                _invoke(method)

        if binding.timeout_ms > 0:
            return DebouncedListener(deliver, binding.timeout_ms, enabled=is_active, dispatcher=self.dispatcher)

        def immediate(value: Any) -> None:
            if is_active():
                deliver(value)
        return immediate

    @staticmethod
    def _lookup(view: View, control_id: str) -> QWidget:
        control = view.lookup_anchor(control_id)
        if control is None:
            raise MissingAnchorError(control_id, view.id, "wire a control handler of")
        return control
