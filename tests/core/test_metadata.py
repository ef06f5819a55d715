"""
Controller markers and descriptors - Unit Tests
"""
import pytest

from foundation.core.decorators import (
    controller,
    inject,
    on_action,
    on_value_changed,
    post_construct,
    show_nested_views,
    show_view,
    subscribe,
)
from foundation.core.events import PriorityEventBus
from foundation.core.metadata import (
    AttachNestedViews,
    ControlAction,
    NestedViewSpec,
    Region,
    ShowView,
    ValueChangeBinding,
    control_actions,
    derive_bean_id,
    describe,
    injection_points,
    is_controller,
    marked_types,
    post_construct_methods,
    subscriber_methods,
    value_change_bindings,
)


class CartChanged:
    pass


class TestControllerMarker:

    def test_describe_defaults(self):
        @controller(view_id="cartView", view_resource="cart.ui")
        class CartController:
            pass

        descriptor = describe(CartController)

        assert descriptor.id == "cartController"
        assert descriptor.view_id == "cartView"
        assert descriptor.view_resource == "cart.ui"
        assert descriptor.singleton is True
        assert descriptor.lazy is True
        assert descriptor.width == 200
        assert descriptor.height == 100
        assert descriptor.actions == ()

    def test_explicit_id_and_flags(self):
        @controller(view_id="v", id="custom", singleton=False, lazy=False, title="Shop")
        class Shop:
            pass

        descriptor = describe(Shop)
        assert descriptor.id == "custom"
        assert descriptor.singleton is False
        assert descriptor.lazy is False
        assert descriptor.title == "Shop"

    def test_marked_types_registry(self):
        @controller(view_id="registered")
        class Registered:
            pass

        assert Registered in marked_types()
        assert is_controller(Registered)
        assert not is_controller(CartChanged)

    def test_describe_rejects_unmarked(self):
        with pytest.raises(ValueError):
            describe(CartChanged)

    def test_derive_bean_id_lowercases_first_letter(self):
        class URLController:
            pass

        assert derive_bean_id(URLController) == "uRLController"


class TestActionMarkers:

    def test_actions_collected(self):
        @controller(view_id="mainView")
        class MainController:
            @show_view("detailsView", new_window=True)
            def open_details(self):
                pass

            @show_nested_views(NestedViewSpec("sideView", anchor="sidebar", index=0))
            def expand(self):
                pass

            def plain(self):
                pass

        descriptor = describe(MainController)

        assert len(descriptor.actions) == 2
        assert descriptor.action("open_details").directive == ShowView("detailsView", in_new_window=True)
        nested = descriptor.action("expand").directive
        assert isinstance(nested, AttachNestedViews)
        assert nested.specs[0].anchor == "sidebar"
        assert descriptor.action("plain") is None

    def test_inherited_actions_collected(self):
        class Base:
            @show_view("baseView")
            def go(self):
                pass

        @controller(view_id="child")
        class Child(Base):
            pass

        assert describe(Child).action("go").directive.view_id == "baseView"

    def test_show_view_requires_id(self):
        with pytest.raises(ValueError):
            show_view("")

    def test_show_nested_views_requires_specs(self):
        with pytest.raises(ValueError):
            show_nested_views()


class TestNestedViewSpec:

    def test_defaults(self):
        spec = NestedViewSpec("v", anchor="a")
        assert (spec.index, spec.column, spec.row, spec.region) == (-1, -1, -1, None)

    def test_region_validated(self):
        NestedViewSpec("v", anchor="a", region=Region.LEFT)
        with pytest.raises(ValueError):
            NestedViewSpec("v", anchor="a", region="middle")

    def test_anchor_required(self):
        with pytest.raises(ValueError):
            NestedViewSpec("v", anchor="")


class TestLifecycleMarkers:

    def test_subscriber_methods(self):
        class Listener:
            @subscribe(CartChanged, order=0)
            def on_cart(self, event):
                pass

            @subscribe(CartChanged)
            def on_cart_default(self, event):
                pass

        found = sorted(subscriber_methods(Listener))
        assert found == [("on_cart", CartChanged, 0), ("on_cart_default", CartChanged, 1)]

    def test_post_construct_base_first(self):
        class Base:
            @post_construct
            def setup_base(self):
                pass

        class Child(Base):
            @post_construct
            def setup_child(self):
                pass

        assert post_construct_methods(Child) == ["setup_base", "setup_child"]

    def test_injection_points(self):
        class Service:
            pass

        class Consumer:
            event_bus: PriorityEventBus = inject()
            service = inject("mainService", Service)

        points = {p.attribute: p for p in injection_points(Consumer)}

        assert points["event_bus"].bean_id == "event_bus"
        assert points["event_bus"].bean_type is PriorityEventBus
        assert points["service"].bean_id == "mainService"
        assert points["service"].bean_type is Service


class TestControlMarkers:

    def test_control_actions(self):
        class Form:
            @on_action("saveButton")
            @show_view("doneView")
            def save(self):
                pass

            def helper(self):
                pass

        assert control_actions(Form) == [("save", ControlAction("saveButton"))]

    def test_value_bindings_sorted_by_control_then_order(self):
        class Form:
            @on_value_changed("name", order=2)
            def second(self, value):
                pass

            @on_value_changed("name", order=1)
            def first(self, value):
                pass

            @on_value_changed("age", timeout_ms=250, listener_active="live")
            def age(self, value):
                pass

        bindings = value_change_bindings(Form)

        assert [name for name, _ in bindings] == ["age", "first", "second"]
        assert bindings[0][1] == ValueChangeBinding("age", timeout_ms=250, listener_active="live", order=1)

    def test_control_id_required(self):
        with pytest.raises(ValueError):
            on_action("")
        with pytest.raises(ValueError):
            on_value_changed("")

    def test_negative_timeout_rejected(self):
        with pytest.raises(ValueError):
            on_value_changed("name", timeout_ms=-1)
