"""
Controller discovery - Unit Tests
"""
import textwrap
import pytest

from foundation.core.discovery import controllers_in_module, scan_package


CONTROLLER_MODULE = textwrap.dedent('''
    from foundation.core.decorators import controller

    @controller(view_id="ordersView")
    class OrdersController:
        pass

    class Helper:
        pass
''')

IMPORTING_MODULE = textwrap.dedent('''
    from {package}.orders import OrdersController

    from foundation.core.decorators import controller

    @controller(view_id="invoiceView")
    class InvoiceController:
        pass
''')


@pytest.fixture
def controller_package(tmp_path, monkeypatch):
    package = "discovery_pkg_" + tmp_path.name.replace("-", "_")
    root = tmp_path / package
    (root / "sub").mkdir(parents=True)
    (root / "__init__.py").write_text("")
    (root / "orders.py").write_text(CONTROLLER_MODULE)
    (root / "sub" / "__init__.py").write_text("")
    (root / "sub" / "invoices.py").write_text(IMPORTING_MODULE.format(package=package))
    monkeypatch.syspath_prepend(str(tmp_path))
    return package


def test_scan_package_finds_controllers_in_submodules(controller_package):
    found = scan_package(controller_package)

    assert sorted(cls.__name__ for cls in found) == ["InvoiceController", "OrdersController"]


def test_imported_controllers_not_counted_twice(controller_package):
    import importlib

    scan_package(controller_package)
    invoices = importlib.import_module(f"{controller_package}.sub.invoices")

    assert [cls.__name__ for cls in controllers_in_module(invoices)] == ["InvoiceController"]


def test_scan_single_module(controller_package):
    found = scan_package(f"{controller_package}.orders")

    assert [cls.__name__ for cls in found] == ["OrdersController"]


def test_missing_package_raises():
    with pytest.raises(ImportError):
        scan_package("no_such_controller_package")
