"""
Controller Discovery.

Finds classes marked with ``@controller`` below a package.
"""
import importlib
import pkgutil
from types import ModuleType
from typing import List

from loguru import logger

from .metadata import CONTROLLER_ATTR


def _import(module_name: str) -> ModuleType:
    try:
        return importlib.import_module(module_name)
    except Exception as e:
        logger.error(f"Failed to import {module_name} during controller scan: {e}")
        raise


def controllers_in_module(module: ModuleType) -> List[type]:
    """Controller classes defined (not merely imported) in ``module``."""
    found = []
    for attr_name in dir(module):
        attr = getattr(module, attr_name)
        if (isinstance(attr, type) and
                CONTROLLER_ATTR in vars(attr) and
                attr.__module__ == module.__name__):
            found.append(attr)
    return found


def scan_package(package_name: str) -> List[type]:
    """
    Import ``package_name`` and all of its submodules and collect controller classes.

    Args:
        package_name: Dotted name of a package or a single module

    Returns:
        Controller classes in module order
    """
    root = _import(package_name)
    controllers = controllers_in_module(root)

    if hasattr(root, "__path__"):
        for info in pkgutil.walk_packages(root.__path__, prefix=f"{root.__name__}."):
            controllers.extend(controllers_in_module(_import(info.name)))

    logger.info(f"Found {len(controllers)} controller(s) in {package_name}")
    return controllers
