"""Look up entry points by name and check that they look like main functions.

An entry point takes the program arguments as one positional ``list[str]``
and returns ``None``. Children name their entry point in one of three ways:

- ``"package.module"``: the ``main`` function of the module
- ``"package.module:qualname"``: an attribute path inside the module, e.g.
  ``"tools.greeter:greet"`` or ``"tools.greeter:Greeter.main"``
- ``"package.module.Class"``: the static ``main`` method of a class

A class or module given as ``"package.module:Class"`` also resolves to its
``main``.
"""

import importlib
import inspect
import sys
from collections.abc import Callable
from types import ModuleType
from typing import Any

from pyprocesses.errors import InvalidEntryPoint

MAIN_FUNCTION = "main"

EntryPoint = Callable[[list[str]], None]

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)
_NO_RETURN = (inspect.Signature.empty, None, "None")


def _invalid(name: str, reason: str) -> InvalidEntryPoint:
    return InvalidEntryPoint(f"{name} cannot be started in a process: {reason}")


def entry_point_name(target: Any) -> str:
    """Return the name a child process uses to import ``target``.

    ``target`` is a function, a class with a static ``main`` method or a module
    with a ``main`` function. The target is checked the same way the child
    checks it, so a bad entry point fails here instead of in the child.
    """
    name = _importable_name(target)
    main_of(target, name)
    return name


def resolve_entry_point(name: str) -> EntryPoint:
    """Import the entry point called ``name`` and return its main callable."""
    return main_of(_import_target(name), name)


def main_of(target: Any, name: str) -> EntryPoint:
    """Return the main callable of a module, class or function."""
    if inspect.ismodule(target):
        main = getattr(target, MAIN_FUNCTION, None)
        if main is None:
            raise _invalid(name, f"module has no {MAIN_FUNCTION}() function")
        check_function(main, name)
        return main
    if inspect.isclass(target):
        _check_public(target.__qualname__, name)
        if not isinstance(inspect.getattr_static(target, MAIN_FUNCTION, None), staticmethod):
            raise _invalid(name, f"class has no static {MAIN_FUNCTION}() method")
        main = getattr(target, MAIN_FUNCTION)
        check_signature(main, name)
        return main
    check_function(target, name)
    return target


def check_function(func: Any, name: str) -> None:
    """Raise InvalidEntryPoint unless ``func`` is a public, static main function."""
    if not inspect.isfunction(func):
        raise _invalid(name, f"{func!r} is not a function")
    qualname = func.__qualname__
    if func.__name__ == "<lambda>":
        raise _invalid(name, "only module-level functions and static methods can be imported")
    _check_public(qualname, name)
    *owners, attr = qualname.split(".")
    if owners:
        owner = _walk(sys.modules.get(func.__module__), owners, name)
        if not isinstance(inspect.getattr_static(owner, attr, None), staticmethod):
            raise _invalid(name, f"{qualname} is not a static method")
    check_signature(func, name)


def _check_public(qualname: str, name: str) -> None:
    if "<locals>" in qualname:
        raise _invalid(name, "only module-level functions and static methods can be imported")
    if any(part.startswith("_") for part in qualname.split(".")):
        raise _invalid(name, f"{qualname} is not public")


def check_signature(func: Callable[..., Any], name: str) -> None:
    """Raise InvalidEntryPoint unless ``func(args) -> None`` is its signature."""
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError) as e:
        raise _invalid(name, "its signature cannot be inspected") from e
    params = list(signature.parameters.values())
    if len(params) != 1 or params[0].kind not in _POSITIONAL:
        raise _invalid(name, "it must take exactly one positional argument (the argument list)")
    if signature.return_annotation not in _NO_RETURN:
        raise _invalid(name, "it must not return a value")


def _importable_name(target: Any) -> str:
    if inspect.ismodule(target):
        return _module_name(target)
    if not (inspect.isclass(target) or inspect.isfunction(target)):
        raise _invalid(repr(target), "not a function, class or module")
    module = sys.modules.get(target.__module__)
    if module is None:
        raise _invalid(target.__qualname__, f"module {target.__module__} is not loaded")
    return f"{_module_name(module)}:{target.__qualname__}"


def _module_name(module: ModuleType) -> str:
    if module.__name__ != "__main__":
        return module.__name__
    spec = getattr(module, "__spec__", None)
    if spec is None:
        raise _invalid(
            "__main__", "a script started by path cannot be imported; run it with -m instead"
        )
    return spec.name


def _import_target(name: str) -> Any:
    module_name, sep, qualname = name.partition(":")
    if not module_name or (sep and not qualname):
        raise _invalid(repr(name), "expected 'module', 'module:qualname' or 'module.Class'")
    if sep:
        return _walk(_import_module(module_name, name), qualname.split("."), name)
    try:
        return importlib.import_module(name)
    except ModuleNotFoundError as e:
        if e.name != name or "." not in name:
            raise _invalid(name, str(e)) from e
    module_name, _, attr = name.rpartition(".")
    return _walk(_import_module(module_name, name), [attr], name)


def _import_module(module_name: str, name: str) -> ModuleType:
    try:
        return importlib.import_module(module_name)
    except ImportError as e:
        raise _invalid(name, str(e)) from e


def _walk(obj: Any, path: list[str], name: str) -> Any:
    for part in path:
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise _invalid(name, f"{part} not found") from e
    return obj
