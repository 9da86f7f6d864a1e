from typing import Iterable, Optional

from gelato.compiler.config import BUILD_DIR, LAYER_PACKAGES, MAIN_PACKAGE


def get_original_pkg_name(name: str) -> str:
    """Alias under which a decorated package refers to the package it wraps."""
    return "_" + name


def get_decorated_pkg_name(name: str) -> str:
    """Alias under which the entry package refers to a decorated package."""
    return "_" + name


def is_main_pkg(name: str) -> bool:
    return name == MAIN_PACKAGE


def is_decoratable_pkg(import_path: str, layers: Iterable[str] = LAYER_PACKAGES) -> bool:
    """
    True for import paths that end with /<layer> or contain /<layer>/.

    .../internal/controller/lookup is decoratable, .../internal/mapper is not.
    """
    for layer in layers:
        if import_path.endswith("/" + layer) or ("/" + layer + "/") in import_path:
            return True
    return False


def decorated_import_path(module_name: str, import_path: str) -> Optional[str]:
    """
    Import path of the generated counterpart of a package, or None when the
    package lives outside the module.
    """
    prefix = module_name + "/"
    if not import_path.startswith(prefix):
        return None
    return f"{module_name}/{BUILD_DIR}/{import_path[len(prefix):]}"
