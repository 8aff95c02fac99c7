import importlib
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
PKG_DIR = REPO_ROOT / "contractfix"


def iter_modules():
    """Iterate through all modules in the contractfix package."""
    modules = []
    for py in PKG_DIR.rglob("*.py"):
        if "__pycache__" in py.parts:
            continue
        rel = py.relative_to(REPO_ROOT)
        if py.name == "__init__.py":
            rel = py.parent.relative_to(REPO_ROOT)
        else:
            rel = rel.with_suffix("")
        modules.append(".".join(rel.parts))
    return sorted(set(modules))


def test_all_modules_import():
    """
    Test that all modules in the contractfix package can be imported.

    This catches circular imports between the analysis, refactoring and
    rules layers.
    """
    failed = []
    for name in iter_modules():
        try:
            importlib.import_module(name)
        except Exception as e:
            failed.append((name, repr(e)))

    assert not failed, "Import failures:\n" + "\n".join(f"{n}: {e}" for n, e in failed)


def test_lazy_api_attributes():
    """Package-level names are resolved lazily."""
    import contractfix

    assert contractfix.ContractFix.__name__ == "ContractFix"
    assert contractfix.ProjectIndex.__name__ == "ProjectIndex"
    assert contractfix.__version__
