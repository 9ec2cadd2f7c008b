"""Tests for packaging metadata and pyproject.toml validation."""

import ast
import re
import sys
from pathlib import Path

try:
    import tomllib
except ImportError:
    import tomli as tomllib

ROOT = Path(__file__).parent.parent

# Import name -> distribution name where they differ
DISTRIBUTION_NAMES = {"pydantic_settings": "pydantic-settings"}


def load_pyproject():
    with open(ROOT / "pyproject.toml", "rb") as f:
        return tomllib.load(f)


def parse_package_name(dep_string):
    """Extract package name from a dependency string."""
    match = re.match(r"^([a-zA-Z0-9_.-]+)", dep_string.strip())
    return match.group(1).lower() if match else None


def third_party_imports():
    """Top level modules imported by the package and the CLI."""
    sources = list((ROOT / "login_wizard").rglob("*.py")) + [ROOT / "main.py"]
    modules = set()
    for source in sources:
        tree = ast.parse(source.read_text(encoding="utf-8"))
        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                modules.update(alias.name.split(".")[0] for alias in node.names)
            elif isinstance(node, ast.ImportFrom) and node.level == 0 and node.module:
                modules.add(node.module.split(".")[0])
    return {
        name
        for name in modules
        if name not in sys.stdlib_module_names and name != "login_wizard"
    }


class TestPackagingMetadata:
    """Tests for pyproject.toml packaging metadata."""

    def test_build_system_exists(self):
        """Test that [build-system] section exists in pyproject.toml."""
        build_system = load_pyproject()["build-system"]

        assert "requires" in build_system, "build-system.requires missing"
        assert "build-backend" in build_system, "build-system.build-backend missing"
        assert len(build_system["requires"]) > 0, "build-system.requires is empty"

    def test_project_metadata_complete(self):
        """Test that all required project metadata fields exist."""
        project = load_pyproject()["project"]

        for field in ["name", "version", "description", "requires-python"]:
            assert project.get(field), f"Field '{field}' is empty"

    def test_version_matches_package(self):
        """Test that pyproject.toml version matches login_wizard.__version__."""
        import login_wizard

        assert load_pyproject()["project"]["version"] == login_wizard.__version__

    def test_optional_dependencies_dev_exists(self):
        """Test that dev optional dependencies carry the test tooling."""
        dev = load_pyproject()["project"]["optional-dependencies"]["dev"]
        names = {parse_package_name(dep) for dep in dev}

        assert {"pytest", "pytest-asyncio"} <= names


class TestDependencySynchronization:
    """Tests that every imported library is declared."""

    def test_imports_declared(self):
        declared = {
            parse_package_name(dep) for dep in load_pyproject()["project"]["dependencies"]
        }

        for module in third_party_imports():
            distribution = DISTRIBUTION_NAMES.get(module, module)
            assert distribution in declared, f"{distribution} imported but not declared"
