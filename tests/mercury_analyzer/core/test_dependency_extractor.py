import pytest

from helpers import NODE_EXPRESS_REPO
from mercury_analyzer.core.domain.models import Dependency, DependencyType
from mercury_analyzer.core.services.dependency_extractor import extract_dependencies, parse_requirement_line


@pytest.mark.parametrize("line,expected", [
    ("Django==4.2", ("Django", "4.2")),
    ("requests[security]>=2.31", ("requests", "2.31")),
    ("flask", ("flask", "latest")),
    ("numpy>=1.26; python_version >= '3.9'", ("numpy", "1.26")),
    ("gunicorn==21.2  # pinned for prod", ("gunicorn", "21.2")),
    ("  uvicorn~=0.29  ", ("uvicorn", "0.29")),
])
def test_parse_requirement_line(line, expected):
    assert parse_requirement_line(line) == expected


@pytest.mark.parametrize("line", ["", "   ", "# comment", "-r base.txt", "-e ."])
def test_parse_requirement_line_skips_non_packages(line):
    assert parse_requirement_line(line) is None


def test_node_sections_map_to_types(manifests_for):
    deps = extract_dependencies(manifests_for({
        "package.json": {
            "dependencies": {"express": "^4.18.0"},
            "devDependencies": {"jest": "^29.0.0"},
            "peerDependencies": {"react": ">=18"},
            "optionalDependencies": {"fsevents": "*"},
        },
    }))

    assert deps == (
        Dependency("express", "^4.18.0", DependencyType.PRODUCTION),
        Dependency("jest", "^29.0.0", DependencyType.DEVELOPMENT),
        Dependency("react", ">=18", DependencyType.PEER),
        Dependency("fsevents", "*", DependencyType.OPTIONAL),
    )


def test_requirements_last_occurrence_wins(manifests_for):
    deps = extract_dependencies(manifests_for({
        "requirements.txt": "flask==1.0\nrequests\nflask==2.0\n",
    }))

    assert [(d.name, d.version) for d in deps] == [("flask", "2.0"), ("requests", "latest")]
    assert all(d.type is DependencyType.PRODUCTION for d in deps)


def test_composer_skips_platform_requirements(manifests_for):
    deps = extract_dependencies(manifests_for({
        "composer.json": {
            "require": {"php": "^8.2", "ext-json": "*", "laravel/framework": "^11.0"},
            "require-dev": {"phpunit/phpunit": "^10"},
        },
    }))

    assert [(d.name, d.type) for d in deps] == [
        ("laravel/framework", DependencyType.PRODUCTION),
        ("phpunit/phpunit", DependencyType.DEVELOPMENT),
    ]


def test_manifests_are_not_merged(manifests_for):
    deps = extract_dependencies(manifests_for({
        **NODE_EXPRESS_REPO,
        "requirements.txt": "redis\n",
    }))

    names = [d.name for d in deps]
    assert names == ["express", "pg", "jest", "typescript", "redis"]


def test_unparsable_package_json_yields_no_dependencies(manifests_for):
    assert extract_dependencies(manifests_for({"package.json": "{oops"})) == ()
