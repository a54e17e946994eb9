"""Classify a repository's primary technology stack from its manifests.

Classification walks an ordered decision list and stops at the first match,
so a polyglot repository is reported under its highest-priority ecosystem
only (a Node manifest always wins).
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Optional

from ..domain.models import StackPrimary, TechStack
from .manifest_reader import ManifestSet


NODE_FRAMEWORKS = (
    (("react", "@types/react"), "react"),
    (("vue",), "vue"),
    (("@angular/core", "angular"), "angular"),
    (("next",), "nextjs"),
    (("nuxt",), "nuxt"),
    (("express",), "express"),
    (("fastify",), "fastify"),
    (("@nestjs/core", "nestjs"), "nestjs"),
)
NODE_BUILD_TOOLS = ("webpack", "vite", "rollup", "parcel")
NODE_TEST_FRAMEWORKS = ("jest", "mocha", "vitest", "cypress")

PYTHON_FRAMEWORKS = ("django", "flask", "fastapi", "tornado")

RUBY_FRAMEWORKS = (("rails", "rails"), ("sinatra", "sinatra"))

GO_FRAMEWORKS = (
    ("github.com/gin-gonic/gin", "gin"),
    ("github.com/labstack/echo", "echo"),
    ("github.com/gofiber/fiber", "fiber"),
)

JAVA_FRAMEWORKS = (
    (("spring-boot", "springframework"), "spring"),
    (("quarkus",), "quarkus"),
    (("micronaut",), "micronaut"),
)

RUST_FRAMEWORKS = (("actix-web", "actix"), ("rocket", "rocket"), ("axum", "axum"))

PHP_FRAMEWORKS = (
    (("laravel/framework",), "laravel"),
    (("symfony/symfony", "symfony/framework-bundle"), "symfony"),
    (("codeigniter/framework", "codeigniter4/framework"), "codeigniter"),
)


def _node_deps(package: dict[str, Any]) -> dict[str, Any]:
    deps: dict[str, Any] = {}
    for section in ("dependencies", "devDependencies"):
        value = package.get(section)
        if isinstance(value, dict):
            deps.update(value)
    return deps


def _first_match(haystack: Iterable[str], table) -> Optional[str]:
    keys = set(haystack)
    for names, tag in table:
        if any(name in keys for name in names):
            return tag
    return None


def _classify_node(m: ManifestSet) -> TechStack:
    deps = _node_deps(m.document("package.json"))
    build_tools = tuple(tool for tool in NODE_BUILD_TOOLS if tool in deps)
    typescript = "typescript" in deps or "@types/node" in deps
    return TechStack(
        primary=StackPrimary.JAVASCRIPT,
        secondary=build_tools,
        framework=_first_match(deps, NODE_FRAMEWORKS),
        language="typescript" if typescript else "javascript",
        package_manager="npm",
        build_tool=build_tools[0] if build_tools else None,
        testing=tuple(t for t in NODE_TEST_FRAMEWORKS if t in deps),
        runtime="nodejs",
    )


def _classify_python(m: ManifestSet) -> TechStack:
    text = "\n".join(
        m.text(name) or "" for name in ("requirements.txt", "pyproject.toml")
    ).lower()
    framework = next((fw for fw in PYTHON_FRAMEWORKS if fw in text), None)
    if framework is None and m.has("manage.py"):
        framework = "django"
    pyproject = (m.text("pyproject.toml") or "").lower()
    return TechStack(
        primary=StackPrimary.PYTHON,
        framework=framework,
        language="python",
        package_manager="poetry" if "[tool.poetry]" in pyproject else "pip",
        testing=("pytest",) if "pytest" in text else (),
        runtime="python",
    )


def _classify_ruby(m: ManifestSet) -> TechStack:
    text = (m.text("Gemfile") or "").lower()
    return TechStack(
        primary=StackPrimary.RUBY,
        framework=next((tag for needle, tag in RUBY_FRAMEWORKS if needle in text), None),
        language="ruby",
        package_manager="bundler",
        testing=("rspec",) if "rspec" in text else (),
        runtime="ruby",
    )


def _classify_go(m: ManifestSet) -> TechStack:
    text = (m.text("go.mod") or "").lower()
    libraries = tuple(tag for needle, tag in GO_FRAMEWORKS if needle in text)
    return TechStack(
        primary=StackPrimary.GO,
        secondary=libraries,
        framework=libraries[0] if libraries else None,
        language="go",
        package_manager="go mod",
        build_tool="go",
        runtime="go",
    )


def _classify_java(m: ManifestSet) -> TechStack:
    maven = m.has("pom.xml")
    text = "\n".join(
        m.text(name) or "" for name in ("pom.xml", "build.gradle", "build.gradle.kts")
    ).lower()
    framework = None
    for needles, tag in JAVA_FRAMEWORKS:
        if any(needle in text for needle in needles):
            framework = tag
            break
    tool = "maven" if maven else "gradle"
    return TechStack(
        primary=StackPrimary.JAVA,
        framework=framework,
        language="kotlin" if m.has("build.gradle.kts") and not maven else "java",
        package_manager=tool,
        build_tool=tool,
        testing=("junit",) if "junit" in text else (),
        runtime="jvm",
    )


def _classify_rust(m: ManifestSet) -> TechStack:
    text = (m.text("Cargo.toml") or "").lower()
    return TechStack(
        primary=StackPrimary.RUST,
        framework=next((tag for needle, tag in RUST_FRAMEWORKS if needle in text), None),
        language="rust",
        package_manager="cargo",
        build_tool="cargo",
        runtime="native",
    )


def _classify_php(m: ManifestSet) -> TechStack:
    composer = m.document("composer.json")
    require = composer.get("require") if isinstance(composer.get("require"), dict) else {}
    require_dev = composer.get("require-dev") if isinstance(composer.get("require-dev"), dict) else {}
    return TechStack(
        primary=StackPrimary.PHP,
        framework=_first_match(require, PHP_FRAMEWORKS),
        language="php",
        package_manager="composer",
        testing=("phpunit",) if "phpunit/phpunit" in require_dev else (),
        runtime="php",
    )


# Ordered decision list: (predicate, classifier). First match wins.
_BRANCHES: tuple[tuple[Callable[[ManifestSet], bool], Callable[[ManifestSet], TechStack]], ...] = (
    (lambda m: m.has("package.json"), _classify_node),
    (lambda m: m.has("requirements.txt", "app.py", "main.py"), _classify_python),
    (lambda m: m.has("Gemfile"), _classify_ruby),
    (lambda m: m.has("go.mod"), _classify_go),
    (lambda m: m.has("pom.xml", "build.gradle", "build.gradle.kts"), _classify_java),
    (lambda m: m.has("Cargo.toml"), _classify_rust),
    (lambda m: m.has("composer.json"), _classify_php),
)


def classify_stack(manifests: ManifestSet) -> TechStack:
    for matches, classify in _BRANCHES:
        if matches(manifests):
            return classify(manifests)
    if manifests.has_html:
        return TechStack(primary=StackPrimary.STATIC, language="html", runtime="static")
    return TechStack()
