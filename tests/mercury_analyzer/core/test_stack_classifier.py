from helpers import DJANGO_REPO, NODE_EXPRESS_REPO, STATIC_REPO
from mercury_analyzer.core.domain.models import StackPrimary, TechStack
from mercury_analyzer.core.services.stack_classifier import classify_stack


def test_node_express_typescript(manifests_for):
    stack = classify_stack(manifests_for(NODE_EXPRESS_REPO))

    assert stack.primary is StackPrimary.JAVASCRIPT
    assert stack.framework == "express"
    assert stack.language == "typescript"
    assert stack.package_manager == "npm"
    assert stack.runtime == "nodejs"
    assert stack.testing == ("jest",)
    assert stack.build_tool is None


def test_react_wins_over_meta_framework(manifests_for):
    stack = classify_stack(manifests_for({
        "package.json": {"dependencies": {"react": "18", "next": "14"}, "devDependencies": {"vite": "5"}},
    }))

    assert stack.framework == "react"
    assert stack.language == "javascript"
    assert stack.build_tool == "vite"
    assert stack.secondary == ("vite",)


def test_django_detected_from_requirements(manifests_for):
    stack = classify_stack(manifests_for(DJANGO_REPO))

    assert stack.primary is StackPrimary.PYTHON
    assert stack.framework == "django"
    assert stack.package_manager == "pip"
    assert stack.runtime == "python"


def test_manage_py_implies_django(manifests_for):
    stack = classify_stack(manifests_for({"manage.py": "", "requirements.txt": "gunicorn\n"}))
    assert stack.framework == "django"


def test_poetry_project(manifests_for):
    stack = classify_stack(manifests_for({
        "main.py": "import uvicorn\n",
        "pyproject.toml": '[tool.poetry]\nname = "svc"\n\n[tool.poetry.dependencies]\nfastapi = "^0.110"\npytest = "^8"\n',
    }))

    assert stack.framework == "fastapi"
    assert stack.package_manager == "poetry"
    assert stack.testing == ("pytest",)


def test_next_without_react_is_nextjs(manifests_for):
    stack = classify_stack(manifests_for({"package.json": {"dependencies": {"next": "14"}}}))
    assert stack.framework == "nextjs"


def test_angular_checked_before_meta_frameworks(manifests_for):
    stack = classify_stack(manifests_for({"package.json": {"dependencies": {"@angular/core": "17", "nuxt": "3"}}}))
    assert stack.framework == "angular"


def test_pyproject_alone_does_not_mark_python(manifests_for):
    stack = classify_stack(manifests_for({"pyproject.toml": "[tool.black]\n", "Gemfile": "gem 'rails'\n"}))

    assert stack.primary is StackPrimary.RUBY
    assert stack.framework == "rails"


def test_manage_py_alone_does_not_mark_python(manifests_for):
    stack = classify_stack(manifests_for({"manage.py": "", "go.mod": "module x\n"}))
    assert stack.primary is StackPrimary.GO


def test_python_entrypoint_marks_python(manifests_for):
    stack = classify_stack(manifests_for({"app.py": "print('hi')\n", "manage.py": ""}))

    assert stack.primary is StackPrimary.PYTHON
    assert stack.framework == "django"


def test_node_manifest_wins_in_polyglot_repository(manifests_for):
    stack = classify_stack(manifests_for({**NODE_EXPRESS_REPO, **DJANGO_REPO}))
    assert stack.primary is StackPrimary.JAVASCRIPT


def test_go_module_with_gin(manifests_for):
    stack = classify_stack(manifests_for({
        "go.mod": "module example.com/api\n\nrequire github.com/gin-gonic/gin v1.9.1\n",
    }))

    assert stack.primary is StackPrimary.GO
    assert stack.framework == "gin"
    assert stack.package_manager == "go mod"


def test_maven_spring(manifests_for):
    stack = classify_stack(manifests_for({
        "pom.xml": "<project><artifactId>spring-boot-starter-web</artifactId><artifactId>junit</artifactId></project>",
    }))

    assert stack.primary is StackPrimary.JAVA
    assert stack.framework == "spring"
    assert stack.build_tool == "maven"
    assert stack.testing == ("junit",)


def test_gradle_kotlin_without_framework(manifests_for):
    stack = classify_stack(manifests_for({"build.gradle.kts": "plugins { kotlin(\"jvm\") }\n"}))

    assert stack.language == "kotlin"
    assert stack.build_tool == "gradle"
    assert stack.framework is None


def test_rust_and_ruby(manifests_for):
    rust = classify_stack(manifests_for({"Cargo.toml": '[dependencies]\naxum = "0.7"\n'}))
    assert rust.primary is StackPrimary.RUST
    assert rust.framework == "axum"

    ruby = classify_stack(manifests_for({"Gemfile": "gem 'rails'\ngem 'rspec-rails'\n"}))
    assert ruby.primary is StackPrimary.RUBY
    assert ruby.framework == "rails"
    assert ruby.testing == ("rspec",)


def test_php_laravel(manifests_for):
    stack = classify_stack(manifests_for({
        "composer.json": {
            "require": {"php": "^8.2", "laravel/framework": "^11.0"},
            "require-dev": {"phpunit/phpunit": "^10"},
        },
    }))

    assert stack.primary is StackPrimary.PHP
    assert stack.framework == "laravel"
    assert stack.testing == ("phpunit",)


def test_html_only_repository_is_static(manifests_for):
    stack = classify_stack(manifests_for(STATIC_REPO))
    assert stack.primary is StackPrimary.STATIC
    assert stack.language == "html"


def test_empty_repository_is_unknown(manifests_for):
    assert classify_stack(manifests_for({})) == TechStack()
