from mercury_analyzer.core.domain.models import (
    BuildConfig,
    Dependency,
    DockerfileAnalysis,
    EnvironmentVariable,
    StackPrimary,
    TechStack,
)
from mercury_analyzer.core.services.advisories import (
    ALWAYS_RECOMMENDED,
    REC_DOCKERFILE,
    REC_PM2,
    REC_TESTS,
    WARN_NO_DEPENDENCIES,
    WARN_NO_ENTRYPOINT,
    WARN_SENSITIVE_WITHOUT_DEFAULT,
    WARN_UNKNOWN_STACK,
    calculate_confidence,
    generate_recommendations,
    generate_warnings,
)


NODE = TechStack(primary=StackPrimary.JAVASCRIPT, framework="express", runtime="nodejs")
FULL_BUILD = BuildConfig(
    has_dockerfile=True,
    dockerfile=DockerfileAnalysis(),
    start_script="node index.js",
    test_script="jest",
)


def test_confidence_base_for_empty_repository():
    assert calculate_confidence(TechStack(), (), BuildConfig()) == 50


def test_confidence_is_capped():
    assert calculate_confidence(NODE, (Dependency("express"),), FULL_BUILD) == 95


def test_confidence_components():
    stack = TechStack(primary=StackPrimary.GO)
    assert calculate_confidence(stack, (), BuildConfig()) == 70
    assert calculate_confidence(stack, (Dependency("x"),), BuildConfig()) == 80
    assert calculate_confidence(stack, (), BuildConfig(start_script="./run")) == 80


def test_warnings_for_empty_repository():
    assert generate_warnings(TechStack(), (), BuildConfig()) == (
        WARN_UNKNOWN_STACK,
        WARN_NO_ENTRYPOINT,
        WARN_NO_DEPENDENCIES,
    )


def test_warning_for_secret_without_default():
    cfg = BuildConfig(
        start_script="npm start",
        environment_variables=(EnvironmentVariable("DB_PASSWORD", sensitive=True),),
    )
    assert generate_warnings(NODE, (Dependency("pg"),), cfg) == (WARN_SENSITIVE_WITHOUT_DEFAULT,)


def test_secret_with_default_does_not_warn():
    cfg = BuildConfig(
        start_script="npm start",
        environment_variables=(EnvironmentVariable("DB_PASSWORD", default_value="dev", sensitive=True),),
    )
    assert generate_warnings(NODE, (Dependency("pg"),), cfg) == ()


def test_recommendations_for_node_without_dockerfile():
    recs = generate_recommendations(NODE, (Dependency("express"),), BuildConfig())
    assert recs == (REC_DOCKERFILE, REC_PM2, REC_TESTS, *ALWAYS_RECOMMENDED)


def test_pm2_dependency_suppresses_pm2_recommendation():
    recs = generate_recommendations(NODE, (Dependency("pm2"),), FULL_BUILD)
    assert recs == ALWAYS_RECOMMENDED
