from helpers import DJANGO_REPO, NODE_EXPRESS_REPO
from mercury_analyzer.core.services.deployment_validator import (
    WARN_EXTERNAL_SERVICES,
    WARN_SSL_WITHOUT_DOMAIN,
    validate_deployment,
)


def _statuses(result):
    return {v["check"]: v["status"] for v in result["validations"]}


def test_sufficient_instance_passes(analyze_files):
    result = validate_deployment(analyze_files(NODE_EXPRESS_REPO), instance_type="s-1vcpu-1gb")

    assert result["valid"]
    assert _statuses(result) == {
        "cpu_requirements": "pass",
        "memory_requirements": "pass",
        "environment_variables": "pass",
    }
    assert result["warnings"] == [WARN_EXTERNAL_SERVICES, WARN_SSL_WITHOUT_DOMAIN]
    assert result["requirements"]["cpu"] == {"min": 1, "recommended": 1}


def test_undersized_instance_fails(analyze_files):
    result = validate_deployment(
        analyze_files(DJANGO_REPO),
        instance_type="s-1vcpu-2gb",
        environment_variables={"SECRET_KEY": "x"},
    )

    assert not result["valid"]
    assert _statuses(result)["cpu_requirements"] == "fail"
    assert _statuses(result)["memory_requirements"] == "pass"
    assert _statuses(result)["environment_variables"] == "pass"


def test_missing_required_variables_fail(analyze_files):
    result = validate_deployment(analyze_files(DJANGO_REPO), instance_type="s-2vcpu-4gb")

    assert not result["valid"]
    env_check = next(v for v in result["validations"] if v["check"] == "environment_variables")
    assert env_check["status"] == "fail"
    # DEBUG and DATABASE_URL have defaults in .env.example
    assert env_check["message"] == "Missing required environment variables: SECRET_KEY"


def test_unknown_instance_type_only_warns(analyze_files):
    result = validate_deployment(
        analyze_files(NODE_EXPRESS_REPO),
        instance_type="m5.large",
        domain="shop.example.com",
    )

    assert result["valid"]
    assert _statuses(result)["cpu_requirements"] == "warning"
    assert _statuses(result)["memory_requirements"] == "warning"
    assert WARN_SSL_WITHOUT_DOMAIN not in result["warnings"]


def test_ssl_disabled_without_domain_does_not_warn(analyze_files):
    result = validate_deployment(analyze_files({}), instance_type="s-1vcpu-1gb", ssl=False)
    assert result["warnings"] == []
