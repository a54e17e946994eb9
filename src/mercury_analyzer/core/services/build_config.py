from __future__ import annotations

import json
import re
from typing import Optional

from ..domain.models import BuildConfig, DockerfileAnalysis, EnvironmentVariable
from .manifest_reader import ManifestSet


ENV_EXAMPLE_FILES = (".env.example", ".env.sample", ".env.template")
SENSITIVE_MARKERS = ("password", "secret", "key")

_LEADING_DIGITS = re.compile(r"^(\d+)")


def is_sensitive(name: str) -> bool:
    lowered = name.lower()
    return any(marker in lowered for marker in SENSITIVE_MARKERS)


def _command_form(rest: str) -> str:
    """Render CMD/ENTRYPOINT arguments; exec-form JSON arrays are joined with spaces."""
    rest = rest.strip()
    if rest.startswith("["):
        try:
            parts = json.loads(rest)
        except json.JSONDecodeError:
            return rest
        if isinstance(parts, list):
            return " ".join(str(p) for p in parts)
    return rest


def _logical_lines(text: str) -> list[str]:
    lines: list[str] = []
    pending = ""
    for raw in text.splitlines():
        stripped = raw.strip()
        if not pending and (not stripped or stripped.startswith("#")):
            continue
        if stripped.endswith("\\"):
            pending += stripped[:-1] + " "
            continue
        lines.append(pending + stripped)
        pending = ""
    if pending.strip():
        lines.append(pending.strip())
    return lines


def analyze_dockerfile(text: str) -> DockerfileAnalysis:
    base_image: Optional[str] = None
    ports: list[int] = []
    workdir: Optional[str] = None
    from_count = 0
    aliased = False
    healthcheck = False
    entrypoint: Optional[str] = None
    cmd: Optional[str] = None

    for line in _logical_lines(text):
        instruction, _, rest = line.partition(" ")
        instruction = instruction.upper()
        rest = rest.strip()

        if instruction == "FROM":
            from_count += 1
            tokens = rest.split()
            # skip flags such as --platform=linux/amd64
            images = [t for t in tokens if not t.startswith("--")]
            if images:
                base_image = images[0]
            if len(images) >= 3 and images[1].lower() == "as":
                aliased = True
        elif instruction == "EXPOSE":
            for token in rest.split():
                m = _LEADING_DIGITS.match(token)
                if m:
                    port = int(m.group(1))
                    if port not in ports:
                        ports.append(port)
        elif instruction == "WORKDIR":
            workdir = rest or None
        elif instruction == "HEALTHCHECK":
            healthcheck = rest.upper() != "NONE"
        elif instruction == "ENTRYPOINT":
            entrypoint = _command_form(rest)
        elif instruction == "CMD":
            cmd = _command_form(rest)

    return DockerfileAnalysis(
        base_image=base_image,
        exposed_ports=tuple(ports),
        workdir=workdir,
        multi_stage=from_count > 1 or aliased,
        healthcheck=healthcheck,
        entrypoint=entrypoint,
        cmd=cmd,
    )


def parse_env_example(text: str) -> tuple[EnvironmentVariable, ...]:
    variables: dict[str, EnvironmentVariable] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export "):].strip()
        # a bare name is declared without a default
        name, _, value = line.partition("=")
        name = name.strip()
        if not name:
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
            value = value[1:-1]
        variables[name] = EnvironmentVariable(
            name=name,
            required=True,
            default_value=value or None,
            sensitive=is_sensitive(name),
        )
    return tuple(variables.values())


def analyze_build_config(manifests: ManifestSet) -> BuildConfig:
    """Build/start/test scripts, Dockerfile shape and expected environment."""
    scripts = manifests.document("package.json").get("scripts")
    if not isinstance(scripts, dict):
        scripts = {}

    dockerfile_text = manifests.text("Dockerfile")
    dockerfile = analyze_dockerfile(dockerfile_text) if dockerfile_text is not None else None

    env_vars: tuple[EnvironmentVariable, ...] = ()
    for name in ENV_EXAMPLE_FILES:
        env_text = manifests.text(name)
        if env_text is not None:
            env_vars = parse_env_example(env_text)
            break

    return BuildConfig(
        has_dockerfile=dockerfile is not None,
        dockerfile=dockerfile,
        build_script=scripts.get("build"),
        start_script=scripts.get("start"),
        test_script=scripts.get("test"),
        environment_variables=env_vars,
    )
