"""The ordered check catalog.

Each row names a check, its group, and the severity a violation carries.
Order is fixed and only affects output; no check reads another's result.
"""

from secgate.checks import configuration, dependencies, dockerfile, manifests, quality, secrets
from secgate.checks.base import CheckSpec
from secgate.types import CheckKind

WARN, FAIL = CheckKind.WARN, CheckKind.FAIL

GROUP_TITLES: dict[str, str] = {
    "dockerfile": "Dockerfile security",
    "manifests": "Kubernetes manifest security",
    "secrets": "Secret detection",
    "quality": "Code quality",
    "dependencies": "Dependencies",
    "configuration": "Configuration security",
}

CATALOG: tuple[CheckSpec, ...] = (
    CheckSpec("dockerfile_present", "Dockerfile presence", "dockerfile", FAIL,
              dockerfile.check_dockerfile_present),
    CheckSpec("dockerfile_structure", "Dockerfile required instructions", "dockerfile", FAIL,
              dockerfile.check_dockerfile_structure),
    CheckSpec("dockerfile_root_user", "Dockerfile root-user usage", "dockerfile", WARN,
              dockerfile.check_root_user),
    CheckSpec("dockerfile_tag_pinning", "Dockerfile tag pinning", "dockerfile", WARN,
              dockerfile.check_tag_pinning),
    CheckSpec("dockerfile_secret_literals", "Dockerfile secret literals", "dockerfile", FAIL,
              dockerfile.check_secret_literals),
    CheckSpec("dockerfile_lint", "Dockerfile static analysis (hadolint)", "dockerfile", WARN,
              dockerfile.check_hadolint),
    CheckSpec("manifests_present", "Manifest directory presence", "manifests", FAIL,
              manifests.check_manifests_present),
    CheckSpec("manifest_hardcoded_passwords", "Hardcoded passwords in manifests", "manifests", FAIL,
              manifests.check_hardcoded_passwords),
    CheckSpec("manifest_privileged", "Privileged containers", "manifests", FAIL,
              manifests.check_privileged),
    CheckSpec("manifest_resource_limits", "Resource limits", "manifests", WARN,
              manifests.check_resource_limits),
    CheckSpec("manifest_security_context", "Security contexts", "manifests", WARN,
              manifests.check_security_context),
    CheckSpec("secret_patterns", "Secret pattern scan", "secrets", WARN,
              secrets.check_secret_patterns),
    CheckSpec("secret_scanner", "Verified secret scan (trufflehog)", "secrets", WARN,
              secrets.check_secret_scanner),
    CheckSpec("source_syntax", "Application source syntax", "quality", FAIL,
              quality.check_source_syntax),
    CheckSpec("yaml_syntax", "YAML syntax", "quality", FAIL,
              quality.check_yaml_syntax),
    CheckSpec("workflow_structure", "CI workflow structure", "quality", FAIL,
              quality.check_workflow_structure),
    CheckSpec("base_image_minimal", "Minimal base image", "dependencies", WARN,
              dependencies.check_base_image_minimal),
    CheckSpec("database_image_pinned", "Database image version pinning", "dependencies", WARN,
              dependencies.check_database_image_pinned),
    CheckSpec("secret_manifests", "Secret externalization", "configuration", WARN,
              configuration.check_secret_manifests),
    CheckSpec("secret_key_refs", "Secret references", "configuration", WARN,
              configuration.check_secret_key_refs),
    CheckSpec("config_map_refs", "ConfigMap references", "configuration", WARN,
              configuration.check_config_map_refs),
    CheckSpec("secrets_documentation", "Secrets documentation", "configuration", WARN,
              configuration.check_secrets_documentation),
)


def severity_policy() -> dict[str, CheckKind]:
    """check_id -> severity on violation."""
    return {spec.check_id: spec.on_violation for spec in CATALOG}


def get_check(check_id: str) -> CheckSpec:
    for spec in CATALOG:
        if spec.check_id == check_id:
            return spec
    raise KeyError(f"Unknown check: {check_id}")
