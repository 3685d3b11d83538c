"""Tests for Kubernetes manifest and configuration checks."""

from __future__ import annotations

import shutil

import pytest
from conftest import write_clean_project

from secgate.catalog import get_check
from secgate.checks.base import CheckContext
from secgate.types import CheckKind

DEPLOYMENT_WITHOUT_HARDENING = """\
apiVersion: apps/v1
kind: Deployment
metadata:
  name: bare
spec:
  template:
    spec:
      containers:
        - name: app
          image: example/app:1.0
"""


def _run(check_id, root):
    spec = get_check(check_id)
    return spec.run(CheckContext(project_root=root), spec)


def _write(root, rel, text):
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "check_id",
    [
        "manifests_present",
        "manifest_hardcoded_passwords",
        "manifest_privileged",
        "manifest_resource_limits",
        "manifest_security_context",
        "database_image_pinned",
        "secret_manifests",
        "secret_key_refs",
        "config_map_refs",
    ],
)
def test_clean_manifests_pass(tmp_path, check_id) -> None:
    write_clean_project(tmp_path)
    assert [r.kind for r in _run(check_id, tmp_path)] == [CheckKind.PASS]


def test_missing_manifests_dir(tmp_path) -> None:
    write_clean_project(tmp_path)
    shutil.rmtree(tmp_path / "k8s")

    present = _run("manifests_present", tmp_path)
    assert [r.kind for r in present] == [CheckKind.FAIL]
    assert "k8s" in present[0].message

    for check_id in (
        "manifest_hardcoded_passwords",
        "manifest_privileged",
        "manifest_resource_limits",
        "manifest_security_context",
    ):
        assert _run(check_id, tmp_path) == []

    for check_id in ("database_image_pinned", "secret_manifests", "secret_key_refs", "config_map_refs"):
        assert [r.kind for r in _run(check_id, tmp_path)] == [CheckKind.WARN]


def test_privileged_container_fails_with_key_path(tmp_path) -> None:
    write_clean_project(tmp_path)
    _write(
        tmp_path,
        "k8s/debug.yaml",
        "kind: Pod\nspec:\n  containers:\n    - name: debug\n      securityContext:\n        privileged: true\n",
    )
    results = _run("manifest_privileged", tmp_path)
    assert [r.kind for r in results] == [CheckKind.FAIL]
    assert results[0].location == "k8s/debug.yaml"
    assert "spec.containers[0].securityContext.privileged" in results[0].message


@pytest.mark.parametrize(
    "security_context",
    [
        "securityContext: {privileged: true}",
        "securityContext: {runAsUser: 1000, privileged: true}",
        'securityContext: {"privileged": "true"}',
    ],
)
def test_flow_style_privileged_fails(tmp_path, security_context) -> None:
    _write(
        tmp_path,
        "k8s/pod.yaml",
        f"kind: Pod\nspec:\n  containers:\n    - name: app\n      {security_context}\n",
    )
    results = _run("manifest_privileged", tmp_path)
    assert [r.kind for r in results] == [CheckKind.FAIL]
    assert "securityContext.privileged" in results[0].message


def test_privileged_in_second_document(tmp_path) -> None:
    _write(
        tmp_path,
        "k8s/multi.yaml",
        "kind: Service\nmetadata: {name: web}\n---\nkind: Pod\nspec: {containers: [{name: a, securityContext: {privileged: true}}]}\n",
    )
    assert [r.kind for r in _run("manifest_privileged", tmp_path)] == [CheckKind.FAIL]


def test_unparsable_privileged_manifest_uses_line_match(tmp_path) -> None:
    _write(tmp_path, "k8s/broken.yaml", "spec: [unclosed\n  privileged: true\n")
    results = _run("manifest_privileged", tmp_path)
    assert [r.kind for r in results] == [CheckKind.FAIL]
    assert "line 2" in results[0].message


def test_privileged_false_is_fine(tmp_path) -> None:
    _write(tmp_path, "k8s/app.yaml", "securityContext:\n  privileged: false\n")
    assert [r.kind for r in _run("manifest_privileged", tmp_path)] == [CheckKind.PASS]


def test_nested_manifests_are_scanned(tmp_path) -> None:
    _write(tmp_path, "k8s/overlays/prod/patch.yml", "privileged: true\n")
    results = _run("manifest_privileged", tmp_path)
    assert results[0].location == "k8s/overlays/prod/patch.yml"


@pytest.mark.parametrize(
    ("line", "flagged"),
    [
        ("password: hunter2", True),
        ("  db_password: 'hunter2'", True),
        ("- password: hunter2", True),
        ('password: ""', False),
        ('password: ""  # set at deploy', False),
        ("password: hunter2  # rotate me", True),
        ("password: {{ .Values.dbPassword }}", False),
        ("password: ${DB_PASSWORD}", False),
        ("password:\n  valueFrom: {}", False),
        ("DB_PASSWORD: c2VjcmV0", False),
    ],
)
def test_hardcoded_password_detection(tmp_path, line, flagged) -> None:
    _write(tmp_path, "k8s/app.yaml", f"kind: ConfigMap\ndata:\n{line}\n")
    kinds = [r.kind for r in _run("manifest_hardcoded_passwords", tmp_path)]
    assert kinds == ([CheckKind.FAIL] if flagged else [CheckKind.PASS])


def test_missing_limits_and_security_context_warn_once(tmp_path) -> None:
    write_clean_project(tmp_path)
    _write(tmp_path, "k8s/bare.yaml", DEPLOYMENT_WITHOUT_HARDENING)
    _write(tmp_path, "k8s/bare-copy.yaml", DEPLOYMENT_WITHOUT_HARDENING.replace("bare", "copy"))

    limits = _run("manifest_resource_limits", tmp_path)
    assert [r.kind for r in limits] == [CheckKind.WARN]
    assert limits[0].message.startswith("2 workload(s)")
    assert "Deployment/bare (k8s/bare.yaml)" in limits[0].message

    context = _run("manifest_security_context", tmp_path)
    assert [r.kind for r in context] == [CheckKind.WARN]
    assert context[0].message.startswith("2 workload(s)")


def test_non_workload_kinds_are_ignored(tmp_path) -> None:
    _write(tmp_path, "k8s/svc.yaml", "apiVersion: v1\nkind: Service\nmetadata:\n  name: web\n")
    assert [r.kind for r in _run("manifest_resource_limits", tmp_path)] == [CheckKind.PASS]


def test_unparsable_workload_falls_back_to_text(tmp_path) -> None:
    _write(tmp_path, "k8s/broken.yaml", "kind: Deployment\nspec: [unclosed\n")
    results = _run("manifest_resource_limits", tmp_path)
    assert [r.kind for r in results] == [CheckKind.WARN]
    assert "broken.yaml" in results[0].message


def test_impossible_date_falls_back_to_text_scan(tmp_path) -> None:
    _write(
        tmp_path,
        "k8s/app.yaml",
        DEPLOYMENT_WITHOUT_HARDENING.replace("  name: bare\n", "  name: bare\n  annotations: {released: 2024-13-45}\n"),
    )
    for check_id in ("manifest_resource_limits", "manifest_security_context"):
        results = _run(check_id, tmp_path)
        assert [r.kind for r in results] == [CheckKind.WARN], check_id
        assert "Deployment (k8s/app.yaml)" in results[0].message


@pytest.mark.parametrize("kind", ["[Deployment]", "{name: Deployment}"])
def test_non_string_kind_is_not_a_workload(tmp_path, kind) -> None:
    _write(tmp_path, "k8s/odd.yaml", f"kind: {kind}\nspec: {{}}\n")
    for check_id in ("manifest_resource_limits", "manifest_security_context"):
        assert [r.kind for r in _run(check_id, tmp_path)] == [CheckKind.PASS], check_id


def test_non_string_name_is_labelled_unnamed(tmp_path) -> None:
    _write(tmp_path, "k8s/odd.yaml", DEPLOYMENT_WITHOUT_HARDENING.replace("name: bare", "name: [bare]"))
    results = _run("manifest_resource_limits", tmp_path)
    assert [r.kind for r in results] == [CheckKind.WARN]
    assert "Deployment/<unnamed>" in results[0].message


def test_database_image_must_be_versioned(tmp_path) -> None:
    _write(tmp_path, "k8s/db.yaml", "image: mysql:latest\n")
    assert [r.kind for r in _run("database_image_pinned", tmp_path)] == [CheckKind.WARN]

    _write(tmp_path, "k8s/db.yaml", "image: docker.io/library/mysql:8.0.36\n")
    assert [r.kind for r in _run("database_image_pinned", tmp_path)] == [CheckKind.PASS]


def test_config_refs_missing_warn(tmp_path) -> None:
    _write(tmp_path, "k8s/bare.yaml", DEPLOYMENT_WITHOUT_HARDENING)
    for check_id in ("secret_manifests", "secret_key_refs", "config_map_refs"):
        assert [r.kind for r in _run(check_id, tmp_path)] == [CheckKind.WARN], check_id


def test_secrets_documentation(tmp_path) -> None:
    assert [r.kind for r in _run("secrets_documentation", tmp_path)] == [CheckKind.WARN]
    _write(tmp_path, ".github/docs/SECRETS.md", "# Secrets\n")
    assert [r.kind for r in _run("secrets_documentation", tmp_path)] == [CheckKind.PASS]
