"""Pytest configuration and fixtures for SecGate tests."""
from pathlib import Path

import pytest

from secgate.tools import ToolRan, ToolRunner, ToolUnavailable

CLEAN_DOCKERFILE = """\
FROM php:8.1-fpm-alpine
WORKDIR /var/www/html
COPY learning-app-ecommerce/ /var/www/html/
USER www-data
EXPOSE 80
"""

WEBSITE_DEPLOYMENT = """\
apiVersion: apps/v1
kind: Deployment
metadata:
  name: ecom-website
spec:
  replicas: 2
  template:
    spec:
      securityContext:
        runAsNonRoot: true
      containers:
        - name: web
          image: example/ecom-web:1.0.0
          resources:
            limits:
              cpu: 500m
              memory: 256Mi
          env:
            - name: DB_PASSWORD
              valueFrom:
                secretKeyRef:
                  name: mysql-secret
                  key: DB_PASSWORD
            - name: FEATURE_DARK_MODE
              valueFrom:
                configMapKeyRef:
                  name: feature-toggle-config
                  key: FEATURE_DARK_MODE
"""

MYSQL_DEPLOYMENT = """\
apiVersion: apps/v1
kind: Deployment
metadata:
  name: mysql
spec:
  template:
    spec:
      containers:
        - name: mysql
          image: mysql:8.0
          securityContext:
            allowPrivilegeEscalation: false
          resources:
            limits:
              memory: 512Mi
---
apiVersion: v1
kind: Service
metadata:
  name: mysql-service
spec:
  ports:
    - port: 3306
"""

MYSQL_SECRET = """\
apiVersion: v1
kind: Secret
metadata:
  name: mysql-secret
type: Opaque
data:
  DB_PASSWORD: c2VjcmV0LXZhbHVl
"""

FEATURE_CONFIGMAP = """\
apiVersion: v1
kind: ConfigMap
metadata:
  name: feature-toggle-config
data:
  FEATURE_DARK_MODE: "false"
"""

CI_WORKFLOW = """\
name: CI
on:
  push:
    branches: [main]
jobs:
  gate:
    runs-on: ubuntu-latest
    steps:
      - uses: actions/checkout@v4
"""


def write_clean_project(root: Path) -> Path:
    """Lay out a deployment bundle on which every check passes."""
    files = {
        "docker/Dockerfile": CLEAN_DOCKERFILE,
        "k8s/website-deployment.yaml": WEBSITE_DEPLOYMENT,
        "k8s/mysql-deployment.yaml": MYSQL_DEPLOYMENT,
        "k8s/mysql-secret.yaml": MYSQL_SECRET,
        "k8s/feature-toggle-configmap.yaml": FEATURE_CONFIGMAP,
        ".github/workflows/ci.yml": CI_WORKFLOW,
        ".github/docs/SECRETS.md": "# Secrets\n",
        "learning-app-ecommerce/index.php": "<?php echo 'shop'; ?>\n",
    }
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


class FakeToolRunner(ToolRunner):
    """Tool runner with scripted availability and outcomes.

    ``outcomes`` maps a tool name to a ToolRan, or to a callable taking the
    argument list and returning one. Installed tools without a scripted
    outcome succeed with empty output.
    """

    def __init__(self, installed=(), outcomes=None):
        super().__init__(timeout=5)
        self.installed = set(installed)
        self.outcomes = outcomes or {}
        self.calls: list[tuple[str, list[str]]] = []

    def locate(self, tool):
        return f"/usr/bin/{tool}" if tool in self.installed else None

    def try_run(self, tool, args, *, cwd=None):
        if tool not in self.installed:
            return ToolUnavailable(tool=tool)
        self.calls.append((tool, list(args)))
        scripted = self.outcomes.get(tool)
        if callable(scripted):
            return scripted(args)
        if scripted is not None:
            return scripted
        return ToolRan(tool=tool, argv=(tool, *args), success=True, output="", returncode=0)


ALL_TOOLS = ("hadolint", "trufflehog", "php")


@pytest.fixture
def clean_project(tmp_path):
    return write_clean_project(tmp_path / "bundle")


@pytest.fixture
def all_tools():
    return FakeToolRunner(installed=ALL_TOOLS)


@pytest.fixture
def no_tools():
    return FakeToolRunner()


def pytest_sessionfinish(session, exitstatus):
    """Fail a --cov run that produced no coverage data file.

    That happens when the tests import a stray copy of the sources instead of
    the installed ``secgate`` package.
    """
    if not session.config.getoption("--cov", default=None):
        return
    roots = {Path.cwd(), Path(session.config.rootpath)}
    if not any(any(root.glob(".coverage*")) for root in roots):
        pytest.exit("--cov was given but no .coverage data was written for secgate", returncode=1)
