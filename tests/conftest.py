"""
pytest 설정:

로컬 작업 환경에 설치된 다른 버전의 lambda_deploy_kit 패키지가 존재할 때,
`pytest` 실행 시 site-packages 쪽이 먼저 import 되어 테스트가 깨질 수 있다.

테스트는 항상 현재 레포의 소스를 대상으로 해야 하므로, repo root 를 sys.path 최상단에 고정한다.
"""

from __future__ import annotations

import os
import sys

import pytest


DEPLOY_ENV_KEYS = [
    "LAMBDA_PACKAGE",
    "LAMBDA_FUNCTION_NAME",
    "LAMBDA_FUNCTION_ARN",
    "LAMBDA_TIMEOUT",
    "LAMBDA_MEMORY",
    "LAMBDA_HANDLER",
    "LAMBDA_ROLE",
    "LAMBDA_ALIAS",
    "LAMBDA_WAIT_FOR_UPDATE",
    "AWS_DEPLOY_REGION",
    "AWS_DEPLOY_PROFILE",
    "AWS_DEPLOY_ROLE_ARN",
    "AWS_DEPLOY_ACCESS_KEY_ID",
    "AWS_DEPLOY_SECRET_ACCESS_KEY",
    "AWS_DEPLOY_CREDENTIALS_JSON",
    "AWS_ASSUME_ROLE_ARN",
    "AWS_ASSUME_ROLE_SESSION_NAME",
    "AWS_ASSUME_ROLE_EXTERNAL_ID",
    "AWS_ASSUME_ROLE_DURATION_SECONDS",
]


def pytest_configure() -> None:
    repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    if repo_root not in sys.path:
        sys.path.insert(0, repo_root)


@pytest.fixture(autouse=True)
def clean_deploy_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # 개발자 셸에 남아 있는 배포 설정이 테스트에 섞이지 않도록 한다.
    for key in DEPLOY_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
