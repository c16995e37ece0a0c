from __future__ import annotations

import os
import time
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, List, Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigError


ENV_FILES_DEFAULT_ORDER = [".env", ".env.lambda", ".env.secrets"]

DEFAULT_REGION = "us-east-1"

# 자격 증명 선택자 (평가 순서대로)
AUTH_PROFILE = "profile"
AUTH_ROLE_ARN = "role_arn"
AUTH_ACCESS_KEY = "access_key"
AUTH_CREDENTIALS_FILE = "credentials_file"
AUTH_DEFAULT = "default"


def load_env_files(base_dir: str = ".",
                   files: Optional[List[str]] = None) -> None:
    """
    주어진 디렉토리에서 .env 계열 파일을 순서대로 로드한다.
    후순위 파일이 같은 키를 덮어쓴다.
    """
    order = files or ENV_FILES_DEFAULT_ORDER
    for name in order:
        path = os.path.join(base_dir, name)
        if os.path.exists(path):
            load_dotenv(path, override=True)


def _get_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_str(name: str) -> Optional[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return raw.strip()


def _get_int(name: str, errors: List[str]) -> Optional[int]:
    raw = _get_str(name)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        errors.append(f"{name} 는 정수여야 합니다: {raw!r}")
        return None


@dataclass(frozen=True)
class AssumeRoleSpec:
    """기존 자격 증명 위에서 추가로 assume 할 역할."""

    role_arn: str
    session_name: Optional[str] = None
    external_id: Optional[str] = None
    duration_seconds: Optional[int] = None

    def to_request(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "RoleArn": self.role_arn,
            "RoleSessionName": self.session_name or f"lambda-deploy-{int(time.time())}",
        }
        if self.external_id:
            params["ExternalId"] = self.external_id
        if self.duration_seconds:
            params["DurationSeconds"] = self.duration_seconds
        return params


@dataclass(frozen=True)
class DeployConfig:
    # 필수
    package_path: str

    # 대상 (둘 중 정확히 하나)
    function_name: Optional[str] = None
    function_arn: Optional[str] = None

    region: str = DEFAULT_REGION

    # 자격 증명 선택자 (동시에 둘 이상 지정하면 오류)
    profile: Optional[str] = None
    role_arn: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    credentials_json: Optional[str] = None

    assume_role: Optional[AssumeRoleSpec] = None

    # 런타임 설정
    timeout: Optional[int] = None
    memory: Optional[int] = None
    handler: Optional[str] = None

    role: Optional[str] = None
    alias: Optional[str] = None

    wait_for_update: bool = True

    def credential_sources(self) -> List[str]:
        """설정된 자격 증명 선택자 목록 (평가 순서 유지)."""
        sources: List[str] = []
        if self.profile:
            sources.append(AUTH_PROFILE)
        if self.role_arn:
            sources.append(AUTH_ROLE_ARN)
        if self.access_key_id or self.secret_access_key:
            sources.append(AUTH_ACCESS_KEY)
        if self.credentials_json:
            sources.append(AUTH_CREDENTIALS_FILE)
        return sources

    @property
    def auth_mode(self) -> str:
        sources = self.credential_sources()
        if not sources:
            return AUTH_DEFAULT
        if len(sources) > 1:
            raise ConfigError(
                "자격 증명 설정이 충돌합니다: " + ", ".join(sources)
                + " (하나만 지정하세요)"
            )
        return sources[0]

    def config_delta(self) -> Dict[str, Any]:
        """명시적으로 지정된 런타임 설정 필드만 담는다. 비어 있으면 변경 없음."""
        delta: Dict[str, Any] = {}
        if self.timeout is not None:
            delta["Timeout"] = self.timeout
        if self.memory is not None:
            delta["MemorySize"] = self.memory
        if self.handler is not None:
            delta["Handler"] = self.handler
        return delta

    def validate(self) -> None:
        problems: List[str] = []

        if not self.package_path:
            problems.append("패키지 경로(LAMBDA_PACKAGE)가 필요합니다.")

        if not self.function_name and not self.function_arn:
            problems.append(
                "함수 이름(LAMBDA_FUNCTION_NAME) 또는 ARN(LAMBDA_FUNCTION_ARN) 중 하나를 지정해야 합니다."
            )
        elif self.function_name and self.function_arn:
            problems.append(
                "함수 이름과 ARN 을 동시에 지정할 수 없습니다. 하나만 지정하세요."
            )

        sources = self.credential_sources()
        if len(sources) > 1:
            problems.append(
                "자격 증명 설정이 충돌합니다: " + ", ".join(sources)
                + " (하나만 지정하세요)"
            )
        if bool(self.access_key_id) != bool(self.secret_access_key):
            problems.append(
                "액세스 키 ID 와 시크릿 키는 함께 지정해야 합니다."
            )

        if self.timeout is not None and self.timeout <= 0:
            problems.append(f"timeout 은 양수여야 합니다: {self.timeout}")
        if self.memory is not None and self.memory <= 0:
            problems.append(f"memory 는 양수여야 합니다: {self.memory}")

        if self.alias is not None and not self.alias.strip():
            problems.append("별칭 이름이 비어 있습니다. 별칭을 쓰지 않으려면 지정하지 마세요.")

        if not self.region:
            problems.append("리전이 비어 있습니다.")

        if problems:
            raise ConfigError("설정 오류:\n- " + "\n- ".join(problems))

    @classmethod
    def from_env(cls, overrides: Optional[Mapping[str, Any]] = None) -> "DeployConfig":
        errors: List[str] = []

        assume_role: Optional[AssumeRoleSpec] = None
        assume_role_arn = _get_str("AWS_ASSUME_ROLE_ARN")
        if assume_role_arn:
            assume_role = AssumeRoleSpec(
                role_arn=assume_role_arn,
                session_name=_get_str("AWS_ASSUME_ROLE_SESSION_NAME"),
                external_id=_get_str("AWS_ASSUME_ROLE_EXTERNAL_ID"),
                duration_seconds=_get_int("AWS_ASSUME_ROLE_DURATION_SECONDS", errors),
            )

        cfg = cls(
            package_path=_get_str("LAMBDA_PACKAGE") or "",
            function_name=_get_str("LAMBDA_FUNCTION_NAME"),
            function_arn=_get_str("LAMBDA_FUNCTION_ARN"),
            region=_get_str("AWS_DEPLOY_REGION") or DEFAULT_REGION,
            profile=_get_str("AWS_DEPLOY_PROFILE"),
            role_arn=_get_str("AWS_DEPLOY_ROLE_ARN"),
            access_key_id=_get_str("AWS_DEPLOY_ACCESS_KEY_ID"),
            secret_access_key=_get_str("AWS_DEPLOY_SECRET_ACCESS_KEY"),
            credentials_json=_get_str("AWS_DEPLOY_CREDENTIALS_JSON"),
            assume_role=assume_role,
            timeout=_get_int("LAMBDA_TIMEOUT", errors),
            memory=_get_int("LAMBDA_MEMORY", errors),
            handler=_get_str("LAMBDA_HANDLER"),
            role=_get_str("LAMBDA_ROLE"),
            alias=_get_str("LAMBDA_ALIAS"),
            wait_for_update=_get_bool("LAMBDA_WAIT_FOR_UPDATE", True),
        )

        if errors:
            raise ConfigError("설정 오류:\n- " + "\n- ".join(errors))

        if overrides:
            known = {f.name for f in fields(cls)}
            unknown = sorted(set(overrides) - known)
            if unknown:
                raise ConfigError("알 수 없는 설정 키: " + ", ".join(unknown))
            # CLI 에서 넘어온 None 은 '지정 안 함'으로 본다.
            applied = {k: v for k, v in overrides.items() if v is not None}
            cfg = replace(cfg, **applied)

        cfg.validate()
        return cfg
