from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .config import DeployConfig
from .errors import ConfigError, DeployError, PackageReadError
from .logging_utils import get_logger
from . import (
    aws_auth,
    aws_lambda,
    aws_target,
)


logger = get_logger(__name__)


@dataclass(frozen=True)
class DeployResult:
    function: str
    region: str
    version: Optional[str]
    code_sha256: Optional[str] = None
    role_updated: bool = False
    config_updated: bool = False
    alias: Optional[str] = None
    alias_action: Optional[str] = None


def read_package(path: str) -> bytes:
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as exc:
        raise PackageReadError(path, exc.strerror or str(exc)) from exc


def _desired_values(cfg: DeployConfig) -> Dict[str, Any]:
    desired = dict(cfg.config_delta())
    if cfg.role:
        desired["Role"] = cfg.role
    return desired


def plan_deploy(cfg: DeployConfig) -> str:
    """
    현재 설정으로 어떤 호출이 일어날지 요약 텍스트를 리턴한다. 실제 AWS 호출은 하지 않는다.
    """
    target = aws_target.resolve_target(cfg)
    delta = cfg.config_delta()

    lines: List[str] = []
    lines.append("# Deploy plan")
    lines.append(f"- function: {target.reference}")
    lines.append(f"- region: {target.region}")
    lines.append(f"- package: {cfg.package_path}")
    lines.append(f"- auth: {cfg.auth_mode}")
    if cfg.assume_role is not None:
        lines.append(f"- assume_role: {cfg.assume_role.role_arn}")
    lines.append("")

    lines.append("## Steps")
    lines.append("- get_function")
    if cfg.role:
        lines.append(f"- update_function_configuration (Role={cfg.role})")
    lines.append(f"- update_function_code (publish={bool(cfg.alias)})")
    if delta:
        changes = ", ".join(f"{k}={v}" for k, v in delta.items())
        lines.append(f"- update_function_configuration ({changes})")
    else:
        lines.append("- update_function_configuration: SKIPPED (변경 없음)")
    if cfg.alias:
        lines.append(f"- create_or_update_alias ({cfg.alias} -> 새 버전)")
    else:
        lines.append("- alias: SKIPPED")

    return "\n".join(lines)


def apply_deploy(cfg: DeployConfig) -> DeployResult:
    """
    조회 -> (역할 변경) -> 코드 업로드 -> (설정 변경) -> (별칭 연결) 순서로 실행한다.

    어느 단계든 실패하면 DeployError 계열 예외가 그대로 올라가고,
    이미 적용된 단계는 되돌리지 않는다.
    """
    target = aws_target.resolve_target(cfg)
    client_cfg = aws_auth.build_client_config(cfg, target)
    client = client_cfg.lambda_client()
    function = target.reference

    logger.info("배포 대상: %s (%s)", function, target.region)
    aws_lambda.get_function(client, function)

    zip_bytes = read_package(cfg.package_path)

    role_updated = False
    if cfg.role:
        aws_lambda.update_role(client, function, cfg.role)
        role_updated = True
        if cfg.wait_for_update:
            aws_lambda.wait_until_updated(client, function)

    publish = bool(cfg.alias)
    code = aws_lambda.update_code(client, function, zip_bytes, publish=publish)
    version = code.get("Version")

    delta = cfg.config_delta()
    if delta and cfg.wait_for_update:
        aws_lambda.wait_until_updated(client, function)
    config_updated = aws_lambda.update_configuration(client, function, delta) is not None

    alias_action: Optional[str] = None
    if publish:
        if not version:
            raise DeployError("update_function_code 응답에 Version 이 없어 별칭을 연결할 수 없습니다.")
        alias_action = aws_lambda.create_or_update_alias(
            client, function, cfg.alias or "", version
        )

    return DeployResult(
        function=function,
        region=target.region,
        version=version,
        code_sha256=code.get("CodeSha256"),
        role_updated=role_updated,
        config_updated=config_updated,
        alias=cfg.alias,
        alias_action=alias_action,
    )


def format_summary(result: DeployResult) -> str:
    lines: List[str] = []
    lines.append("# Deploy summary")
    lines.append(f"- function: {result.function}")
    lines.append(f"- region: {result.region}")
    lines.append(f"- version: {result.version or '(unpublished)'}")
    if result.code_sha256:
        lines.append(f"- code_sha256: {result.code_sha256}")
    lines.append(f"- role_updated: {result.role_updated}")
    lines.append(f"- config_updated: {result.config_updated}")
    if result.alias:
        lines.append(f"- alias: {result.alias} ({result.alias_action})")
    else:
        lines.append("- alias: (none)")
    return "\n".join(lines)


def check_deploy(cfg: DeployConfig, show_all: bool = False) -> tuple[str, bool]:
    """
    실제 변경 없이 자격 증명, 함수 존재 여부, 현재 설정값, 별칭 상태를 점검한다.

    Returns:
        summary: 사람이 읽기 좋은 텍스트 요약
        has_issues: 치명적인 이슈(대상 없음, 권한 오류 등)가 있는지 여부
    """
    lines: List[str] = []
    critical: List[str] = []
    changes: List[str] = []

    try:
        target = aws_target.resolve_target(cfg)
    except ConfigError as e:
        return f"# Deploy pre-check\n- [CRITICAL] {e}", True

    lines.append("# Deploy pre-check")
    lines.append(f"- function: {target.reference}")
    lines.append(f"- region: {target.region}")
    lines.append("")

    # 1) 패키지
    lines.append("## Package")
    if os.path.isfile(cfg.package_path) and os.access(cfg.package_path, os.R_OK):
        if show_all:
            size = os.path.getsize(cfg.package_path)
            lines.append(f"- {cfg.package_path}: {size} bytes")
    else:
        msg = str(PackageReadError(cfg.package_path, "파일이 없거나 읽기 권한이 없습니다"))
        lines.append(f"- {msg}")
        critical.append(msg)
    lines.append("")

    # 2) 자격 증명 + 함수
    lines.append("## Function")
    client: Any = None
    current: Dict[str, Any] = {}
    try:
        client = aws_auth.build_client_config(cfg, target).lambda_client()
        current = aws_lambda.get_function(client, target.reference).get("Configuration", {})
        if show_all:
            lines.append(f"- runtime: {current.get('Runtime', '(unknown)')}")
            lines.append(f"- last_modified: {current.get('LastModified', '(unknown)')}")
        for key, desired in _desired_values(cfg).items():
            now = current.get(key)
            if now != desired:
                changes.append(f"{key}: {now} -> {desired}")
            elif show_all:
                lines.append(f"- {key}: {now} (변경 없음)")
    except DeployError as e:
        lines.append(f"- {e}")
        critical.append(str(e))
        client = None
    lines.append("")

    # 3) 별칭
    if cfg.alias:
        lines.append("## Alias")
        if client is None:
            lines.append("- (함수 조회 실패로 건너뜀)")
        else:
            try:
                existing = aws_lambda.get_alias(client, target.reference, cfg.alias)
                if existing is None:
                    lines.append(f"- {cfg.alias}: 없음 (배포 시 생성)")
                else:
                    lines.append(
                        f"- {cfg.alias}: version {existing.get('FunctionVersion')} (배포 시 갱신)"
                    )
            except DeployError as e:
                lines.append(f"- {e}")
                critical.append(str(e))
        lines.append("")

    lines.append("## Changes")
    if changes:
        for c in changes:
            lines.append(f"- {c}")
    else:
        lines.append("- (설정 변경 없음, 코드만 업로드)")
    lines.append("")

    lines.append("## Summary")
    if critical:
        lines.append("- 상태: 크리티컬 이슈가 있습니다. 배포 전 반드시 해결해야 합니다.")
    else:
        lines.append("- 상태: 주요 이슈 없음 (배포 가능 상태로 보입니다)")

    return "\n".join(lines), bool(critical)
