"""
aws_auth
--------

배포에 사용할 AWS 자격 증명을 선택하고(프로필 / 위임 역할 / 액세스 키 / 자격 증명 파일 / 기본 체인),
필요하면 STS AssumeRole 로 임시 자격 증명을 받아 boto3 세션을 만든다.

전역 설정(boto3.setup_default_session 등)은 건드리지 않고,
ClientConfig 값 하나를 만들어 이후 단계에 넘긴다.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

import boto3
from botocore.credentials import InstanceMetadataProvider, ReadOnlyCredentials
from botocore.exceptions import BotoCoreError, ClientError, ProfileNotFound
from botocore.utils import InstanceMetadataFetcher

from .aws_target import DeploymentTarget
from .config import (
    AUTH_ACCESS_KEY,
    AUTH_CREDENTIALS_FILE,
    AUTH_PROFILE,
    AUTH_ROLE_ARN,
    AssumeRoleSpec,
    DeployConfig,
)
from .errors import CredentialError, client_error_status
from .logging_utils import get_logger


logger = get_logger(__name__)

# 인스턴스 메타데이터 자격 증명 조회 시 연결 타임아웃(초)
INSTANCE_METADATA_TIMEOUT = 5.0


@dataclass(frozen=True)
class ClientConfig:
    session: boto3.Session
    region: str
    auth_mode: str
    expiration: Optional[datetime] = None

    def lambda_client(self) -> Any:
        return self.session.client("lambda", region_name=self.region)


def _instance_metadata_credentials(timeout: float = INSTANCE_METADATA_TIMEOUT) -> ReadOnlyCredentials:
    fetcher = InstanceMetadataFetcher(timeout=timeout, num_attempts=1)
    provider = InstanceMetadataProvider(iam_role_fetcher=fetcher)
    credentials = provider.load()
    if credentials is None:
        raise CredentialError(
            "인스턴스 메타데이터에서 자격 증명을 가져오지 못했습니다."
        )
    return credentials.get_frozen_credentials()


def _session_from_sts_credentials(creds: Dict[str, Any], region: str) -> boto3.Session:
    return boto3.Session(
        aws_access_key_id=creds["AccessKeyId"],
        aws_secret_access_key=creds["SecretAccessKey"],
        aws_session_token=creds["SessionToken"],
        region_name=region,
    )


def assume_role(
    session: boto3.Session,
    spec: AssumeRoleSpec,
    region: str,
) -> Tuple[boto3.Session, Optional[datetime]]:
    """
    STS AssumeRole 을 한 번 호출해 임시 자격 증명 세션을 만든다. 재시도하지 않는다.
    """
    logger.debug("Assuming role: %s", spec.role_arn)
    sts = session.client("sts", region_name=region)
    try:
        response = sts.assume_role(**spec.to_request())
    except ClientError as exc:
        status = client_error_status(exc)
        raise CredentialError(
            f"Role assume 실패: {status} - {exc}", status_code=status
        ) from exc
    except BotoCoreError as exc:
        raise CredentialError(f"Role assume 실패: {exc}") from exc

    creds = response["Credentials"]
    logger.info("역할을 assume 했습니다: %s (만료: %s)", spec.role_arn, creds.get("Expiration"))
    return _session_from_sts_credentials(creds, region), creds.get("Expiration")


def _delegated_role_session(
    role_arn: str,
    region: str,
) -> Tuple[boto3.Session, Optional[datetime]]:
    """
    인스턴스 메타데이터 자격 증명을 원본으로 삼아 role_arn 을 assume 한다.
    """
    source = _instance_metadata_credentials()
    base = boto3.Session(
        aws_access_key_id=source.access_key,
        aws_secret_access_key=source.secret_key,
        aws_session_token=source.token,
        region_name=region,
    )
    return assume_role(base, AssumeRoleSpec(role_arn=role_arn), region)


def _session_from_credentials_file(path: str, region: str) -> boto3.Session:
    """
    JSON 자격 증명 파일을 읽는다.
    {"accessKeyId", "secretAccessKey", "sessionToken"} 또는
    `aws sts` 출력과 같은 {"AccessKeyId", ...} 형식을 모두 받는다.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        raise CredentialError(f"자격 증명 파일을 읽을 수 없습니다: {path} ({exc})") from exc

    if isinstance(data.get("Credentials"), dict):
        data = data["Credentials"]

    access_key = data.get("accessKeyId") or data.get("AccessKeyId")
    secret_key = data.get("secretAccessKey") or data.get("SecretAccessKey")
    token = data.get("sessionToken") or data.get("SessionToken")
    if not access_key or not secret_key:
        raise CredentialError(f"자격 증명 파일에 액세스 키/시크릿 키가 없습니다: {path}")

    return boto3.Session(
        aws_access_key_id=access_key,
        aws_secret_access_key=secret_key,
        aws_session_token=token,
        region_name=region,
    )


def select_credentials(
    cfg: DeployConfig,
    region: str,
) -> Tuple[boto3.Session, Optional[datetime]]:
    """
    설정된 자격 증명 선택자 하나로 세션을 만든다. 없으면 botocore 기본 체인을 쓴다.
    임시 자격 증명(위임 역할)이면 만료 시각도 함께 돌려준다.
    """
    mode = cfg.auth_mode
    logger.info("자격 증명 방식: %s", mode)

    if mode == AUTH_PROFILE:
        try:
            session = boto3.Session(profile_name=cfg.profile, region_name=region)
            session.get_credentials()
            return session, None
        except ProfileNotFound as exc:
            raise CredentialError(f"AWS 프로필을 찾을 수 없습니다: {cfg.profile}") from exc

    if mode == AUTH_ROLE_ARN:
        return _delegated_role_session(cfg.role_arn or "", region)

    if mode == AUTH_ACCESS_KEY:
        return (
            boto3.Session(
                aws_access_key_id=cfg.access_key_id,
                aws_secret_access_key=cfg.secret_access_key,
                region_name=region,
            ),
            None,
        )

    if mode == AUTH_CREDENTIALS_FILE:
        return _session_from_credentials_file(cfg.credentials_json or "", region), None

    return boto3.Session(region_name=region), None


def select_session(cfg: DeployConfig, region: str) -> boto3.Session:
    session, _ = select_credentials(cfg, region)
    return session


def build_client_config(cfg: DeployConfig, target: DeploymentTarget) -> ClientConfig:
    session, expiration = select_credentials(cfg, target.region)
    if cfg.assume_role is not None:
        session, expiration = assume_role(session, cfg.assume_role, target.region)
    return ClientConfig(
        session=session,
        region=target.region,
        auth_mode=cfg.auth_mode,
        expiration=expiration,
    )
