"""
aws_target
----------

배포 대상 Lambda 함수의 참조(이름 또는 ARN)와 리전을 결정한다.

ARN 형식: arn:<partition>:lambda:<region>:<account>:function:<name>[:<qualifier>]
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .config import DeployConfig
from .errors import ConfigError
from .logging_utils import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class LambdaArn:
    partition: str
    service: str
    region: str
    account_id: str
    resource_type: str
    function_name: str
    qualifier: Optional[str] = None


@dataclass(frozen=True)
class DeploymentTarget:
    reference: str
    region: str
    from_arn: bool = False


def parse_arn(arn: str) -> Optional[LambdaArn]:
    """
    ARN 문자열을 분해한다. ARN 형식이 아니면 None.
    """
    parts = arn.strip().split(":")
    if len(parts) < 6 or parts[0] != "arn":
        return None

    _, partition, service, region, account_id = parts[:5]
    resource = parts[5:]

    if len(resource) == 1:
        # arn:aws:service:region:account:type/name 형태
        resource_type, _, name = resource[0].partition("/")
        return LambdaArn(partition, service, region, account_id, resource_type, name)

    qualifier = resource[2] if len(resource) > 2 else None
    return LambdaArn(
        partition=partition,
        service=service,
        region=region,
        account_id=account_id,
        resource_type=resource[0],
        function_name=resource[1],
        qualifier=qualifier,
    )


def resolve_target(cfg: DeployConfig) -> DeploymentTarget:
    """
    이름/ARN 중 정확히 하나가 있어야 한다. 원격 호출 전에 검사한다.
    ARN 에 리전이 있으면 설정된 리전보다 우선한다.
    """
    if not cfg.function_name and not cfg.function_arn:
        raise ConfigError("함수 이름 또는 ARN 중 하나를 지정해야 합니다.")
    if cfg.function_name and cfg.function_arn:
        raise ConfigError("함수 이름과 ARN 을 동시에 지정할 수 없습니다.")

    if cfg.function_name:
        return DeploymentTarget(reference=cfg.function_name, region=cfg.region)

    arn = cfg.function_arn or ""
    region = cfg.region
    info = parse_arn(arn)
    if info is None:
        logger.warning("ARN 형식을 해석할 수 없어 설정된 리전을 사용합니다: %s", arn)
    elif info.region:
        if info.region != cfg.region:
            logger.info("ARN 의 리전(%s)으로 대체합니다. (설정값: %s)", info.region, cfg.region)
        region = info.region

    return DeploymentTarget(reference=arn, region=region, from_arn=True)
