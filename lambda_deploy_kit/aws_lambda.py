"""
aws_lambda
----------

Lambda API(boto3 lambda client) 호출 단위를 정의한다.
각 함수는 한 번의 원격 호출(또는 waiter)만 책임지고, 실패 시 DeployError 계열 예외를 올린다.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from botocore.exceptions import BotoCoreError, ClientError, WaiterError

from .errors import (
    CHECK_CREDENTIALS_HINT,
    AwsApiError,
    FunctionNotFoundError,
    is_not_found,
)
from .logging_utils import get_logger


logger = get_logger(__name__)

ALIAS_CREATED = "created"
ALIAS_UPDATED = "updated"


def get_function(client: Any, function_name: str) -> Dict[str, Any]:
    try:
        return client.get_function(FunctionName=function_name)
    except ClientError as exc:
        if is_not_found(exc):
            raise FunctionNotFoundError(function_name) from exc
        raise AwsApiError.from_client_error(
            "get_function", exc, hint=CHECK_CREDENTIALS_HINT
        ) from exc
    except BotoCoreError as exc:
        raise AwsApiError.from_botocore_error(
            "get_function", exc, hint=CHECK_CREDENTIALS_HINT
        ) from exc


def update_configuration(
    client: Any,
    function_name: str,
    delta: Mapping[str, Any],
) -> Optional[Dict[str, Any]]:
    """
    delta 가 비어 있으면 호출하지 않고 None 을 돌려준다.
    """
    if not delta:
        logger.info("변경할 설정이 없습니다.")
        return None

    params = dict(delta)
    params["FunctionName"] = function_name
    try:
        response = client.update_function_configuration(**params)
    except ClientError as exc:
        raise AwsApiError.from_client_error("update_function_configuration", exc) from exc
    except BotoCoreError as exc:
        raise AwsApiError.from_botocore_error("update_function_configuration", exc) from exc
    logger.info("설정을 업데이트했습니다: %s", ", ".join(sorted(delta)))
    return response


def update_role(client: Any, function_name: str, role: str) -> Dict[str, Any]:
    logger.info("함수 실행 역할 설정: %s", role)
    try:
        return client.update_function_configuration(FunctionName=function_name, Role=role)
    except ClientError as exc:
        raise AwsApiError.from_client_error("update_function_configuration", exc) from exc
    except BotoCoreError as exc:
        raise AwsApiError.from_botocore_error("update_function_configuration", exc) from exc


def update_code(
    client: Any,
    function_name: str,
    zip_bytes: bytes,
    *,
    publish: bool = False,
) -> Dict[str, Any]:
    params: Dict[str, Any] = {"FunctionName": function_name, "ZipFile": zip_bytes}
    if publish:
        params["Publish"] = True

    logger.info("패키지 업로드 중... (%d bytes)", len(zip_bytes))
    try:
        response = client.update_function_code(**params)
    except ClientError as exc:
        raise AwsApiError.from_client_error("update_function_code", exc) from exc
    except BotoCoreError as exc:
        raise AwsApiError.from_botocore_error("update_function_code", exc) from exc

    logger.info("패키지 배포 완료. version=%s", response.get("Version"))
    return response


def get_alias(client: Any, function_name: str, alias: str) -> Optional[Dict[str, Any]]:
    """
    별칭이 없으면 None. 그 외 실패는 AwsApiError.
    """
    try:
        return client.get_alias(FunctionName=function_name, Name=alias)
    except ClientError as exc:
        if is_not_found(exc):
            return None
        raise AwsApiError.from_client_error("get_alias", exc) from exc
    except BotoCoreError as exc:
        raise AwsApiError.from_botocore_error("get_alias", exc) from exc


def create_or_update_alias(
    client: Any,
    function_name: str,
    alias: str,
    version: str,
) -> str:
    """
    별칭이 없으면 생성, 있으면 갱신한다. 어느 쪽이든 version 을 가리키게 한다.

    Returns:
        "created" 또는 "updated"
    """
    logger.info("별칭 %s 을(를) 버전 %s 에 연결합니다.", alias, version)
    existing = get_alias(client, function_name, alias)

    if existing is None:
        logger.info("별칭 %s 이(가) 없어 새로 생성합니다.", alias)
        operation = "create_alias"
        action = ALIAS_CREATED
    else:
        logger.info("별칭 %s 이(가) 이미 있어 갱신합니다.", alias)
        operation = "update_alias"
        action = ALIAS_UPDATED

    try:
        getattr(client, operation)(
            FunctionName=function_name,
            Name=alias,
            FunctionVersion=version,
        )
    except ClientError as exc:
        raise AwsApiError.from_client_error(operation, exc) from exc
    except BotoCoreError as exc:
        raise AwsApiError.from_botocore_error(operation, exc) from exc

    return action


def wait_until_updated(client: Any, function_name: str) -> None:
    """
    직전 업데이트(LastUpdateStatus)가 끝날 때까지 기다린다.
    진행 중에 다음 업데이트를 보내면 ResourceConflictException 이 난다.
    """
    logger.debug("함수 업데이트 완료 대기: %s", function_name)
    try:
        client.get_waiter("function_updated").wait(FunctionName=function_name)
    except WaiterError as exc:
        raise AwsApiError(
            "function_updated",
            f"함수 업데이트 대기 실패: {function_name} ({exc})",
        ) from exc
