"""
errors
------

배포 과정에서 발생하는 예외 타입 모음.

각 단계는 예외를 올리기만 하고, 프로세스 종료 여부는 CLI 최상위에서 결정한다.
"""

from __future__ import annotations

from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError


CHECK_CREDENTIALS_HINT = "AWS 자격 증명, 리전, 권한이 올바른지 확인하세요."


def client_error_status(exc: ClientError) -> Optional[int]:
    return exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")


def client_error_code(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Code", "")


def is_not_found(exc: ClientError) -> bool:
    return (
        client_error_status(exc) == 404
        or client_error_code(exc) == "ResourceNotFoundException"
    )


class DeployError(RuntimeError):
    """배포 실패 공통 예외."""


class ConfigError(DeployError, ValueError):
    """원격 호출 전에 발견된 설정 오류."""


class CredentialError(DeployError):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(f"{message}\n{CHECK_CREDENTIALS_HINT}")
        self.status_code = status_code


class FunctionNotFoundError(DeployError):
    def __init__(self, function_name: str) -> None:
        super().__init__(
            f"Lambda 함수 {function_name} 을(를) 찾을 수 없습니다. "
            "함수 이름과 AWS 리전이 올바른지 확인하세요."
        )
        self.function_name = function_name


class PackageReadError(DeployError):
    def __init__(self, path: str, reason: str = "") -> None:
        detail = f" ({reason})" if reason else ""
        super().__init__(
            f"패키지 파일을 읽을 수 없습니다: {path}{detail}. "
            "패키지 경로가 올바른지, 패키지를 미리 빌드했는지 확인하세요."
        )
        self.path = path


class AwsApiError(DeployError):
    """
    Lambda API 호출 실패.

    operation 은 boto3 메서드 이름(update_function_code 등),
    status_code 는 응답의 HTTP 상태 코드(없으면 None).
    """

    def __init__(
        self,
        operation: str,
        message: str,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code

    @classmethod
    def from_client_error(
        cls,
        operation: str,
        exc: ClientError,
        hint: str = "",
    ) -> "AwsApiError":
        status = client_error_status(exc)
        message = f"{operation} 실패: {status} - {exc}"
        if hint:
            message += f"\n{hint}"
        return cls(operation, message, status_code=status)

    @classmethod
    def from_botocore_error(
        cls,
        operation: str,
        exc: BotoCoreError,
        hint: str = "",
    ) -> "AwsApiError":
        # 응답 없이 끝난 실패(타임아웃, 연결 실패, 자격 증명 없음 등)
        message = f"{operation} 실패: {exc}"
        if hint:
            message += f"\n{hint}"
        return cls(operation, message)
