"""
lambda_deploy_kit
-----------------

미리 빌드된 zip 패키지를 AWS Lambda 함수에 배포하는 CLI 패키지.
대상 함수 조회, (선택) 역할 assume, 코드 업로드, 런타임 설정 변경, 별칭 연결을
환경변수 기반 설정으로 한 번에 실행하는 것을 목표로 한다.
"""

__all__ = [
    "config",
    "orchestrator",
]
