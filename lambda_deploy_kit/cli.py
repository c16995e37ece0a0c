import sys
from typing import Any, Dict, Optional

import click

from .config import load_env_files, DeployConfig
from .errors import DeployError
from .logging_utils import setup_logging, get_logger
from .orchestrator import apply_deploy, check_deploy, format_summary, plan_deploy


logger = get_logger(__name__)


@click.group()
@click.option(
    "-C",
    "--chdir",
    "chdir",
    type=click.Path(file_okay=False, dir_okay=True, exists=True),
    default=".",
    help="작업 디렉토리 (기본: 현재 디렉토리)",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="로그 레벨을 DEBUG로 올립니다. (-vv 는 boto3/botocore 로그까지 출력)",
)
@click.pass_context
def main(ctx: click.Context, chdir: str, verbose: int) -> None:
    """AWS Lambda 함수 코드/설정/별칭 배포용 CLI"""
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["chdir"] = chdir
    ctx.obj["verbose"] = verbose


def _load_config_from_ctx(
    ctx: click.Context,
    overrides: Optional[Dict[str, Any]] = None,
) -> DeployConfig:
    base_dir: str = ctx.obj["chdir"]
    load_env_files(base_dir)
    cfg = DeployConfig.from_env(overrides)
    logger.debug("Config loaded: %s", cfg)
    return cfg


def _config_or_exit(ctx: click.Context, overrides: Optional[Dict[str, Any]] = None) -> DeployConfig:
    try:
        return _load_config_from_ctx(ctx, overrides)
    except Exception as e:  # noqa: BLE001
        click.echo(f"[ERROR] 설정 로드 실패: {e}", err=True)
        sys.exit(1)


@main.command()
@click.pass_context
def plan(ctx: click.Context) -> None:
    """현재 설정(.env/.env.lambda/.env.secrets)으로 실행될 단계를 요약 출력 (AWS 호출 없음)"""
    cfg = _config_or_exit(ctx)

    try:
        report = plan_deploy(cfg)
    except DeployError as e:
        click.echo(f"[ERROR] {e}", err=True)
        sys.exit(1)

    click.echo(report)


@main.command(name="deploy")
@click.option("--package", "package_path", type=str, default=None, help="배포할 zip 패키지 경로 (LAMBDA_PACKAGE 대체)")
@click.option("--function", "function_name", type=str, default=None, help="함수 이름 (LAMBDA_FUNCTION_NAME 대체)")
@click.option("--arn", "function_arn", type=str, default=None, help="함수 ARN (LAMBDA_FUNCTION_ARN 대체)")
@click.option("--alias", "alias", type=str, default=None, help="새 버전을 발행하고 연결할 별칭 (LAMBDA_ALIAS 대체)")
@click.option(
    "--no-wait",
    "no_wait",
    is_flag=True,
    help="업데이트 사이에 함수 상태(LastUpdateStatus) 대기를 하지 않습니다.",
)
@click.pass_context
def deploy(
    ctx: click.Context,
    package_path: Optional[str],
    function_name: Optional[str],
    function_arn: Optional[str],
    alias: Optional[str],
    no_wait: bool,
) -> None:
    """패키지를 업로드하고 설정/별칭을 갱신하여 배포"""
    overrides: Dict[str, Any] = {
        "package_path": package_path,
        "function_name": function_name,
        "function_arn": function_arn,
        "alias": alias,
    }
    # CLI 에서 대상을 지정하면 env 의 다른 쪽 대상은 무시한다.
    if function_name:
        overrides["function_arn"] = ""
    elif function_arn:
        overrides["function_name"] = ""
    if no_wait:
        overrides["wait_for_update"] = False

    cfg = _config_or_exit(ctx, overrides)

    try:
        result = apply_deploy(cfg)
    except DeployError as e:
        click.echo(f"[ERROR] 배포 실패: {e}", err=True)
        sys.exit(1)
    except Exception as e:  # noqa: BLE001
        logger.exception("배포 중 오류 발생")
        click.echo(f"[ERROR] 배포 실패: {e}", err=True)
        sys.exit(1)

    click.echo(format_summary(result))


@main.command()
@click.pass_context
def init(ctx: click.Context) -> None:
    """
    현재 디렉토리에 env 템플릿(env.lambda.example)을 복사하는 초기화.
    """
    import os
    from importlib import resources

    base_dir: str = ctx.obj["chdir"]

    for name in ("env.lambda.example",):
        target = os.path.join(base_dir, name)
        if os.path.exists(target):
            click.echo(f"{name} 이(가) 이미 존재하여 건너뜀")
            continue
        try:
            with resources.files("lambda_deploy_kit.examples").joinpath(name).open("r", encoding="utf-8") as src, open(
                target, "w", encoding="utf-8"
            ) as dst:
                dst.write(src.read())
            click.echo(f"{name} 템플릿을 생성했습니다.")
        except FileNotFoundError:
            click.echo(f"템플릿 {name} 을(를) 패키지에서 찾을 수 없습니다.", err=True)


@main.command()
@click.option(
    "-a",
    "--all",
    "show_all",
    is_flag=True,
    help="모든 체크 항목의 상세 상태를 출력합니다. (기본은 이슈만 요약)",
)
@click.pass_context
def check(ctx: click.Context, show_all: bool) -> None:
    """
    배포 전에 자격 증명, 대상 함수, 별칭 상태를 점검한다.
    (실제 리소스 변경은 하지 않는다)
    """
    cfg = _config_or_exit(ctx)

    try:
        report, has_issues = check_deploy(cfg, show_all=show_all)
    except Exception as e:  # noqa: BLE001
        logger.exception("사전 체크 중 오류 발생")
        click.echo(f"[ERROR] 체크 실패: {e}", err=True)
        sys.exit(1)

    click.echo(report)

    # 치명적인 이슈가 있으면 exit 1 로 종료하여 CI 등에서 감지 가능하게 한다.
    if has_issues:
        sys.exit(1)
