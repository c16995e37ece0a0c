import pytest
from click.testing import CliRunner

from lambda_deploy_kit import cli
from lambda_deploy_kit.errors import FunctionNotFoundError
from lambda_deploy_kit.orchestrator import DeployResult


def test_deploy_without_target_exits_with_error(tmp_path) -> None:  # noqa: ANN001
    runner = CliRunner()

    result = runner.invoke(cli.main, ["-C", str(tmp_path), "deploy", "--package", "f.zip"])

    assert result.exit_code == 1
    assert "[ERROR]" in result.output


def test_deploy_reads_env_file_and_prints_summary(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:  # noqa: ANN001
    (tmp_path / ".env.lambda").write_text(
        "LAMBDA_PACKAGE=dist/function.zip\nLAMBDA_FUNCTION_NAME=fromEnv\n",
        encoding="utf-8",
    )
    seen = {}

    def fake_apply(cfg):  # noqa: ANN001, ANN202
        seen["cfg"] = cfg
        return DeployResult(function=cfg.function_name, region=cfg.region, version="4", alias="prod", alias_action="created")

    monkeypatch.setattr(cli, "apply_deploy", fake_apply)
    runner = CliRunner()

    result = runner.invoke(cli.main, ["-C", str(tmp_path), "deploy", "--function", "myFn", "--alias", "prod"])

    assert result.exit_code == 0, result.output
    assert seen["cfg"].function_name == "myFn"
    assert seen["cfg"].package_path == "dist/function.zip"
    assert "# Deploy summary" in result.output
    assert "prod (created)" in result.output


def test_deploy_error_exits_with_message(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:  # noqa: ANN001
    def fake_apply(cfg):  # noqa: ANN001, ANN202
        raise FunctionNotFoundError(cfg.function_name)

    monkeypatch.setattr(cli, "apply_deploy", fake_apply)
    monkeypatch.setenv("LAMBDA_PACKAGE", "f.zip")
    runner = CliRunner()

    result = runner.invoke(cli.main, ["-C", str(tmp_path), "deploy", "--function", "ghost"])

    assert result.exit_code == 1
    assert "ghost" in result.output


def test_plan_prints_steps(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:  # noqa: ANN001
    monkeypatch.setenv("LAMBDA_PACKAGE", "f.zip")
    monkeypatch.setenv("LAMBDA_FUNCTION_ARN", "arn:aws:lambda:eu-west-1:123456789012:function:myFn")
    runner = CliRunner()

    result = runner.invoke(cli.main, ["-C", str(tmp_path), "plan"])

    assert result.exit_code == 0, result.output
    assert "- region: eu-west-1" in result.output
    assert "SKIPPED" in result.output


def test_init_copies_env_template(tmp_path) -> None:  # noqa: ANN001
    runner = CliRunner()

    result = runner.invoke(cli.main, ["-C", str(tmp_path), "init"])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "env.lambda.example").read_text(encoding="utf-8").startswith("# ")


def test_deploy_with_empty_alias_exits_before_deploying(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:  # noqa: ANN001
    def fake_apply(cfg):  # noqa: ANN001, ANN202
        raise AssertionError("설정 오류면 배포를 시작하지 않는다")

    monkeypatch.setattr(cli, "apply_deploy", fake_apply)
    monkeypatch.setenv("LAMBDA_PACKAGE", "f.zip")
    runner = CliRunner()

    result = runner.invoke(cli.main, ["-C", str(tmp_path), "deploy", "--function", "myFn", "--alias", ""])

    assert result.exit_code == 1
    assert "[ERROR]" in result.output
