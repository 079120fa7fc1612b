from unittest.mock import patch

import yaml

from tools.gobuild.cli import main
from tools.gobuild.core.runner import CompletedCommand, RunnerError


def _write_service(path, gopath, functions, **options):
    go_build = {"goPath": f"{gopath.resolve().as_posix()}/src/"}
    go_build.update(options)
    document = {
        "service": "widgets",
        "provider": {"name": "aws", "runtime": "go1.x"},
        "custom": {"go-build": go_build},
        "functions": functions,
    }
    service_file = path / "serverless.yml"
    service_file.write_text(yaml.safe_dump(document, sort_keys=False), encoding="utf-8")
    return service_file


def test_build_dry_run(service_dir, gopath, capsys):
    service_file = _write_service(
        service_dir, gopath, {"widget": {"handler": "entrypoints/widget.Handle"}}
    )

    rc = main(["--config", str(service_file), "--dry-run", "build"])

    assert rc == 0
    out = capsys.readouterr().out
    assert "[dry-run] generate" in out
    assert "[dry-run] $ GOOS=linux go build" in out
    assert not (service_dir / "generatedEntrypoints").exists()


@patch("tools.gobuild.core.runner.CommandRunner.run")
def test_build_failure_exit_code(mock_run, service_dir, gopath, capsys):
    mock_run.side_effect = RunnerError("command failed with exit code 1", command="go build")
    service_file = _write_service(service_dir, gopath, {"hello": {"handler": "hello.go"}})

    rc = main(["--config", str(service_file), "build", "--local"])

    assert rc == 1
    err = capsys.readouterr().err
    assert "To replicate please run:" in err
    assert 'Error: Go build failure: go build -ldflags="-s -w" -o bin/hello hello.go' in err
    assert "Hint: run `gobuild build --help`." in err


def test_test_without_tests_exits_zero(service_dir, gopath, capsys):
    service_file = _write_service(service_dir, gopath, {"hello": {"handler": "hello.go"}})

    assert main(["--config", str(service_file), "test"]) == 0
    assert "No tests to run" in capsys.readouterr().out


@patch("tools.gobuild.core.runner.CommandRunner.run")
def test_test_runs_configured_tests(mock_run, service_dir, gopath):
    mock_run.return_value = CompletedCommand("go test", 0)
    service_file = _write_service(
        service_dir, gopath, {"hello": {"handler": "hello.go"}}, tests=["./..."]
    )

    assert main(["--config", str(service_file), "test"]) == 0
    assert mock_run.call_args[0][0].render() == "stage=testing GO_TEST=serverless go test -v ./..."


def test_package_writes_output(service_dir, gopath, tmp_path):
    service_file = _write_service(service_dir, gopath, {"hello": {"handler": "hello/main.go"}})
    output = tmp_path / "out" / "serverless.yml"

    rc = main(["--config", str(service_file), "package", "--output", str(output)])

    assert rc == 0
    document = yaml.safe_load(output.read_text(encoding="utf-8"))
    assert document["functions"]["hello"]["handler"] == "bin/hello/main"
    assert document["functions"]["hello"]["package"]["exclude"] == ["./**"]
    original = yaml.safe_load(service_file.read_text(encoding="utf-8"))
    assert original["functions"]["hello"]["handler"] == "hello/main.go"


def test_package_prints_to_stdout(service_dir, gopath, capsys):
    service_file = _write_service(service_dir, gopath, {"hello": {"handler": "hello.go"}})

    assert main(["--config", str(service_file), "package", "--function", "hello"]) == 0
    out = capsys.readouterr().out
    assert "handler: bin/hello" in out


def test_missing_config(tmp_path, capsys):
    rc = main(["--config", str(tmp_path / "missing.yml"), "build"])

    assert rc == 1
    err = capsys.readouterr().err
    assert "serverless config not found" in err
    assert "Hint: run `gobuild build --help`." in err


def test_unknown_function(service_dir, gopath, capsys):
    service_file = _write_service(service_dir, gopath, {"hello": {"handler": "hello.go"}})

    assert main(["--config", str(service_file), "build", "-f", "nope"]) == 1
    err = capsys.readouterr().err
    assert "doesn't exist" in err
    assert "Hint: run `gobuild build --help`." in err


@patch("tools.gobuild.core.runner.CommandRunner.run")
def test_test_failure_exit_code(mock_run, service_dir, gopath, capsys):
    mock_run.side_effect = RunnerError("command failed with exit code 1", command="go test")
    service_file = _write_service(
        service_dir, gopath, {"hello": {"handler": "hello.go"}}, tests=["./..."]
    )

    assert main(["--config", str(service_file), "test"]) == 1
    err = capsys.readouterr().err
    assert "Error running test on ./..." in err
    assert "Error: Go test failure: stage=testing GO_TEST=serverless go test -v ./..." in err
