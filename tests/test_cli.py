import os
import signal
import threading

from hajserv.cli import main


def test_too_many_arguments(capsys):
    assert main(["a.conf", "b.conf"]) == 1
    assert "Usage" in capsys.readouterr().err


def test_missing_config_file(tmp_path, capsys):
    path = tmp_path / "absent.conf"
    assert main([str(path)]) == 1
    err = capsys.readouterr().err
    assert f"Failed to load config file: {path}" in err
    assert "Could not open config file" in err


def test_syntax_error_in_config(tmp_path, capsys):
    path = tmp_path / "bad.conf"
    path.write_text("server {\nlisten 8080\n", encoding="utf-8")
    assert main([str(path)]) == 1
    assert "server block not closed properly before EOF" in capsys.readouterr().err


def test_runs_until_sigterm(tmp_path, capsys):
    path = tmp_path / "ok.conf"
    path.write_text("log_level debug;\n", encoding="utf-8")
    timer = threading.Timer(0.3, os.kill, (os.getpid(), signal.SIGTERM))
    timer.start()
    try:
        status = main([str(path)])
    finally:
        timer.cancel()
    out = capsys.readouterr().out
    assert status == 0
    assert "Config file loaded successfully!" in out
    assert "[ Global Config ]" in out
    assert "Exiting main poll loop..." in out