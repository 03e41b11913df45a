"""Tests for the command line entry point."""

from unittest.mock import patch

import pytest

from amethyst import cli


def run_main(argv):
    with patch.object(cli, "send_ipc_command", return_value=0) as send:
        with pytest.raises(SystemExit) as exc_info:
            cli.main(argv)
    return send, exc_info.value.code


@pytest.mark.parametrize(
    "argv,command,args",
    [
        (["play-file", "/music/a.mp3"], "play-file", ["/music/a.mp3"]),
        (["play-folder", "~/Music"], "play-folder", ["~/Music"]),
        (["next"], "next", []),
        (["previous", "2"], "previous", ["2"]),
        (["seek-forward", "30"], "seek-forward", ["30.0"]),
        (["volume", "0.5"], "volume", ["0.5"]),
        (["toggle"], "toggle", []),
        (["status"], "status", []),
    ],
)
def test_commands_are_forwarded(argv, command, args) -> None:
    send, code = run_main(argv)

    send.assert_called_once_with(command, args, None)
    assert code == 0


def test_socket_option_is_forwarded() -> None:
    send, _ = run_main(["--socket", "/tmp/x.sock", "pause"])
    send.assert_called_once_with("pause", [], "/tmp/x.sock")


def test_no_subcommand_prints_help(capsys) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.main([])
    assert exc_info.value.code == 1
    assert "serve" in capsys.readouterr().out


def test_send_ipc_command_exit_codes(capsys) -> None:
    with patch("amethyst.ipc.send_command", return_value=(True, "Paused")):
        assert cli.send_ipc_command("pause", []) == 0
    assert "Paused" in capsys.readouterr().out

    with patch("amethyst.ipc.send_command", return_value=(False, "Amethyst is not running")):
        assert cli.send_ipc_command("pause", []) == 1
    assert "not running" in capsys.readouterr().err


def test_serve_starts_daemon() -> None:
    with patch("amethyst.app.serve") as serve:
        cli.main(["serve"])
    serve.assert_called_once_with()
