"""
Tests for cli.py — argument wiring and exit codes.
"""

import pytest

from homing import cli
from homing.config import UDP_PORT
from homing.errors import FileOpenError, SendError
from homing.errstream import ErrorStream


def stream_of(*errors):
    stream = ErrorStream()
    for err in errors:
        stream.put(err)
    stream.close()
    return stream


class TestUpload:
    def test_clean_upload_exits_zero(self, monkeypatch, capsys):
        calls = []

        def fake_post_files(url, files, **kwargs):
            calls.append((url, files, kwargs))
            return stream_of()

        monkeypatch.setattr(cli, "post_files", fake_post_files)
        assert cli.main(["upload", "http://c.test/", "a.txt", "b.txt", "--compress"]) == 0

        url, files, kwargs = calls[0]
        assert url == "http://c.test/"
        assert files == ["a.txt", "b.txt"]
        assert kwargs["compress"] is True
        assert kwargs["ignore_file_open_error"] is False
        assert "Uploaded 2 file(s)" in capsys.readouterr().out

    def test_reported_errors_exit_one(self, monkeypatch, capsys):
        err = FileOpenError("b.txt", 1, FileNotFoundError("gone"))
        monkeypatch.setattr(cli, "post_files", lambda *a, **k: stream_of(err))
        assert cli.main(["upload", "http://c.test/", "a.txt", "b.txt", "--ignore-missing"]) == 1
        assert "[!]" in capsys.readouterr().out


class TestBroadcast:
    def test_errors_printed(self, monkeypatch, capsys):
        err = SendError(("10.0.0.255", 5001), OSError("unreachable"))
        captured = {}

        def fake_send(address, payload, **kwargs):
            captured.update(address=address, payload=payload)
            return stream_of(err)

        monkeypatch.setattr(cli, "send_broadcast", fake_send)
        assert cli.main(["broadcast", "HELLO", "--address", ":5001"]) == 1
        assert captured == {"address": ":5001", "payload": b"HELLO"}
        assert "10.0.0.255:5001" in capsys.readouterr().out

    def test_default_address_uses_udp_port(self, monkeypatch):
        captured = {}

        def fake_send(address, payload, **kwargs):
            captured["address"] = address
            return stream_of()

        monkeypatch.setattr(cli, "send_broadcast", fake_send)
        assert cli.main(["broadcast", "HELLO"]) == 0
        assert captured["address"] == f":{UDP_PORT}"


class TestFileCommands:
    def test_encrypt_then_decrypt(self, tmp_path):
        src, sealed, out = tmp_path / "a", tmp_path / "a.enc", tmp_path / "a.out"
        src.write_bytes(b"evidence")
        assert cli.main(["encrypt", "pw", str(src), str(sealed)]) == 0
        assert cli.main(["decrypt", "pw", str(sealed), str(out)]) == 0
        assert out.read_bytes() == b"evidence"

    def test_decrypt_wrong_password(self, tmp_path):
        src, sealed, out = tmp_path / "a", tmp_path / "a.enc", tmp_path / "a.out"
        src.write_bytes(b"evidence")
        cli.main(["encrypt", "pw", str(src), str(sealed)])
        assert cli.main(["decrypt", "nope", str(sealed), str(out)]) == 1
        assert not out.exists()

    def test_shred(self, tmp_path):
        path = tmp_path / "gone"
        path.write_bytes(b"x")
        assert cli.main(["shred", str(path), str(tmp_path / "missing")]) == 1
        assert not path.exists()

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.main([])
