import json

from openai import OpenAIError

from brandboost import cli
from brandboost.services.asset_generator import AssetGenerator


def _patch_generator(monkeypatch, fake_client):
    monkeypatch.setattr(cli, "AssetGenerator", lambda: AssetGenerator(client=fake_client))


def test_writes_jpeg_asset(tmp_path, monkeypatch, fake_client, png_bytes):
    _patch_generator(monkeypatch, fake_client)
    logo = tmp_path / "logo.png"
    logo.write_bytes(png_bytes)
    out_dir = tmp_path / "out"

    code = cli.cli_main([
        "--logo", str(logo),
        "--business-name", "Acme",
        "--description", "Summer sale",
        "--format", "jpeg",
        "--out-dir", str(out_dir),
    ])

    assert code == 0
    written = out_dir / "Acme-asset.jpeg"
    assert written.read_bytes()[:2] == b"\xff\xd8"


def test_prints_json_without_out_dir(tmp_path, monkeypatch, capsys, fake_client, png_bytes):
    _patch_generator(monkeypatch, fake_client)
    logo = tmp_path / "logo.png"
    logo.write_bytes(png_bytes)

    code = cli.cli_main(["--logo", str(logo), "--business-name", "Acme", "--description", "Summer sale"])

    assert code == 0
    assert json.loads(capsys.readouterr().out)["asset_data_uri"].startswith("data:image/png;base64,")


def test_validation_errors_exit_before_generation(monkeypatch, capsys, fake_client):
    _patch_generator(monkeypatch, fake_client)

    code = cli.cli_main(["--business-name", "A"])

    assert code == 2
    err = capsys.readouterr().err
    assert "logo: Logo is required." in err
    assert "image_description: Image description is required." in err
    assert fake_client.responses.calls == []


def test_missing_logo_file_exits_cleanly(tmp_path, monkeypatch, capsys, fake_client):
    _patch_generator(monkeypatch, fake_client)

    code = cli.cli_main([
        "--logo", str(tmp_path / "missing.png"),
        "--business-name", "Acme",
        "--description", "Summer sale",
    ])

    assert code == 2
    assert "Cannot read image" in capsys.readouterr().err
    assert fake_client.responses.calls == []


def test_missing_reference_file_exits_cleanly(tmp_path, capsys, png_bytes):
    logo = tmp_path / "logo.png"
    logo.write_bytes(png_bytes)

    code = cli.cli_main([
        "--logo", str(logo),
        "--business-name", "Acme",
        "--description", "Summer sale",
        "--reference", str(tmp_path / "nope.png"),
    ])

    assert code == 2
    assert "Cannot read image" in capsys.readouterr().err


def test_client_setup_error_exits_cleanly(tmp_path, monkeypatch, capsys, png_bytes):
    def no_api_key():
        raise OpenAIError("The api_key client option must be set")

    monkeypatch.setattr(cli, "AssetGenerator", no_api_key)
    logo = tmp_path / "logo.png"
    logo.write_bytes(png_bytes)

    code = cli.cli_main(["--logo", str(logo), "--business-name", "Acme", "--description", "Summer sale"])

    assert code == 1
    assert "Generation failed: The api_key client option must be set" in capsys.readouterr().err
