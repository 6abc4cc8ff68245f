import json

from typer.testing import CliRunner

from scaleio_client.cli import app
from scaleio_client.exceptions import DeviceQueryError
from scaleio_client.sdc import DRV_CFG_TIMEOUT, MappedVolume

runner = CliRunner()

BASE_URL = "https://gateway"
GATEWAY_ARGS = ["--base-url", BASE_URL, "--token", "tok"]
POOL = {
    "id": "p1",
    "name": "gold",
    "protectionDomainId": "pd1",
    "links": [
        {
            "rel": "/api/StoragePool/relationship/Volume",
            "href": "/api/instances/StoragePool::p1/relationships/Volume",
        }
    ],
}


def test_pools_list_cli(requests_mock):
    requests_mock.get(
        f"{BASE_URL}/api/types/StoragePool/instances",
        json=[{"id": "p1", "name": "gold", "capacityAvailableForVolumeAllocationInKb": 104857600}],
    )

    result = runner.invoke(app, ["pools", "list", *GATEWAY_ARGS])

    assert result.exit_code == 0
    assert "gold" in result.stdout
    assert "100.0" in result.stdout


def test_volumes_list_cli_json(requests_mock):
    requests_mock.get(f"{BASE_URL}/api/instances/StoragePool::p1", json=POOL)
    requests_mock.get(
        f"{BASE_URL}/api/instances/StoragePool::p1/relationships/Volume",
        json=[{"id": "v1", "name": "data", "sizeInKb": 8388608}],
    )

    result = runner.invoke(app, ["volumes", "list", *GATEWAY_ARGS, "--pool-id", "p1", "--json"])

    assert result.exit_code == 0
    assert json.loads(result.stdout) == [{"id": "v1", "name": "data", "sizeInKb": 8388608}]


def test_volumes_create_cli_builds_payload(requests_mock):
    requests_mock.get(f"{BASE_URL}/api/instances/StoragePool::p1", json=POOL)
    matcher = requests_mock.post(f"{BASE_URL}/api/types/Volume/instances", json={"id": "v7"})

    result = runner.invoke(
        app,
        [
            "volumes",
            "create",
            *GATEWAY_ARGS,
            "--pool-id",
            "p1",
            "--name",
            "data",
            "--size-gb",
            "8",
            "--thick",
        ],
    )

    assert result.exit_code == 0
    assert json.loads(result.stdout) == {"id": "v7"}
    assert matcher.last_request.json() == {
        "name": "data",
        "volumeSizeInKb": str(8 * 1024 * 1024),
        "volumeType": "ThickProvisioned",
        "storagePoolId": "p1",
        "protectionDomainId": "pd1",
    }


def test_volumes_create_cli_requires_size():
    result = runner.invoke(
        app, ["volumes", "create", *GATEWAY_ARGS, "--pool-id", "p1", "--name", "data"]
    )

    assert result.exit_code != 0


def test_volumes_find_cli_reports_not_implemented(requests_mock):
    requests_mock.get(f"{BASE_URL}/api/instances/StoragePool::p1", json=POOL)

    result = runner.invoke(
        app, ["volumes", "find", *GATEWAY_ARGS, "--pool-id", "p1", "--name", "data"]
    )

    assert result.exit_code == 2
    assert "not supported" in result.stderr


def test_request_error_exits_with_status(requests_mock):
    requests_mock.get(
        f"{BASE_URL}/api/types/StoragePool/instances",
        status_code=500,
        json={"message": "internal failure"},
    )

    result = runner.invoke(app, ["pools", "list", *GATEWAY_ARGS])

    assert result.exit_code == 1
    assert "Request failed (status 500)" in result.stderr


def test_missing_token_is_rejected():
    result = runner.invoke(app, ["pools", "list", "--base-url", BASE_URL])

    assert result.exit_code != 0


def test_cli_reads_gateway_settings_from_env(requests_mock):
    matcher = requests_mock.get(f"{BASE_URL}/api/types/StoragePool/instances", json=[])

    result = runner.invoke(
        app,
        ["pools", "list", "--json"],
        env={"SCALEIO_BASE_URL": BASE_URL, "SCALEIO_TOKEN": "envtok", "SCALEIO_API_VERSION": "3.0"},
    )

    assert result.exit_code == 0
    assert matcher.last_request.headers["Accept"] == "application/json;version=3.0"


def test_cert_with_no_verify_rejected(tmp_path):
    cert = tmp_path / "ca.pem"
    cert.write_text("dummy", encoding="utf-8")

    result = runner.invoke(
        app, ["pools", "list", *GATEWAY_ARGS, "--cert", str(cert), "--no-verify"]
    )

    assert result.exit_code != 0
    assert "Cannot combine --cert with --no-verify" in result.stderr


def test_sdc_volumes_cli(monkeypatch):
    captured: dict[str, object] = {}

    def fake_map(**kwargs):
        captured.update(kwargs)
        return [
            MappedVolume(mdm_id="mdm1", volume_id="abc", sdc_device="/dev/scinia"),
            MappedVolume(mdm_id="mdm1", volume_id="xyz"),
        ]

    monkeypatch.setattr("scaleio_client.cli.get_local_volume_map", fake_map)

    result = runner.invoke(app, ["sdc", "volumes", "--drv-cfg", "/opt/drv_cfg", "--json"])

    assert result.exit_code == 0
    assert captured["drv_cfg"] == "/opt/drv_cfg"
    assert json.loads(result.stdout) == [
        {"mdm_id": "mdm1", "volume_id": "abc", "sdc_device": "/dev/scinia"},
        {"mdm_id": "mdm1", "volume_id": "xyz", "sdc_device": ""},
    ]


def test_sdc_volumes_cli_reports_drv_cfg_failure(monkeypatch):
    def fake_map(**kwargs):
        raise DeviceQueryError("Error querying /bin/emc/scaleio/drv_cfg --query_vols: missing")

    monkeypatch.setattr("scaleio_client.cli.get_local_volume_map", fake_map)

    result = runner.invoke(app, ["sdc", "volumes"])

    assert result.exit_code == 1
    assert "Error querying" in result.stderr


def test_sdc_guid_cli(monkeypatch):
    monkeypatch.setattr("scaleio_client.cli.query_sdc_guid", lambda **kwargs: "271bad82")

    result = runner.invoke(app, ["sdc", "guid"])

    assert result.exit_code == 0
    assert result.stdout.strip() == "271bad82"


def test_volumes_create_cli_rejects_non_object_payload(tmp_path):
    payload = tmp_path / "payload.json"
    payload.write_text("[1, 2]", encoding="utf-8")

    result = runner.invoke(
        app,
        ["volumes", "create", *GATEWAY_ARGS, "--pool-id", "p1", "--payload", str(payload)],
    )

    assert result.exit_code == 2
    assert "Payload file must contain a JSON object." in result.stderr


def test_volumes_create_cli_rejects_zero_size():
    result = runner.invoke(
        app,
        ["volumes", "create", *GATEWAY_ARGS, "--pool-id", "p1", "--name", "data", "--size-gb", "0"],
    )

    assert result.exit_code == 2
    assert "--size-gb must be positive." in result.stderr


def test_sdc_volumes_cli_uses_default_drv_cfg_timeout(monkeypatch):
    captured: dict[str, object] = {}

    def fake_map(**kwargs):
        captured.update(kwargs)
        return []

    monkeypatch.setattr("scaleio_client.cli.get_local_volume_map", fake_map)

    result = runner.invoke(app, ["sdc", "volumes", "--json"])

    assert result.exit_code == 0
    assert captured["timeout"] == DRV_CFG_TIMEOUT


def test_sdc_guid_cli_labels_local_failure(monkeypatch):
    def fake_guid(**kwargs):
        raise DeviceQueryError("/bin/emc/scaleio/drv_cfg --query_guid timed out after 30.0s")

    monkeypatch.setattr("scaleio_client.cli.query_sdc_guid", fake_guid)

    result = runner.invoke(app, ["sdc", "guid"])

    assert result.exit_code == 1
    assert "drv_cfg query failed" in result.stderr
    assert "Request failed" not in result.stderr
