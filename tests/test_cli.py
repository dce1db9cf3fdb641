import json

import pytest

from bmctl import cli
from bmctl.models import PowerState
from bmctl.services import BatchRunner

from fakes import FakeRemoteClient

DOCUMENTS = """
apiVersion: metal3.io/v1alpha1
kind: BareMetalHost
metadata:
  name: master-0
  labels:
    host-group: control-plane
spec:
  bmc:
    address: redfish+https://10.0.0.1/redfish/v1/Systems/1
    credentialsName: bmc-secret
---
apiVersion: v1
kind: Secret
metadata:
  name: bmc-secret
stringData:
  username: admin
  password: password
"""


def test_remotedirect_requires_iso_url():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["remotedirect", "--name", "master-0"])


def test_build_selector_from_flags():
    args = cli.build_parser().parse_args(["poweron", "--name", "master-0", "--labels", "rack=r1"])
    selector = cli.build_selector(args)

    assert selector.name == "master-0"
    assert selector.labels == (("rack", "r1"),)


def test_main_prints_report(monkeypatch, tmp_path, capsys):
    documents = tmp_path / "hosts.yaml"
    documents.write_text(DOCUMENTS)
    monkeypatch.setattr(BatchRunner, "_default_client_builder",
                        lambda self, host: FakeRemoteClient(host.name, power_state=PowerState.OFF))

    code = cli.main(["powerstatus", "--documents", str(documents), "--format", "json"])

    assert code == 0
    data = json.loads(capsys.readouterr().out)
    assert data["hosts"]["master-0"] == {"status": "succeeded", "value": "Off"}


def test_main_reports_failures(monkeypatch, tmp_path, capsys):
    documents = tmp_path / "hosts.yaml"
    documents.write_text(DOCUMENTS)
    monkeypatch.setattr(BatchRunner, "_default_client_builder",
                        lambda self, host: FakeRemoteClient(host.name, errors={"power_on": RuntimeError("boom")}))

    code = cli.main(["poweron", "--documents", str(documents)])

    assert code == 1
    assert "FAILED" in capsys.readouterr().out


def test_main_no_hosts(tmp_path):
    documents = tmp_path / "hosts.yaml"
    documents.write_text(DOCUMENTS)

    assert cli.main(["poweroff", "--documents", str(documents), "--name", "missing"]) == 1


def test_main_missing_documents(tmp_path):
    assert cli.main(["poweroff", "--documents", str(tmp_path / "missing.yaml")]) == 1


def write_env(tmp_path, **settings):
    env_file = tmp_path / "bmctl.env"
    env_file.write_text("".join(f"{name}={value}\n" for name, value in settings.items()))
    return str(env_file)


def test_main_reads_settings_from_env_file(isolated_env, tmp_path, capsys):
    documents = tmp_path / "hosts.yaml"
    documents.write_text(DOCUMENTS)
    env_file = write_env(tmp_path, BMC_DOCUMENTS_PATH=documents,
                         BMC_MANAGEMENT_TYPE="redfish-dell", BMC_SYSTEM_ACTION_RETRIES=3)
    configs = []

    def build(self, host):
        configs.append(self.inventory.management_config)
        return FakeRemoteClient(host.name)

    isolated_env.setattr(BatchRunner, "_default_client_builder", build)

    code = cli.main(["powerstatus", "--env-file", env_file, "--format", "json"])

    assert code == 0
    assert json.loads(capsys.readouterr().out)["hosts"]["master-0"] == {"status": "succeeded", "value": "On"}
    assert configs[0].type == "redfish-dell"
    assert configs[0].system_action_retries == 3


def test_main_flags_override_env_file(isolated_env, tmp_path):
    documents = tmp_path / "hosts.yaml"
    documents.write_text(DOCUMENTS)
    env_file = write_env(tmp_path, BMC_DOCUMENTS_PATH=tmp_path / "missing.yaml", BMC_SYSTEM_ACTION_RETRIES=3)
    configs = []

    def build(self, host):
        configs.append(self.inventory.management_config)
        return FakeRemoteClient(host.name)

    isolated_env.setattr(BatchRunner, "_default_client_builder", build)

    code = cli.main(["poweron", "--env-file", env_file, "--documents", str(documents), "--retries", "0"])

    assert code == 0
    assert configs[0].system_action_retries == 0


def test_main_validates_configuration_first(isolated_env, tmp_path, capsys):
    documents = tmp_path / "hosts.yaml"
    documents.write_text(DOCUMENTS)
    env_file = write_env(tmp_path, BMC_DOCUMENTS_PATH=documents, BMC_SYSTEM_REBOOT_DELAY=-1)

    assert cli.main(["poweroff", "--env-file", env_file]) == 1
    assert "BMC_SYSTEM_REBOOT_DELAY must be >= 0" in capsys.readouterr().err


def test_main_without_document_source(isolated_env, capsys):
    assert cli.main(["powerstatus"]) == 1
    assert "No host document source configured" in capsys.readouterr().err
