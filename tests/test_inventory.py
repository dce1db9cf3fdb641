import base64
from unittest import mock

import pytest
from kubernetes.client.rest import ApiException

from bmctl.errors import (
    AmbiguousSelectionError,
    ConfigurationError,
    HostNotFoundError,
    NoHostsMatchedError,
    UnsupportedOperationError,
)
from bmctl.inventory import BaremetalInventory, HostSelector, KubernetesDocumentSource, StaticDocumentSource
from bmctl.models import ManagementConfig

DOCUMENTS = """
apiVersion: metal3.io/v1alpha1
kind: BareMetalHost
metadata:
  name: master-0
  namespace: metal3
  labels:
    host-group: control-plane
spec:
  bmc:
    address: redfish+https://10.23.25.1:8000/redfish/v1/Systems/air-target-1
    credentialsName: master-0-bmc-secret
    disableCertificateVerification: true
---
apiVersion: metal3.io/v1alpha1
kind: BareMetalHost
metadata:
  name: master-1
  namespace: metal3
  labels:
    host-group: control-plane
spec:
  bmc:
    address: redfish+https://10.23.25.2:8000/redfish/v1/Systems/air-target-2
    credentialsName: master-1-bmc-secret
---
apiVersion: metal3.io/v1alpha1
kind: BareMetalHost
metadata:
  name: no-creds
  namespace: metal3
spec:
  bmc:
    address: redfish+https://10.23.25.3:8000/redfish/v1/Systems/air-target-3
    credentialsName: no-creds-bmc-secret
---
apiVersion: v1
kind: Secret
metadata:
  name: master-0-bmc-secret
  namespace: metal3
data:
  username: {username}
  password: {password}
---
apiVersion: v1
kind: Secret
metadata:
  name: master-1-bmc-secret
  namespace: metal3
stringData:
  username: admin
  password: password
---
apiVersion: v1
kind: Secret
metadata:
  name: no-creds-bmc-secret
  namespace: metal3
stringData:
  username: admin
---
apiVersion: v1
kind: ConfigMap
metadata:
  name: unrelated
""".format(
    username=base64.b64encode(b"root").decode(),
    password=base64.b64encode(b"calvin").decode(),
)


def make_inventory(driver="redfish", text=DOCUMENTS):
    return BaremetalInventory(ManagementConfig(type=driver), StaticDocumentSource.from_yaml(text))


def test_select_by_name_resolves_host():
    hosts = make_inventory().select(HostSelector.by_name("master-0"))

    assert len(hosts) == 1
    host = hosts[0]
    assert host.name == "master-0"
    assert host.namespace == "metal3"
    assert host.labels == {"host-group": "control-plane"}
    assert host.bmc.system_id == "air-target-1"
    assert host.bmc.base_url == "https://10.23.25.1:8000"
    assert host.credentials.username == "root"
    assert host.credentials.password == "calvin"
    assert host.disable_certificate_verification is True
    assert host.driver == "redfish"


def test_password_is_not_in_repr():
    host = make_inventory().select_one(HostSelector.by_name("master-0"))
    assert "calvin" not in repr(host)


def test_select_by_label():
    hosts = make_inventory().select(HostSelector.by_label("host-group=control-plane"))
    assert sorted(h.name for h in hosts) == ["master-0", "master-1"]


def test_select_empty_match_is_not_an_error():
    assert make_inventory().select(HostSelector.by_name("no such host")) == []


def test_select_unsupported_driver():
    with pytest.raises(ConfigurationError) as exc:
        make_inventory(driver="ipmi").select(HostSelector.by_label("host-group=control-plane"))
    assert "not supported" in str(exc.value)


def test_select_missing_credential_field():
    with pytest.raises(ConfigurationError) as exc:
        make_inventory().select(HostSelector.by_name("no-creds"))
    assert "missing field password" in str(exc.value)


def test_select_missing_secret():
    text = DOCUMENTS.replace("name: master-1-bmc-secret\n  namespace", "name: renamed\n  namespace")
    with pytest.raises(ConfigurationError) as exc:
        make_inventory(text=text).select(HostSelector.by_name("master-1"))
    assert "not found" in str(exc.value)


def test_select_missing_bmc_address():
    text = DOCUMENTS.replace("    address: redfish+https://10.23.25.2:8000/redfish/v1/Systems/air-target-2\n", "")
    with pytest.raises(ConfigurationError) as exc:
        make_inventory(text=text).select(HostSelector.by_name("master-1"))
    assert "missing field spec.bmc.address" in str(exc.value)


def test_select_invalid_bmc_address():
    text = DOCUMENTS.replace("/redfish/v1/Systems/air-target-2", "")
    with pytest.raises(ConfigurationError):
        make_inventory(text=text).select(HostSelector.by_name("master-1"))


def test_select_one():
    host = make_inventory().select_one(HostSelector.by_name("master-1"))
    assert host.credentials.username == "admin"


def test_select_one_not_found():
    with pytest.raises(HostNotFoundError):
        make_inventory().select_one(HostSelector.by_name("master-9"))


def test_select_one_ambiguous():
    with pytest.raises(AmbiguousSelectionError) as exc:
        make_inventory().select_one(HostSelector.by_label("host-group=control-plane"))

    assert "found more than one document" in str(exc.value)
    assert sorted(exc.value.names) == ["metal3/master-0", "metal3/master-1"]


def test_run_operation_rejects_unsupported_operation():
    with pytest.raises(UnsupportedOperationError) as exc:
        make_inventory().run_operation(None, "self-destruct", HostSelector.by_name("master-0"))
    assert "Baremetal operation not supported" in str(exc.value)


def test_run_operation_no_hosts_matched():
    with pytest.raises(NoHostsMatchedError) as exc:
        make_inventory().run_operation(None, "power-on", HostSelector.by_name("does not exist"))
    assert "No baremetal hosts matched selector" in str(exc.value)


def test_static_source_from_directory(tmp_path):
    hosts_dir = tmp_path / "site" / "hosts"
    hosts_dir.mkdir(parents=True)
    documents = DOCUMENTS.split("---\n")
    (hosts_dir / "hosts.yaml").write_text("---\n".join(documents[:3]))
    (tmp_path / "site" / "secrets.yml").write_text("---\n".join(documents[3:]))
    (tmp_path / "site" / "README.md").write_text("not yaml: [")

    inventory = BaremetalInventory(ManagementConfig(), StaticDocumentSource.from_path(tmp_path / "site"))

    assert [h.name for h in inventory.select(HostSelector.by_label("host-group=control-plane"))] == [
        "master-0", "master-1"
    ]


def test_static_source_missing_path(tmp_path):
    with pytest.raises(ConfigurationError):
        StaticDocumentSource.from_path(tmp_path / "missing")


def test_static_source_invalid_yaml(tmp_path):
    path = tmp_path / "hosts.yaml"
    path.write_text("kind: [unterminated")
    with pytest.raises(ConfigurationError):
        StaticDocumentSource.from_path(path)


def test_static_source_invalid_base64():
    source = StaticDocumentSource.from_yaml(
        "kind: Secret\nmetadata:\n  name: s\ndata:\n  username: '***'\n"
    )
    with pytest.raises(ConfigurationError):
        source.get_secret("s")


def make_kubernetes_source(monkeypatch, items=None, list_error=None, secret=None, secret_error=None):
    custom_api = mock.Mock()
    if list_error:
        custom_api.list_namespaced_custom_object.side_effect = list_error
    else:
        custom_api.list_namespaced_custom_object.return_value = {"items": items or []}

    core_api = mock.Mock()
    if secret_error:
        core_api.read_namespaced_secret.side_effect = secret_error
    else:
        core_api.read_namespaced_secret.return_value = secret

    monkeypatch.setattr("bmctl.inventory.document_source.client.CustomObjectsApi", lambda api_client: custom_api)
    monkeypatch.setattr("bmctl.inventory.document_source.client.CoreV1Api", lambda api_client: core_api)

    source = KubernetesDocumentSource("https://api.cluster:6443", "token", api_client=mock.Mock())
    return source, custom_api, core_api


def test_kubernetes_source_pushes_labels_to_server(monkeypatch):
    items = [
        {"metadata": {"name": "master-0", "labels": {"host-group": "control-plane"}}},
        {"metadata": {"name": "master-1", "labels": {"host-group": "control-plane"}}},
    ]
    source, custom_api, _ = make_kubernetes_source(monkeypatch, items=items)

    selected = source.select(HostSelector.by_label("host-group=control-plane").with_name("master-1"))

    assert [d["metadata"]["name"] for d in selected] == ["master-1"]
    kwargs = custom_api.list_namespaced_custom_object.call_args.kwargs
    assert kwargs["group"] == "metal3.io"
    assert kwargs["plural"] == "baremetalhosts"
    assert kwargs["namespace"] == "metal3"
    assert kwargs["label_selector"] == "host-group=control-plane"


def test_kubernetes_source_missing_crd(monkeypatch):
    source, _, _ = make_kubernetes_source(monkeypatch, list_error=ApiException(status=404, reason="Not Found"))
    assert source.select(HostSelector()) == []


def test_kubernetes_source_api_error(monkeypatch):
    source, _, _ = make_kubernetes_source(monkeypatch, list_error=ApiException(status=403, reason="Forbidden"))
    with pytest.raises(ConfigurationError) as exc:
        source.select(HostSelector())
    assert "403" in str(exc.value)


def test_kubernetes_source_reads_secret(monkeypatch):
    secret = mock.Mock(data={"username": base64.b64encode(b"root").decode(),
                             "password": base64.b64encode(b"calvin").decode()},
                       string_data=None)
    source, _, core_api = make_kubernetes_source(monkeypatch, secret=secret)

    assert source.get_secret("master-0-bmc-secret") == {"username": "root", "password": "calvin"}
    assert core_api.read_namespaced_secret.call_args.kwargs["namespace"] == "metal3"


def test_kubernetes_source_missing_secret(monkeypatch):
    source, _, _ = make_kubernetes_source(monkeypatch, secret_error=ApiException(status=404, reason="Not Found"))
    assert source.get_secret("missing", "other") is None


def duplicate_master_0(namespace):
    """DOCUMENTS plus a copy of master-0 and its secret in another namespace"""
    documents = DOCUMENTS.split("---\n")
    copies = [documents[0], documents[3]]
    return DOCUMENTS + "".join(
        "---\n" + d.replace("namespace: metal3", f"namespace: {namespace}") for d in copies
    )


def test_select_by_name_matching_several_documents():
    inventory = make_inventory(text=duplicate_master_0("staging"))

    with pytest.raises(AmbiguousSelectionError) as exc:
        inventory.select(HostSelector.by_name("master-0"))

    assert sorted(exc.value.names) == ["metal3/master-0", "staging/master-0"]


def test_select_by_label_keeps_same_named_hosts_apart():
    hosts = make_inventory(text=duplicate_master_0("staging")).select(
        HostSelector.by_label("host-group=control-plane")
    )

    assert sorted(h.qualified_name for h in hosts) == ["metal3/master-0", "metal3/master-1", "staging/master-0"]


def test_select_rejects_duplicate_documents():
    inventory = make_inventory(text=duplicate_master_0("metal3"))

    with pytest.raises(AmbiguousSelectionError) as exc:
        inventory.select(HostSelector.by_label("host-group=control-plane"))

    assert exc.value.names == ["metal3/master-0"]
