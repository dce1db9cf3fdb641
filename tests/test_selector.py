import pytest

from bmctl.errors import ConfigurationError
from bmctl.inventory import HostSelector


def make_document(name, **labels):
    return {"kind": "BareMetalHost", "metadata": {"name": name, "labels": labels}}


def test_by_name_matches_exactly():
    selector = HostSelector.by_name("master-0")

    assert selector.matches(make_document("master-0"))
    assert not selector.matches(make_document("master-01"))


def test_by_label_requires_every_label():
    selector = HostSelector.by_label("host-group=control-plane, rack=r1")

    assert selector.matches(make_document("a", **{"host-group": "control-plane", "rack": "r1", "extra": "x"}))
    assert not selector.matches(make_document("b", **{"host-group": "control-plane"}))
    assert not selector.matches(make_document("c"))


def test_chaining_returns_new_selector():
    base = HostSelector.by_label("host-group=control-plane")
    narrowed = base.with_name("master-1")

    assert base.name is None
    assert narrowed.name == "master-1"
    assert narrowed.labels == base.labels


def test_selectors_are_values():
    assert HostSelector.by_label("b=2,a=1") == HostSelector.by_label("a=1,b=2")
    assert hash(HostSelector.by_name("x")) == hash(HostSelector.by_name("x"))


def test_empty_selector_matches_everything():
    assert HostSelector().matches(make_document("anything"))
    assert str(HostSelector()) == "all hosts"


def test_label_selector_string():
    assert HostSelector.by_label("rack=r1,host-group=workers").label_selector == "host-group=workers,rack=r1"
    assert HostSelector.by_name("x").label_selector is None


def test_equality_form_is_accepted():
    assert HostSelector.by_label("rack==r1").labels == (("rack", "r1"),)


@pytest.mark.parametrize("expression", ["rack", "=r1", "rack=r1,broken"])
def test_malformed_label_expression(expression):
    with pytest.raises(ConfigurationError):
        HostSelector.by_label(expression)


def test_empty_name_is_rejected():
    with pytest.raises(ConfigurationError):
        HostSelector.by_name("")
