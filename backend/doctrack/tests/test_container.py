from doctrack.bootstrap import container
from doctrack.domain.models.record_types import RECORD_TYPES


def test_container_resolves_singleton_repository():
    first = container.resolve_repository("leave")
    second = container.resolve_repository("leave")
    assert first is second
    assert first.record_type == "leave"


def test_container_knows_every_record_type():
    assert list(container.record_types) == [record_type.key for record_type in RECORD_TYPES]
    assert container.resolve_record_type("processing").edit_when_rejected


def test_container_default_actor_from_settings(settings):
    settings.DEFAULT_ACTOR = "Records Office"
    assert container.default_actor() == "Records Office"
