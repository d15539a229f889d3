import pytest

from poker.services.sessions import SessionNotFound, SessionRegistry
from poker.services.sessions import registry as registry_module


def test_create_session_with_single_creator():
    registry = SessionRegistry()
    session = registry.create('alice', 'Alice', handle='sid-a')
    assert len(session.session_id) == 8
    assert session.creator_id == 'alice'
    assert list(session.participants) == ['alice']
    assert session.participants['alice'].role == 'developer'
    assert session.participants['alice'].connected
    assert session.current_round is None
    assert registry.lookup(session.session_id) is session


def test_ids_are_url_safe_and_unique():
    registry = SessionRegistry(id_length=6)
    ids = {registry.create(f'p{i}', 'P').session_id for i in range(200)}
    assert len(ids) == 200
    assert all(len(i) == 6 for i in ids)
    assert all(set(i) <= set(registry_module.SESSION_ID_ALPHABET) for i in ids)


def test_create_retries_on_collision(monkeypatch):
    registry = SessionRegistry()
    first = registry.create('alice', 'Alice')
    codes = iter([first.session_id, 'fresh123'])
    monkeypatch.setattr(registry_module, 'generate_session_id', lambda length=8: next(codes))
    assert registry.create('bob', 'Bob').session_id == 'fresh123'


def test_lookup_get_and_destroy():
    registry = SessionRegistry()
    session = registry.create('alice', 'Alice')
    assert session.session_id in registry
    assert registry.lookup('missing') is None
    assert registry.lookup(None) is None
    with pytest.raises(SessionNotFound):
        registry.get('missing')

    assert registry.destroy(session.session_id) is True
    assert registry.destroy(session.session_id) is False
    assert registry.lookup(session.session_id) is None
    assert len(registry) == 0
