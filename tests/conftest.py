import pytest
from fastapi.testclient import TestClient

from songvault.api.app import app
from songvault.api.state import AppState, get_state
from songvault.core.auth import TokenService, hash_password
from songvault.core.chunk_store import ChunkStore
from songvault.core.metadata_index import MetadataIndex

TEST_SECRET = "test-secret"


@pytest.fixture
def store(tmp_path):
    s = ChunkStore(tmp_path / "objects", chunk_size=4)
    s.open()
    yield s
    s.close()


@pytest.fixture
def index(tmp_path):
    idx = MetadataIndex(tmp_path / "songs.json")
    idx.open()
    yield idx
    idx.close()


@pytest.fixture
def state(tmp_path):
    st = AppState(
        tmp_path / "data",
        chunk_size=8,
        relay_unit=3,
        allow_empty_uploads=False,
        token_service=TokenService(secret=TEST_SECRET),
    )
    st.open()
    yield st
    st.close()


@pytest.fixture
def client(state):
    app.dependency_overrides[get_state] = lambda: state
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def user(state):
    return state.users.add("Test User", "tester@example.com", "tester", hash_password("secret", rounds=4))


@pytest.fixture
def auth_headers(state, user):
    return {"Authorization": f"Bearer {state.tokens.issue(user)}"}
