"""Tests for the mock auth session service."""
import pytest

from storage.auth import AuthSessionService, hash_password, verify_password
from storage.errors import DuplicateIdentity, InvalidCredentials, InvalidRole, MissingField


@pytest.fixture
def auth(store):
    service = AuthSessionService(store, password_iterations=1_000)
    yield service
    service.close()


class TestPasswordHashing:
    def test_roundtrip(self):
        blob = hash_password("secret", 1_000)
        assert verify_password("secret", blob, 1_000)
        assert not verify_password("other", blob, 1_000)

    def test_malformed_blob(self):
        assert verify_password("secret", "not-a-blob", 1_000) is False


class TestCreateIdentity:
    @pytest.mark.asyncio
    async def test_signs_in_and_writes_profile_stub(self, auth, store):
        session = await auth.create_identity("a@x.com", "pw123456", "Ali", "doctor")

        assert auth.current_session == session
        assert session.role == "doctor"
        assert session.display_name == "Ali"

        profile = (await store.get_doc(f"users/{session.uid}")).data()
        assert profile["role"] == "doctor"
        assert profile["name"] == "Ali"
        assert profile["email"] == "a@x.com"
        assert "created_at" in profile

    @pytest.mark.asyncio
    async def test_uids_are_unique(self, auth):
        a = await auth.create_identity("a@x.com", "pw", "A", "patient")
        b = await auth.create_identity("b@x.com", "pw", "B", "patient")
        assert a.uid != b.uid

    @pytest.mark.asyncio
    async def test_duplicate_email(self, auth):
        await auth.create_identity("a@x.com", "pw", "A", "patient")
        with pytest.raises(DuplicateIdentity):
            await auth.create_identity("A@X.com ", "pw2", "A2", "doctor")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "args,field",
        [
            (("", "pw", "A", "patient"), "email"),
            (("a@x.com", "", "A", "patient"), "password"),
            (("a@x.com", "pw", "", "patient"), "name"),
            (("a@x.com", "pw", "A", ""), "role"),
        ],
    )
    async def test_missing_field(self, auth, args, field):
        with pytest.raises(MissingField) as exc_info:
            await auth.create_identity(*args)
        assert exc_info.value.field == field
        assert auth.current_session is None

    @pytest.mark.asyncio
    async def test_invalid_role(self, auth):
        with pytest.raises(InvalidRole):
            await auth.create_identity("a@x.com", "pw", "A", "nurse")

    @pytest.mark.asyncio
    async def test_sign_in_false_keeps_session(self, auth):
        await auth.create_identity("a@x.com", "pw", "A", "patient", sign_in=False)
        assert auth.current_session is None

    @pytest.mark.asyncio
    async def test_subscriber_notified_exactly_once(self, auth):
        seen = []
        auth.subscribe(seen.append)
        assert seen == [None]

        session = await auth.create_identity("a@x.com", "pw", "Ali", "doctor")

        assert len(seen) == 2
        assert seen[1].uid == session.uid
        assert seen[1].role == "doctor"


class TestAuthenticate:
    @pytest.mark.asyncio
    async def test_wrong_password_leaves_no_session(self, auth):
        await auth.create_identity("a@x.com", "pw123456", "Ali", "doctor", sign_in=False)
        with pytest.raises(InvalidCredentials):
            await auth.authenticate("a@x.com", "wrongpw")
        assert auth.current_session is None

    @pytest.mark.asyncio
    async def test_wrong_password_keeps_existing_session(self, auth):
        active = await auth.create_identity("b@x.com", "pw", "B", "patient")
        await auth.create_identity("a@x.com", "pw123456", "Ali", "doctor", sign_in=False)
        with pytest.raises(InvalidCredentials):
            await auth.authenticate("a@x.com", "wrongpw")
        assert auth.current_session == active

    @pytest.mark.asyncio
    async def test_unknown_email(self, auth):
        with pytest.raises(InvalidCredentials):
            await auth.authenticate("nobody@x.com", "pw")

    @pytest.mark.asyncio
    async def test_missing_credentials(self, auth):
        with pytest.raises(MissingField):
            await auth.authenticate("", "pw")
        with pytest.raises(MissingField):
            await auth.authenticate("a@x.com", "")

    @pytest.mark.asyncio
    async def test_profile_values_win(self, auth, store):
        created = await auth.create_identity("a@x.com", "pw", "Ali", "doctor", sign_in=False)
        await store.set_doc(f"users/{created.uid}", {"name": "Dr. Ali", "photo_url": "http://img/1"})

        session = await auth.authenticate("a@x.com", "pw")
        assert session.display_name == "Dr. Ali"
        assert session.photo_url == "http://img/1"
        assert session.role == "doctor"

    @pytest.mark.asyncio
    async def test_recreates_missing_profile(self, auth, store):
        created = await auth.create_identity("a@x.com", "pw", "Ali", "patient", sign_in=False)
        await store.delete_doc(f"users/{created.uid}")

        session = await auth.authenticate("a@x.com", "pw")
        profile = (await store.get_doc(f"users/{created.uid}")).data()
        assert session.role == "patient"
        assert profile["role"] == "patient"
        assert profile["name"] == "Ali"


class TestSessionLifecycle:
    @pytest.mark.asyncio
    async def test_end_session_is_idempotent(self, auth):
        await auth.create_identity("a@x.com", "pw", "A", "patient")
        await auth.end_session()
        assert auth.current_session is None
        await auth.end_session()
        assert auth.current_session is None

    @pytest.mark.asyncio
    async def test_unsubscribe_stops_notifications(self, auth):
        seen = []
        unsubscribe = auth.subscribe(seen.append)
        unsubscribe()
        await auth.create_identity("a@x.com", "pw", "A", "patient")
        assert seen == [None]

    @pytest.mark.asyncio
    async def test_profile_write_rebroadcasts_active_session(self, auth, store):
        session = await auth.create_identity("a@x.com", "pw", "Ali", "doctor")
        seen = []
        auth.subscribe(seen.append)

        await store.set_doc(f"users/{session.uid}", {"name": "Dr. Ali"})

        # Delivered before set_doc returned.
        assert [s.display_name for s in seen] == ["Ali", "Dr. Ali"]
        assert auth.current_session.display_name == "Dr. Ali"

    @pytest.mark.asyncio
    async def test_profile_write_for_inactive_identity_is_silent(self, auth, store):
        other = await auth.create_identity("b@x.com", "pw", "B", "patient", sign_in=False)
        await auth.create_identity("a@x.com", "pw", "A", "patient")
        seen = []
        auth.subscribe(seen.append)

        await store.set_doc(f"users/{other.uid}", {"name": "Bee"})

        assert len(seen) == 1
        session = await auth.authenticate("b@x.com", "pw")
        assert session.display_name == "Bee"

    @pytest.mark.asyncio
    async def test_fetch_role(self, auth):
        session = await auth.create_identity("a@x.com", "pw", "A", "doctor")
        assert await auth.fetch_role(session.uid) == "doctor"
        assert await auth.fetch_role("missing") is None
