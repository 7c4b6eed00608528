"""Unit tests for the message store and key-value backends."""
import pytest

from mkai.chat import ChatMessage, Role
from mkai.config import HISTORY_STORAGE_KEY
from mkai.store import KeyValueStore, MessageStore, create_key_value_store
from mkai.store.in_memory import InMemoryKeyValueStore
from mkai.store.sqlite import SQLiteKeyValueStore


class TestKeyValueStoreInterface:

    def test_store_is_abstract(self):
        """Test that KeyValueStore cannot be instantiated directly."""
        with pytest.raises(TypeError):
            KeyValueStore()  # type: ignore

    def test_factory_creates_backends(self, tmp_path):
        assert isinstance(create_key_value_store("memory"), InMemoryKeyValueStore)
        sqlite = create_key_value_store("sqlite", path=tmp_path / "h.db")
        assert isinstance(sqlite, SQLiteKeyValueStore)
        assert sqlite.backend_type == "sqlite"

    def test_factory_rejects_unknown_backend(self):
        with pytest.raises(ValueError, match="Unsupported store backend"):
            create_key_value_store("redis")


class TestSQLiteKeyValueStore:

    @pytest.mark.asyncio
    async def test_set_get_delete(self, tmp_path):
        async with SQLiteKeyValueStore(tmp_path / "kv.db") as store:
            assert await store.get("k") is None
            await store.set("k", "v1")
            await store.set("k", "v2")
            assert await store.get("k") == "v2"
            await store.delete("k")
            assert await store.get("k") is None
            await store.delete("k")

    @pytest.mark.asyncio
    async def test_values_survive_reconnect(self, tmp_path):
        path = tmp_path / "nested" / "kv.db"
        async with SQLiteKeyValueStore(path) as store:
            await store.set("k", "persisted")

        async with SQLiteKeyValueStore(path) as store:
            assert await store.get("k") == "persisted"

    @pytest.mark.asyncio
    async def test_requires_connect(self, tmp_path):
        store = SQLiteKeyValueStore(tmp_path / "kv.db")
        with pytest.raises(RuntimeError, match="not connected"):
            await store.get("k")


class TestMessageStore:

    @pytest.mark.asyncio
    async def test_load_absent_key_is_empty(self, message_store):
        assert await message_store.load() == []
        assert len(message_store) == 0

    @pytest.mark.asyncio
    async def test_append_flushes_every_mutation(self, message_store, kv_backend):
        await message_store.append(ChatMessage.user("one"))
        first = await kv_backend.get(HISTORY_STORAGE_KEY)
        await message_store.append(ChatMessage.assistant("two"))
        second = await kv_backend.get(HISTORY_STORAGE_KEY)

        assert first is not None and "one" in first
        assert "two" in second

    @pytest.mark.asyncio
    async def test_reload_preserves_order(self, kv_backend):
        store = MessageStore(kv_backend)
        for text in ("a", "b", "c"):
            await store.append(ChatMessage.user(text))

        reloaded = MessageStore(kv_backend)
        messages = await reloaded.load()

        assert [m.content for m in messages] == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_clear_removes_persisted_key(self, message_store, kv_backend):
        await message_store.append(ChatMessage.user("hello"))
        await message_store.clear()

        assert len(message_store) == 0
        assert HISTORY_STORAGE_KEY not in kv_backend

    @pytest.mark.asyncio
    async def test_sqlite_round_trip(self, tmp_path):
        async with SQLiteKeyValueStore(tmp_path / "h.db") as backend:
            store = MessageStore(backend)
            await store.append(ChatMessage.user("hello"))
            await store.append(ChatMessage.assistant("Hi there!"))

        async with SQLiteKeyValueStore(tmp_path / "h.db") as backend:
            messages = await MessageStore(backend).load()

        assert [(m.role, m.content) for m in messages] == [
            (Role.USER, "hello"),
            (Role.ASSISTANT, "Hi there!"),
        ]

    @pytest.mark.asyncio
    async def test_history_window_is_most_recent_ten(self, message_store):
        for i in range(15):
            await message_store.append(ChatMessage.user(f"m{i}"))

        window = message_store.history_window()

        assert len(window) == 10
        assert [turn.content for turn in window] == [f"m{i}" for i in range(5, 15)]

    @pytest.mark.asyncio
    async def test_history_window_excludes_images(self, message_store, png_data_uri):
        await message_store.append(ChatMessage.user("look", image=png_data_uri))
        await message_store.append(ChatMessage.assistant("nice", generated_image=png_data_uri))

        window = message_store.history_window()

        assert [(t.role, t.content) for t in window] == [(Role.USER, "look"), (Role.ASSISTANT, "nice")]

    @pytest.mark.asyncio
    async def test_find(self, message_store):
        message = await message_store.append(ChatMessage.user("hello"))
        assert message_store.find(message.id) == message
        assert message_store.find("missing") is None
