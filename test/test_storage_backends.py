import asyncio
import json
import tempfile
import unittest
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import patch

import httpx
from sqlalchemy.pool import StaticPool

from watchdiary.database import init_db, make_sessionmaker
from watchdiary.models import WatchedMovie  # noqa: F401
from watchdiary.schemas import MovieRecord
from watchdiary.services.watchlist import WatchlistStore
from watchdiary.storage.base import PersistenceError
from watchdiary.storage.keyvalue import JsonFileStorage, KeyValueBackend, WATCHLIST_KEY
from watchdiary.storage.rest import RestCollectionBackend
from watchdiary.storage.sql import SqlBackend

from sqlalchemy.ext.asyncio import create_async_engine

NOW = datetime(2026, 10, 19, 12, 30, tzinfo=timezone.utc)


def _movie(movie_id: str) -> MovieRecord:
    return MovieRecord(id=movie_id, title=f"Movie {movie_id}", image="http://i", year="1999", date_added=NOW)


class TestJsonFileStorage(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.path = Path(self.tmp.name) / "nested" / "watchlist.json"

    def tearDown(self) -> None:
        self.tmp.cleanup()

    async def test_missing_file_loads_empty(self):
        backend = KeyValueBackend(JsonFileStorage(str(self.path)))
        self.assertEqual(await backend.load(), [])

    async def test_snapshot_round_trip(self):
        backend = KeyValueBackend(JsonFileStorage(str(self.path)))
        records = [_movie("tt1"), _movie("tt2").model_copy(update={"date_added": None})]
        await backend.persist_add(records[-1], records)

        on_disk = json.loads(self.path.read_text(encoding="utf-8"))
        self.assertIn(WATCHLIST_KEY, on_disk)
        self.assertNotIn("dateAdded", json.loads(on_disk[WATCHLIST_KEY])[1])

        self.assertEqual(await KeyValueBackend(JsonFileStorage(str(self.path))).load(), records)

    async def test_other_keys_survive(self):
        storage = JsonFileStorage(str(self.path))
        storage.set("theme", "dark")
        await KeyValueBackend(storage).persist_add(_movie("tt1"), [_movie("tt1")])
        self.assertEqual(storage.get("theme"), "dark")

    async def test_corrupt_file_write_is_persistence_error(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text("{broken", encoding="utf-8")
        store = WatchlistStore(KeyValueBackend(JsonFileStorage(str(self.path))))
        with self.assertRaises(PersistenceError):
            await store.add(_movie("tt1"))
        self.assertEqual(self.path.read_text(encoding="utf-8"), "{broken")

    async def test_file_io_runs_off_the_event_loop(self):
        backend = KeyValueBackend(JsonFileStorage(str(self.path)))
        with patch("watchdiary.storage.keyvalue.asyncio.to_thread", wraps=asyncio.to_thread) as to_thread:
            await backend.persist_add(_movie("tt1"), [_movie("tt1")])
            await backend.load()
        called = [c.args[0] for c in to_thread.call_args_list]
        self.assertEqual(called, [backend.storage.set, backend.storage.get])

    async def test_corrupt_file_raises(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text("[1, 2", encoding="utf-8")
        with self.assertRaises(PersistenceError):
            await KeyValueBackend(JsonFileStorage(str(self.path))).load()


class TestRestCollectionBackend(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.requests: list[httpx.Request] = []
        self.stored: list[dict] = []

    def _handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "GET":
            return httpx.Response(200, json=self.stored)
        if request.method == "POST":
            body = json.loads(request.content)
            self.stored.append(body)
            return httpx.Response(201, json=body)
        if request.method == "DELETE":
            movie_id = request.url.path.rsplit("/", 1)[-1]
            before = len(self.stored)
            self.stored = [m for m in self.stored if m["id"] != movie_id]
            return httpx.Response(204 if len(self.stored) < before else 404)
        return httpx.Response(405)

    def _backend(self, handler=None) -> RestCollectionBackend:
        return RestCollectionBackend(
            "http://backend.test/",
            transport=httpx.MockTransport(handler or self._handler),
        )

    async def test_add_load_remove(self):
        backend = self._backend()
        await backend.persist_add(_movie("tt1"), [])
        self.assertEqual(self.requests[0].url.path, "/movies")
        self.assertEqual(json.loads(self.requests[0].content)["dateAdded"], "2026-10-19T12:30:00Z")

        self.assertEqual(await backend.load(), [_movie("tt1")])

        await backend.persist_remove("tt1", [])
        self.assertEqual(self.requests[-1].method, "DELETE")
        self.assertEqual(self.requests[-1].url.path, "/movies/tt1")

    async def test_delete_404_is_fine(self):
        await self._backend().persist_remove("missing", [])

    async def test_server_error_raises(self):
        backend = self._backend(lambda request: httpx.Response(500))
        with self.assertRaises(PersistenceError):
            await backend.persist_add(_movie("tt1"), [])
        with self.assertRaises(PersistenceError):
            await backend.persist_remove("tt1", [])
        with self.assertRaises(PersistenceError):
            await backend.load()

    async def test_network_error_raises(self):
        def boom(request):
            raise httpx.ConnectError("refused", request=request)

        with self.assertRaises(PersistenceError):
            await self._backend(boom).load()

    async def test_non_list_body_raises(self):
        backend = self._backend(lambda request: httpx.Response(200, json={"movies": []}))
        with self.assertRaises(PersistenceError):
            await backend.load()

    async def test_unreadable_remote_entries_are_skipped(self):
        body = [{"id": "tt1", "title": "One"}, {"id": "tt2", "title": ["bad"]}, 7]
        backend = self._backend(lambda request: httpx.Response(200, json=body))
        self.assertEqual([m.id for m in await backend.load()], ["tt1"])

    def test_requires_base_url(self):
        with self.assertRaises(ValueError):
            RestCollectionBackend("")


class TestSqlBackend(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
        await init_db(self.engine)
        self.backend = SqlBackend(make_sessionmaker(self.engine))

    async def asyncTearDown(self):
        await self.engine.dispose()

    async def test_round_trip_preserves_order_and_fields(self):
        records = [_movie("tt2"), _movie("tt1"), _movie("tt3")]
        for record in records:
            await self.backend.persist_add(record, [])
        self.assertEqual(await self.backend.load(), records)

    async def test_add_is_idempotent(self):
        await self.backend.persist_add(_movie("tt1"), [])
        await self.backend.persist_add(_movie("tt1"), [])
        self.assertEqual(len(await self.backend.load()), 1)

    async def test_remove(self):
        await self.backend.persist_add(_movie("tt1"), [])
        await self.backend.persist_remove("tt1", [])
        await self.backend.persist_remove("tt1", [])
        self.assertEqual(await self.backend.load(), [])
