"""Ownership-scoped storage: a resource created by one user is NotFound for every other user."""

import unittest
from datetime import datetime, timedelta, timezone

from tracky.core.database import build_engine, build_session_factory, init_db
from tracky.core.errors import NotFoundError, UsernameTakenError
from tracky.models import DEFAULT_NOTEBOOK_NAME, Note, NoteImage, User
from tracky.services import store


class StoreTestCase(unittest.TestCase):
    """Fresh in-memory SQLite database per test with two users, alice and bob."""

    def setUp(self) -> None:
        self.engine = build_engine("sqlite://")
        init_db(self.engine)
        self.db = build_session_factory(self.engine)()
        self.alice = store.create_user(self.db, "alice", "hash-a").id
        self.bob = store.create_user(self.db, "bob", "hash-b").id

    def tearDown(self) -> None:
        self.db.close()
        self.engine.dispose()


class TestUsers(StoreTestCase):
    def test_duplicate_username_rejected_without_change(self) -> None:
        with self.assertRaises(UsernameTakenError):
            store.create_user(self.db, "alice", "other-hash")
        self.assertEqual(self.db.query(User).count(), 2)
        self.assertEqual(store.find_user_by_username(self.db, "alice").password_hash, "hash-a")

    def test_usernames_are_case_sensitive(self) -> None:
        store.create_user(self.db, "Alice", "hash-c")
        self.assertEqual(self.db.query(User).count(), 3)

    def test_find_unknown_user(self) -> None:
        with self.assertRaises(NotFoundError):
            store.find_user_by_username(self.db, "carol")

    def test_ids_are_distinct(self) -> None:
        self.assertNotEqual(self.alice, self.bob)


class TestNotebooks(StoreTestCase):
    def test_default_notebook_created_once(self) -> None:
        created = store.ensure_default_notebook(self.db, self.alice)
        self.assertIsNotNone(created)
        self.assertEqual(created.name, DEFAULT_NOTEBOOK_NAME)
        self.assertIsNone(store.ensure_default_notebook(self.db, self.alice))
        self.assertEqual(len(store.list_notebooks(self.db, self.alice)), 1)

    def test_list_only_own(self) -> None:
        store.create_notebook(self.db, self.alice, "Work")
        store.create_notebook(self.db, self.bob, "Home")
        names = [nb.name for nb in store.list_notebooks(self.db, self.alice)]
        self.assertEqual(names, ["Work"])

    def test_foreign_notebook_unreachable(self) -> None:
        nb = store.create_notebook(self.db, self.alice, "Private").id
        with self.assertRaises(NotFoundError):
            store.get_notebook(self.db, nb, self.bob)
        with self.assertRaises(NotFoundError):
            store.rename_notebook(self.db, nb, self.bob, "Mine now")
        with self.assertRaises(NotFoundError):
            store.delete_notebook(self.db, nb, self.bob)
        self.assertEqual(store.get_notebook(self.db, nb, self.alice).name, "Private")

    def test_missing_and_foreign_are_same_error(self) -> None:
        nb = store.create_notebook(self.db, self.alice, "Private").id
        with self.assertRaises(NotFoundError) as foreign:
            store.get_notebook(self.db, nb, self.bob)
        with self.assertRaises(NotFoundError) as missing:
            store.get_notebook(self.db, nb + 1000, self.bob)
        self.assertEqual(str(foreign.exception), str(missing.exception))

    def test_rename(self) -> None:
        nb = store.create_notebook(self.db, self.alice, "Old").id
        self.assertEqual(store.rename_notebook(self.db, nb, self.alice, "New").name, "New")

    def test_delete_cascades_to_notes_and_images(self) -> None:
        nb = store.create_notebook(self.db, self.alice, "Trip").id
        note = store.create_note(self.db, self.alice, nb, "day one").id
        store.create_note_image(self.db, note, self.alice, "1_1_1.jpg")
        filenames = store.delete_notebook(self.db, nb, self.alice)
        self.assertEqual(filenames, ["1_1_1.jpg"])
        self.assertEqual(self.db.query(Note).count(), 0)
        self.assertEqual(self.db.query(NoteImage).count(), 0)


class TestNotes(StoreTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.alice_nb = store.create_notebook(self.db, self.alice, "A").id
        self.bob_nb = store.create_notebook(self.db, self.bob, "B").id

    def test_cannot_write_into_foreign_notebook(self) -> None:
        with self.assertRaises(NotFoundError):
            store.create_note(self.db, self.bob, self.alice_nb, "sneaky")
        self.assertEqual(self.db.query(Note).count(), 0)

    def test_list_newest_first(self) -> None:
        first = store.create_note(self.db, self.alice, self.alice_nb, "first").id
        second = store.create_note(self.db, self.alice, self.alice_nb, "second").id
        ids = [n.id for n in store.list_notes(self.db, self.alice, self.alice_nb)]
        self.assertEqual(ids, [second, first])

    def test_list_scoped_by_owner(self) -> None:
        store.create_note(self.db, self.alice, self.alice_nb, "mine")
        self.assertEqual(store.list_notes(self.db, self.bob, self.alice_nb), [])

    def test_list_time_range(self) -> None:
        note = store.create_note(self.db, self.alice, self.alice_nb, "dated")
        created = note.created_at
        before = created - timedelta(days=1)
        after = created + timedelta(days=1)
        self.assertEqual(len(store.list_notes(self.db, self.alice, self.alice_nb, since=before, until=after)), 1)
        self.assertEqual(len(store.list_notes(self.db, self.alice, self.alice_nb, since=after)), 0)
        self.assertEqual(len(store.list_notes(self.db, self.alice, self.alice_nb, until=before)), 0)

    def test_time_range_is_inclusive(self) -> None:
        note = store.create_note(self.db, self.alice, self.alice_nb, "on the dot")
        created = note.created_at
        self.assertEqual(len(store.list_notes(self.db, self.alice, self.alice_nb, since=created)), 1)
        self.assertEqual(len(store.list_notes(self.db, self.alice, self.alice_nb, until=created)), 1)

    def test_time_range_honours_utc_offset(self) -> None:
        note = store.create_note(self.db, self.alice, self.alice_nb, "offset")
        created_utc = store.as_utc(note.created_at)
        eastern = timezone(timedelta(hours=-5))
        hour_later = (created_utc + timedelta(hours=1)).astimezone(eastern)
        hour_earlier = (created_utc - timedelta(hours=1)).astimezone(eastern)
        self.assertEqual(len(store.list_notes(self.db, self.alice, self.alice_nb, until=hour_later)), 1)
        self.assertEqual(len(store.list_notes(self.db, self.alice, self.alice_nb, since=hour_later)), 0)
        self.assertEqual(len(store.list_notes(self.db, self.alice, self.alice_nb, since=hour_earlier)), 1)
        self.assertEqual(len(store.list_notes(self.db, self.alice, self.alice_nb, until=hour_earlier)), 0)

    def test_as_utc(self) -> None:
        naive = datetime(2026, 5, 1, 12, 0)
        self.assertEqual(store.as_utc(naive), naive.replace(tzinfo=timezone.utc))
        eastern = datetime(2026, 5, 1, 7, 0, tzinfo=timezone(timedelta(hours=-5)))
        self.assertEqual(store.as_utc(eastern), naive.replace(tzinfo=timezone.utc))
        self.assertEqual(store.as_utc(eastern).tzinfo, timezone.utc)

    def test_foreign_note_unreachable(self) -> None:
        note = store.create_note(self.db, self.alice, self.alice_nb, "secret").id
        with self.assertRaises(NotFoundError):
            store.get_note(self.db, note, self.bob)
        with self.assertRaises(NotFoundError):
            store.update_note(self.db, note, self.bob, "defaced")
        with self.assertRaises(NotFoundError):
            store.delete_note(self.db, note, self.bob)
        self.assertEqual(store.get_note(self.db, note, self.alice).content, "secret")

    def test_update_and_delete_own(self) -> None:
        note = store.create_note(self.db, self.alice, self.alice_nb, "draft").id
        store.update_note(self.db, note, self.alice, "final")
        self.assertEqual(store.get_note(self.db, note, self.alice).content, "final")
        self.assertEqual(store.delete_note(self.db, note, self.alice), [])
        with self.assertRaises(NotFoundError):
            store.get_note(self.db, note, self.alice)

    def test_missing_note_update_is_not_found(self) -> None:
        with self.assertRaises(NotFoundError):
            store.update_note(self.db, 9999, self.alice, "x")


class TestImages(StoreTestCase):
    def setUp(self) -> None:
        super().setUp()
        nb = store.create_notebook(self.db, self.alice, "A").id
        self.note = store.create_note(self.db, self.alice, nb, "with picture").id
        self.image = store.create_note_image(self.db, self.note, self.alice, "a.jpg").id

    def test_owner_reads_filename(self) -> None:
        self.assertEqual(store.get_note_image_filename(self.db, self.image, self.alice), "a.jpg")

    def test_foreign_image_unreachable(self) -> None:
        with self.assertRaises(NotFoundError):
            store.get_note_image_filename(self.db, self.image, self.bob)
        with self.assertRaises(NotFoundError):
            store.delete_note_image(self.db, self.image, self.bob)
        self.assertEqual(self.db.query(NoteImage).count(), 1)

    def test_cannot_attach_to_foreign_note(self) -> None:
        with self.assertRaises(NotFoundError):
            store.create_note_image(self.db, self.note, self.bob, "b.jpg")

    def test_images_attached_to_listed_notes(self) -> None:
        note = store.get_note(self.db, self.note, self.alice)
        notes = store.list_notes(self.db, self.alice, note.notebook_id)
        self.assertEqual([img.filename for img in notes[0].images], ["a.jpg"])

    def test_delete_note_returns_image_files(self) -> None:
        self.assertEqual(store.delete_note(self.db, self.note, self.alice), ["a.jpg"])
        self.assertEqual(self.db.query(NoteImage).count(), 0)

    def test_delete_own_image(self) -> None:
        self.assertEqual(store.delete_note_image(self.db, self.image, self.alice), "a.jpg")
        with self.assertRaises(NotFoundError):
            store.get_note_image_filename(self.db, self.image, self.alice)


if __name__ == "__main__":
    unittest.main()
