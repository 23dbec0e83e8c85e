# test/pytest/test_mongo_note.py
import asyncio
import copy
import pytest
from datetime import datetime, timezone
from types import SimpleNamespace

from app.database.mongo_note import MongoNoteRepository
from app.schemas.note import Note
from conftest import oid


class FakeNotesCollection:
    """Just enough of a motor collection for the rating updates."""

    def __init__(self):
        self.docs = []

    def _matches(self, doc, filt):
        for key, cond in filt.items():
            if key == "ratings.userId":
                raters = [r["userId"] for r in doc.get("ratings", [])]
                if isinstance(cond, dict):
                    if cond["$ne"] in raters:
                        return False
                elif cond not in raters:
                    return False
            elif doc.get(key) != cond:
                return False
        return True

    async def insert_one(self, doc):
        self.docs.append(copy.deepcopy(doc))

    async def find_one(self, filt, projection=None):
        doc = next((d for d in self.docs if self._matches(d, filt)), None)
        return copy.deepcopy(doc)

    async def update_one(self, filt, update):
        # yield first so concurrent callers interleave between their writes
        await asyncio.sleep(0)
        doc = next((d for d in self.docs if self._matches(d, filt)), None)
        if doc is None:
            return SimpleNamespace(matched_count=0)
        for path, value in update.get("$set", {}).items():
            assert path == "ratings.$.rating"
            entry = next(r for r in doc["ratings"] if r["userId"] == filt["ratings.userId"])
            entry["rating"] = value
        for field, value in update.get("$push", {}).items():
            doc.setdefault(field, []).append(dict(value))
        return SimpleNamespace(matched_count=1)


@pytest.fixture
def note_repo():
    return MongoNoteRepository({"notes": FakeNotesCollection()})


async def _seed(repo) -> str:
    note = Note(
        id=oid(), title="Graphs", subject="Math", description="BFS and DFS",
        authorId=oid(), uploadDate=datetime.now(timezone.utc),
        fileId=oid(), fileName="graphs.pdf", fileType="application/pdf",
    )
    return await repo.create(note)


@pytest.mark.asyncio
async def test_set_rating_adds_then_replaces(note_repo):
    note_id = await _seed(note_repo)
    rater = oid()

    note = await note_repo.set_rating(note_id, rater, 3)
    assert [(r.userId, r.rating) for r in note.ratings] == [(rater, 3)]

    note = await note_repo.set_rating(note_id, rater, 5)
    assert [(r.userId, r.rating) for r in note.ratings] == [(rater, 5)]

    other = oid()
    note = await note_repo.set_rating(note_id, other, 1)
    assert len(note.ratings) == 2
    assert note.average_rating == 3.0


@pytest.mark.asyncio
async def test_concurrent_ratings_by_one_user_keep_one_entry(note_repo):
    note_id = await _seed(note_repo)
    rater = oid()

    await asyncio.gather(
        note_repo.set_rating(note_id, rater, 2),
        note_repo.set_rating(note_id, rater, 4),
    )
    note = await note_repo.find_one(note_id)
    assert len(note.ratings) == 1
    assert note.ratings[0].rating in (2, 4)


@pytest.mark.asyncio
async def test_set_rating_missing_note(note_repo):
    assert await note_repo.set_rating(oid(), oid(), 4) is None
