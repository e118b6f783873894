"""
Unit tests for the metadata catalog
"""
import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from shared.auth import get_password_hash
from shared.exceptions import ConflictError, NotFoundError
from services.file_portal.core import catalog
from services.file_portal.models import Subject, UserRole


class TestFileQueries:
    """Tests for listing, search and adjacency"""

    async def test_adjacent_files_in_name_order(self, db_session: AsyncSession, teacher_user, make_file):
        # Inserted out of name order on purpose
        c = await make_file(teacher_user, "c.pdf")
        a = await make_file(teacher_user, "a.pdf")
        b = await make_file(teacher_user, "b.pdf")
        await make_file(teacher_user, "other.pdf", subject="Science")

        assert await catalog.adjacent_files(db_session, a.id, "VI", "Math") == (None, b.id)
        assert await catalog.adjacent_files(db_session, b.id, "VI", "Math") == (a.id, c.id)
        assert await catalog.adjacent_files(db_session, c.id, "VI", "Math") == (b.id, None)

    async def test_adjacent_files_outside_bucket(self, db_session: AsyncSession, teacher_user, make_file):
        record = await make_file(teacher_user, "a.pdf")
        assert await catalog.adjacent_files(db_session, record.id, "VII", "Math") == (None, None)

    async def test_list_files_filters(self, db_session: AsyncSession, teacher_user, make_file):
        await make_file(teacher_user, "a.pdf", class_name="VI", subject="Math")
        await make_file(teacher_user, "b.pdf", class_name="VI", subject="Science")
        await make_file(teacher_user, "c.pdf", class_name="VII", subject="Math")

        assert len(await catalog.list_files(db_session)) == 3
        assert [f.file_name for f in await catalog.list_files(db_session, "VI")] == ["a.pdf", "b.pdf"]
        assert [f.file_name for f in await catalog.list_files(db_session, "VI", "Science")] == ["b.pdf"]

    async def test_search_is_case_insensitive_substring(self, db_session: AsyncSession, teacher_user, make_file):
        await make_file(teacher_user, "algebra.pdf", subject="Mathematics")
        await make_file(teacher_user, "MATH_notes.pdf", subject="Science")
        await make_file(teacher_user, "poem.txt", subject="English", description="Maths-free reading")
        await make_file(teacher_user, "map.png", subject="Geography")

        names = {f.file_name for f in await catalog.search_files(db_session, "math")}
        assert names == {"algebra.pdf", "MATH_notes.pdf", "poem.txt"}

    async def test_search_treats_wildcards_literally(self, db_session: AsyncSession, teacher_user, make_file):
        await make_file(teacher_user, "report.pdf")
        assert await catalog.search_files(db_session, "%") == []
        assert await catalog.search_files(db_session, "_") == []

    async def test_blank_search_lists_everything(self, db_session: AsyncSession, teacher_user, make_file):
        await make_file(teacher_user, "a.pdf")
        await make_file(teacher_user, "b.pdf")
        assert len(await catalog.search_files(db_session, "   ")) == 2

    async def test_storage_summary_and_recent(self, db_session: AsyncSession, teacher_user, make_file):
        assert await catalog.storage_summary(db_session) == (0, 0)

        await make_file(teacher_user, "a.pdf", content=b"x" * 10)
        last = await make_file(teacher_user, "b.pdf", content=b"x" * 30)

        assert await catalog.storage_summary(db_session) == (2, 40)
        recent = await catalog.recent_files(db_session, limit=1)
        assert [f.id for f in recent] == [last.id]

    async def test_get_missing_file(self, db_session: AsyncSession):
        with pytest.raises(NotFoundError):
            await catalog.get_file(db_session, 999)


class TestClassesAndSubjects:
    """Tests for class lookup and subject creation"""

    async def test_get_class_by_code_ignores_case(self, db_session: AsyncSession, school_classes):
        found = await catalog.get_class_by_code(db_session, "vi")
        assert found is not None
        assert found.code == "VI"

    async def test_get_class_by_code_excludes_self(self, db_session: AsyncSession, school_classes):
        vi = school_classes[0]
        assert await catalog.get_class_by_code(db_session, "VI", exclude_id=vi.id) is None

    async def test_active_classes_ordered(self, db_session: AsyncSession, school_classes):
        assert [c.code for c in school_classes] == ["VI", "VII", "VIII"]

    async def test_create_subject_if_absent_is_idempotent(self, db_session: AsyncSession, school_classes, teacher_user):
        vi = school_classes[0]
        first = await catalog.create_subject_if_absent(db_session, vi, "Math", teacher_user.id)
        second = await catalog.create_subject_if_absent(db_session, vi, " Math ", teacher_user.id)
        assert first.id == second.id
        assert await catalog.list_subjects(db_session, "VI") == ["Math"]
        assert await catalog.list_subjects(db_session, "VII") == []

    async def test_concurrent_subject_insert_reads_back_winner(
        self, db_session: AsyncSession, school_classes, teacher_user, monkeypatch
    ):
        vi = school_classes[0]
        vi_id, teacher_id = vi.id, teacher_user.id

        # Another request already inserted the row, but this one looked first.
        winner = Subject(name="Science", class_id=vi_id, created_by=teacher_id, is_active=True)
        db_session.add(winner)
        await db_session.commit()
        winner_id = winner.id

        real_find = catalog._find_subject
        calls = []

        async def stale_then_real(db, class_id, name):
            calls.append(name)
            if len(calls) == 1:
                return None
            return await real_find(db, class_id, name)

        monkeypatch.setattr(catalog, "_find_subject", stale_then_real)

        subject = await catalog.create_subject_if_absent(db_session, vi, "Science", teacher_id)
        assert subject.id == winner_id
        assert len(calls) == 2


class TestUsers:
    """Tests for account storage and authentication"""

    async def test_create_and_authenticate(self, db_session: AsyncSession):
        user = await catalog.create_user(
            db_session, "Asha", get_password_hash("pass1234"), UserRole.TEACHER, ["VII", "VI", "VI"]
        )
        assert user.assigned_classes == ["VI", "VII"]

        assert (await catalog.authenticate_user(db_session, "asha", "pass1234")).id == user.id
        assert await catalog.authenticate_user(db_session, "asha", "wrong") is None
        assert await catalog.authenticate_user(db_session, "nobody", "pass1234") is None

    async def test_username_unique_ignoring_case(self, db_session: AsyncSession):
        await catalog.create_user(db_session, "Ravi", get_password_hash("pass1234"), UserRole.TEACHER)
        with pytest.raises(ConflictError):
            await catalog.create_user(db_session, "ravi", get_password_hash("pass1234"), UserRole.TEACHER)

    async def test_deactivated_user_cannot_log_in(self, db_session: AsyncSession):
        user = await catalog.create_user(db_session, "Kiran", get_password_hash("pass1234"), UserRole.TEACHER)
        await catalog.deactivate_user(db_session, user.id)

        assert await catalog.authenticate_user(db_session, "Kiran", "pass1234") is None
        assert await catalog.list_teachers(db_session) == []

    async def test_any_active_admin(self, db_session: AsyncSession, teacher_user):
        assert await catalog.any_active_admin(db_session) is False
        await catalog.create_user(db_session, "head", get_password_hash("pass1234"), UserRole.ADMIN)
        assert await catalog.any_active_admin(db_session) is True
