import pytest
from decimal import Decimal
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import PreconditionError
from src.modules.app_settings.service import set_setting
from src.modules.courses.models import Course, Grade, Hour
from src.modules.families.models import NO_COURSE, Family, Student
from src.modules.invoices.calculator import build_hour_labels
from src.modules.invoices.locator import hash_for_family
from src.modules.schedules.service import build_family_schedule


class TestBuildFamilySchedule:
    """Tests for the schedule builder."""

    COURSES = [
        {"course_name": "Algebra", "fee": "50", "location": "Room 2"},
        {"course_name": "Choir", "fee": "0", "location": "Chapel"},
    ]

    def test_every_student_gets_all_seven_slots(self):
        schedule = build_family_schedule(
            {"id": 7, "last_name": "Miller"},
            [
                {
                    "id": 1,
                    "first_name": "Ann",
                    "last_name": "Miller",
                    "grad_year": "2030",
                    "math_hour": "Algebra",
                    "first_hour": NO_COURSE,
                    "fifth_hour_fall": "Choir",
                    "fifth_hour_spring": "Drama",
                },
            ],
            self.COURSES,
            build_hour_labels([{"id": 0, "description": "Math"}]),
            {"SchoolYear": "2025"},
            {8: "8th"},
        )

        assert schedule.token == "7902699b"
        student = schedule.students[0]
        assert student.grade == "8th"
        assert [slot.hour for slot in student.slots] == [
            "Math",
            "1st",
            "2nd",
            "3rd",
            "4th",
            "5th Fall",
            "5th Spring",
        ]
        assert [slot.course_name for slot in student.slots] == [
            "Algebra",
            None,
            None,
            None,
            None,
            "Choir",
            "Drama",
        ]
        # Free courses are still on the schedule; unknown courses have no location
        assert student.slots[0].location == "Room 2"
        assert student.slots[5].location == "Chapel"
        assert student.slots[6].location is None

    def test_students_in_invoice_order(self):
        schedule = build_family_schedule(
            {"id": 7, "last_name": "Miller"},
            [
                {"first_name": "Old", "last_name": "Miller", "grad_year": "2027"},
                {"first_name": "Gone", "last_name": "Miller", "grad_year": "2033", "inactive": True},
                {"first_name": "Young", "last_name": "Miller", "grad_year": "2033"},
            ],
            [],
            {},
            {},
            {},
        )

        assert [s.first_name for s in schedule.students] == ["Young", "Old"]
        assert {s.grade for s in schedule.students} == {"Unknown"}

    def test_missing_family(self):
        with pytest.raises(PreconditionError):
            build_family_schedule(None, [], [], {}, {}, {})


class TestScheduleEndpoints:
    """Tests for schedule API endpoints."""

    async def _setup_test_data(self, db_session: AsyncSession) -> dict:
        await set_setting(db_session, "SchoolYear", "2025")
        db_session.add_all(
            [
                Hour(id=0, description="Math"),
                Hour(id=5, description="5th"),
                Grade(code=8, grade_name="8th"),
                Course(course_name="Algebra", fee=Decimal("50.00"), hour=0, location="Room 2"),
            ]
        )
        family = Family(last_name="Miller", needs_background_check=False, active=True)
        inactive = Family(last_name="Gone", needs_background_check=False, active=False)
        db_session.add_all([family, inactive])
        await db_session.flush()

        db_session.add(
            Student(
                family_id=family.id,
                first_name="Ann",
                last_name="Miller",
                grad_year="2030",
                math_hour="Algebra",
                fifth_hour_spring="Choir",
            )
        )
        await db_session.commit()
        return {"family": family, "inactive": inactive}

    async def test_get_family_schedule(self, client: AsyncClient, db_session: AsyncSession):
        data = await self._setup_test_data(db_session)

        response = await client.get(f"/api/v1/schedules/families/{data['family'].id}")

        assert response.status_code == 200
        students = response.json()["data"]["students"]
        assert len(students) == 1
        slots = students[0]["slots"]
        assert students[0]["grade"] == "8th"
        assert slots[0] == {"hour": "Math", "course_name": "Algebra", "location": "Room 2"}
        assert slots[6] == {"hour": "5th Spring", "course_name": "Choir", "location": None}

    async def test_unknown_family(self, client: AsyncClient, db_session: AsyncSession):
        await self._setup_test_data(db_session)

        response = await client.get("/api/v1/schedules/families/99999")

        assert response.status_code == 404

    async def test_public_schedule(self, client: AsyncClient, db_session: AsyncSession):
        data = await self._setup_test_data(db_session)
        token = hash_for_family(data["family"].id)

        response = await client.get(f"/api/v1/public/schedules/{token}")

        assert response.status_code == 200
        assert response.json()["data"]["token"] == token

    async def test_public_schedule_inactive_or_unknown(
        self, client: AsyncClient, db_session: AsyncSession
    ):
        data = await self._setup_test_data(db_session)

        for token in (hash_for_family(data["inactive"].id), "00000000", "short"):
            response = await client.get(f"/api/v1/public/schedules/{token}")
            assert response.status_code == 404
            assert response.json()["message"] == "Schedule not found"
