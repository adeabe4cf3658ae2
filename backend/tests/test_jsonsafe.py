"""Tests for tolerant JSON columns and key-case helpers."""

import pytest
from sqlalchemy import text

from app.models.registration import Registration
from app.utils.case import dict_keys_to_camel, dict_keys_to_snake
from app.utils.jsonsafe import safe_json_loads


@pytest.mark.unit
class TestSafeJsonLoads:

    @pytest.mark.parametrize(
        "raw",
        [None, "", "   ", "[object Object]", "[object Array]", "{not json", "undefined"],
    )
    def test_garbage_reads_as_none(self, raw):
        assert safe_json_loads(raw) is None

    def test_valid_json(self):
        assert safe_json_loads('{"url": "/uploads/documents/a.pdf"}') == {
            "url": "/uploads/documents/a.pdf"
        }
        assert safe_json_loads(" [1, 2] ") == [1, 2]


@pytest.mark.unit
class TestCaseConversion:

    def test_nested_to_camel(self):
        assert dict_keys_to_camel({"from_status": "x", "fields": [{"postal_code": 1}]}) == {
            "fromStatus": "x",
            "fields": [{"postalCode": 1}],
        }

    def test_to_snake(self):
        assert dict_keys_to_snake({"companyName": "Acme", "directors": [{"fullName": "A"}]}) == {
            "company_name": "Acme",
            "directors": [{"full_name": "A"}],
        }

    def test_scalars_pass_through(self):
        assert dict_keys_to_camel("plain") == "plain"
        assert dict_keys_to_camel(None) is None


@pytest.mark.asyncio
class TestCorruptColumns:

    async def test_corrupt_attachment_reads_as_null(self, db_session):
        db_session.add(Registration(
            id="legacy",
            company_name="Old Co",
            contact_person_name="A",
            contact_person_email="a@example.com",
            contact_person_phone="1",
            selected_package="basic",
        ))
        await db_session.commit()
        await db_session.execute(
            text("UPDATE registrations SET payment_receipt = '[object Object]', directors = '[{\"name\": \"ok\"}]' WHERE id = 'legacy'")
        )
        await db_session.commit()
        db_session.expire_all()

        registration = await db_session.get(Registration, "legacy")

        assert registration.payment_receipt is None
        assert registration.directors == [{"name": "ok"}]
