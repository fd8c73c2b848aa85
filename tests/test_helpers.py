"""Single-fetch helpers."""
import pytest

from slapi import Client
from slapi.helpers import clear_ticket_subjects, ticket_subjects

SUBJECTS = [{"id": 1001, "name": "Accounting Request"}, {"id": 1021, "name": "Hardware Issue"}]


@pytest.fixture(autouse=True)
def forget_subjects():
    clear_ticket_subjects()
    yield
    clear_ticket_subjects()


class TestTicketSubjects:
    def test_fetched_once_per_client(self, client, transport):
        transport.result = SUBJECTS
        first = ticket_subjects(client)
        second = ticket_subjects(client)
        assert first is SUBJECTS
        assert second is first
        assert len(transport.requests) == 1
        assert transport.last.service_name == "SoftLayer_Ticket_Subject"
        assert transport.last.method == "getAllObjects"

    def test_each_client_fetches_its_own(self, transport):
        transport.result = SUBJECTS
        ticket_subjects(Client(username="a", api_key="k", transport=transport))
        ticket_subjects(Client(username="b", api_key="k", transport=transport))
        assert len(transport.requests) == 2

    def test_clear(self, client, transport):
        transport.result = SUBJECTS
        ticket_subjects(client)
        clear_ticket_subjects(client)
        ticket_subjects(client)
        assert len(transport.requests) == 2
