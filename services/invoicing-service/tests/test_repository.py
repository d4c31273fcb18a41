from __future__ import annotations

import pytest

from invoicing.domain.errors import ConflictError, NotFoundError
from invoicing.domain.records import Client
from invoicing.repository import CompanyRepository, client_repository, invoice_repository
from invoicing.storage import InMemoryRecordStore, JsonFileRecordStore


@pytest.fixture()
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


def test_create_stamps_owner_and_ignores_identity_fields(store):
    clients = client_repository(store)
    created = clients.create("owner-1", {"name": "Ada", "id": "forged", "owner_id": "owner-2"})

    assert created.owner_id == "owner-1"
    assert created.id != "forged"
    assert store.load("clients") == [created.to_dict()]


def test_list_filters_by_owner_in_insertion_order(store):
    clients = client_repository(store)
    first = clients.create("owner-1", {"name": "first"})
    clients.create("owner-2", {"name": "other"})
    second = clients.create("owner-1", {"name": "second"})

    assert [c.id for c in clients.list("owner-1")] == [first.id, second.id]
    assert [c.name for c in clients.list("owner-2")] == ["other"]
    assert clients.list("owner-3") == []


def test_get_update_delete_hide_other_owners_records(store):
    clients = client_repository(store)
    record = clients.create("owner-1", {"name": "Ada"})

    with pytest.raises(NotFoundError) as excinfo:
        clients.get("owner-2", record.id)
    assert str(excinfo.value) == "Client not found or unauthorized"
    with pytest.raises(NotFoundError):
        clients.update("owner-2", record.id, {"name": "stolen"})
    with pytest.raises(NotFoundError):
        clients.delete("owner-2", record.id)

    assert clients.get("owner-1", record.id).name == "Ada"


def test_update_replaces_mutable_fields_and_keeps_identity(store):
    clients = client_repository(store)
    record = clients.create("owner-1", {"name": "Ada", "email": "ada@example.com"})

    updated = clients.update("owner-1", record.id, {"name": "Grace", "id": "x", "owner_id": "y"})

    assert updated == Client(id=record.id, owner_id="owner-1", name="Grace")
    assert clients.get("owner-1", record.id) == updated


def test_delete_twice_reports_not_found(store):
    invoices = invoice_repository(store)
    record = invoices.create("owner-1", {"invoice_number": "INV-1", "items": [{"sku": 1}]})

    invoices.delete("owner-1", record.id)
    with pytest.raises(NotFoundError):
        invoices.delete("owner-1", record.id)
    assert invoices.list("owner-1") == []


def test_company_is_unique_per_owner(store):
    companies = CompanyRepository(store)
    company = companies.register("owner-1", {"company_name": "A Corp"})

    with pytest.raises(ConflictError) as excinfo:
        companies.register("owner-1", {"company_name": "B Corp"})
    assert str(excinfo.value) == "Company already registered"
    assert len(store.load("companies")) == 1

    companies.register("owner-2", {"company_name": "B Corp"})
    assert companies.get_for_owner("owner-1") == company


def test_company_lookup_without_registration(store):
    with pytest.raises(NotFoundError):
        CompanyRepository(store).get_for_owner("nobody")


def test_repositories_persist_through_json_files(tmp_path):
    store = JsonFileRecordStore(tmp_path)
    invoices = invoice_repository(store)
    record = invoices.create("owner-1", {"invoice_number": "INV-9", "items": [{"qty": 3}]})

    reopened = invoice_repository(JsonFileRecordStore(tmp_path))
    assert reopened.get("owner-1", record.id).items == [{"qty": 3}]
    assert (tmp_path / "invoices.json").exists()
