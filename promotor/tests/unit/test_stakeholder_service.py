"""Unit tests for StakeholderService."""

from datetime import date
from uuid import uuid4

import pytest

from promotor.core.exceptions import StakeholderNotFoundError
from promotor.modules.projects.schemas import BudgetItemCreate, ProjectCreate
from promotor.modules.stakeholders.models import StakeholderType
from promotor.modules.stakeholders.schemas import StakeholderCreate, StakeholderUpdate


@pytest.mark.asyncio
class TestStakeholderCrud:
    """Tests for contact CRUD."""

    async def test_create_and_get(self, stakeholder_service):
        created = await stakeholder_service.create(
            StakeholderCreate(
                name="Materiales y Suministros SA",
                activity="Materiales",
                email="ventas@mys.com",
                tax_id="A87654321",
            )
        )

        fetched = await stakeholder_service.get(created.id)

        assert fetched.type == StakeholderType.PROVIDER
        assert fetched.tax_id == "A87654321"
        assert fetched.address is None

    async def test_get_unknown(self, stakeholder_service):
        with pytest.raises(StakeholderNotFoundError):
            await stakeholder_service.get(uuid4())

        assert await stakeholder_service.get_by_id(uuid4()) is None

    async def test_update_only_sent_fields(self, stakeholder_service, provider):
        updated = await stakeholder_service.update(
            provider.id,
            StakeholderUpdate(phone="912345678", notes="Proveedor principal"),
        )

        assert updated.phone == "912345678"
        assert updated.notes == "Proveedor principal"
        assert updated.name == "Construcciones Norte SL"

    async def test_update_ignores_null_required_fields(self, stakeholder_service, provider):
        updated = await stakeholder_service.update(provider.id, StakeholderUpdate(name=None))

        assert updated.name == "Construcciones Norte SL"

    async def test_delete(self, stakeholder_service, provider):
        await stakeholder_service.delete(provider.id)

        assert await stakeholder_service.get_by_id(provider.id) is None

    async def test_delete_unknown(self, stakeholder_service):
        with pytest.raises(StakeholderNotFoundError):
            await stakeholder_service.delete(uuid4())


@pytest.mark.asyncio
class TestStakeholderListing:
    """Tests for filtering and search."""

    async def test_type_filter(self, stakeholder_service, provider, client_contact):
        clients = await stakeholder_service.list(type_filter="Client")
        providers = await stakeholder_service.list(type_filter="Provider")
        everyone = await stakeholder_service.list()

        assert [s.id for s in clients] == [client_contact.id]
        assert [s.id for s in providers] == [provider.id]
        assert [s.name for s in everyone] == ["Construcciones Norte SL", "Juan Pérez García"]

    @pytest.mark.parametrize("search", ["PÉREZ", "juan.perez@", "  garcía "])
    async def test_search_is_case_insensitive(
        self, stakeholder_service, provider, client_contact, search
    ):
        found = await stakeholder_service.list(search=search)

        assert [s.id for s in found] == [client_contact.id]

    async def test_search_and_filter_combine(self, stakeholder_service, provider, client_contact):
        found = await stakeholder_service.list(type_filter="Provider", search="juan")

        assert found == []


@pytest.mark.asyncio
class TestProviderStats:
    """Tests for business volume."""

    async def test_stats_count_items_and_links(
        self, stakeholder_service, project_service, provider
    ):
        olivos = await project_service.create(ProjectCreate(name="Los Olivos", budget=100))
        marina = await project_service.create(ProjectCreate(name="Torre Marina", budget=100))
        bosque = await project_service.create(ProjectCreate(name="Villas", budget=100))

        for concept, amount in (("Electricidad", 250_000), ("Tierras", 50_000)):
            await project_service.add_budget_item(
                olivos.id,
                BudgetItemCreate(concept=concept, amount=amount, provider_id=provider.id),
            )
        await project_service.add_budget_item(
            marina.id, BudgetItemCreate(concept="Grúa", amount=10_000, provider_id=provider.id)
        )
        await project_service.add_stakeholder(bosque.id, provider.id)

        stats = await stakeholder_service.provider_stats(provider.id)

        assert stats.total_budgeted == 310_000
        assert stats.project_count == 3

    async def test_stats_without_activity(self, stakeholder_service, client_contact):
        stats = await stakeholder_service.provider_stats(client_contact.id)

        assert stats.total_budgeted == 0
        assert stats.project_count == 0

    async def test_csv_rows(self, stakeholder_service, project_service, provider, client_contact):
        project = await project_service.create(
            ProjectCreate(name="Los Olivos", budget=100, start_date=date(2024, 1, 1))
        )
        await project_service.add_budget_item(
            project.id, BudgetItemCreate(concept="Obra", amount=1_500, provider_id=provider.id)
        )

        rows = await stakeholder_service.csv_rows(type_filter="Provider")

        assert rows == [
            [
                "Construcciones Norte SL",
                "Provider",
                "Obra Civil",
                "contacto@cnorte.com",
                "",
                "",
                "",
                1_500,
            ]
        ]
