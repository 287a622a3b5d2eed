"""Demo portfolio loaded into an empty store on first start."""

from datetime import date

from promotor.modules.documents.models import DocumentStatus, DocumentType, LinkedEntityType
from promotor.modules.projects.models import ActionType, AlertType, BudgetStatus, ProjectStatus
from promotor.modules.stakeholders.models import StakeholderType

from .schemas import (
    ActionSnapshot,
    AlertSnapshot,
    BudgetItemSnapshot,
    DocumentSnapshot,
    ProjectSnapshot,
    Snapshot,
    StakeholderSnapshot,
)


def demo_snapshot() -> Snapshot:
    """Build the demo portfolio with fresh IDs."""
    norte = StakeholderSnapshot(
        name="Construcciones Norte SL",
        type=StakeholderType.PROVIDER,
        activity="Obra Civil",
        email="contacto@cnorte.com",
        phone="912345678",
        address="C/ Industrial 4, Madrid",
        tax_id="B12345678",
        notes="Proveedor principal de obra civil.",
    )
    perez = StakeholderSnapshot(
        name="Juan Pérez García",
        type=StakeholderType.CLIENT,
        activity="Inversor",
        email="juan.perez@email.com",
        phone="600123456",
        address="Av. Libertad 20, Valencia",
        tax_id="12345678Z",
        notes="Interesado en áticos.",
    )
    materiales = StakeholderSnapshot(
        name="Materiales y Suministros SA",
        type=StakeholderType.PROVIDER,
        activity="Materiales",
        email="ventas@mys.com",
        phone="934567890",
        address="Polígono Sur, Nave 3, Sevilla",
        tax_id="A87654321",
    )
    arquitectura = StakeholderSnapshot(
        name="Arquitectura & Diseño",
        type=StakeholderType.PROVIDER,
        activity="Arquitectura",
        email="estudio@arq.com",
        phone="915555555",
        address="Madrid",
        tax_id="B9999999",
    )

    olivos = ProjectSnapshot(
        name="Residencial Los Olivos",
        location="Madrid, Zona Norte",
        budget=4_500_000,
        actual_cost=1_200_000,
        progress=35,
        status=ProjectStatus.ACTIVE,
        start_date=date(2023, 9, 1),
        end_date=date(2025, 3, 1),
        stakeholder_ids=[norte.id, arquitectura.id],
        actions=[
            ActionSnapshot(
                date=date(2024, 2, 10),
                title="Estructura P1",
                description="Finalizada estructura primera planta.",
                type=ActionType.CONSTRUCTION,
            ),
            ActionSnapshot(
                date=date(2023, 11, 15),
                title="Pago Cimentación",
                description="Certificación nº1 abonada.",
                type=ActionType.PAYMENT,
                amount=150_000,
            ),
            ActionSnapshot(
                date=date(2023, 9, 1),
                title="Inicio de Obra",
                description="Firma de acta de replanteo.",
                type=ActionType.CONSTRUCTION,
            ),
        ],
        budgets=[
            BudgetItemSnapshot(
                concept="Instalación Eléctrica General",
                amount=250_000,
                actual_amount=245_000,
                date=date(2024, 1, 15),
                status=BudgetStatus.APPROVED,
                provider_id=norte.id,
            ),
            BudgetItemSnapshot(
                concept="Carpintería de Aluminio",
                amount=180_000,
                actual_amount=0,
                date=date(2024, 2, 1),
                status=BudgetStatus.PENDING,
            ),
            BudgetItemSnapshot(
                concept="Movimiento de Tierras",
                amount=50_000,
                actual_amount=55_000,
                date=date(2023, 10, 1),
                status=BudgetStatus.APPROVED,
                provider_id=norte.id,
            ),
        ],
        alerts=[
            AlertSnapshot(
                title="Vencimiento Licencia de Grúa",
                date=date(2024, 6, 1),
                type=AlertType.LICENSE,
            ),
            AlertSnapshot(
                title="Reunión con Arquitecto",
                date=date(2024, 5, 20),
                type=AlertType.MEETING,
                is_completed=True,
            ),
        ],
    )
    marina = ProjectSnapshot(
        name="Torre Marina",
        location="Valencia, Puerto",
        budget=8_200_000,
        actual_cost=50_000,
        progress=5,
        status=ProjectStatus.PLANNING,
        start_date=date(2024, 1, 15),
        end_date=date(2026, 6, 30),
        stakeholder_ids=[arquitectura.id],
        actions=[
            ActionSnapshot(
                date=date(2024, 1, 20),
                title="Licencia Solicitada",
                description="Presentación proyecto básico al ayuntamiento.",
                type=ActionType.LEGAL,
            ),
        ],
        alerts=[
            AlertSnapshot(
                title="Presentar Aval Bancario",
                date=date(2024, 5, 30),
                type=AlertType.DEADLINE,
            ),
        ],
    )
    bosque = ProjectSnapshot(
        name="Villas del Bosque",
        location="Girona",
        budget=3_100_000,
        actual_cost=2_900_000,
        progress=92,
        status=ProjectStatus.SALES,
        start_date=date(2022, 5, 1),
        end_date=date(2024, 8, 1),
        stakeholder_ids=[materiales.id],
    )

    documents = [
        DocumentSnapshot(
            name="Factura Cimentos SA",
            type=DocumentType.INVOICE,
            date=date(2024, 5, 12),
            amount=12_500,
            status=DocumentStatus.PROCESSED,
            linked_entity_id=olivos.id,
            linked_entity_type=LinkedEntityType.PROJECT,
        ),
        DocumentSnapshot(
            name="Plano Estructural v2",
            type=DocumentType.BLUEPRINT,
            date=date(2024, 5, 10),
            status=DocumentStatus.PENDING,
            linked_entity_id=marina.id,
            linked_entity_type=LinkedEntityType.PROJECT,
        ),
        DocumentSnapshot(
            name="Licencia de Obra",
            type=DocumentType.CONTRACT,
            date=date(2024, 1, 20),
            status=DocumentStatus.PROCESSED,
            linked_entity_id=olivos.id,
            linked_entity_type=LinkedEntityType.PROJECT,
        ),
    ]

    return Snapshot(
        projects=[olivos, marina, bosque],
        stakeholders=[norte, perez, materiales, arquitectura],
        documents=documents,
    )
