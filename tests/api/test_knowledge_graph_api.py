"""
Test suite for knowledge graph endpoints and document details.

The KnowledgeGraphService is replaced with a MagicMock through FastAPI
dependency overrides.

System role: Verification of the knowledge graph HTTP API
"""

import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from backend.api.deps import get_knowledge_graph_service
from backend.api.main import create_app
from backend.boundary.db.models import DocumentStatus, Modality
from backend.core.exceptions import DocumentNotFoundError
from backend.models.document import DocumentDetailsResponse, DocumentResponse, DocumentStats
from backend.models.knowledge_graph import (
    EntityListResponse,
    EntityResponse,
    KnowledgeGraphResponse,
    Pagination,
    RelationListResponse,
    RelationResponse,
)

NOW = datetime.now(timezone.utc)


def _entity(name: str = "Acme", entity_type: str = "ORGANIZATION") -> EntityResponse:
    return EntityResponse(
        id=uuid.uuid4(),
        workspace="default",
        entity_name=name,
        entity_type=entity_type,
        description=f"About {name}",
        source_chunk_ids=[str(uuid.uuid4())],
        created_at=NOW,
    )


def _relation(source: EntityResponse, target: EntityResponse) -> RelationResponse:
    return RelationResponse(
        id=uuid.uuid4(),
        workspace="default",
        source_entity_id=source.id,
        target_entity_id=target.id,
        source_entity_name=source.entity_name,
        target_entity_name=target.entity_name,
        relation_type="WORKS_FOR",
        created_at=NOW,
    )


@pytest.fixture
def service() -> MagicMock:
    service = MagicMock()
    service.list_entities = AsyncMock()
    service.list_relations = AsyncMock()
    service.get_graph = AsyncMock()
    service.get_document_details = AsyncMock()
    return service


@pytest.fixture
def client(service):
    client = TestClient(create_app())
    client.app.dependency_overrides[get_knowledge_graph_service] = lambda: service
    return client


class TestEntities:
    def test_lists_entities_with_filters(self, client, service) -> None:
        acme = _entity()
        service.list_entities.return_value = EntityListResponse(
            entities=[acme],
            available_types=["ORGANIZATION", "PERSON"],
            pagination=Pagination(limit=10, offset=5, total=6),
        )

        response = client.get(
            "/api/v1/entities",
            params={"workspace": "team", "type": "organization", "search": "ac", "limit": 10, "offset": 5},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["entities"][0]["entity_name"] == "Acme"
        assert body["available_types"] == ["ORGANIZATION", "PERSON"]
        assert body["pagination"] == {"limit": 10, "offset": 5, "total": 6}
        service.list_entities.assert_awaited_once_with(
            "team", entity_type="organization", search="ac", limit=10, offset=5
        )

    def test_defaults_to_default_workspace(self, client, service) -> None:
        service.list_entities.return_value = EntityListResponse(
            entities=[], pagination=Pagination(limit=50, offset=0, total=0)
        )

        response = client.get("/api/v1/entities")

        assert response.status_code == 200
        service.list_entities.assert_awaited_once_with(
            "default", entity_type=None, search=None, limit=50, offset=0
        )

    @pytest.mark.parametrize("limit", [0, 101])
    def test_limit_out_of_range_is_rejected(self, client, service, limit) -> None:
        response = client.get("/api/v1/entities", params={"limit": limit})

        assert response.status_code == 422
        service.list_entities.assert_not_awaited()


class TestRelations:
    def test_lists_relations_with_names(self, client, service) -> None:
        jane, acme = _entity("Jane Doe", "PERSON"), _entity()
        service.list_relations.return_value = RelationListResponse(
            relations=[_relation(jane, acme)],
            pagination=Pagination(limit=50, offset=0, total=1),
        )

        response = client.get("/api/v1/relations", params={"type": "works_for"})

        assert response.status_code == 200
        relation = response.json()["relations"][0]
        assert relation["source_entity_name"] == "Jane Doe"
        assert relation["target_entity_name"] == "Acme"
        service.list_relations.assert_awaited_once_with(
            "default", relation_type="works_for", limit=50, offset=0
        )

    def test_negative_offset_is_rejected(self, client) -> None:
        response = client.get("/api/v1/relations", params={"offset": -1})

        assert response.status_code == 422


class TestKnowledgeGraph:
    def test_returns_whole_graph(self, client, service) -> None:
        jane, acme = _entity("Jane Doe", "PERSON"), _entity()
        service.get_graph.return_value = KnowledgeGraphResponse(
            workspace="team",
            entities=[jane, acme],
            relations=[_relation(jane, acme)],
            entity_count=2,
            relation_count=1,
        )

        response = client.get("/api/v1/knowledge-graph", params={"workspace": "team"})

        assert response.status_code == 200
        body = response.json()
        assert (body["entity_count"], body["relation_count"]) == (2, 1)
        service.get_graph.assert_awaited_once_with("team")


class TestDocumentDetails:
    def test_returns_details(self, client, service) -> None:
        document_id = uuid.uuid4()
        acme = _entity()
        service.get_document_details.return_value = DocumentDetailsResponse(
            document=DocumentResponse(
                id=document_id,
                workspace="default",
                name="notes.txt",
                file_type="txt",
                modality=Modality.TEXT,
                byte_size=11,
                status=DocumentStatus.PROCESSED,
                chunk_count=0,
                created_at=NOW,
            ),
            chunks=[],
            entities=[acme],
            relations=[],
            stats=DocumentStats(
                total_chunks=0,
                total_entities=1,
                total_relations=0,
                entity_types={"ORGANIZATION": 1},
                relation_types={},
                avg_chunk_length=0,
            ),
        )

        response = client.get(f"/api/v1/documents/{document_id}/details")

        assert response.status_code == 200
        body = response.json()
        assert body["document"]["id"] == str(document_id)
        assert body["stats"]["entity_types"] == {"ORGANIZATION": 1}
        service.get_document_details.assert_awaited_once_with(document_id)

    def test_missing_document_returns_404(self, client, service) -> None:
        service.get_document_details.side_effect = DocumentNotFoundError("gone")

        response = client.get(f"/api/v1/documents/{uuid.uuid4()}/details")

        assert response.status_code == 404
