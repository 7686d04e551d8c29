"""Integration tests for API endpoints."""

import json
import os
from datetime import UTC, datetime, timedelta

import boto3
import pytest
from jose import jwt
from moto import mock_aws

# Set environment variables before any app imports
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
os.environ["AWS_SECURITY_TOKEN"] = "testing"
os.environ["AWS_SESSION_TOKEN"] = "testing"
os.environ["AWS_DEFAULT_REGION"] = "us-west-2"
os.environ["CLIMBS_TABLE"] = "climb-planner-climbs-test"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret-key-for-testing"

# Test JWT secret (must match the one in environment)
TEST_JWT_SECRET = "test-jwt-secret-key-for-testing"


def create_test_token(user_id: str = "test_user") -> str:
    """Create a valid JWT token for testing."""
    payload = {
        "sub": user_id,
        "type": "access",
        "iat": datetime.now(UTC),
        "exp": datetime.now(UTC) + timedelta(hours=1),
    }
    return jwt.encode(payload, TEST_JWT_SECRET, algorithm="HS256")


def auth_headers(user_id: str = "test_user") -> dict:
    return {"Authorization": f"Bearer {create_test_token(user_id)}"}


@pytest.fixture(scope="module")
def aws_mock():
    """Set up AWS mock for the entire module."""
    with mock_aws():
        yield


@pytest.fixture(scope="module")
def climbs_table(aws_mock):
    """Create the climbs table for testing."""
    dynamodb = boto3.resource("dynamodb", region_name="us-west-2")

    table = dynamodb.create_table(
        TableName="climb-planner-climbs-test",
        KeySchema=[
            {"AttributeName": "climb_id", "KeyType": "HASH"},
            {"AttributeName": "user_id", "KeyType": "RANGE"},
        ],
        AttributeDefinitions=[
            {"AttributeName": "climb_id", "AttributeType": "S"},
            {"AttributeName": "user_id", "AttributeType": "S"},
        ],
        GlobalSecondaryIndexes=[
            {
                "IndexName": "UserIdIndex",
                "KeySchema": [{"AttributeName": "user_id", "KeyType": "HASH"}],
                "Projection": {"ProjectionType": "ALL"},
            }
        ],
        BillingMode="PAY_PER_REQUEST",
    )
    table.wait_until_exists()
    yield table


@pytest.fixture(scope="module")
def app_client(climbs_table):
    """Create FastAPI test client after the table is set up."""
    # Import app after mock is active
    from fastapi.testclient import TestClient

    from handlers.api_handler import app, reset_services

    reset_services()
    return TestClient(app)


@pytest.fixture
def climb_payload():
    """A high, snowy overnight climb."""
    return {
        "mountain_name": "Mount Shasta",
        "elevation": 14179,
        "location": "California",
        "planned_start_date": "2026-06-20",
        "duration_days": 2,
        "difficulty_level": "intermediate",
        "climbing_style": "overnight",
        "group_size": 3,
        "weather_concerns": "Snow above 10k, possible storm",
        "base_pack_weight_kg": 1.4,
        "required_gear": [
            {"item_name": "Ice Axe", "packed": True},
            {"item_name": "Camera", "estimated_weight_kg": 0.8, "packed": True},
        ],
    }


class TestAPIIntegration:
    """Integration tests for the API endpoints."""

    def test_health_check(self, app_client):
        response = app_client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_climb_lifecycle(self, app_client, climb_payload):
        """Create, autofill, reweigh and delete a climb end to end."""
        headers = auth_headers("lifecycle_user")

        created = app_client.post("/api/v1/climbs", json=climb_payload, headers=headers)
        assert created.status_code == 201
        climb_id = created.json()["climb_id"]

        # Stored gear comes back intact
        gear = app_client.get(f"/api/v1/climbs/{climb_id}/gear", headers=headers).json()
        assert [item["item_name"] for item in gear["required_gear"]] == ["Ice Axe", "Camera"]
        assert gear["pack_weight"]["packed_weight_kg"] == pytest.approx(2.2)

        first = app_client.post(
            f"/api/v1/climbs/{climb_id}/gear/autofill", headers=headers
        ).json()
        assert first["changed"] is True
        assert first["backfilled_count"] == 1
        names = [item["item_name"] for item in first["required_gear"]]
        assert names[:2] == ["Ice Axe", "Camera"]
        assert names.count("Ice Axe") == 1
        for expected in ("Tent or Bivy", "Crampons", "Extra Layers", "Group Emergency Shelter"):
            assert expected in names

        second = app_client.post(
            f"/api/v1/climbs/{climb_id}/gear/autofill", headers=headers
        ).json()
        assert second["changed"] is False
        assert second["added_count"] == 0
        assert len(second["required_gear"]) == len(first["required_gear"])

        weight = app_client.get(
            f"/api/v1/climbs/{climb_id}/pack-weight", headers=headers
        ).json()
        # Ice Axe backfilled to 0.5 kg, Camera 0.8 kg, both packed
        assert weight["packed_weight_kg"] == pytest.approx(1.4 + 0.5 + 0.8)
        assert weight["packed_count"] == 2
        assert weight["total_count"] == len(names)
        assert weight["total_weight_kg"] > weight["packed_weight_kg"]

        deleted = app_client.delete(f"/api/v1/climbs/{climb_id}", headers=headers)
        assert deleted.status_code == 204
        missing = app_client.get(f"/api/v1/climbs/{climb_id}", headers=headers)
        assert missing.status_code == 404

    def test_create_with_autofill(self, app_client, climb_payload):
        headers = auth_headers("autofill_user")
        response = app_client.post(
            "/api/v1/climbs?autofill_gear=true", json=climb_payload, headers=headers
        )
        assert response.status_code == 201
        names = [item["item_name"] for item in response.json()["required_gear"]]
        assert names[0] == "Ice Axe"
        assert "First Aid Kit" in names

    def test_climbs_are_scoped_to_user(self, app_client, climb_payload):
        owner = auth_headers("owner_user")
        other = auth_headers("other_user")

        climb_id = app_client.post(
            "/api/v1/climbs", json=climb_payload, headers=owner
        ).json()["climb_id"]

        assert app_client.get(f"/api/v1/climbs/{climb_id}", headers=other).status_code == 404
        assert app_client.get("/api/v1/climbs", headers=other).json()["count"] == 0
        assert app_client.get("/api/v1/climbs", headers=owner).json()["count"] == 1

    def test_update_gear_and_status(self, app_client, climb_payload):
        headers = auth_headers("gear_user")
        climb_id = app_client.post(
            "/api/v1/climbs", json=climb_payload, headers=headers
        ).json()["climb_id"]

        saved = app_client.put(
            f"/api/v1/climbs/{climb_id}/gear",
            json={
                "required_gear": [{"item_name": "Helmet", "estimated_weight_kg": 0.35}],
                "backpack_name": "Hyperlite 3400",
                "base_pack_weight_kg": 0.9,
            },
            headers=headers,
        ).json()
        assert saved["backpack_name"] == "Hyperlite 3400"
        assert saved["pack_weight"]["total_weight_kg"] == pytest.approx(1.25)

        updated = app_client.put(
            f"/api/v1/climbs/{climb_id}", json={"status": "completed"}, headers=headers
        ).json()
        assert updated["status"] == "completed"
        assert updated["ttl"] is not None

        completed = app_client.get("/api/v1/climbs?status=completed", headers=headers).json()
        assert [c["climb_id"] for c in completed["climbs"]] == [climb_id]

    def test_bulk_autofill(self, app_client, climbs_table, climb_payload):
        headers = auth_headers("bulk_user")
        for _ in range(2):
            app_client.post("/api/v1/climbs", json=climb_payload, headers=headers)

        # A legacy row holding its gear as a JSON string
        climbs_table.put_item(
            Item={
                "climb_id": "legacy-1",
                "user_id": "bulk_user",
                "mountain_name": "Mount Adams",
                "elevation": 12276,
                "required_gear": json.dumps([{"item_name": "Crampons"}]),
                "created_at": "2025-01-01T00:00:00Z",
                "updated_at": "2025-01-01T00:00:00Z",
            }
        )

        summary = app_client.post("/api/v1/climbs/gear/autofill", headers=headers).json()
        assert summary["climbs_checked"] == 3
        assert summary["climbs_updated"] == 3
        assert summary["failed"] == 0

        again = app_client.post("/api/v1/climbs/gear/autofill", headers=headers).json()
        assert again["climbs_updated"] == 0

        legacy = app_client.get("/api/v1/climbs/legacy-1/gear", headers=headers).json()
        assert legacy["required_gear"][0]["item_name"] == "Crampons"
        assert legacy["required_gear"][0]["estimated_weight_kg"] == 0.9

    def test_requires_auth(self, app_client):
        assert app_client.get("/api/v1/climbs").status_code == 401

    def test_gear_defaults(self, app_client):
        response = app_client.get("/api/v1/gear/defaults", params={"name": "Waterproof Gaiters"})
        assert response.status_code == 200
        assert response.json()["category"] == "food_water"
