"""Pytest configuration and shared fixtures."""

from unittest.mock import Mock

import pytest

from models.climb import Climb, ClimbProfile
from models.gear import GearItem


@pytest.fixture
def day_hike_profile():
    """A short, low, easy day hike."""
    return ClimbProfile(
        mountain_name="Mount Tam",
        elevation=5000,
        difficulty_level="beginner",
        climbing_style="day_hike",
        duration_days=1,
        group_size=1,
    )


@pytest.fixture
def technical_expedition_profile():
    """A high, technical, stormy two-day climb with a group of three."""
    return ClimbProfile(
        mountain_name="Mount Whitney",
        elevation=14505,
        difficulty_level="advanced",
        climbing_style="technical_climb",
        duration_days=2,
        group_size=3,
        weather_concerns="storm expected",
        special_equipment="ice tools",
    )


@pytest.fixture
def sample_climb_data():
    """A climb as stored in DynamoDB (numbers already parsed)."""
    return {
        "climb_id": "climb-123",
        "user_id": "user-456",
        "mountain_name": "Mount Rainier",
        "elevation": 14411,
        "location": "Washington",
        "planned_start_date": "2026-07-10",
        "duration_days": 3,
        "difficulty_level": "advanced",
        "climbing_style": "expedition",
        "group_size": 4,
        "weather_concerns": "glacier travel",
        "special_equipment": "",
        "base_pack_weight_kg": 1.5,
        "backpack_name": "Osprey Mutant 52",
        "status": "planning",
        "required_gear": [
            {
                "item_name": "Ice Axe",
                "estimated_weight_kg": None,
                "importance": None,
                "category": None,
                "quantity": 1,
                "required": True,
                "packed": True,
            },
            {
                "item_name": "Sunscreen",
                "estimated_weight_kg": 0.1,
                "category": "health",
                "quantity": 1,
                "packed": False,
            },
        ],
        "created_at": "2026-01-20T08:00:00Z",
        "updated_at": "2026-01-20T08:00:00Z",
    }


@pytest.fixture
def sample_climb(sample_climb_data):
    """Sample Climb model."""
    return Climb(**sample_climb_data)


@pytest.fixture
def sample_gear():
    """Two items: one packed, one not."""
    return [
        GearItem(item_name="Tent", estimated_weight_kg=3.0, quantity=1, packed=True),
        GearItem(item_name="Fuel Canister", estimated_weight_kg=0.5, quantity=2, packed=False),
    ]


@pytest.fixture
def mock_dynamodb_table():
    """Create a mock DynamoDB table for testing."""
    mock_table = Mock()
    mock_table.put_item.return_value = {}
    mock_table.get_item.return_value = {}
    mock_table.query.return_value = {"Items": []}
    mock_table.delete_item.return_value = {}
    return mock_table
