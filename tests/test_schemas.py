"""
Tests for building response schemas from ORM rows.
"""
from datetime import datetime
from types import SimpleNamespace

import pytest

from app.schemas.auth import UserResponse
from app.schemas.project import ProjectResponse
from app.schemas.settings import UserSettingsResponse
from app.services.settings_service import SettingsService


class TestFromAttributes:
    """Response schemas read attributes rather than dict keys."""

    @pytest.mark.parametrize("schema", [UserResponse, ProjectResponse, UserSettingsResponse])
    def test_configured(self, schema):
        assert schema.model_config["from_attributes"] is True

    def test_user_from_object(self):
        row = SimpleNamespace(
            id=1, email="alice@example.com", full_name=None, is_active=True, created_at=datetime(2024, 1, 1)
        )

        response = UserResponse.model_validate(row)

        assert response.email == "alice@example.com"

    def test_project_from_object(self):
        row = SimpleNamespace(
            id=4,
            name="Shop",
            description=None,
            created_at=datetime(2024, 1, 1),
            updated_at=datetime(2024, 1, 2),
            archived_at=None,
            key_count=2,
        )

        assert ProjectResponse.model_validate(row).key_count == 2

    async def test_settings_from_row(self, db_session, user):
        row = await SettingsService.get_or_create(db_session, user.id)

        response = UserSettingsResponse.model_validate(row)

        assert response.expiration_threshold == row.expiration_threshold
        assert response.hide_api_keys == row.hide_api_keys
