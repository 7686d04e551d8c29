"""Climb planning service."""

import logging
import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

from botocore.exceptions import ClientError

from models.climb import Climb, ClimbCreate, ClimbStatus, ClimbUpdate, GearListUpdate
from models.gear import PackWeightSummary
from services.gear_recommendation_service import GearMergeResult, merge_with_report
from services.pack_weight_service import summarize_pack_weight
from utils.constants import COMPLETED_CLIMB_TTL_DAYS
from utils.dynamodb_utils import (
    parse_from_dynamodb,
    parse_items_from_dynamodb,
    prepare_for_dynamodb,
)

logger = logging.getLogger(__name__)


class ClimbService:
    """Service for storing climbs and their gear checklists."""

    def __init__(self, table):
        """Initialize the climb service.

        Args:
            table: DynamoDB table for climbs (hash key climb_id, range key
                user_id, GSI UserIdIndex on user_id)
        """
        self.table = table

    def _save(self, climb: Climb, action: str) -> Climb:
        try:
            item = prepare_for_dynamodb(climb.model_dump())
            self.table.put_item(Item=item)
            return climb
        except ClientError as e:
            logger.error("Failed to %s climb %s: %s", action, climb.climb_id, e)
            raise Exception(f"Failed to {action} climb: {str(e)}")

    def create_climb(
        self, user_id: str, climb_data: ClimbCreate, autofill_gear: bool = False
    ) -> Climb:
        """Create a new climb.

        Args:
            user_id: ID of the user creating the climb
            climb_data: Climb creation data
            autofill_gear: Merge recommended gear into the initial list

        Returns:
            Created Climb object

        Raises:
            Exception: On database errors
        """
        now = datetime.now(UTC).isoformat()
        climb = Climb(
            climb_id=str(uuid.uuid4()),
            user_id=user_id,
            created_at=now,
            updated_at=now,
            **climb_data.model_dump(),
        )

        if autofill_gear:
            climb.required_gear = merge_with_report(climb.required_gear, climb).items

        return self._save(climb, "create")

    def get_climb(self, climb_id: str, user_id: str) -> Climb | None:
        """Get a climb by ID.

        Args:
            climb_id: Climb ID
            user_id: User ID (for authorization)

        Returns:
            Climb object or None if not found
        """
        try:
            response = self.table.get_item(Key={"climb_id": climb_id, "user_id": user_id})
            item = response.get("Item")
            if not item:
                return None

            return Climb(**parse_from_dynamodb(item))
        except ClientError as e:
            raise Exception(f"Failed to get climb: {str(e)}")

    def _require_climb(self, climb_id: str, user_id: str) -> Climb:
        climb = self.get_climb(climb_id, user_id)
        if not climb:
            raise ValueError(f"Climb {climb_id} not found")
        return climb

    def get_user_climbs(
        self, user_id: str, status: ClimbStatus | None = None
    ) -> list[Climb]:
        """Get all climbs for a user, latest planned start first.

        Args:
            user_id: User ID
            status: Optional status filter

        Returns:
            List of Climb objects
        """
        try:
            climbs = []
            query_kwargs: dict[str, Any] = {
                "IndexName": "UserIdIndex",
                "KeyConditionExpression": "user_id = :uid",
                "ExpressionAttributeValues": {":uid": user_id},
            }
            while True:
                response = self.table.query(**query_kwargs)
                for item in parse_items_from_dynamodb(response.get("Items", [])):
                    climb = Climb(**item)
                    if status and climb.status != status:
                        continue
                    climbs.append(climb)

                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                query_kwargs["ExclusiveStartKey"] = last_key

            climbs.sort(key=lambda c: c.planned_start_date or "", reverse=True)
            return climbs

        except ClientError as e:
            raise Exception(f"Failed to get climbs: {str(e)}")

    def _apply_ttl(self, climb: Climb) -> None:
        if climb.status in (ClimbStatus.COMPLETED, ClimbStatus.CANCELLED):
            ttl_time = datetime.now(UTC) + timedelta(days=COMPLETED_CLIMB_TTL_DAYS)
            climb.ttl = int(ttl_time.timestamp())
        else:
            climb.ttl = None

    def update_climb(self, climb_id: str, user_id: str, update_data: ClimbUpdate) -> Climb:
        """Update a climb's attributes.

        Raises:
            ValueError: If climb not found
            Exception: On database errors
        """
        climb = self._require_climb(climb_id, user_id)

        update_dict = update_data.model_dump(exclude_unset=True, exclude_none=True)
        climb = climb.model_copy(update=update_dict)
        # Re-validate so enum/text coercion applies to the updated fields
        climb = Climb.model_validate(climb.model_dump())

        climb.updated_at = datetime.now(UTC).isoformat()
        self._apply_ttl(climb)
        return self._save(climb, "update")

    def delete_climb(self, climb_id: str, user_id: str) -> bool:
        """Delete a climb.

        Returns:
            True if deleted, False if not found
        """
        try:
            self.table.delete_item(
                Key={"climb_id": climb_id, "user_id": user_id},
                ConditionExpression="attribute_exists(climb_id)",
            )
            return True
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                return False
            raise Exception(f"Failed to delete climb: {str(e)}")

    def update_gear(self, climb_id: str, user_id: str, gear_data: GearListUpdate) -> Climb:
        """Save the gear page: checklist, backpack name and base pack weight.

        Raises:
            ValueError: If climb not found
        """
        climb = self._require_climb(climb_id, user_id)

        if gear_data.required_gear is not None:
            climb.required_gear = [item.model_copy() for item in gear_data.required_gear]
        if gear_data.backpack_name is not None:
            climb.backpack_name = gear_data.backpack_name
        if gear_data.base_pack_weight_kg is not None:
            climb.base_pack_weight_kg = gear_data.base_pack_weight_kg

        climb.updated_at = datetime.now(UTC).isoformat()
        return self._save(climb, "update gear for")

    def autofill_gear(self, climb_id: str, user_id: str) -> tuple[Climb, GearMergeResult]:
        """Merge recommended gear into a climb's stored checklist.

        Saves only when the merge added or backfilled something, so calling
        it again (e.g. after a failed save) never duplicates items.

        Raises:
            ValueError: If climb not found
        """
        climb = self._require_climb(climb_id, user_id)
        result = merge_with_report(climb.required_gear, climb)

        if result.changed:
            climb.required_gear = result.items
            climb.updated_at = datetime.now(UTC).isoformat()
            self._save(climb, "autofill gear for")
            logger.info(
                "Autofilled climb %s: %d added, %d backfilled",
                climb_id,
                result.added_count,
                result.backfilled_count,
            )

        return climb, result

    def autofill_all(self, user_id: str) -> dict[str, int]:
        """Autofill gear for every climb the user owns.

        A failure on one climb is logged and counted; the others still run.

        Returns:
            Counts of climbs checked, climbs updated, items added and failures
        """
        summary = {"climbs_checked": 0, "climbs_updated": 0, "items_added": 0, "failed": 0}

        for climb in self.get_user_climbs(user_id):
            summary["climbs_checked"] += 1
            result = merge_with_report(climb.required_gear, climb)
            if not result.changed:
                continue

            climb.required_gear = result.items
            climb.updated_at = datetime.now(UTC).isoformat()
            try:
                self._save(climb, "autofill gear for")
            except Exception as e:
                logger.error("Autofill update failed for climb %s: %s", climb.climb_id, e)
                summary["failed"] += 1
                continue

            summary["climbs_updated"] += 1
            summary["items_added"] += result.added_count

        logger.info(
            "Bulk autofill for %s: %d/%d climbs updated",
            user_id,
            summary["climbs_updated"],
            summary["climbs_checked"],
        )
        return summary

    def get_pack_summary(self, climb_id: str, user_id: str) -> PackWeightSummary:
        """Pack weight summary for a stored climb.

        Raises:
            ValueError: If climb not found
        """
        climb = self._require_climb(climb_id, user_id)
        return summarize_pack_weight(climb.required_gear, climb.base_pack_weight_kg)
