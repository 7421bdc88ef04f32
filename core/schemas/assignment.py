"""
Module 01 - Schemas
File: assignment.py

Purpose: Check assignments and the rounds that publish them.

An Assignment names one (content id, storage provider) pair to be checked.
A Round is a time-boxed batch of assignments published by the round service
together with the randomness the stations use to sample from it.

Wire payloads use camelCase (contentId, providerId, taskQuotaPerNode). The
older names used by the round service (cid, minerId, maxTasksPerNode,
retrievalTasks) are accepted on input as well.
"""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class Assignment(BaseModel):
    """
    One retrieval check: fetch `content_id` from `provider_id`.

    Immutable and hashable; two assignments are equal when both ids match.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    content_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("contentId", "content_id", "cid"),
        serialization_alias="contentId",
        description="Content identifier (CID) to retrieve",
    )
    provider_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("providerId", "provider_id", "minerId"),
        serialization_alias="providerId",
        description="Storage provider (miner actor) id, e.g. f0142637",
    )

    def to_wire(self) -> dict[str, str]:
        return self.model_dump(by_alias=True)

    def __str__(self) -> str:
        return f"{self.content_id}@{self.provider_id}"


class Round(BaseModel):
    """
    A published batch of assignments.

    The assignment order is the order published by the round service; the
    sampler reads it but never reorders it in place.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    round_id: str = Field(
        ...,
        validation_alias=AliasChoices("roundId", "round_id"),
        serialization_alias="roundId",
    )
    start_epoch: int | None = Field(
        default=None,
        validation_alias=AliasChoices("startEpoch", "start_epoch"),
        serialization_alias="startEpoch",
    )
    task_quota_per_node: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("taskQuotaPerNode", "task_quota_per_node", "maxTasksPerNode"),
        serialization_alias="taskQuotaPerNode",
    )
    assignments: tuple[Assignment, ...] = Field(
        default=(),
        validation_alias=AliasChoices("assignments", "retrievalTasks"),
    )
    randomness: str = Field(
        default="",
        description="Sampling entropy committed when the round was published",
    )
    location: str | None = Field(
        default=None,
        description="Resolved round resource this round was fetched from",
    )

    @field_validator("round_id", mode="before")
    @classmethod
    def _coerce_round_id(cls, value: Any) -> Any:
        # The round service emits numeric ids
        if isinstance(value, int):
            return str(value)
        return value

    @classmethod
    def from_response(cls, body: dict[str, Any], location: str) -> "Round":
        """
        Build a Round from the resolved round resource.

        The randomness is taken from the body when the service provides it,
        otherwise the resolved location is used: it is only known once the
        round has been committed.

        Raises:
            ValueError: If the body is not a JSON object
        """
        if not isinstance(body, dict):
            raise ValueError(f"Round body must be a JSON object, got {type(body).__name__}")
        data = dict(body)
        data.setdefault("randomness", location)
        data["location"] = location
        if "roundId" not in data and "round_id" not in data:
            data["roundId"] = location.rstrip("/").rsplit("/", 1)[-1]
        return cls.model_validate(data)

    def __len__(self) -> int:
        return len(self.assignments)
