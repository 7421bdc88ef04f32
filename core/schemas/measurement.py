"""
Module 01 - Schemas
File: measurement.py

Purpose: Outcome record of a single retrieval check and the measurement
payload submitted to the measurement service.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr
from pydantic.alias_generators import to_camel

from .assignment import Assignment


class StatsAlreadyCompleteError(RuntimeError):
    """Raised when a completed RetrievalStats record is written to."""


class RetrievalStats(BaseModel):
    """
    Mutable accumulator for one check.

    Created empty when the check starts. Each stage of the check fills in the
    fields it owns. Once `mark_complete()` has been called the record is
    read-only and any further write raises StatsAlreadyCompleteError.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    status_code: int | None = Field(default=None, description="Outcome status (see StatusCode)")
    head_status_code: int | None = Field(default=None, description="HEAD probe status, 600 if it threw")
    timeout: bool = Field(default=False, description="The fetch was aborted by a timeout")
    byte_length: int = Field(default=0, ge=0, description="Bytes received")
    car_too_large: bool = Field(default=False, description="The archive exceeded the size limit")
    car_checksum: str | None = Field(default=None, description="Multihash (sha2-256) of the archive, hex")
    start_at: datetime | None = Field(default=None)
    first_byte_at: datetime | None = Field(default=None)
    end_at: datetime | None = Field(default=None)
    protocol: str | None = Field(default=None, description="Transport used: http or graphsync")
    provider_address: str | None = Field(default=None, description="Multiaddr of the provider")
    provider_id: str | None = Field(default=None, description="Resolved peer id of the provider")
    indexer_result: str | None = Field(default=None, description="Outcome of the index lookup")

    _completed: bool = PrivateAttr(default=False)

    def __setattr__(self, name: str, value: Any) -> None:
        if not name.startswith("_") and self._completed:
            raise StatsAlreadyCompleteError(
                f"Cannot set {name!r}: retrieval stats are already complete"
            )
        super().__setattr__(name, value)

    @property
    def completed(self) -> bool:
        return self._completed

    @property
    def succeeded(self) -> bool:
        return self.status_code == 200 and self.car_checksum is not None

    def mark_complete(self) -> "RetrievalStats":
        self._completed = True
        return self

    def to_wire(self) -> dict[str, Any]:
        """Serialize with camelCase keys and ISO-8601 timestamps."""
        return self.model_dump(mode="json", by_alias=True)


def new_stats() -> RetrievalStats:
    """Create an empty outcome record."""
    return RetrievalStats()


class Measurement(BaseModel):
    """Body of POST /measurements."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    spark_version: str
    runtime_version: str
    station_id: str
    participant_address: str | None = None
    content_id: str
    provider_id: str
    stats: RetrievalStats

    @classmethod
    def build(
        cls,
        assignment: Assignment,
        stats: RetrievalStats,
        *,
        station_id: str,
        spark_version: str,
        runtime_version: str,
        participant_address: str | None = None,
    ) -> "Measurement":
        return cls(
            spark_version=spark_version,
            runtime_version=runtime_version,
            station_id=station_id,
            participant_address=participant_address,
            content_id=assignment.content_id,
            provider_id=assignment.provider_id,
            stats=stats,
        )

    def to_wire(self) -> dict[str, Any]:
        """
        Flatten into the JSON body expected by the measurement service.

        The outcome fields sit at the top level next to the station and
        client metadata. The resolved peer id is sent as `providerPeerId`
        so it does not shadow the assigned provider id.
        """
        body = self.stats.to_wire()
        body["providerPeerId"] = body.pop("providerId")
        body.update(
            {
                "sparkVersion": self.spark_version,
                "runtimeVersion": self.runtime_version,
                "stationId": self.station_id,
                "contentId": self.content_id,
                "providerId": self.provider_id,
            }
        )
        if self.participant_address:
            body["participantAddress"] = self.participant_address
        return body
