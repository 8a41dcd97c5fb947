"""Request parameters for Redis Cloud database operations.

The models use snake_case attributes and serialize to the camelCase bodies the
Redis Cloud API expects via ``to_request()``. Fields left unset are omitted
from the body so the API applies its own defaults.
"""

from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from redisctl.core.errors import ValidationError

P = TypeVar("P", bound="CloudParams")

IMPORT_SOURCE_TYPES = (
    "http",
    "redis",
    "ftp",
    "aws-s3",
    "azure-blob-storage",
    "google-blob-storage",
)


class CloudParams(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_request(self) -> Dict[str, Any]:
        """Serialize to the Redis Cloud request body."""
        return self.model_dump(by_alias=True, exclude_none=True)


class CreateDatabaseParams(CloudParams):
    """Parameters for creating a database in a subscription."""

    name: str = Field(min_length=1, description="Database name")
    memory_limit_in_gb: float = Field(gt=0, description="Memory limit in GB")
    replication: Optional[bool] = True
    protocol: Optional[str] = "redis"
    data_persistence: Optional[str] = "none"
    data_eviction_policy: Optional[str] = "volatile-lru"
    redis_version: Optional[str] = None
    support_oss_cluster_api: Optional[bool] = Field(default=None, alias="supportOSSClusterApi")
    port: Optional[int] = Field(default=None, ge=10000, le=19999)


class UpdateDatabaseParams(CloudParams):
    """Parameters for updating a database. Only set fields are sent."""

    name: Optional[str] = None
    memory_limit_in_gb: Optional[float] = Field(default=None, gt=0)
    replication: Optional[bool] = None
    data_persistence: Optional[str] = None
    data_eviction_policy: Optional[str] = None
    support_oss_cluster_api: Optional[bool] = Field(default=None, alias="supportOSSClusterApi")

    def is_empty(self) -> bool:
        return not self.to_request()


class ImportDatabaseParams(CloudParams):
    """Parameters for importing data into a database."""

    source_type: str
    import_from_uri: List[str] = Field(min_length=1)

    @field_validator("source_type")
    @classmethod
    def _known_source_type(cls, value: str) -> str:
        if value not in IMPORT_SOURCE_TYPES:
            raise ValueError(f"source_type must be one of: {', '.join(IMPORT_SOURCE_TYPES)}")
        return value

    @field_validator("import_from_uri")
    @classmethod
    def _non_blank_uris(cls, value: List[str]) -> List[str]:
        if any(not uri.strip() for uri in value):
            raise ValueError("import URIs must not be empty")
        return value


class BackupDatabaseParams(CloudParams):
    """Parameters for an on-demand backup (Active-Active databases take a region)."""

    region_name: Optional[str] = None


def build_params(model: Type[P], **values: Any) -> P:
    """Construct ``model``, reporting invalid input as ``ValidationError``."""
    try:
        return model(**values)
    except PydanticValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc']) or 'params'}: {err['msg']}"
            for err in e.errors()
        )
        raise ValidationError(details) from e
