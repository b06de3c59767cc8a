import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Load environment variables from .env file if it exists
load_dotenv()


class RecordConfig(BaseModel):
    """Configuration for the DynamoDB connection and default table naming."""

    aws_access_key_id: Optional[str] = Field(
        default_factory=lambda: os.getenv("AWS_ACCESS_KEY_ID"),
        description="AWS access key ID"
    )

    aws_secret_access_key: Optional[str] = Field(
        default_factory=lambda: os.getenv("AWS_SECRET_ACCESS_KEY"),
        description="AWS secret access key"
    )

    region_name: str = Field(
        default_factory=lambda: os.getenv("AWS_REGION", "eu-west-1"),
        description="AWS region name"
    )

    # DynamoDB specific settings
    endpoint_url: Optional[str] = Field(
        default_factory=lambda: os.getenv("DYNAMODB_ENDPOINT_URL"),
        description="DynamoDB endpoint URL (for local development)"
    )

    # Table naming
    project: Optional[str] = Field(
        default_factory=lambda: os.getenv("PROJECT"),
        description="Project identifier, first component of default table names"
    )

    stage: Optional[str] = Field(
        default_factory=lambda: os.getenv("STAGE"),
        description="Deployment stage identifier, second component of default table names"
    )

    table_name_separator: str = Field(
        default="-",
        description="Separator placed between table name components"
    )

    # Connection settings
    max_pool_connections: int = Field(
        default=50,
        description="Maximum number of connections in the connection pool"
    )

    retries: int = Field(
        default=3,
        description="Number of retry attempts botocore makes for failed requests"
    )

    timeout_seconds: float = Field(
        default=30.0,
        description="Request timeout in seconds"
    )

    # Logging settings
    enable_debug_logging: bool = Field(
        default_factory=lambda: os.getenv("DYNAMODB_DEBUG_LOGGING", "false").lower() == "true",
        description="Enable debug logging for DynamoDB operations"
    )

    @field_validator('region_name')
    @classmethod
    def validate_region(cls, v):
        """Validate AWS region name."""
        if not v:
            raise ValueError("AWS region name is required")
        return v

    def get_table_name(self, type_name: str) -> str:
        """Get the default table name for a record type.

        Project, stage and type name are joined with the separator; project
        and stage are left out when they are not configured.

        Args:
            type_name: Name of the record type

        Returns:
            Full table name, e.g. ``MyProject-MyStage-Widget``
        """
        parts = [part for part in (self.project, self.stage, type_name) if part]
        return self.table_name_separator.join(parts)

    @classmethod
    def from_env(cls) -> 'RecordConfig':
        """Create configuration from environment variables.

        Returns:
            RecordConfig instance
        """
        return cls()

    @classmethod
    def for_local_development(cls) -> 'RecordConfig':
        """Create configuration for local DynamoDB development.

        Returns:
            RecordConfig instance configured for local development
        """
        return cls(
            aws_access_key_id="local",
            aws_secret_access_key="local",
            region_name="us-east-1",
            endpoint_url="http://localhost:8000",
            enable_debug_logging=True
        )

    model_config = ConfigDict(
        validate_assignment=True
    )
