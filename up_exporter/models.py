"""Pydantic models for Up API resources and webhook events."""
from enum import Enum
from typing import Generic, List, Optional, TypeVar
from pydantic import BaseModel, Field, field_validator


class LabelEnum(str, Enum):
    """String enum that renders unknown upstream values as UNKNOWN."""

    @classmethod
    def _missing_(cls, value):
        return cls["UNKNOWN"]

    @property
    def label(self) -> str:
        """Metric label value for this member."""
        return self.value


class AccountType(LabelEnum):
    SAVER = "SAVER"
    TRANSACTIONAL = "TRANSACTIONAL"
    HOME_LOAN = "HOME_LOAN"
    UNKNOWN = "UNKNOWN"


class OwnershipType(LabelEnum):
    INDIVIDUAL = "INDIVIDUAL"
    JOINT = "JOINT"
    UNKNOWN = "UNKNOWN"


class WebhookEventType(LabelEnum):
    TRANSACTION_CREATED = "TRANSACTION_CREATED"
    TRANSACTION_SETTLED = "TRANSACTION_SETTLED"
    TRANSACTION_DELETED = "TRANSACTION_DELETED"
    PING = "PING"
    UNKNOWN = "UNKNOWN"


class TransactionStatus(LabelEnum):
    HELD = "HELD"
    SETTLED = "SETTLED"
    UNKNOWN = "UNKNOWN"


class ResourceModel(BaseModel):
    """Base for camelCase API payloads."""

    class Config:
        populate_by_name = True


class MoneyObject(ResourceModel):
    """Amount of money in base units plus its currency."""
    currency_code: str = Field(..., alias="currencyCode")
    value: Optional[str] = None
    value_in_base_units: int = Field(..., alias="valueInBaseUnits")


class RelationshipData(ResourceModel):
    """Reference to another resource by id."""
    id: str
    type: Optional[str] = None


class Relationship(ResourceModel):
    data: RelationshipData


class AccountAttributes(ResourceModel):
    display_name: str = Field(..., alias="displayName")
    account_type: AccountType = Field(..., alias="accountType")
    ownership_type: OwnershipType = Field(..., alias="ownershipType")
    balance: MoneyObject
    created_at: Optional[str] = Field(None, alias="createdAt")

    @field_validator("account_type", mode="before")
    @classmethod
    def parse_account_type(cls, v):
        """Map unrecognised account types to UNKNOWN."""
        return AccountType(v)

    @field_validator("ownership_type", mode="before")
    @classmethod
    def parse_ownership_type(cls, v):
        """Map unrecognised ownership types to UNKNOWN."""
        return OwnershipType(v)


class AccountResource(ResourceModel):
    """Item in GET /accounts response."""
    id: str
    type: Optional[str] = None
    attributes: AccountAttributes


class WebhookAttributes(ResourceModel):
    url: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[str] = Field(None, alias="createdAt")


class WebhookResource(ResourceModel):
    """Item in GET /webhooks response. Only the id is used."""
    id: str
    type: Optional[str] = None
    attributes: Optional[WebhookAttributes] = None


class PaginationLinks(ResourceModel):
    prev: Optional[str] = None
    next: Optional[str] = None


T = TypeVar("T")


class Page(ResourceModel, Generic[T]):
    """One page of a paginated collection."""
    data: List[T]
    links: PaginationLinks = Field(default_factory=PaginationLinks)


class TransactionAttributes(ResourceModel):
    status: TransactionStatus
    amount: MoneyObject
    description: Optional[str] = None
    created_at: Optional[str] = Field(None, alias="createdAt")

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, v):
        """Map unrecognised transaction statuses to UNKNOWN."""
        return TransactionStatus(v)


class TransactionRelationships(ResourceModel):
    account: Relationship


class TransactionResource(ResourceModel):
    id: str
    type: Optional[str] = None
    attributes: TransactionAttributes
    relationships: TransactionRelationships


class TransactionResponse(ResourceModel):
    """Response model for GET /transactions/{id}."""
    data: TransactionResource


class WebhookEventAttributes(ResourceModel):
    event_type: WebhookEventType = Field(..., alias="eventType")
    created_at: Optional[str] = Field(None, alias="createdAt")

    @field_validator("event_type", mode="before")
    @classmethod
    def parse_event_type(cls, v):
        """Map unrecognised event types to UNKNOWN."""
        return WebhookEventType(v)


class WebhookEventRelationships(ResourceModel):
    webhook: Relationship
    transaction: Optional[Relationship] = None


class WebhookEventResource(ResourceModel):
    id: Optional[str] = None
    type: Optional[str] = None
    attributes: WebhookEventAttributes
    relationships: WebhookEventRelationships

    @property
    def webhook_id(self) -> str:
        return self.relationships.webhook.data.id

    @property
    def transaction_id(self) -> Optional[str]:
        """Id of the referenced transaction, None for events such as PING."""
        if self.relationships.transaction is None:
            return None
        return self.relationships.transaction.data.id


class WebhookEventCallback(ResourceModel):
    """Request model for POST /webhook."""
    data: WebhookEventResource
