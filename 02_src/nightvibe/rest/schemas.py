"""Wire shapes returned by the NightVibe backend."""

from datetime import datetime, timezone
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from ..models import (
    AccountType,
    Chat,
    ChatKind,
    City,
    Event,
    Message,
    MessageKind,
    MessagePage,
    MessageStatus,
    Pagination,
    SearchResult,
    Session,
    Ticket,
    User,
    Vendor,
    VendorType,
)


def _ref_id(value: Any) -> Any:
    """Collapse a populated document to its id."""
    if isinstance(value, dict):
        return value.get("_id") or value.get("id")
    return value


def _id_field(**kwargs: Any) -> Any:
    return Field(validation_alias=AliasChoices("_id", "id"), **kwargs)


class WireModel(BaseModel):
    """Base for backend payloads: camelCase in, unknown fields ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("*", mode="after")
    @classmethod
    def _assume_utc(cls, value: Any) -> Any:
        # Backend timestamps without an offset are UTC
        if isinstance(value, datetime) and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class UserPayload(WireModel):
    id: str = _id_field()
    username: str = ""
    email: str = ""
    is_vendor: bool = Field(default=False, validation_alias="isVendor")
    user_type: str | None = Field(default=None, validation_alias="userType")
    profile_picture: str | None = Field(default=None, validation_alias="profilePicture")

    def to_domain(self) -> User:
        is_vendor = self.is_vendor or self.user_type == AccountType.VENDOR.value
        return User(
            id=self.id,
            username=self.username,
            email=self.email,
            account_type=AccountType.VENDOR if is_vendor else AccountType.CLIENT,
            profile_picture=self.profile_picture,
        )


class AuthPayload(WireModel):
    token: str
    user: UserPayload

    def to_domain(self) -> Session:
        return Session(auth_token=self.token, user=self.user.to_domain())


class MessagePayload(WireModel):
    id: str = _id_field()
    chat: str
    sender: UserPayload
    type: MessageKind = MessageKind.TEXT
    content: str | None = None
    image_url: str | None = Field(default=None, validation_alias="imageUrl")
    event: str | None = None
    status: MessageStatus = MessageStatus.SENT
    reply_to: "MessagePayload | str | None" = Field(default=None, validation_alias="replyTo")
    is_deleted: bool = Field(default=False, validation_alias="isDeleted")
    created_at: datetime = Field(validation_alias="createdAt")

    @field_validator("chat", "event", mode="before")
    @classmethod
    def _collapse_ref(cls, value: Any) -> Any:
        return _ref_id(value)

    @field_validator("sender", mode="before")
    @classmethod
    def _expand_sender(cls, value: Any) -> Any:
        # replyTo documents come back with an unpopulated sender id
        if isinstance(value, str):
            return {"_id": value}
        return value

    def to_domain(self) -> Message:
        reply_to = None
        if isinstance(self.reply_to, MessagePayload):
            reply_to = self.reply_to.to_domain()
        return Message(
            id=self.id,
            chat_id=self.chat,
            sender=self.sender.to_domain(),
            kind=self.type,
            content=self.content or "",
            created_at=self.created_at,
            status=self.status,
            image_url=self.image_url,
            event_id=self.event,
            reply_to=reply_to,
            is_deleted=self.is_deleted,
        )


MessagePayload.model_rebuild()


class ChatPayload(WireModel):
    id: str = _id_field()
    type: ChatKind
    name: str | None = None
    group_image: str | None = Field(default=None, validation_alias="groupImage")
    participants: list[UserPayload] = Field(default_factory=list)
    last_message: MessagePayload | None = Field(default=None, validation_alias="lastMessage")
    unread_count: dict[str, int] = Field(default_factory=dict, validation_alias="unreadCount")
    updated_at: datetime | None = Field(default=None, validation_alias="updatedAt")

    @field_validator("last_message", mode="before")
    @classmethod
    def _drop_unpopulated(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else None

    def to_domain(self) -> Chat:
        return Chat(
            id=self.id,
            kind=self.type,
            participants=[p.to_domain() for p in self.participants],
            name=self.name,
            group_image=self.group_image,
            last_message=self.last_message.to_domain() if self.last_message else None,
            unread_count=dict(self.unread_count),
            updated_at=self.updated_at,
        )


class PaginationPayload(WireModel):
    page: int = 1
    limit: int = 50
    total: int = 0
    total_pages: int = Field(default=0, validation_alias="totalPages")


class MessagePagePayload(WireModel):
    messages: list[MessagePayload] = Field(default_factory=list)
    pagination: PaginationPayload = Field(default_factory=PaginationPayload)

    def to_domain(self) -> MessagePage:
        return MessagePage(
            messages=[m.to_domain() for m in self.messages],
            pagination=Pagination(
                page=self.pagination.page,
                limit=self.pagination.limit,
                total=self.pagination.total,
                total_pages=self.pagination.total_pages,
            ),
        )


class SearchPayload(WireModel):
    chats: list[ChatPayload] = Field(default_factory=list)
    messages: list[MessagePayload] = Field(default_factory=list)

    def to_domain(self) -> SearchResult:
        return SearchResult(
            chats=[c.to_domain() for c in self.chats],
            messages=[m.to_domain() for m in self.messages],
        )


class EventPayload(WireModel):
    id: str = _id_field()
    title: str
    date: datetime | None = None
    location: str = ""
    image: str | None = None
    description: str = ""
    is_public: bool = Field(default=False, validation_alias="isPublic")
    is_paid: bool = Field(default=False, validation_alias="isPaid")
    ticket_price: float | None = Field(default=None, validation_alias="ticketPrice")
    tickets_remaining: int | None = Field(default=None, validation_alias="ticketsRemaining")
    user_has_purchased: bool = Field(default=False, validation_alias="userHasPurchased")
    is_creator: bool = Field(default=False, validation_alias="isCreator")

    def to_domain(self) -> Event:
        return Event(**self.model_dump())


class TicketPayload(WireModel):
    id: str = _id_field()
    event: Any = None
    ticket_price: float = Field(default=0.0, validation_alias="ticketPrice")
    is_valid: bool = Field(default=True, validation_alias="isValid")
    ticket_code: str | None = Field(default=None, validation_alias="ticketCode")
    payment_intent_id: str | None = Field(
        default=None, validation_alias="stripePaymentIntentId"
    )
    purchase_date: datetime | None = Field(default=None, validation_alias="purchaseDate")

    def to_domain(self) -> Ticket:
        title = self.event.get("title", "") if isinstance(self.event, dict) else ""
        return Ticket(
            id=self.id,
            event_id=_ref_id(self.event) or "",
            ticket_price=self.ticket_price,
            is_valid=self.is_valid,
            ticket_code=self.ticket_code,
            payment_intent_id=self.payment_intent_id,
            purchase_date=self.purchase_date,
            event_title=title,
        )


class CityPayload(WireModel):
    id: str = _id_field()
    name: str
    state: str = ""

    def to_domain(self) -> City:
        return City(id=self.id, name=self.name, state=self.state)


class VendorTypePayload(WireModel):
    id: str = _id_field()
    name: str
    icon: str = ""

    def to_domain(self) -> VendorType:
        return VendorType(id=self.id, name=self.name, icon=self.icon)


class VendorPayload(WireModel):
    id: str = _id_field()
    name: str
    description: str = ""
    vendor_type: Any = Field(default="", validation_alias="vendorType")
    city: Any = ""
    images: list[str] = Field(default_factory=list)
    price_range: int = Field(default=0, validation_alias="priceRange")
    rating: float = 0.0
    verified: bool = False

    @field_validator("vendor_type", "city", mode="before")
    @classmethod
    def _collapse_ref(cls, value: Any) -> Any:
        return _ref_id(value) or ""

    def to_domain(self) -> Vendor:
        return Vendor(**self.model_dump())


def parse_message(data: Any) -> Message:
    """Parse a pushed or fetched message document."""
    return MessagePayload.model_validate(data).to_domain()
