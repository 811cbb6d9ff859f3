"""
Customer/employee messaging relay.

Conversations are keyed by an unordered participant pair and carry a
per-participant unread counter. Each conversation owns an append-only
message log in the ``conversations/<id>/messages`` subcollection, which
viewers follow through a live, cancellable subscription.

Usage:
    relay = MessageRelay(store)
    convo = await relay.get_or_create_conversation(cust_id, "Ana", emp_id, "Ben")
    sub = relay.open_view(emp_id, convo.id)
    await relay.send_message(convo.id, cust_id, "Ana", emp_id, "Running late?")
    async for message in sub:
        ...
"""

from typing import Optional

from emerald_details.errors import EmeraldError, NotFoundError, ValidationError
from emerald_details.logging_context import get_session_logger
from emerald_details.results import OperationResult
from emerald_details.schemas.message_schema import Conversation, Message
from emerald_details.store.document_store import DocumentStore, DocumentSubscription, FieldFilter
from emerald_details.utils import utcnow

logger = get_session_logger(__name__)

CONVERSATIONS = "conversations"


def messages_collection(conversation_id: str) -> str:
    return f"{CONVERSATIONS}/{conversation_id}/messages"


class MessageSubscription:
    """Async iterator of ``Message`` for one conversation, oldest first."""

    def __init__(self, conversation_id: str, feed: DocumentSubscription) -> None:
        self.conversation_id = conversation_id
        self._feed = feed

    @property
    def active(self) -> bool:
        return self._feed.active

    def cancel(self) -> None:
        self._feed.cancel()

    def __aiter__(self) -> "MessageSubscription":
        return self

    async def __anext__(self) -> Message:
        doc = await self._feed.__anext__()
        return Message.model_validate(doc)


class MessageRelay:

    def __init__(self, store: DocumentStore) -> None:
        self._store = store
        self._views: dict[str, MessageSubscription] = {}

    # ------------------------------------------------------------------ #
    # Conversations
    # ------------------------------------------------------------------ #

    async def get_or_create_conversation(
        self,
        user_a: str,
        user_a_name: str,
        user_b: str,
        user_b_name: str,
        appointment_id: Optional[str] = None,
    ) -> Conversation:
        """Return the conversation between two users, creating it on first contact.

        Participant order does not matter: (a, b) and (b, a) resolve to the
        same conversation.
        """
        if user_a == user_b:
            raise ValidationError("A conversation needs two different participants")
        docs = await self._store.query(
            CONVERSATIONS, [FieldFilter("participant_ids", "array_contains", user_a)]
        )
        for doc in docs:
            if user_b in doc.get("participant_ids", []):
                return Conversation.model_validate(doc)

        conversation = Conversation(
            participant_ids=[user_a, user_b],
            participant_names={user_a: user_a_name, user_b: user_b_name},
            appointment_id=appointment_id,
            unread_counts={user_a: 0, user_b: 0},
        )
        await self._store.set(CONVERSATIONS, conversation.id, conversation.model_dump())
        logger.info("Conversation %s created", conversation.id)
        return conversation

    async def get_conversation(self, conversation_id: str) -> Conversation:
        doc = await self._store.get(CONVERSATIONS, conversation_id)
        if doc is None:
            raise NotFoundError(f"Conversation {conversation_id} not found")
        return Conversation.model_validate(doc)

    async def conversations_for(self, user_id: str) -> list[Conversation]:
        """Conversations the user takes part in, most recent activity first."""
        docs = await self._store.query(
            CONVERSATIONS,
            [FieldFilter("participant_ids", "array_contains", user_id)],
            order_by="last_message_timestamp",
            descending=True,
        )
        return [Conversation.model_validate(doc) for doc in docs]

    # ------------------------------------------------------------------ #
    # Messages
    # ------------------------------------------------------------------ #

    async def send_message(
        self,
        conversation_id: str,
        sender_id: str,
        sender_name: str,
        receiver_id: str,
        content: str,
        appointment_id: Optional[str] = None,
    ) -> OperationResult[Message]:
        """Append a message and bump only the receiver's unread counter."""
        content = content.strip()
        try:
            if not content:
                raise ValidationError("Message cannot be empty")
            conversation = await self.get_conversation(conversation_id)
            if {sender_id, receiver_id} != set(conversation.participant_ids):
                raise ValidationError("Sender and receiver must be the conversation's participants")

            message = Message(
                sender_id=sender_id,
                sender_name=sender_name,
                receiver_id=receiver_id,
                appointment_id=appointment_id or conversation.appointment_id,
                content=content,
            )
            await self._store.set(
                messages_collection(conversation_id), message.id, message.model_dump()
            )
            await self._store.update(CONVERSATIONS, conversation_id, {
                "last_message": content,
                "last_message_timestamp": message.timestamp,
            })
            await self._store.increment(
                CONVERSATIONS, conversation_id, f"unread_counts.{receiver_id}"
            )
        except EmeraldError as e:
            logger.warning("Message not sent in %s: %s", conversation_id, e)
            return OperationResult.fail(e)

        logger.debug("Message %s sent in %s", message.id, conversation_id)
        return OperationResult.ok(message)

    async def mark_read(self, conversation_id: str, user_id: str) -> OperationResult[None]:
        """Reset ``user_id``'s unread counter to zero."""
        try:
            conversation = await self.get_conversation(conversation_id)
            if user_id not in conversation.participant_ids:
                raise ValidationError(f"{user_id} is not part of this conversation")
            await self._store.update(
                CONVERSATIONS, conversation_id, {f"unread_counts.{user_id}": 0}
            )
        except EmeraldError as e:
            logger.warning("Could not mark %s read for %s: %s", conversation_id, user_id, e)
            return OperationResult.fail(e)
        return OperationResult.ok()

    async def messages(self, conversation_id: str) -> list[Message]:
        docs = await self._store.query(
            messages_collection(conversation_id), order_by="timestamp"
        )
        return [Message.model_validate(doc) for doc in docs]

    # ------------------------------------------------------------------ #
    # Live views
    # ------------------------------------------------------------------ #

    def subscribe(self, conversation_id: str) -> MessageSubscription:
        """Existing messages in timestamp order, then each new one as it is sent."""
        feed = self._store.subscribe(messages_collection(conversation_id), order_by="timestamp")
        return MessageSubscription(conversation_id, feed)

    def open_view(self, viewer_id: str, conversation_id: str) -> MessageSubscription:
        """Follow a conversation, replacing whatever this viewer was following."""
        self.close_view(viewer_id)
        subscription = self.subscribe(conversation_id)
        self._views[viewer_id] = subscription
        logger.debug("Viewer %s opened %s", viewer_id, conversation_id)
        return subscription

    def close_view(self, viewer_id: str) -> None:
        subscription = self._views.pop(viewer_id, None)
        if subscription is not None:
            subscription.cancel()

    def active_view(self, viewer_id: str) -> Optional[MessageSubscription]:
        return self._views.get(viewer_id)
