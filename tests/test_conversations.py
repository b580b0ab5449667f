"""Unit tests for the conversation repository."""
import json

import pytest
from pydantic import ValidationError

from sensei_history.config import (
    CONVERSATIONS_KEY,
    CURRENT_CONVERSATION_KEY,
    DEFAULT_TITLE,
    FOLDERS_KEY,
)
from sensei_history.conversations import (
    ConversationRepository,
    Message,
    MessageRole,
    generate_conversation_title,
)
from sensei_history.errors import InvalidArgumentError, NotFoundError, StorageUnavailableError


class TestCreate:
    """Tests for ConversationRepository.create."""

    def test_defaults(self, repository, clock):
        conversation = repository.create()

        assert conversation.id == "id-0001"
        assert conversation.title == DEFAULT_TITLE
        assert conversation.messages == []
        assert conversation.date_created == clock.now
        assert conversation.date_modified == clock.now
        assert conversation.starred is False
        assert conversation.archived is False
        assert conversation.system_type is None
        assert conversation.diagnostic_id is None

    def test_provenance_tags(self, repository):
        conversation = repository.create(system_type="heat-pump", diagnostic_id="diag-42")
        stored = repository.get(conversation.id)
        assert stored.system_type == "heat-pump"
        assert stored.diagnostic_id == "diag-42"

    def test_list_contains_created(self, repository):
        a = repository.create()
        b = repository.create()
        assert {c.id for c in repository.list_conversations()} == {a.id, b.id}
        assert len(repository) == 2


class TestGet:
    """Tests for ConversationRepository.get."""

    def test_unknown_id_raises_not_found(self, repository):
        with pytest.raises(NotFoundError) as exc_info:
            repository.get("nope")
        assert exc_info.value.kind == "conversation"
        assert exc_info.value.identifier == "nope"

    def test_returns_copy(self, repository):
        conversation = repository.create()
        copy = repository.get(conversation.id)
        copy.title = "changed locally"
        assert repository.get(conversation.id).title == DEFAULT_TITLE


class TestAppendMessage:
    """Tests for ConversationRepository.append_message."""

    def test_appends_in_order_and_bumps_modified(self, repository, add_message, clock):
        conversation = repository.create()
        clock.advance(minutes=5)
        add_message(conversation.id, "user", "Compressor short cycling")
        clock.advance(minutes=1)
        add_message(conversation.id, "assistant", "Check the low pressure switch")

        stored = repository.get(conversation.id)
        assert [m.content for m in stored.messages] == [
            "Compressor short cycling",
            "Check the low pressure switch",
        ]
        assert stored.date_modified == clock.now
        assert stored.date_created < stored.date_modified

    def test_unknown_conversation_raises(self, repository):
        message = repository.new_message("user", "hello")
        with pytest.raises(NotFoundError):
            repository.append_message("nope", message)

    def test_first_user_message_derives_title(self, repository, add_message):
        conversation = repository.create()
        add_message(conversation.id, "user", "How do I check superheat on a TXV system?")
        assert repository.get(conversation.id).title == "Check superheat on a TXV system?"

    def test_later_messages_keep_title(self, repository, add_message):
        conversation = repository.create()
        add_message(conversation.id, "user", "Low suction pressure")
        add_message(conversation.id, "user", "Also high head pressure")
        assert repository.get(conversation.id).title == "Low suction pressure"

    def test_assistant_message_does_not_derive_title(self, repository, add_message):
        conversation = repository.create()
        add_message(conversation.id, "assistant", "Welcome! What system are you on?")
        assert repository.get(conversation.id).title == DEFAULT_TITLE

    def test_renamed_conversation_keeps_title(self, repository, add_message):
        conversation = repository.create()
        repository.rename(conversation.id, "Site visit 12")
        add_message(conversation.id, "user", "Frozen evaporator coil")
        assert repository.get(conversation.id).title == "Site visit 12"

    def test_messages_are_immutable(self, repository):
        message = repository.new_message(MessageRole.USER, "hello")
        with pytest.raises(ValidationError):
            message.content = "edited"  # type: ignore[misc]


class TestRename:
    """Tests for ConversationRepository.rename."""

    def test_rename_trims_and_bumps_modified(self, repository, clock):
        conversation = repository.create()
        clock.advance(hours=1)
        renamed = repository.rename(conversation.id, "  Rooftop unit  ")

        assert renamed.title == "Rooftop unit"
        assert renamed.title_pinned is True
        assert repository.get(conversation.id).date_modified == clock.now

    @pytest.mark.parametrize("title", ["", "   ", "\n\t"])
    def test_blank_title_rejected(self, repository, title):
        conversation = repository.create()
        with pytest.raises(InvalidArgumentError):
            repository.rename(conversation.id, title)
        assert repository.get(conversation.id).title == DEFAULT_TITLE

    def test_unknown_id_checked_before_title(self, repository):
        with pytest.raises(NotFoundError):
            repository.rename("nope", "")


class TestFlags:
    """Tests for toggle_star and set_archived."""

    def test_toggle_star_does_not_bump_modified(self, repository, clock):
        conversation = repository.create()
        clock.advance(days=3)

        assert repository.toggle_star(conversation.id) is True
        assert repository.toggle_star(conversation.id) is False
        assert repository.get(conversation.id).date_modified == conversation.date_modified

    def test_set_archived_does_not_bump_modified(self, repository, clock):
        conversation = repository.create()
        clock.advance(days=3)

        repository.set_archived(conversation.id, True)
        stored = repository.get(conversation.id)
        assert stored.archived is True
        assert stored.date_modified == conversation.date_modified

        repository.set_archived(conversation.id, False)
        assert repository.get(conversation.id).archived is False

    def test_flags_on_unknown_id_raise(self, repository):
        with pytest.raises(NotFoundError):
            repository.toggle_star("nope")
        with pytest.raises(NotFoundError):
            repository.set_archived("nope", True)

    def test_archive_many_skips_unknown_and_archived(self, repository):
        a = repository.create()
        b = repository.create()
        repository.set_archived(b.id, True)

        assert repository.archive_many([a.id, b.id, "nope"]) == 1
        assert repository.get(a.id).archived is True


class TestDelete:
    """Tests for ConversationRepository.delete."""

    def test_delete_removes_conversation(self, repository):
        conversation = repository.create()
        repository.delete(conversation.id)
        assert not repository.exists(conversation.id)
        with pytest.raises(NotFoundError):
            repository.get(conversation.id)

    def test_delete_unknown_raises(self, repository):
        with pytest.raises(NotFoundError):
            repository.delete("nope")

    def test_delete_purges_folders(self, repository, folders):
        conversation = repository.create()
        folder = folders.create_folder("Heat pumps")
        folders.move_conversation(conversation.id, folder.id)

        repository.delete(conversation.id)
        assert folders.get_folder(folder.id).conversation_ids == []

    def test_failed_folder_write_leaves_conversation(self, repository, folders, kv):
        conversation = repository.create()
        folder = folders.create_folder("Heat pumps")
        folders.move_conversation(conversation.id, folder.id)

        kv.failing_keys.add(FOLDERS_KEY)
        with pytest.raises(StorageUnavailableError):
            repository.delete(conversation.id)

        assert repository.exists(conversation.id)
        assert folders.get_folder(folder.id).conversation_ids == [conversation.id]

    def test_failed_conversation_write_never_dangles(self, repository, folders, kv):
        conversation = repository.create()
        folder = folders.create_folder("Heat pumps")
        folders.move_conversation(conversation.id, folder.id)

        kv.failing_keys.add(CONVERSATIONS_KEY)
        with pytest.raises(StorageUnavailableError):
            repository.delete(conversation.id)

        assert repository.exists(conversation.id)
        assert folders.folder_of(conversation.id) is None


class TestAtomicity:
    """Failed writes must leave in-memory state untouched."""

    def test_failed_append_is_not_visible(self, repository, kv):
        conversation = repository.create()
        kv.failing_keys.add(CONVERSATIONS_KEY)

        with pytest.raises(StorageUnavailableError):
            repository.append_message(conversation.id, repository.new_message("user", "hi"))
        assert repository.get(conversation.id).messages == []

    def test_failed_create_is_not_visible(self, repository, kv):
        kv.failing_keys.add(CONVERSATIONS_KEY)
        with pytest.raises(StorageUnavailableError):
            repository.create()
        assert repository.list_conversations() == []


class TestPersistence:
    """Tests for loading persisted conversations."""

    def test_reload_from_same_store(self, repository, add_message, kv, clock):
        conversation = repository.create(system_type="gas-split")
        add_message(conversation.id, "user", "Ignitor not glowing")
        repository.toggle_star(conversation.id)

        reloaded = ConversationRepository(kv, clock=clock)
        stored = reloaded.get(conversation.id)
        assert stored.title == "Ignitor not glowing"
        assert stored.starred is True
        assert stored.system_type == "gas-split"
        assert stored.messages[0].role == MessageRole.USER

    def test_persisted_layout_uses_camel_case(self, repository, kv):
        repository.create(diagnostic_id="diag-1")
        record = json.loads(kv.get(CONVERSATIONS_KEY))[0]
        assert {"id", "title", "messages", "dateCreated", "dateModified",
                "starred", "archived", "systemType", "diagnosticId"} <= set(record)

    def test_malformed_record_is_skipped(self, kv, clock, caplog):
        good = {
            "id": "c1",
            "title": "Good",
            "messages": [],
            "dateCreated": "2025-01-01T00:00:00+00:00",
            "dateModified": "2025-01-01T00:00:00+00:00",
            "starred": False,
            "archived": False,
        }
        kv.set(CONVERSATIONS_KEY, json.dumps([good, {"id": "c2", "messages": "nope"}]))

        repository = ConversationRepository(kv, clock=clock)
        assert [c.id for c in repository.list_conversations()] == ["c1"]
        assert "Skipping malformed conversation record" in caplog.text

    def test_corrupt_root_record_raises(self, kv, clock):
        kv.set(CONVERSATIONS_KEY, "{broken")
        with pytest.raises(StorageUnavailableError):
            ConversationRepository(kv, clock=clock)

    def test_message_accepts_camel_case_payload(self):
        message = Message.model_validate({
            "id": "m1",
            "role": "assistant",
            "content": "Check the capacitor",
            "timestamp": "2025-01-15T10:00:00Z",
        })
        assert message.role == MessageRole.ASSISTANT
        assert message.timestamp.tzinfo is not None


class TestCurrentConversation:
    """Tests for the current-conversation pointer."""

    def test_set_and_get_current(self, repository, kv, clock):
        conversation = repository.create()
        repository.set_current(conversation.id)

        assert repository.current().id == conversation.id
        assert ConversationRepository(kv, clock=clock).current().id == conversation.id

    def test_set_current_unknown_raises(self, repository):
        with pytest.raises(NotFoundError):
            repository.set_current("nope")

    def test_delete_clears_current(self, repository):
        conversation = repository.create()
        repository.set_current(conversation.id)
        repository.delete(conversation.id)
        assert repository.current() is None

    def test_failed_pointer_clear_keeps_conversation(self, repository, kv):
        conversation = repository.create()
        repository.set_current(conversation.id)
        kv.failing_keys.add(CURRENT_CONVERSATION_KEY)

        with pytest.raises(StorageUnavailableError):
            repository.delete(conversation.id)

        assert repository.exists(conversation.id)
        assert repository.current().id == conversation.id


class TestListRecent:
    """Tests for canonical recency ordering."""

    def test_most_recently_modified_first(self, repository, add_message, clock):
        old = repository.create()
        clock.advance(minutes=1)
        new = repository.create()
        clock.advance(minutes=1)
        add_message(old.id, "user", "bump")

        assert [c.id for c in repository.list_recent()] == [old.id, new.id]


class TestGenerateConversationTitle:
    """Tests for generate_conversation_title."""

    def test_plain_message_unchanged(self):
        assert generate_conversation_title("  Frozen coil  ") == "Frozen coil"

    @pytest.mark.parametrize("message,expected", [
        ("How do I reset the board?", "Reset the board?"),
        ("can you help me with a leak", "A leak"),
        ("What is subcooling", "Subcooling"),
        ("Why does the fan keep running", "The fan keep running"),
    ])
    def test_question_starter_removed(self, message, expected):
        assert generate_conversation_title(message) == expected

    def test_long_message_cut_at_word_boundary(self):
        message = "Outdoor unit trips the breaker every time the compressor starts after a defrost"
        title = generate_conversation_title(message)
        assert title == "Outdoor unit trips the breaker every time the compressor..."
        assert len(title) <= 63

    def test_long_message_without_late_space_cut_hard(self):
        message = "x" * 80
        assert generate_conversation_title(message) == "x" * 60 + "..."

    def test_blank_message(self):
        assert generate_conversation_title("   ") == ""
