"""Tests for prompt card placement."""

from contextkit.domain.entities import PromptCard, RequestMessage, create_prompt_card
from contextkit.domain.services import MessageEditor
from contextkit.domain.services.message_operators import no_formatter
from contextkit.domain.services.prompt_cards import (
    MERGED_FILE_SEPARATOR,
    apply_system_cards,
    apply_user_end_cards,
    build_priority_buckets,
    cards_for_placement,
    collect_file_contents,
    insert_prioritized_context,
)


def card(
    content: str,
    placement: str = "system",
    priority: int = 5,
    order: int = 0,
) -> PromptCard:
    return create_prompt_card(
        title=content,
        content=content,
        order=order,
        placement=placement,  # type: ignore[arg-type]
        priority=priority,
    )


def msg(role: str, content: str) -> RequestMessage:
    return RequestMessage(role=role, content=content)  # type: ignore[arg-type]


def pairs(editor: MessageEditor) -> list[tuple[str, str]]:
    return [(m.role, m.content) for m in editor.build()]


class TestCardsForPlacement:
    """cards_for_placement tests."""

    def test_filters_placement_and_blank(self) -> None:
        cards = [card("a"), card("  "), card("b", "user_end"), card("c")]

        assert cards_for_placement(cards, "system") == ["a", "c"]
        assert cards_for_placement(cards, "user_end") == ["b"]


class TestCollectFileContents:
    """collect_file_contents tests."""

    def test_merged(self) -> None:
        result = collect_file_contents(None, ["one", "  ", "two"], "merged")

        assert result == [f"one{MERGED_FILE_SEPARATOR}two"]

    def test_separate(self) -> None:
        result = collect_file_contents(None, ["one", "", "two"], "separate")

        assert result == ["one", "two"]

    def test_list_takes_precedence(self) -> None:
        assert collect_file_contents("single", ["listed"], "merged") == ["listed"]

    def test_single_content(self) -> None:
        assert collect_file_contents("single", None, "separate") == ["single"]

    def test_nothing(self) -> None:
        assert collect_file_contents("  ", None, "merged") == []
        assert collect_file_contents(None, ["", " "], "merged") == []


class TestPriorityBuckets:
    """build_priority_buckets / insert_prioritized_context tests."""

    def test_buckets(self) -> None:
        cards = [
            card("low", "after_system", 5),
            card("sys", "system", 15),
            card("high", "after_system", 15),
        ]

        buckets = build_priority_buckets(["file"], 10, cards)

        assert sorted(buckets) == [5, 10, 15]
        assert buckets[10].files == ["file"]
        assert buckets[15].cards == ["high"]
        assert buckets[5].cards == ["low"]

    def test_descending_priority_order(self) -> None:
        """card@15, file@10, card@5 の順に system 直後へ挿入される"""
        editor = MessageEditor([msg("system", "S"), msg("user", "U")])
        cards = [
            card("card5", "after_system", 5),
            card("card15", "after_system", 15),
        ]

        result = insert_prioritized_context(["file"], 10, cards)(editor)

        assert pairs(result) == [
            ("system", "S"),
            ("user", "card15"),
            ("user", "【上下文】\nfile"),
            ("user", "card5"),
            ("user", "U"),
        ]

    def test_same_priority_files_before_cards(self) -> None:
        editor = MessageEditor([msg("user", "U")])
        cards = [card("c1", "after_system", 10), card("c2", "after_system", 10)]

        result = insert_prioritized_context(["f1", "f2"], 10, cards, no_formatter)(
            editor
        )

        assert pairs(result) == [
            ("user", "f1"),
            ("user", "f2"),
            ("user", "c1\n\nc2"),
            ("user", "U"),
        ]

    def test_nothing_to_insert(self) -> None:
        editor = MessageEditor([msg("user", "U")])

        assert insert_prioritized_context([], 10, [card("s")])(editor) == editor


class TestSystemAndUserEndCards:
    """apply_system_cards / apply_user_end_cards tests."""

    def test_system_cards_appended(self) -> None:
        editor = MessageEditor([msg("system", "S"), msg("user", "U")])

        result = apply_system_cards([card("a"), card("b")])(editor)

        assert pairs(result)[0] == ("system", "S\n\na\n\nb")

    def test_system_cards_create_message(self) -> None:
        editor = MessageEditor([msg("user", "U")])

        result = apply_system_cards([card("a")])(editor)

        assert pairs(result) == [("system", "a"), ("user", "U")]

    def test_user_end_cards(self) -> None:
        editor = MessageEditor(
            [msg("user", "U1"), msg("assistant", "A"), msg("user", "U2")]
        )

        result = apply_user_end_cards([card("x", "user_end"), card("y", "user_end")])(
            editor
        )

        assert pairs(result)[-1] == ("user", "U2\n\nx\n\ny")
        assert pairs(result)[0] == ("user", "U1")

    def test_user_end_without_user(self) -> None:
        editor = MessageEditor([msg("system", "S")])

        assert apply_user_end_cards([card("x", "user_end")])(editor) == editor

    def test_no_matching_cards(self) -> None:
        editor = MessageEditor([msg("user", "U")])

        assert apply_system_cards([card("x", "user_end")])(editor) == editor
