import logging

import pytest

from app.modules.flashcards.parser import (
    is_valid_card,
    parse_completion_to_cards,
    parse_json_cards,
    parse_qa_cards,
)

PARSER_LOGGER = "app.modules.flashcards.parser"


def test_json_array_is_returned_as_is():
    text = '[{"question":"Cap of France?","answer":"Paris"}]'
    assert parse_completion_to_cards(text) == [
        {"question": "Cap of France?", "answer": "Paris"}
    ]


def test_single_qa_pair():
    assert parse_completion_to_cards("Q: 2+2?\nA: 4") == [
        {"question": "2+2?", "answer": "4"}
    ]


@pytest.mark.parametrize("text", ["", "   ", "\n\t \n", None])
def test_empty_or_blank_input_returns_no_cards(text):
    assert parse_completion_to_cards(text) == []


def test_one_invalid_element_discards_the_whole_array():
    text = '[{"question":"X","answer":"Y"},{"answer":"Z"}]'
    assert parse_completion_to_cards(text) == []


def test_json_keeps_extra_properties_and_order():
    text = (
        '[{"question":"Q1","answer":"A1","id":"c1","isNew":false},'
        '{"question":"Q2","answer":"A2","tags":["x"],"score":3}]'
    )
    assert parse_completion_to_cards(text) == [
        {"question": "Q1", "answer": "A1", "id": "c1", "isNew": False},
        {"question": "Q2", "answer": "A2", "tags": ["x"], "score": 3},
    ]


def test_json_values_are_not_trimmed():
    text = '[{"question":"  padded  ","answer":" yes "}]'
    assert parse_completion_to_cards(text) == [
        {"question": "  padded  ", "answer": " yes "}
    ]


def test_surrounding_whitespace_around_json_is_ignored():
    text = '\n\n  [{"question":"a","answer":"b"}]  \n'
    assert parse_completion_to_cards(text) == [{"question": "a", "answer": "b"}]


def test_json_cards_are_copies():
    cards = parse_json_cards('[{"question":"a","answer":"b"}]')
    cards[0]["question"] = "changed"
    assert parse_json_cards('[{"question":"a","answer":"b"}]')[0]["question"] == "a"


@pytest.mark.parametrize(
    "text",
    [
        "[]",
        "{}",
        '{"question":"a","answer":"b"}',
        '"just a string"',
        "42",
        '[{"question":"a","answer":""}]',
        '[{"question":"   ","answer":"b"}]',
        '[{"question":1,"answer":"b"}]',
        '[{"question":"a","answer":null}]',
        '["a", "b"]',
    ],
)
def test_well_formed_json_of_wrong_shape_yields_none(text):
    assert parse_json_cards(text) is None


def test_wrong_shape_json_falls_back_without_logging(caplog):
    with caplog.at_level(logging.ERROR, logger=PARSER_LOGGER):
        assert parse_completion_to_cards('[{"question":"a","answer":""}]') == []
    assert caplog.records == []


@pytest.mark.parametrize("constant", ["NaN", "Infinity", "-Infinity"])
def test_non_standard_json_constants_are_rejected(constant):
    with pytest.raises(ValueError):
        parse_json_cards(f'[{{"question":"a","answer":"b","score":{constant}}}]')


def test_multiple_pairs_in_source_order():
    text = "Q: one?\nA: 1\n\nQ: two?\nA: 2\nQ: three?\nA: 3"
    assert parse_completion_to_cards(text) == [
        {"question": "one?", "answer": "1"},
        {"question": "two?", "answer": "2"},
        {"question": "three?", "answer": "3"},
    ]


def test_markers_and_values_are_trimmed():
    text = "   Q:    What is H2O?   \n\t A:   Water  "
    assert parse_completion_to_cards(text) == [
        {"question": "What is H2O?", "answer": "Water"}
    ]


def test_trailing_question_without_answer_is_dropped():
    text = "Q: kept?\nA: yes\nQ: dangling?"
    assert parse_completion_to_cards(text) == [{"question": "kept?", "answer": "yes"}]


def test_question_without_answer_is_replaced_by_next_question():
    text = "Q: first?\nQ: second?\nA: answer"
    assert parse_completion_to_cards(text) == [
        {"question": "second?", "answer": "answer"}
    ]


def test_multiline_answer_is_joined_with_newlines():
    text = "Q: Steps?\nA: first\n  second  \nthird\n\nnot part of it"
    assert parse_completion_to_cards(text) == [
        {"question": "Steps?", "answer": "first\nsecond\nthird"}
    ]


def test_multiline_answer_stops_at_next_question():
    text = "Q: a?\nA: line one\nline two\nQ: b?\nA: other"
    assert parse_completion_to_cards(text) == [
        {"question": "a?", "answer": "line one\nline two"},
        {"question": "b?", "answer": "other"},
    ]


def test_text_between_question_and_answer_is_ignored():
    text = "Q: term?\nsome stray note\nA: definition"
    assert parse_completion_to_cards(text) == [
        {"question": "term?", "answer": "definition"}
    ]


def test_markers_mid_line_are_plain_text():
    text = "Q: What does Q: mean in A: notation?\nA: It marks a question, not A: an answer"
    assert parse_completion_to_cards(text) == [
        {
            "question": "What does Q: mean in A: notation?",
            "answer": "It marks a question, not A: an answer",
        }
    ]


def test_markers_are_case_sensitive():
    assert parse_completion_to_cards("q: lower?\na: nope") == []


def test_crlf_line_endings():
    text = "Q: one?\r\nA: 1\r\nQ: two?\r\nA: 2\r\n"
    assert parse_completion_to_cards(text) == [
        {"question": "one?", "answer": "1"},
        {"question": "two?", "answer": "2"},
    ]


def test_prose_without_markers_yields_nothing():
    assert parse_completion_to_cards("Here are some thoughts about biology.") == []


def test_empty_answer_text_continues_on_next_line():
    text = "Q: list?\nA:\nalpha\nbeta"
    assert parse_qa_cards(text) == [{"question": "list?", "answer": "alpha\nbeta"}]


def test_malformed_json_falls_back_to_qa_lines():
    text = "[ this is not json\nQ: still works?\nA: yes"
    assert parse_completion_to_cards(text) == [
        {"question": "still works?", "answer": "yes"}
    ]


def test_malformed_json_looking_input_is_logged(caplog):
    with caplog.at_level(logging.ERROR, logger=PARSER_LOGGER):
        assert parse_completion_to_cards('[{"question": "a", "answer": ') == []
    errors = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert len(errors) == 1
    assert "Failed to parse flashcards" in errors[0].getMessage()


def test_malformed_object_input_is_logged(caplog):
    with caplog.at_level(logging.ERROR, logger=PARSER_LOGGER):
        parse_completion_to_cards("  {not json")
    assert len(caplog.records) == 1


def test_non_json_text_is_not_logged(caplog):
    with caplog.at_level(logging.DEBUG, logger=PARSER_LOGGER):
        parse_completion_to_cards("Q: 2+2?\nA: 4")
        parse_completion_to_cards("plain prose")
    assert caplog.records == []


def test_valid_json_is_not_logged(caplog):
    with caplog.at_level(logging.DEBUG, logger=PARSER_LOGGER):
        parse_completion_to_cards('[{"question":"a","answer":"b"}]')
    assert caplog.records == []


def test_injected_logger_receives_the_diagnostic():
    class Recorder:
        def __init__(self):
            self.messages = []

        def error(self, msg, *args):
            self.messages.append(msg % args)

    recorder = Recorder()
    parse_completion_to_cards("[oops", logger=recorder)
    assert len(recorder.messages) == 1
    assert recorder.messages[0].startswith("Failed to parse flashcards")


def test_deeply_nested_json_does_not_raise():
    text = "[" * 100000 + "]" * 100000
    assert parse_completion_to_cards(text) == []


def test_is_valid_card():
    assert is_valid_card({"question": "a", "answer": "b", "extra": 1})
    assert not is_valid_card({"question": "a"})
    assert not is_valid_card(["question", "answer"])
    assert not is_valid_card({"question": " ", "answer": "b"})
