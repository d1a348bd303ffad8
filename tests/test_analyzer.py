from formlens.models.forms import FormQuestion, NoAnswer, QuestionType, TextValues
from formlens.services.analyzer import (
    analyze_choices,
    analyze_numeric,
    analyze_question,
    analyze_text,
    parse_int,
    response_rate,
    top_words,
)


def _texts(*values: str) -> list[TextValues]:
    return [TextValues(values=[v]) for v in values]


def _question(question_type: QuestionType, question_id: str = "q1") -> FormQuestion:
    return FormQuestion(question_id=question_id, item_id="i1", title="Q", question_type=question_type)


class TestResponseRate:
    def test_percentage(self):
        assert response_rate(1, 4) == 25

    def test_zero_total_is_zero(self):
        assert response_rate(0, 0) == 0


class TestChoices:
    def test_open_tally_counts_every_value(self):
        answers = [
            TextValues(values=["Cheese", "Ham"]),
            TextValues(values=["Ham"]),
            TextValues(values=["Pineapple"]),  # not among current options
        ]
        tally = analyze_choices(answers)
        assert tally == {"Cheese": 1, "Ham": 2, "Pineapple": 1}
        # multi-select: more values than respondents
        assert sum(tally.values()) == 4

    def test_skips_empty_values_and_non_text(self):
        assert analyze_choices([TextValues(values=[""]), NoAnswer(), TextValues(values=["A"])]) == {"A": 1}


class TestNumeric:
    def test_odd_and_even(self):
        assert analyze_numeric(_texts("1", "3", "3", "5")) == {"average": 3, "median": 3, "min": 1, "max": 5}
        assert analyze_numeric(_texts("4", "1", "3", "2"))["median"] == 2.5
        assert analyze_numeric(_texts("5", "1", "2"))["median"] == 2

    def test_unparseable_values_skipped(self):
        stats = analyze_numeric(_texts("abc", "4", "") + [TextValues(values=[]), NoAnswer()])
        assert stats == {"average": 4, "median": 4, "min": 4, "max": 4}

    def test_nothing_parseable_omits_all(self):
        assert analyze_numeric(_texts("n/a")) == {}
        assert analyze_numeric([]) == {}

    def test_custom_extractor(self):
        stats = analyze_numeric(_texts("a", "bbb"), extract=lambda a: len(a.values[0]))
        assert stats["max"] == 3

    def test_parse_int_leading_digits(self):
        assert parse_int("4 stars") == 4
        assert parse_int(" -2") == -2
        assert parse_int("3.5") == 3
        assert parse_int("four") is None
        assert parse_int(None) is None


class TestText:
    def test_common_words(self):
        stats = analyze_text(_texts("good service, good food"))
        assert stats["common_words"] == {"good": 2, "service": 1, "food": 1}
        assert stats["average_length"] == len("good service, good food")

    def test_short_tokens_and_punctuation_dropped(self):
        assert top_words(["It is OK!! we're fine"]) == {"were": 1, "fine": 1}

    def test_top_ten_non_increasing(self):
        text = " ".join(f"word{i} " * (i + 1) for i in range(15))
        words = top_words([text])
        assert len(words) == 10
        counts = list(words.values())
        assert counts == sorted(counts, reverse=True)
        assert next(iter(words)) == "word14"

    def test_ties_keep_first_occurrence(self):
        assert list(top_words(["zebra apple mango"])) == ["zebra", "apple", "mango"]

    def test_empty_strings_ignored(self):
        assert analyze_text(_texts("", "")) == {}
        assert analyze_text(_texts("", "abcd"))["average_length"] == 4


class TestAnalyzeQuestion:
    def test_choice(self):
        stats = analyze_question(_question(QuestionType.CHECKBOX), [TextValues(values=["A", "B"])], 2)
        assert stats.choice_distribution == {"A": 1, "B": 1}
        assert stats.response_rate == 50
        assert stats.average is None

    def test_scale_and_rating_share_numeric_stats(self):
        answers = _texts("1", "3", "3", "5")
        for question_type in (QuestionType.SCALE, QuestionType.RATING):
            stats = analyze_question(_question(question_type), answers, 4)
            assert (stats.average, stats.median, stats.min, stats.max) == (3, 3, 1, 5)
            assert stats.response_rate == 100

    def test_text(self):
        stats = analyze_question(_question(QuestionType.TEXT), _texts("hello world"), 1)
        assert stats.common_words == {"hello": 1, "world": 1}

    def test_date_time_file_have_rate_only(self):
        for question_type in (QuestionType.DATE, QuestionType.TIME, QuestionType.FILE_UPLOAD, QuestionType.UNKNOWN):
            stats = analyze_question(_question(question_type), _texts("2025-01-01"), 2)
            assert stats.model_dump(exclude_none=True) == {"response_rate": 50}

    def test_no_answers_no_responses(self):
        stats = analyze_question(_question(QuestionType.SCALE), [], 0)
        assert stats.model_dump(exclude_none=True) == {"response_rate": 0}

    def test_choice_without_values_has_no_distribution(self):
        for answers in ([], _texts("")):
            stats = analyze_question(_question(QuestionType.RADIO), answers, 0)
            assert stats.choice_distribution is None
            assert stats.model_dump(exclude_none=True) == {"response_rate": 0}
