import pytest

from companion.services.classifier import KeywordClassifier, detect_mode, detect_mood
from companion.services.types import Mode, Mood


class TestDetectMood:
    @pytest.mark.parametrize(
        "text",
        ["awesome", "This is AWESOME!", "what an awesome day", "Awesome, but I'm sad and stressed"],
    )
    def test_awesome_is_always_happy(self, text):
        assert detect_mood(text) == Mood.HAPPY

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("I feel so lonely tonight", Mood.SAD),
            ("Work has me overwhelmed", Mood.STRESSED),
            ("I'm so excited about this!", Mood.EXCITED),
            ("Can't wait for the weekend", Mood.EXCITED),
            ("I'm pumped", Mood.EXCITED),
            ("Had a WONDERFUL time", Mood.HAPPY),
        ],
    )
    def test_keywords(self, text, expected):
        assert detect_mood(text) == expected

    def test_first_match_wins(self):
        # sad is checked before stressed, stressed before excited
        assert detect_mood("upset and anxious") == Mood.SAD
        assert detect_mood("tired but looking forward to it") == Mood.STRESSED

    @pytest.mark.parametrize("text", ["", "   ", "\n\t", None, "the sky is blue", "ok"])
    def test_no_keyword_is_neutral(self, text):
        assert detect_mood(text) == Mood.NEUTRAL


class TestDetectMode:
    def test_code_keywords(self):
        assert detect_mode("help me debug this function") == Mode.CODE
        assert detect_mode("My React component keeps re-rendering") == Mode.CODE

    def test_research_keywords(self):
        assert detect_mode("Explain photosynthesis") == Mode.RESEARCH
        assert detect_mode("what is a black hole?") == Mode.RESEARCH

    def test_code_beats_research(self):
        assert detect_mode("explain this error") == Mode.CODE

    def test_no_keyword_keeps_current_mode(self):
        assert detect_mode("thanks, that helps", Mode.RESEARCH) == Mode.RESEARCH
        assert detect_mode("thanks, that helps", "code") == Mode.CODE

    def test_no_keyword_defaults_to_friend(self):
        assert detect_mode("good morning") == Mode.FRIEND
        assert detect_mode("good morning", "not-a-mode") == Mode.FRIEND

    @pytest.mark.parametrize("text", ["", "  ", None])
    def test_empty_text_keeps_current_or_friend(self, text):
        assert detect_mode(text) == Mode.FRIEND
        assert detect_mode(text, Mode.CODE) == Mode.CODE


def test_keyword_classifier_is_table_driven():
    classifier = KeywordClassifier.from_table([("greeting", ("hello", "hi there")), ("farewell", ("bye",))])
    assert classifier.classify("HELLO you", "none") == "greeting"
    assert classifier.classify("ok bye", "none") == "farewell"
    assert classifier.classify("what's up", "none") == "none"
    # special regex characters in keywords are literal
    literal = KeywordClassifier.from_table([("q", ("c++",))])
    assert literal.classify("I write C++", "none") == "q"
    assert literal.classify("I write C", "none") == "none"
