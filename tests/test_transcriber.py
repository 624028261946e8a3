from types import SimpleNamespace

from healthlog.transcriber import transcribe_utterance


class _FakeModel:
    def __init__(self, texts):
        self.texts = texts
        self.calls = []

    def transcribe(self, audio_path, language=None):
        self.calls.append((audio_path, language))
        segments = [SimpleNamespace(text=t) for t in self.texts]
        return iter(segments), SimpleNamespace(language=language)


def test_transcribe_joins_segments():
    model = _FakeModel([" My blood pressure is", " 130 over 85 ", "  "])
    text = transcribe_utterance("bp.wav", language="en", model=model)
    assert text == "My blood pressure is 130 over 85"
    assert model.calls == [("bp.wav", "en")]


def test_transcribe_empty_audio():
    assert transcribe_utterance("silence.wav", model=_FakeModel([])) == ""
