import pytest

from localchat.engine.normalizer import INFERENCE_CAPABILITIES, infer, normalize_result
from localchat.kernel.errors import (
    InferenceInvocationFailed,
    ModelUnavailable,
    NoInferenceMethod,
)
from tests.engine.stubs import (
    AsyncModel,
    CallableModel,
    ChoicesModel,
    EmptyPromptModel,
    OpenModel,
    PromptModel,
    RaisingModel,
    SilentModel,
)

# --- infer ---

def test_prompt_string_is_returned_unchanged(run, make_handle):
    assert run(infer(make_handle(PromptModel()), "hello")) == "ok"

def test_generate_choices_text(run, make_handle):
    assert run(infer(make_handle(ChoicesModel()), "hello")) == "hi"

def test_no_handle_is_model_unavailable(run):
    with pytest.raises(ModelUnavailable):
        run(infer(None, "hello"))

def test_no_inference_capability(run, make_handle):
    with pytest.raises(NoInferenceMethod):
        run(infer(make_handle(SilentModel()), "hello"))

@pytest.mark.parametrize("prompt", ["", "   ", None, 42])
def test_prompt_must_be_non_empty_text(run, make_handle, prompt):
    with pytest.raises(ValueError):
        run(infer(make_handle(PromptModel()), prompt))

def test_first_capability_wins(run, make_handle, mocker):
    model = PromptModel()
    model.generate = mocker.Mock(return_value="never")

    assert run(infer(make_handle(model), "hello")) == "ok"
    model.generate.assert_not_called()

def test_none_result_falls_through_to_next_capability(run, make_handle):
    assert run(infer(make_handle(EmptyPromptModel()), "hello")) == "fallback"

def test_every_capability_empty(run, make_handle):
    class Nothing:
        def prompt(self, text):
            return None

    with pytest.raises(InferenceInvocationFailed, match="no result"):
        run(infer(make_handle(Nothing()), "hello"))

def test_invocation_error_is_wrapped(run, make_handle):
    with pytest.raises(InferenceInvocationFailed) as excinfo:
        run(infer(make_handle(RaisingModel()), "hello"))

    assert excinfo.value.capability == "chat"
    assert isinstance(excinfo.value.cause, RuntimeError)

def test_callable_instance_counts_as_call(run, make_handle):
    assert run(infer(make_handle(CallableModel()), "hello")) == "HELLO"

def test_async_inference_method_is_awaited(run, make_handle):
    assert run(infer(make_handle(AsyncModel()), "hi")) == "async:hi"

def test_sequence_result_uses_first_element(run, make_handle):
    assert run(infer(make_handle(OpenModel()), "hi")) == "first"

def test_capability_priority_order():
    assert INFERENCE_CAPABILITIES == ("prompt", "generate", "call", "chat", "predict", "ask", "completion")

# --- normalize_result ---

class _Reply:
    def __init__(self, **fields):
        self.__dict__.update(fields)

    def __str__(self):
        return "<reply>"

@pytest.mark.parametrize("raw, expected", [
    ("plain", "plain"),
    (b"caf\xc3\xa9", "café"),
    ({"text": "from text"}, "from text"),
    ({"output": "from output"}, "from output"),
    ({"text": 3, "output": "from output"}, "from output"),
    (_Reply(text="attr text"), "attr text"),
    (_Reply(output="attr output"), "attr output"),
    ([1, 2], "1"),
    (("a",), "a"),
    ([], "[]"),
    (12, "12"),
    (_Reply(), "<reply>"),
])
def test_normalize_result(raw, expected):
    assert normalize_result(raw) == expected

def test_choices_are_preferred_for_generate():
    raw = {"choices": [{"text": "choice"}], "text": "top-level"}

    assert normalize_result(raw, capability="generate") == "choice"
    assert normalize_result(raw, capability="completion") == "top-level"

def test_empty_choice_text_is_an_empty_reply():
    raw = {"id": "cmpl-1", "choices": [{"text": "", "finish_reason": "stop"}]}

    assert normalize_result(raw, capability="generate") == ""

def test_missing_choice_text_falls_back():
    raw = {"choices": [{"finish_reason": "stop"}], "output": "out"}

    assert normalize_result(raw, capability="generate") == "out"
