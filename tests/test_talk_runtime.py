from talk.talk_datatypes import Value, Namespace, EvalError
from talk.talk_interpreter import Eval, Literal, Dummy, FieldPath, Assign
from talk.talk_runtime import TalkRunner, ExecutionResult


def assert_ok(res, expected=None):
    assert res.status == "success", f"expected success, got {res}"
    if expected is not None:
        assert res.value == expected, f"expected {expected!r}, got {res.value!r}"


def assert_error(res, contains=None):
    assert res.status == 'error', f"expected error, got success: {res.value!r}"
    if contains is not None:
        assert contains in (res.error_message or ""), res.error_message


def test_runner_evaluates_literal_without_touching_root():
    runner = TalkRunner()
    res = runner.handle(Literal(Value.new_integer(7)))
    assert_ok(res, Value.new_integer(7))
    assert runner.root.is_empty()


def test_runner_dummy():
    assert_ok(TalkRunner().handle(Dummy()), Value.new_integer(42))


def test_runner_adopts_given_root():
    root = Namespace()
    root.set("n", Value.new_integer(1))
    runner = TalkRunner(root=root)
    res = runner.handle(FieldPath(["n"]))
    assert_ok(res, Value.new_integer(1))
    assert res.value is root.get("n")


def test_runner_state_persists_between_calls():
    runner = TalkRunner()
    assert_ok(runner.handle(Assign(FieldPath(["a", "b"]), Literal(Value.new_text("hi")))))
    assert_ok(runner.handle(FieldPath(["a", "b"])), Value.new_text("hi"))


def test_runner_reports_type_mismatch():
    runner = TalkRunner()
    runner.root.set("n", Value.new_integer(1))
    res = runner.handle(FieldPath(["n", "x"]))
    assert_error(res, "Object expected, got Int")
    assert res.format_error() == "Error: Object expected, got Int"


def test_runner_does_not_catch_programming_errors():
    class Broken(Eval):
        def eval(self, context):
            raise RuntimeError("bug")

    runner = TalkRunner()
    try:
        runner.handle(Broken())
    except RuntimeError as e:
        assert str(e) == "bug"
    else:
        raise AssertionError("RuntimeError should propagate")


def test_runner_error_is_not_retried():
    calls = []

    class Flaky(Eval):
        def eval(self, context):
            calls.append(1)
            raise EvalError("flaky")

    assert_error(TalkRunner().handle(Flaky()), "flaky")
    assert len(calls) == 1


def test_format_error_on_success_is_empty():
    assert ExecutionResult(status='success', value=Value.new_integer(1)).format_error() == ""
    assert ExecutionResult(status='error').format_error() == "Error: Unknown error"
