import contextvars

from shopfloor.core.observability import (
    add_call_context,
    correlation_id_var,
    set_actor_id,
    set_correlation_id,
)


def _in_fresh_context(fn):
    return contextvars.copy_context().run(fn)


def test_call_context_is_added_to_events():
    def run():
        set_correlation_id("req-42")
        set_actor_id("operator-7")
        return add_call_context(None, "info", {"event": "Assigned machines"})

    event = _in_fresh_context(run)

    assert event == {
        "event": "Assigned machines",
        "correlation_id": "req-42",
        "actor_id": "operator-7",
    }


def test_unset_context_adds_nothing():
    def run():
        correlation_id_var.set("")
        return add_call_context(None, "info", {"event": "idle"})

    assert _in_fresh_context(run) == {"event": "idle"}


def test_generated_correlation_id():
    generated = _in_fresh_context(set_correlation_id)

    assert len(generated) == 32
    assert _in_fresh_context(lambda: set_correlation_id("given")) == "given"
