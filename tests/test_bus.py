import threading
import time

from lendingdesk.bus import EventBus


def test_publish_reaches_subscribers_in_order():
    bus = EventBus()
    seen = []
    bus.subscribe("t", lambda x: seen.append(("a", x)))
    bus.subscribe("t", lambda x: seen.append(("b", x)))
    bus.publish("t", 1)
    assert seen == [("a", 1), ("b", 1)]


def test_publish_other_topic_is_ignored():
    bus = EventBus()
    seen = []
    bus.subscribe("t", seen.append)
    bus.publish("other", 1)
    assert seen == []


def test_references_are_unique_and_increasing():
    bus = EventBus()
    refs = [bus.subscribe("t", print), bus.subscribe("u", print), bus.subscribe_once("t", print)]
    assert refs == sorted(refs)
    assert len(set(refs)) == 3


def test_has_callback():
    bus = EventBus()
    assert bus.has_callback("t") is False
    ref = bus.subscribe("t", print)
    assert bus.has_callback("t") is True
    bus.unsubscribe("t", ref)
    assert bus.has_callback("t") is False


def test_once_handler_fires_once():
    bus = EventBus()
    seen = []
    bus.subscribe_once("t", seen.append)
    bus.publish("t", 1)
    bus.publish("t", 2)
    assert seen == [1]
    assert bus.has_callback("t") is False


def test_unsubscribe_stops_delivery():
    bus = EventBus()
    seen = []
    ref = bus.subscribe("t", seen.append)
    bus.unsubscribe("t", ref)
    bus.unsubscribe("missing", ref)
    bus.publish("t", 1)
    assert seen == []


def test_async_handler_runs_and_wait_blocks():
    bus = EventBus()
    seen = []
    done = threading.Event()

    def slow(x):
        time.sleep(0.05)
        seen.append(x)
        done.set()

    bus.subscribe_async("t", slow, False)
    bus.publish("t", "msg")
    bus.wait_async()
    assert seen == ["msg"]
    assert done.is_set()
    assert bus.has_callback("t") is True


def test_async_runs_on_other_thread():
    bus = EventBus()
    threads = []
    bus.subscribe_async("t", lambda _: threads.append(threading.get_ident()), False)
    bus.publish("t", None)
    bus.wait_async()
    assert threads and threads[0] != threading.get_ident()


def test_transactional_handler_runs_serially():
    bus = EventBus()
    lock = threading.Lock()
    state = {"running": 0, "peak": 0, "calls": 0}

    def handler(_):
        with lock:
            state["running"] += 1
            state["peak"] = max(state["peak"], state["running"])
        time.sleep(0.01)
        with lock:
            state["running"] -= 1
            state["calls"] += 1

    bus.subscribe_async("t", handler, True)
    for i in range(5):
        bus.publish("t", i)
    bus.wait_async()
    assert state["calls"] == 5
    assert state["peak"] == 1
    assert bus.has_callback("t") is True


def test_once_async_fires_once():
    bus = EventBus()
    seen = []
    bus.subscribe_once_async("t", seen.append)
    bus.publish("t", 1)
    bus.publish("t", 2)
    bus.wait_async()
    assert seen == [1]
    assert bus.has_callback("t") is False